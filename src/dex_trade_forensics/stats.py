"""Small numeric helpers shared by the aggregators and detectors."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

import numpy as np


class RatioKind(str, Enum):
    FINITE = "finite"
    INFINITE = "infinite"
    UNDEFINED = "undefined"


@dataclass(frozen=True)
class Ratio:
    """A count ratio with explicit handling of zero denominators.

    ``Ratio.of(buys, sells)`` is Finite when sells > 0, Infinite when only
    the numerator is non-zero and Undefined when both are zero. Undefined
    compares as 0.
    """

    kind: RatioKind
    value: float = 0.0

    @classmethod
    def of(cls, numerator: float, denominator: float) -> "Ratio":
        if denominator > 0:
            return cls(RatioKind.FINITE, numerator / denominator)
        if numerator > 0:
            return cls(RatioKind.INFINITE, math.inf)
        return cls(RatioKind.UNDEFINED, 0.0)

    @property
    def is_infinite(self) -> bool:
        return self.kind is RatioKind.INFINITE

    def as_float(self) -> float:
        if self.kind is RatioKind.INFINITE:
            return math.inf
        if self.kind is RatioKind.UNDEFINED:
            return 0.0
        return self.value

    def exceeds(self, bound: float) -> bool:
        return self.as_float() > bound

    def below(self, bound: float) -> bool:
        return self.as_float() < bound

    def is_skewed(self, high: float = 10.0, low: float = 0.1) -> bool:
        """True when the ratio is above ``high`` or below ``low``."""
        return self.exceeds(high) or self.below(low)

    def capped(self, cap: float) -> float:
        return min(self.as_float(), cap)

    def to_json(self) -> float | str:
        if self.kind is RatioKind.INFINITE:
            return "Infinity"
        return self.as_float()

    def __str__(self) -> str:
        if self.kind is RatioKind.INFINITE:
            return "inf"
        return f"{self.as_float():.2f}"


def percent_change(start: float, end: float) -> float:
    """Percentage change from ``start`` to ``end``.

    Raises:
        ZeroDivisionError: If ``start`` is zero.
    """
    return (end - start) / start * 100


def safe_percent(part: float, whole: float) -> float:
    """``part`` as a percentage of ``whole``; 0.0 when ``whole`` is zero."""
    if whole <= 0:
        return 0.0
    return part / whole * 100


def mean_or_none(values: Iterable[float]) -> float | None:
    arr = np.fromiter(values, dtype=float)
    if arr.size == 0:
        return None
    return float(arr.mean())
