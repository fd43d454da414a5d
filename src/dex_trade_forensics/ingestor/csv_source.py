"""CSV trade export reader."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any, Iterator

logger = logging.getLogger(__name__)

_ENCODING = "utf-8"

# Only these columns are converted; addresses and signatures stay text.
NUMERIC_COLUMNS = frozenset(
    {
        "trade_timestamp",
        "timestamp",
        "buy_amount",
        "buy_price",
        "sell_amount",
        "sell_price",
        "net_sol_balance_change",
        "net_quote_change",
    }
)


class CsvSourceError(Exception):
    """Raised when a trade export cannot be read."""


def _coerce(column: str, cell: str | None) -> Any:
    """Numeric columns become int/float, blanks become None."""
    if cell is None:
        return None
    text = cell.strip()
    if not text:
        return None
    if column not in NUMERIC_COLUMNS:
        return text
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


def iter_trade_rows(path: str | Path) -> Iterator[dict[str, Any]]:
    """Yield header-keyed rows from a trade export, skipping blank lines.

    Raises:
        CsvSourceError: If the file does not exist or has no header row.
    """
    path = Path(path)
    if not path.is_file():
        raise CsvSourceError(f"Trade export not found: {path}")

    with path.open(newline="", encoding=_ENCODING) as fh:
        reader = csv.DictReader(fh)
        if not reader.fieldnames:
            raise CsvSourceError(f"Trade export has no header row: {path}")
        for raw in reader:
            if not any((v or "").strip() for v in raw.values() if isinstance(v, str)):
                continue
            yield {
                key.strip(): _coerce(key.strip(), value)
                for key, value in raw.items()
                if key is not None
            }


def read_trade_rows(path: str | Path) -> list[dict[str, Any]]:
    rows = list(iter_trade_rows(path))
    logger.info("Read %d trade rows from %s", len(rows), path)
    return rows
