"""Pytest configuration and fixtures."""

from collections.abc import Iterator

import pytest

from dex_trade_forensics.config import clear_settings_cache

# 2024-01-01 00:00:00 UTC, aligned to every bucket width.
BASE_TS = 1_704_067_200


@pytest.fixture
def base_ts() -> int:
    return BASE_TS


@pytest.fixture
def sample_wallet() -> str:
    """Sample Solana-style wallet address for testing."""
    return "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


@pytest.fixture
def sample_rows(base_ts: int) -> list[dict[str, object]]:
    """Raw export rows in the shape the CSV reader produces."""
    return [
        {
            "trade_timestamp": base_ts + 120,
            "type": "TOKEN_SELL",
            "sell_amount": 500,
            "sell_price": 0.2,
            "trader_wallet_address": "walletB",
            "net_sol_balance_change": 0.5,
            "transaction_signature": "sig-2",
        },
        {
            "trade_timestamp": base_ts,
            "type": "TOKEN_BUY",
            "buy_amount": 1000,
            "buy_price": 0.1,
            "trader_wallet_address": "walletA",
            "net_sol_balance_change": -0.4,
            "transaction_signature": "sig-1",
        },
        {
            "trade_timestamp": base_ts + 60,
            "type": "TOKEN_BUY",
            "buy_amount": None,
            "buy_price": 0.1,
            "trader_wallet_address": "walletC",
        },
    ]


@pytest.fixture(autouse=True)
def _reset_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate tests from cached settings and a developer's .env file."""
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


def _raw(ts: int, side: str, amount: float, price: float, wallet: str, net: float = 0.0) -> dict[str, object]:
    prefix = "buy" if side == "TOKEN_BUY" else "sell"
    return {
        "trade_timestamp": ts,
        "type": side,
        f"{prefix}_amount": amount,
        f"{prefix}_price": price,
        "trader_wallet_address": wallet,
        "net_sol_balance_change": net,
        "transaction_signature": f"{wallet}-{ts}",
    }


@pytest.fixture
def pump_rows(base_ts: int) -> list[dict[str, object]]:
    """A +50% move on retail buying followed by two large sells."""
    rows = [_raw(base_ts + 30 * i, "TOKEN_BUY", 50, 1.0, f"retail{i}") for i in range(8)]
    rows.append(_raw(base_ts + 600, "TOKEN_BUY", 40, 1.5, "retail8"))
    rows.append(_raw(base_ts + 900, "TOKEN_SELL", 4000, 1.5, "dumper", net=6000))
    rows.append(_raw(base_ts + 1000, "TOKEN_SELL", 1000, 1.5, "dumper", net=1500))
    return rows
