"""Tests for ingestor data models."""

import pytest

from dex_trade_forensics.ingestor.models import (
    TradeNormalizationError,
    TradeRecord,
    TradeSide,
    ValueThresholds,
)


class TestTradeSide:
    @pytest.mark.parametrize("raw", ["TOKEN_BUY", "token_buy", "BUY", " buy "])
    def test_parse_buy(self, raw: str) -> None:
        assert TradeSide.parse(raw) is TradeSide.BUY

    @pytest.mark.parametrize("raw", ["TOKEN_SELL", "Sell"])
    def test_parse_sell(self, raw: str) -> None:
        assert TradeSide.parse(raw) is TradeSide.SELL

    def test_parse_unknown(self) -> None:
        with pytest.raises(TradeNormalizationError, match="Unknown trade side"):
            TradeSide.parse("TRANSFER")


class TestValueThresholds:
    def test_whale_is_inclusive(self) -> None:
        th = ValueThresholds()
        assert th.is_whale(10_000)
        assert not th.is_whale(9_999)

    def test_retail_excludes_zero(self) -> None:
        th = ValueThresholds()
        assert th.is_retail(100)
        assert th.is_retail(0.01)
        assert not th.is_retail(0)
        assert not th.is_retail(100.01)


class TestTradeRecord:
    def test_from_row_buy(self) -> None:
        row = {
            "trade_timestamp": 1_704_067_200,
            "type": "TOKEN_BUY",
            "buy_amount": "2500",
            "buy_price": "0.04",
            "sell_amount": None,
            "trader_wallet_address": "walletA",
            "net_sol_balance_change": "-1.5",
            "transaction_signature": "abc",
        }
        trade = TradeRecord.from_row(row)

        assert trade.timestamp == 1_704_067_200
        assert trade.side is TradeSide.BUY
        assert trade.amount == 2500
        assert trade.price == 0.04
        assert trade.value == pytest.approx(100.0)
        assert trade.net_quote_change == -1.5
        assert trade.transaction_id == "abc"
        assert trade.is_buy and not trade.is_sell

    def test_from_row_reads_sell_columns(self) -> None:
        row = {
            "timestamp": 1_704_067_200,
            "side": "sell",
            "buy_amount": 1,
            "buy_price": 1,
            "sell_amount": 10,
            "sell_price": 3,
            "wallet_address": "walletB",
        }
        trade = TradeRecord.from_row(row)
        assert trade.is_sell
        assert trade.value == 30
        assert trade.net_quote_change == 0.0
        assert trade.transaction_id == ""

    def test_millisecond_timestamps_scaled(self) -> None:
        row = {"trade_timestamp": 1_704_067_200_500, "type": "BUY", "buy_amount": 1, "buy_price": 1}
        assert TradeRecord.from_row(row).timestamp == 1_704_067_200

    def test_missing_wallet_is_empty_string(self) -> None:
        row = {"trade_timestamp": 1_704_067_200, "type": "BUY", "buy_amount": 1, "buy_price": 1}
        assert TradeRecord.from_row(row).wallet_address == ""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"trade_timestamp": None},
            {"trade_timestamp": "yesterday"},
            {"type": None},
            {"buy_amount": None},
            {"buy_amount": 0},
            {"buy_price": "nan"},
            {"buy_price": -1},
            {"buy_price": True},
        ],
    )
    def test_malformed_rows_raise(self, overrides: dict[str, object]) -> None:
        row: dict[str, object] = {
            "trade_timestamp": 1_704_067_200,
            "type": "TOKEN_BUY",
            "buy_amount": 10,
            "buy_price": 1.0,
        }
        row.update(overrides)
        with pytest.raises(TradeNormalizationError):
            TradeRecord.from_row(row)

    def test_frozen(self) -> None:
        trade = TradeRecord(1, TradeSide.BUY, "w", 1.0, 1.0)
        with pytest.raises(AttributeError):
            trade.price = 2.0  # type: ignore[misc]

    def test_to_dict(self) -> None:
        trade = TradeRecord(1, TradeSide.SELL, "w", 4.0, 0.5, transaction_id="t")
        data = trade.to_dict()
        assert data["side"] == "SELL"
        assert data["value"] == 2.0
        assert data["transaction_id"] == "t"
