"""
Response Normalizer Tests.

============================================================
PURPOSE
============================================================
Raw Poloniex Futures records -> canonical records.

============================================================
"""

from decimal import Decimal

import pytest

from poloniex_futures.markets import MarketRegistry
from poloniex_futures.parsers import (
    empty_order,
    parse_balance,
    parse_funding_payment,
    parse_funding_rate,
    parse_market,
    parse_ohlcvs,
    parse_order,
    parse_order_book,
    parse_position,
    parse_ticker,
    parse_tickers,
    parse_trade,
    parse_trades,
)

from payloads import (
    FILL,
    INVERSE_CONTRACT,
    LINEAR_CONTRACT,
    PAUSED_CONTRACT,
    POSITION,
    PUBLIC_TRADE,
    TICKER,
    make_order,
)


# ============================================================
# MARKETS
# ============================================================

class TestParseMarket:
    """Tests for contract listing normalization."""

    def test_linear_contract(self):
        market = parse_market(LINEAR_CONTRACT)

        assert market.id == "BTCUSDTPERP"
        assert market.symbol == "BTC/USDT:USDT"
        assert market.base == "BTC"
        assert market.base_id == "XBT"
        assert market.active is True
        assert market.linear is True
        assert market.inverse is False
        assert market.swap is True
        assert market.contract_size == Decimal("0.001")
        assert market.taker == Decimal("0.00075")

    def test_inverse_contract(self):
        """Negative multiplier becomes a positive contract size."""
        market = parse_market(INVERSE_CONTRACT)

        assert market.symbol == "BTC/USD:BTC"
        assert market.inverse is True
        assert market.linear is False
        assert market.contract_size == Decimal("1")

    def test_precision_and_limits(self):
        market = parse_market(LINEAR_CONTRACT)

        assert market.precision.price == Decimal("0.1")
        assert market.precision.amount == Decimal("1")
        assert market.limits.leverage.min == Decimal("1")
        assert market.limits.leverage.max == Decimal("75")
        assert market.limits.amount.max == Decimal("1000000")
        assert market.limits.price.min == Decimal("0.1")

    def test_index_tick_size_fallback(self):
        raw = dict(LINEAR_CONTRACT)
        del raw["tickSize"]

        assert parse_market(raw).precision.price == Decimal("0.01")

    def test_inactive_status(self):
        assert parse_market(PAUSED_CONTRACT).active is False

    def test_missing_currencies_fall_back_to_id(self):
        market = parse_market({"symbol": "ODDPERP"})

        assert market.symbol == "ODDPERP"
        assert market.linear is None
        assert market.inverse is None
        assert market.contract_size is None


# ============================================================
# TICKERS AND ORDER BOOKS
# ============================================================

class TestParseTicker:
    """Tests for ticker normalization."""

    def test_ticker(self, registry):
        ticker = parse_ticker(TICKER, registry)

        assert ticker.symbol == "BTC/USDT:USDT"
        assert ticker.timestamp == 1671203410721
        assert ticker.datetime == "2022-12-16T15:10:10.721Z"
        assert ticker.bid == Decimal("16990.1")
        assert ticker.ask == Decimal("16991.0")
        assert ticker.last == ticker.close == Decimal("16990.1")
        assert ticker.high is None
        assert ticker.vwap is None

    def test_unknown_symbol_keeps_id(self, registry):
        ticker = parse_ticker(dict(TICKER, symbol="NEWPERP"), registry)

        assert ticker.symbol == "NEWPERP"

    def test_tickers_keyed_by_symbol(self, registry):
        other = dict(TICKER, symbol="BTCUSDPERP")

        tickers = parse_tickers([TICKER, other], registry, ["BTC/USD:BTC"])

        assert list(tickers) == ["BTC/USD:BTC"]


class TestParseOrderBook:
    """Tests for L2/L3 snapshot normalization."""

    def test_level2(self):
        data = {
            "symbol": "BTCUSDTPERP",
            "sequence": 1671206200542,
            "bids": [["16950.0", "5"], ["16952.0", "3"]],
            "asks": [["16960.0", "2"], ["16955.0", "1"]],
            "ts": 1671206200542484700,
        }

        book = parse_order_book(data, "BTC/USDT:USDT")

        assert book.bids == [[Decimal("16952.0"), Decimal("3")], [Decimal("16950.0"), Decimal("5")]]
        assert book.asks == [[Decimal("16955.0"), Decimal("1")], [Decimal("16960.0"), Decimal("2")]]
        assert book.nonce == 1671206200542
        assert book.timestamp == 1671206200542

    def test_level3_reads_price_and_size_positions(self):
        data = {
            "bids": [["639c95388cba5100084eabce", "16952.0", "1", 1671206200542484700]],
            "asks": [["639c95a1a39e3e0007e0f0ee", "16961.0", "4", 1671206300542484700]],
            "ts": 1671206300542484700,
        }

        book = parse_order_book(data, "BTC/USDT:USDT", level=3)

        assert book.bids == [[Decimal("16952.0"), Decimal("1")]]
        assert book.asks == [[Decimal("16961.0"), Decimal("4")]]

    def test_empty_sides(self):
        book = parse_order_book({}, "BTC/USDT:USDT")

        assert book.bids == []
        assert book.asks == []
        assert book.timestamp is None


# ============================================================
# TRADES
# ============================================================

class TestParseTrade:
    """Tests for public trade and fill normalization."""

    def test_public_trade(self, registry, linear_market):
        trade = parse_trade(PUBLIC_TRADE, registry, linear_market)

        assert trade.id == "639c986f9fd7cf0001afd7ee"
        assert trade.symbol == "BTC/USDT:USDT"
        assert trade.timestamp == 1671207023485
        assert trade.side == "buy"
        assert trade.amount == Decimal("101")
        # price * contractSize * amount
        assert trade.cost == Decimal("1703.264")
        assert trade.fee is None

    def test_inverse_trade_cost(self, registry, inverse_market):
        raw = dict(PUBLIC_TRADE, price="20000", size=10)

        trade = parse_trade(raw, registry, inverse_market)

        assert trade.cost == Decimal("0.0005")

    def test_fill(self, registry):
        trade = parse_trade(FILL, registry)

        assert trade.symbol == "BTC/USDT:USDT"
        assert trade.order == "5ce24c16b210233c36ee321d"
        assert trade.timestamp == 1558334496000
        assert trade.taker_or_maker == "taker"
        assert trade.type == "limit"
        assert trade.cost == Decimal("83.02")
        assert trade.fee.cost == Decimal("0.04151")
        assert trade.fee.currency == "USDT"
        assert trade.fee.rate == Decimal("0.0005")

    def test_legacy_seconds_timestamp(self, registry):
        """Records carrying dealValue report createdAt in seconds."""
        raw = dict(FILL, createdAt=1558334496, dealValue="83.02")

        assert parse_trade(raw, registry).timestamp == 1558334496000

    def test_fee_currency_defaults(self, registry):
        sell = dict(FILL)
        del sell["feeCurrency"]
        buy = dict(sell, side="buy")

        assert parse_trade(sell, registry).fee.currency == "USDT"
        assert parse_trade(buy, registry).fee.currency == "BTC"

    def test_match_order_type_is_unset(self, registry):
        raw = dict(FILL, orderType="match")

        assert parse_trade(raw, registry).type is None

    def test_trades_sorted_and_limited(self, registry, linear_market):
        first = dict(PUBLIC_TRADE, ts=1671207023000000000, tradeId="a")
        second = dict(PUBLIC_TRADE, ts=1671207024000000000, tradeId="b")
        third = dict(PUBLIC_TRADE, ts=1671207025000000000, tradeId="c")

        trades = parse_trades([third, first, second], registry, linear_market, limit=2)

        assert [t.id for t in trades] == ["b", "c"]

    def test_idempotent(self, registry):
        assert parse_trade(FILL, registry) == parse_trade(FILL, registry)


class TestParseOhlcv:
    """Tests for candle normalization."""

    def test_sorted_candles(self):
        raws = [
            [1558000060000, "8100", "8200", "8050", "8150", "20"],
            [1558000000000, "8000", "8100", "7900", "8100", "10"],
        ]

        candles = parse_ohlcvs(raws)

        assert [c.timestamp for c in candles] == [1558000000000, 1558000060000]
        assert candles[0].to_list() == [
            1558000000000,
            Decimal("8000"),
            Decimal("8100"),
            Decimal("7900"),
            Decimal("8100"),
            Decimal("10"),
        ]


# ============================================================
# POSITIONS
# ============================================================

class TestParsePosition:
    """Tests for position normalization."""

    def test_short_position(self, registry):
        position = parse_position(POSITION, registry)

        assert position.symbol == "BTC/USDT:USDT"
        assert position.side == "short"
        assert position.contracts == Decimal("20")
        assert position.contract_size == Decimal("0.001")
        assert position.notional == Decimal("400")
        assert position.timestamp == 1558507727807
        assert position.margin_mode == "isolated"

    def test_margin_percentages(self, registry):
        position = parse_position(POSITION, registry)

        assert position.initial_margin == Decimal("20")
        assert position.initial_margin_percentage == Decimal("0.05")
        assert position.percentage == Decimal("0.25")
        assert position.collateral == Decimal("19.5")
        assert position.maintenance_margin_percentage == Decimal("0.005")

    def test_long_and_flat(self, registry):
        long = parse_position(dict(POSITION, currentQty=3, crossMode=True), registry)
        flat = parse_position(dict(POSITION, currentQty=0), registry)

        assert long.side == "long"
        assert long.margin_mode == "cross"
        assert flat.side is None

    def test_zero_notional_leaves_percentage_unset(self, registry):
        position = parse_position(dict(POSITION, posCost="0"), registry)

        assert position.initial_margin_percentage is None


# ============================================================
# ORDERS
# ============================================================

class TestParseOrder:
    """Tests for order normalization."""

    def test_linear_filled_order(self, registry):
        order = parse_order(make_order(dealFunds="0.1", dealValue="0.1"), registry)

        assert order.id == "5cdfc138b21023a909e5ad55"
        assert order.symbol == "BTC/USDT:USDT"
        assert order.status == "closed"
        assert order.amount == Decimal("10")
        assert order.filled == Decimal("10")
        assert order.remaining == Decimal("0")
        assert order.cost == Decimal("0.1")
        # dealFunds / (contractSize * filled)
        assert order.average == Decimal("10")
        assert order.timestamp == 1558167872000

    def test_cost_divided_by_leverage(self, registry):
        order = parse_order(make_order(dealFunds="100", leverage="5"), registry)

        assert order.cost == Decimal("20")

    def test_inverse_average(self, registry):
        raw = make_order(symbol="BTCUSDPERP", dealFunds="0.001", dealSize="10")

        order = parse_order(raw, registry)

        # (contractSize * filled) / dealFunds
        assert order.average == Decimal("10000")

    def test_unfilled_order_has_no_average(self, registry):
        order = parse_order(make_order(dealSize="0", dealFunds="0", isActive=True), registry)

        assert order.average is None
        assert order.status == "open"
        assert order.remaining == Decimal("10")

    def test_unknown_market_has_no_average(self, registry):
        order = parse_order(make_order(symbol="NEWPERP"), registry)

        assert order.symbol == "NEWPERP"
        assert order.average is None

    def test_zero_price_is_unset(self, registry):
        order = parse_order(make_order(type="market", price="0"), registry)

        assert order.price is None

    def test_canceled_overrides_active(self, registry):
        order = parse_order(make_order(isActive=True, cancelExist=True), registry)

        assert order.status == "canceled"

    def test_fee(self, registry):
        order = parse_order(make_order(), registry)

        assert order.fee.cost == Decimal("0.075")
        assert order.fee.currency == "USDT"

    def test_missing_fields(self, registry):
        order = parse_order({}, registry)

        assert order.id is None
        assert order.cost is None
        assert order.remaining is None
        assert order.status == "closed"

    def test_idempotent(self, registry):
        raw = make_order()

        assert parse_order(raw, registry) == parse_order(raw, registry)

    def test_empty_order(self):
        order = empty_order("abc", {"code": "200000"})

        assert order.id == "abc"
        assert order.status is None
        assert order.info == {"code": "200000"}


# ============================================================
# ACCOUNT
# ============================================================

class TestParseAccount:
    """Tests for balance and funding normalization."""

    def test_balance(self):
        response = {
            "code": "200000",
            "data": {
                "accountEquity": "100.5",
                "unrealisedPNL": "0",
                "marginBalance": "100.5",
                "positionMargin": "0",
                "orderMargin": "20.5",
                "frozenFunds": "0",
                "availableBalance": "80",
                "currency": "XBT",
            },
        }

        balances = parse_balance(response)

        assert "BTC" in balances
        assert balances["BTC"].free == Decimal("80")
        assert balances["BTC"].total == Decimal("100.5")
        assert balances["BTC"].used == Decimal("20.5")
        assert balances.get("USDT") is None

    def test_balance_without_currency(self):
        balances = parse_balance({"code": "200000", "data": {}})

        assert balances.currencies == {}

    def test_funding_payment(self):
        raw = {
            "id": 36275152660006,
            "symbol": "BTCUSDTPERP",
            "timePoint": 1557918000000,
            "fundingRate": "0.000013",
            "markPrice": "8058.27",
            "positionQty": 10,
            "positionCost": "-0.001241",
            "funding": "-0.00000464",
            "settleCurrency": "USDT",
        }

        payment = parse_funding_payment(raw, "BTC/USDT:USDT")

        assert payment.id == "36275152660006"
        assert payment.code == "USDT"
        assert payment.amount == Decimal("-0.00000464")
        assert payment.timestamp == 1557918000000

    def test_funding_rate(self, linear_market):
        raw = {
            "symbol": ".BTCUSDTPERPFPI8H",
            "granularity": 28800000,
            "timePoint": 1558000800000,
            "value": "0.00375",
            "predictedValue": "0.0001",
        }

        rate = parse_funding_rate(raw, linear_market)

        assert rate.symbol == "BTC/USDT:USDT"
        assert rate.funding_rate == Decimal("0.0001")
        assert rate.previous_funding_rate == Decimal("0.00375")
        assert rate.previous_funding_timestamp == 1558000800000


@pytest.mark.parametrize("raw", [LINEAR_CONTRACT, INVERSE_CONTRACT, PAUSED_CONTRACT])
def test_market_parsing_is_pure(raw):
    assert parse_market(raw) == parse_market(raw)


def test_registry_lookup_by_id_and_symbol():
    registry = MarketRegistry([parse_market(LINEAR_CONTRACT)])

    assert registry.market("BTCUSDTPERP") is registry.market("BTC/USDT:USDT")
