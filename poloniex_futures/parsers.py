"""
Poloniex Futures - Response Normalizers.

============================================================
PURPOSE
============================================================
One routine per resource type converting a raw exchange
record into its canonical shape (see types.py).

RULES:
- Every raw field is optional; absent fields leave the
  canonical field unset, nothing here raises for missing data
- Derived numbers (cost, average, margin percentages) use
  exact decimal-string arithmetic (precise.py)
- Exchange timestamps in nanoseconds are converted with an
  exact factor of 0.000001 and truncated
- Functions are pure: the same record always yields the same
  output

============================================================
"""

from typing import Any, Dict, Iterable, List, Optional

from .fields import (
    filter_by_since_limit,
    iso8601,
    parse_number,
    safe_integer,
    safe_integer_product,
    safe_number,
    safe_string,
    safe_string_2,
    safe_value,
    sort_by,
)
from .markets import MarketRegistry, safe_currency_code
from .precise import string_abs, string_div, string_eq, string_gt, string_lt, string_mul, string_sub
from .types import (
    BalanceEntry,
    Balances,
    Candle,
    Fee,
    FundingPayment,
    FundingRate,
    Market,
    MarketLimits,
    MarketPrecision,
    MinMax,
    Order,
    OrderBook,
    Position,
    Ticker,
    Trade,
)


NANOSECONDS_TO_MS = "0.000001"


def _filter_list(items: List[Any], symbol: Optional[str], since: Optional[int], limit: Optional[int]) -> List[Any]:
    items = sort_by(items, "timestamp")
    if symbol is not None:
        items = [item for item in items if item.symbol == symbol]
    return filter_by_since_limit(items, since, limit, tail=since is None)


# ============================================================
# MARKETS
# ============================================================

def parse_market(raw: Dict[str, Any]) -> Market:
    """
    Normalize one contract listing record.

    Raw (abridged):
        {"symbol": "BTCUSDTPERP", "baseCurrency": "XBT",
         "quoteCurrency": "USDT", "rootSymbol": "USDT",
         "status": "Open", "isInverse": false, "multiplier": "0.001",
         "lotSize": "1", "tickSize": "1", "maxOrderQty": "1000000",
         "maxPrice": "1000000.0", "maxLeverage": "75",
         "takerFeeRate": "0.00075", "makerFeeRate": "0.0001"}
    """
    market_id = safe_string(raw, "symbol")
    base_id = safe_string(raw, "baseCurrency")
    quote_id = safe_string(raw, "quoteCurrency")
    settle_id = safe_string(raw, "rootSymbol")
    base = safe_currency_code(base_id)
    quote = safe_currency_code(quote_id)
    settle = safe_currency_code(settle_id)

    if base is not None and quote is not None and settle is not None:
        symbol = f"{base}/{quote}:{settle}"
    else:
        symbol = market_id

    inverse = safe_value(raw, "isInverse")
    if inverse is not None:
        inverse = bool(inverse)
    linear = (not inverse) if inverse is not None else None

    tick_size = parse_number(safe_string_2(raw, "tickSize", "indexPriceTickSize"))
    lot_size = safe_number(raw, "lotSize")

    return Market(
        id=market_id,
        symbol=symbol,
        base=base,
        quote=quote,
        settle=settle,
        base_id=base_id,
        quote_id=quote_id,
        settle_id=settle_id,
        active=safe_string(raw, "status") == "Open",
        linear=linear,
        inverse=inverse,
        taker=safe_number(raw, "takerFeeRate"),
        maker=safe_number(raw, "makerFeeRate"),
        contract_size=parse_number(string_abs(safe_string(raw, "multiplier"))),
        precision=MarketPrecision(amount=lot_size, price=tick_size),
        limits=MarketLimits(
            leverage=MinMax(min=parse_number("1"), max=safe_number(raw, "maxLeverage")),
            amount=MinMax(min=lot_size, max=safe_number(raw, "maxOrderQty")),
            price=MinMax(min=tick_size, max=safe_number(raw, "maxPrice")),
            cost=MinMax(),
        ),
        info=raw,
    )


# ============================================================
# TICKERS
# ============================================================

def parse_ticker(
    raw: Dict[str, Any],
    registry: MarketRegistry,
    market: Optional[Market] = None,
) -> Ticker:
    """
    Normalize a real-time ticker.

    The venue reports no high/low/open/vwap; those stay unset.
    """
    timestamp = safe_integer_product(raw, "ts", NANOSECONDS_TO_MS)
    last = safe_number(raw, "price")
    return Ticker(
        symbol=registry.safe_symbol(safe_string(raw, "symbol"), market),
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        bid=safe_number(raw, "bestBidPrice"),
        bid_volume=safe_number(raw, "bestBidSize"),
        ask=safe_number(raw, "bestAskPrice"),
        ask_volume=safe_number(raw, "bestAskSize"),
        close=last,
        last=last,
        base_volume=safe_number(raw, "size"),
        info=raw,
    )


def parse_tickers(
    raws: Iterable[Dict[str, Any]],
    registry: MarketRegistry,
    symbols: Optional[List[str]] = None,
) -> Dict[str, Ticker]:
    """Tickers keyed by symbol, optionally restricted to symbols."""
    result: Dict[str, Ticker] = {}
    for raw in raws or []:
        ticker = parse_ticker(raw, registry)
        if symbols is None or ticker.symbol in symbols:
            result[ticker.symbol] = ticker
    return result


# ============================================================
# ORDER BOOK
# ============================================================

def _book_side(entries: Any, price_index: int, size_index: int, descending: bool) -> List[List[Any]]:
    side = []
    for entry in entries or []:
        price = safe_number(entry, price_index)
        size = safe_number(entry, size_index)
        if price is None or size is None:
            continue
        side.append([price, size])
    return sorted(side, key=lambda e: e[0], reverse=descending)


def parse_order_book(data: Dict[str, Any], symbol: Optional[str], level: int = 2) -> OrderBook:
    """
    Normalize a level 2 or level 3 snapshot.

    L2 entries are [price, size]; L3 entries are
    [orderId, price, size, ts] with price/size at 1 and 2.
    Both are returned as [price, size].
    """
    price_index, size_index = (1, 2) if level == 3 else (0, 1)
    timestamp = safe_integer_product(data, "ts", NANOSECONDS_TO_MS)
    return OrderBook(
        symbol=symbol,
        bids=_book_side(safe_value(data, "bids"), price_index, size_index, descending=True),
        asks=_book_side(safe_value(data, "asks"), price_index, size_index, descending=False),
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        nonce=safe_integer(data, "sequence"),
        info=data,
    )


# ============================================================
# TRADES
# ============================================================

def parse_trade(
    raw: Dict[str, Any],
    registry: MarketRegistry,
    market: Optional[Market] = None,
) -> Trade:
    """
    Normalize a public trade or a private fill.

    Timestamp: nanosecond `ts` when present; otherwise
    `createdAt`, which legacy v1 records (those carrying
    `dealValue`) report in seconds.
    """
    market = registry.safe_market(safe_string(raw, "symbol"), market)

    timestamp = safe_integer_product(raw, "ts", NANOSECONDS_TO_MS)
    if timestamp is None:
        timestamp = safe_integer(raw, "createdAt")
        if isinstance(raw, dict) and "dealValue" in raw and timestamp is not None:
            timestamp = timestamp * 1000

    price = safe_string(raw, "price")
    amount = safe_string(raw, "size")
    side = safe_string(raw, "side")

    fee = None
    fee_cost = safe_string(raw, "fee")
    if fee_cost is not None:
        fee_currency = safe_currency_code(safe_string(raw, "feeCurrency"))
        if fee_currency is None:
            fee_currency = market.quote if side == "sell" else market.base
        fee = Fee(
            cost=parse_number(fee_cost),
            currency=fee_currency,
            rate=safe_number(raw, "feeRate"),
        )

    order_type = safe_string(raw, "orderType")
    if order_type == "match":
        order_type = None

    cost = safe_string(raw, "value")
    if cost is None and price is not None and amount is not None:
        cost = _trade_cost(price, amount, market)

    return Trade(
        id=safe_string(raw, "tradeId"),
        order=safe_string(raw, "orderId"),
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        symbol=market.symbol,
        type=order_type,
        taker_or_maker=safe_string(raw, "liquidity"),
        side=side,
        price=parse_number(price),
        amount=parse_number(amount),
        cost=parse_number(cost),
        fee=fee,
        info=raw,
    )


def _trade_cost(price: str, amount: str, market: Market) -> Optional[str]:
    contract_size = market.contract_size
    if contract_size is None:
        return string_mul(price, amount)
    if market.inverse:
        return string_mul(string_div(contract_size, price), amount)
    return string_mul(string_mul(price, contract_size), amount)


def parse_trades(
    raws: Iterable[Dict[str, Any]],
    registry: MarketRegistry,
    market: Optional[Market] = None,
    since: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[Trade]:
    trades = [parse_trade(raw, registry, market) for raw in raws or []]
    return _filter_list(trades, market.symbol if market else None, since, limit)


# ============================================================
# OHLCV
# ============================================================

def parse_ohlcv(raw: List[Any]) -> Candle:
    """[ts, open, high, low, close, volume] -> Candle."""
    return Candle(
        timestamp=safe_integer(raw, 0),
        open=safe_number(raw, 1),
        high=safe_number(raw, 2),
        low=safe_number(raw, 3),
        close=safe_number(raw, 4),
        volume=safe_number(raw, 5),
    )


def parse_ohlcvs(
    raws: Iterable[List[Any]],
    since: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[Candle]:
    candles = sort_by([parse_ohlcv(raw) for raw in raws or []], "timestamp")
    return filter_by_since_limit(candles, since, limit, tail=since is None)


# ============================================================
# POSITIONS
# ============================================================

def parse_position(
    raw: Dict[str, Any],
    registry: MarketRegistry,
    market: Optional[Market] = None,
) -> Position:
    """
    Normalize an open position.

    Side follows the sign of currentQty; a flat position has
    no side. Percentages are exact decimal quotients and stay
    unset when the denominator is absent or zero.
    """
    market = registry.safe_market(safe_string(raw, "symbol"), market)
    timestamp = safe_integer(raw, "currentTimestamp")

    size = safe_string(raw, "currentQty")
    side = None
    if string_gt(size, "0"):
        side = "long"
    elif string_lt(size, "0"):
        side = "short"

    notional = string_abs(safe_string(raw, "posCost"))
    initial_margin = safe_string(raw, "posInit")
    unrealized_pnl = safe_string(raw, "unrealisedPnl")
    cross_mode = safe_value(raw, "crossMode")

    return Position(
        symbol=market.symbol,
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        side=side,
        contracts=parse_number(string_abs(size)),
        contract_size=market.contract_size,
        notional=parse_number(notional),
        leverage=safe_number(raw, "realLeverage"),
        entry_price=safe_number(raw, "avgEntryPrice"),
        mark_price=safe_number(raw, "markPrice"),
        liquidation_price=safe_number(raw, "liquidationPrice"),
        initial_margin=parse_number(initial_margin),
        initial_margin_percentage=parse_number(string_div(initial_margin, notional)),
        maintenance_margin=safe_number(raw, "posMaint"),
        maintenance_margin_percentage=safe_number(raw, "maintMarginReq"),
        collateral=safe_number(raw, "maintMargin"),
        margin_mode="cross" if cross_mode else "isolated",
        unrealized_pnl=parse_number(unrealized_pnl),
        percentage=parse_number(string_div(unrealized_pnl, initial_margin)),
        info=raw,
    )


def parse_positions(
    raws: Iterable[Dict[str, Any]],
    registry: MarketRegistry,
    symbols: Optional[List[str]] = None,
) -> List[Position]:
    positions = [parse_position(raw, registry) for raw in raws or []]
    if symbols is not None:
        positions = [p for p in positions if p.symbol in symbols]
    return positions


# ============================================================
# ORDERS
# ============================================================

def parse_order(
    raw: Dict[str, Any],
    registry: MarketRegistry,
    market: Optional[Market] = None,
) -> Order:
    """
    Normalize an order snapshot.

    cost    = (dealFunds | filledValue) / leverage
    average = value / (contractSize * filled)      linear
              (contractSize * filled) / value      inverse
    average is only computed when filled > 0.
    """
    market = registry.safe_market(safe_string(raw, "symbol"), market)

    timestamp = safe_integer(raw, "createdAt")
    amount = safe_string(raw, "size")
    filled = safe_string(raw, "dealSize")
    raw_cost = safe_string_2(raw, "dealFunds", "filledValue")
    cost = string_div(raw_cost, safe_string(raw, "leverage"))

    average = None
    if string_gt(filled, "0"):
        contract_size = market.contract_size
        if market.linear:
            average = string_div(raw_cost, string_mul(contract_size, filled))
        elif market.inverse:
            average = string_div(string_mul(contract_size, filled), raw_cost)

    # market orders report a zero price
    price = safe_string(raw, "price")
    if string_eq(price, "0"):
        price = None

    status = "open" if safe_value(raw, "isActive", False) else "closed"
    if safe_value(raw, "cancelExist", False):
        status = "canceled"

    return Order(
        id=safe_string(raw, "id"),
        client_order_id=safe_string(raw, "clientOid"),
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        symbol=market.symbol,
        type=safe_string(raw, "type"),
        time_in_force=safe_string(raw, "timeInForce"),
        post_only=safe_value(raw, "postOnly"),
        side=safe_string(raw, "side"),
        price=parse_number(price),
        stop_price=safe_number(raw, "stopPrice"),
        amount=parse_number(amount),
        cost=parse_number(cost),
        average=parse_number(average),
        filled=parse_number(filled),
        remaining=parse_number(string_sub(amount, filled)),
        status=status,
        fee=Fee(
            currency=safe_currency_code(safe_string(raw, "feeCurrency")),
            cost=safe_number(raw, "fee"),
        ),
        info=raw,
    )


def parse_orders(
    raws: Iterable[Dict[str, Any]],
    registry: MarketRegistry,
    market: Optional[Market] = None,
    since: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[Order]:
    orders = [parse_order(raw, registry, market) for raw in raws or []]
    return _filter_list(orders, market.symbol if market else None, since, limit)


def empty_order(order_id: Optional[str], info: Any) -> Order:
    """Order skeleton carrying only an id (creation/cancel responses)."""
    return Order(id=order_id, info=info)


# ============================================================
# ACCOUNT
# ============================================================

def parse_balance(response: Dict[str, Any]) -> Balances:
    """
    Normalize an account overview.

        free  = availableBalance
        total = accountEquity
        used  = total - free
    """
    data = safe_value(response, "data", {})
    code = safe_currency_code(safe_string(data, "currency"))

    free = safe_string(data, "availableBalance")
    total = safe_string(data, "accountEquity")

    balances = Balances(info=response)
    if code is not None:
        balances.currencies[code] = BalanceEntry(
            free=parse_number(free),
            used=parse_number(string_sub(total, free)),
            total=parse_number(total),
        )
    return balances


def parse_funding_payment(raw: Dict[str, Any], symbol: Optional[str]) -> FundingPayment:
    timestamp = safe_integer(raw, "timePoint")
    return FundingPayment(
        id=safe_string(raw, "id"),
        symbol=symbol,
        code=safe_currency_code(safe_string(raw, "settleCurrency")),
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        amount=safe_number(raw, "funding"),
        funding_rate=safe_number(raw, "fundingRate"),
        mark_price=safe_number(raw, "markPrice"),
        position_qty=safe_number(raw, "positionQty"),
        position_cost=safe_number(raw, "positionCost"),
        info=raw,
    )


def parse_funding_rate(raw: Dict[str, Any], market: Market) -> FundingRate:
    """
    Normalize the current funding rate.

    `value` is the last settled rate and `predictedValue` the
    rate of the upcoming settlement.
    """
    previous_timestamp = safe_integer(raw, "timePoint")
    return FundingRate(
        symbol=market.symbol,
        funding_rate=safe_number(raw, "predictedValue"),
        previous_funding_rate=safe_number(raw, "value"),
        previous_funding_timestamp=previous_timestamp,
        previous_funding_datetime=iso8601(previous_timestamp),
        info=raw,
    )
