"""
Poloniex Futures - Exchange Adapter.

============================================================
PURPOSE
============================================================
Unified adapter for the Poloniex Futures REST API
(USDT-margined and inverse perpetual contracts).

Public:  markets, tickers, order books (L2/L3), trades,
         OHLCV, server time, funding rate
Private: balance, orders, positions, fills, funding history,
         margin mode

============================================================
CONVENTIONS
============================================================
- Symbols are unified BASE/QUOTE:SETTLE (e.g., BTC/USDT:USDT)
- Amounts are integer contract counts (lot size 1)
- Caller argument validation happens before any network call
- Server errors are raised as the matched ExchangeException
- No retries

============================================================
"""

from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

import aiohttp

from .base import ExchangeAdapter
from .config import AdapterConfig
from .endpoints import select_order_endpoint
from .errors import ArgumentsRequired, BadRequest, InvalidOrder, handle_errors
from .fields import (
    extend,
    milliseconds,
    omit,
    parse_timeframe,
    safe_integer,
    safe_integer_2,
    safe_number,
    safe_string,
    safe_string_2,
    safe_string_upper,
    safe_value,
    uuid,
)
from .markets import currency_id
from .parsers import (
    empty_order,
    parse_balance,
    parse_funding_payment,
    parse_funding_rate,
    parse_market,
    parse_ohlcvs,
    parse_order,
    parse_order_book,
    parse_orders,
    parse_positions,
    parse_ticker,
    parse_tickers,
    parse_trades,
)
from .precise import ROUND, TRUNCATE, to_decimal, to_precision
from .signer import EndpointSigner
from .types import (
    Balances,
    Candle,
    FundingPayment,
    FundingRate,
    Market,
    Order,
    OrderBook,
    Position,
    SignedRequest,
    Ticker,
    Trade,
)


# ============================================================
# CONSTANTS
# ============================================================

# Unified timeframe -> kline granularity in minutes
TIMEFRAMES: Dict[str, int] = {
    "1m": 1,
    "5m": 5,
    "15m": 15,
    "30m": 30,
    "1h": 60,
    "2h": 120,
    "4h": 240,
    "12h": 720,
    "1d": 1440,
    "1w": 10080,
}

TRADING_FEES = {
    "tier_based": False,
    "percentage": True,
    "taker": Decimal("0.00075"),
    "maker": Decimal("0.0001"),
}

ORDER_STATUS_MAP = {
    "open": "active",
    "closed": "done",
}

MARGIN_MODES = {
    "isolated": 0,
    "cross": 1,
}


# ============================================================
# POLONIEX FUTURES ADAPTER
# ============================================================

class PoloniexFuturesAdapter(ExchangeAdapter):
    """
    Poloniex Futures adapter.

    Example:
        config = AdapterConfig.from_env()
        async with PoloniexFuturesAdapter(config) as exchange:
            book = await exchange.fetch_order_book("BTC/USDT:USDT")
    """

    EXCHANGE_ID = "poloniexfutures"

    HAS: Dict[str, Optional[bool]] = {
        "spot": False,
        "margin": True,
        "swap": True,
        "future": False,
        "option": None,
        "create_order": True,
        "cancel_order": True,
        "cancel_all_orders": True,
        "fetch_balance": True,
        "fetch_closed_orders": True,
        "fetch_currencies": False,
        "fetch_funding_history": True,
        "fetch_funding_rate": True,
        "fetch_l3_order_book": True,
        "fetch_markets": True,
        "fetch_my_trades": True,
        "fetch_ohlcv": True,
        "fetch_open_orders": True,
        "fetch_order": True,
        "fetch_order_book": True,
        "fetch_orders_by_status": True,
        "fetch_positions": True,
        "fetch_ticker": True,
        "fetch_tickers": True,
        "fetch_time": True,
        "fetch_trades": True,
        "set_margin_mode": True,
    }

    def __init__(
        self,
        config: Optional[AdapterConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
        clock: Callable[[], int] = milliseconds,
    ):
        """
        Args:
            config: Adapter configuration (or AdapterConfig.from_env())
            session: Shared aiohttp session
            clock: Millisecond clock for signing and OHLCV windows
        """
        super().__init__(config, session)
        self._clock = clock
        self._signer = EndpointSigner(self._config, clock)

    @property
    def timeframes(self) -> Dict[str, int]:
        return dict(TIMEFRAMES)

    @property
    def fees(self) -> Dict[str, Any]:
        return {"trading": dict(TRADING_FEES)}

    # --------------------------------------------------------
    # REQUEST HANDLING
    # --------------------------------------------------------

    def sign(
        self,
        path: str,
        api: str = "public",
        method: str = "GET",
        params: Optional[Dict[str, Any]] = None,
    ) -> SignedRequest:
        return self._signer.sign(path, api, method, params)

    def handle_errors(self, http_status: Optional[int], body: Optional[str], response: Any) -> None:
        handle_errors(http_status, body, response)

    # --------------------------------------------------------
    # PUBLIC: MARKET DATA
    # --------------------------------------------------------

    async def fetch_markets(self, params: Optional[Dict[str, Any]] = None) -> List[Market]:
        """Fetch all active contracts."""
        response = await self._request("contracts/active", "public", "GET", params)
        return [parse_market(raw) for raw in safe_value(response, "data", [])]

    async def fetch_ticker(self, symbol: str, params: Optional[Dict[str, Any]] = None) -> Ticker:
        """
        Fetch real-time ticker.

        Args:
            symbol: Unified symbol

        Returns:
            Ticker (high/low/open/vwap unset)
        """
        await self.load_markets()
        market = self.market(symbol)
        request = {"symbol": market.id}
        response = await self._request("ticker", "public", "GET", extend(request, params))
        return parse_ticker(safe_value(response, "data", {}), self._registry, market)

    async def fetch_tickers(
        self,
        symbols: Optional[List[str]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Ticker]:
        """Fetch tickers of all contracts, keyed by symbol."""
        await self.load_markets()
        response = await self._request("tickers", "public", "GET", params)
        return parse_tickers(safe_value(response, "data", []), self._registry, symbols)

    async def fetch_order_book(
        self,
        symbol: str,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> OrderBook:
        """
        Fetch full order book snapshot.

        Args:
            symbol: Unified symbol
            limit: Unused; the venue returns the full book
            params: `level` 2 (default) or 3

        Raises:
            BadRequest: If level is not 2 or 3
        """
        level = safe_number(params, "level")
        params = omit(params, "level")
        if level is not None and level not in (2, 3):
            raise BadRequest("poloniexfutures fetch_order_book() can only return level 2 & 3")

        await self.load_markets()
        market = self.market(symbol)
        request = {"symbol": market.id}
        path = "level3/snapshot" if level == 3 else "level2/snapshot"
        response = await self._request(path, "public", "GET", extend(request, params))

        return parse_order_book(
            safe_value(response, "data", {}),
            market.symbol,
            level=3 if level == 3 else 2,
        )

    async def fetch_l3_order_book(
        self,
        symbol: str,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> OrderBook:
        """Level 3 order book; entries are still [price, size]."""
        return await self.fetch_order_book(symbol, limit, extend(params, {"level": 3}))

    async def fetch_trades(
        self,
        symbol: str,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Trade]:
        """Fetch most recent public trades."""
        await self.load_markets()
        market = self.market(symbol)
        request = {"symbol": market.id}
        response = await self._request("trade/history", "public", "GET", extend(request, params))
        return parse_trades(safe_value(response, "data", []), self._registry, market, since, limit)

    async def fetch_time(self, params: Optional[Dict[str, Any]] = None) -> Optional[int]:
        """Server time in milliseconds."""
        response = await self._request("timestamp", "public", "GET", params)
        return safe_integer(response, "data")

    async def fetch_ohlcv(
        self,
        symbol: str,
        timeframe: str = "1m",
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Candle]:
        """
        Fetch candles.

        Window:
            since given:       from=since, to=since + limit*duration
                               (limit defaults to config.ohlcv_limit)
            only limit given:  from=now - limit*duration
            neither:           server default window

        Raises:
            BadRequest: If timeframe is not supported
        """
        granularity = TIMEFRAMES.get(timeframe)
        if granularity is None:
            raise BadRequest(f"poloniexfutures fetch_ohlcv() does not support timeframe {timeframe}")

        await self.load_markets()
        market = self.market(symbol)
        request: Dict[str, Any] = {
            "symbol": market.id,
            "granularity": granularity,
        }

        duration = parse_timeframe(timeframe) * 1000
        if since is not None:
            request["from"] = since
            if limit is None:
                limit = self._config.ohlcv_limit
            request["to"] = since + limit * duration
        elif limit is not None:
            since = self._clock() - limit * duration
            request["from"] = since

        response = await self._request("kline/query", "public", "GET", extend(request, params))
        return parse_ohlcvs(safe_value(response, "data", []), since, limit)

    async def fetch_funding_rate(self, symbol: str, params: Optional[Dict[str, Any]] = None) -> FundingRate:
        """Current predicted and last settled funding rate."""
        await self.load_markets()
        market = self.market(symbol)
        request = {"symbol": market.id}
        response = await self._request(
            "funding-rate/{symbol}/current", "public", "GET", extend(request, params),
        )
        return parse_funding_rate(safe_value(response, "data", {}), market)

    # --------------------------------------------------------
    # PRIVATE: ACCOUNT
    # --------------------------------------------------------

    async def fetch_balance(self, params: Optional[Dict[str, Any]] = None) -> Balances:
        """
        Fetch account overview.

        Args:
            params: optional `currency` (unified code, e.g. BTC)
        """
        await self.load_markets()
        code = safe_string(params, "currency")
        request: Dict[str, Any] = {}
        if code is not None:
            request["currency"] = currency_id(code)
        response = await self._request(
            "account-overview", "private", "GET", extend(omit(params, "currency"), request),
        )
        return parse_balance(response)

    async def fetch_positions(
        self,
        symbols: Optional[List[str]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Position]:
        """Fetch all open positions."""
        await self.load_markets()
        response = await self._request("positions", "private", "GET", params)
        return parse_positions(safe_value(response, "data", []), self._registry, symbols)

    async def fetch_funding_history(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[FundingPayment]:
        """
        Funding payments paid and received.

        Raises:
            ArgumentsRequired: If symbol is missing
        """
        if symbol is None:
            raise ArgumentsRequired("poloniexfutures fetch_funding_history() requires a symbol argument")

        await self.load_markets()
        market = self.market(symbol)
        request: Dict[str, Any] = {"symbol": market.id}
        if since is not None:
            request["startAt"] = since
        if limit is not None:
            request["maxCount"] = limit

        response = await self._request("funding-history", "private", "GET", extend(request, params))
        data = safe_value(response, "data", {})
        return [
            parse_funding_payment(item, market.symbol)
            for item in safe_value(data, "dataList", [])
        ]

    async def set_margin_mode(
        self,
        margin_mode: Any,
        symbol: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Set margin mode for a contract.

        Args:
            margin_mode: 0 / "isolated" or 1 / "cross"
            symbol: Unified symbol

        Returns:
            Raw exchange response

        Raises:
            ArgumentsRequired: If symbol is missing or mode is invalid
        """
        if symbol is None:
            raise ArgumentsRequired("poloniexfutures set_margin_mode() requires a symbol argument")
        if isinstance(margin_mode, str):
            margin_mode = MARGIN_MODES.get(margin_mode.lower(), margin_mode)
        if isinstance(margin_mode, bool) or margin_mode not in (0, 1):
            raise ArgumentsRequired(
                "poloniexfutures set_margin_mode() marginMode must be 0 (isolated) or 1 (cross)"
            )

        await self.load_markets()
        market = self.market(symbol)
        request = {
            "symbol": market.id,
            "marginType": margin_mode,
        }
        return await self._request("marginType/change", "private", "POST", extend(params, request))

    # --------------------------------------------------------
    # PRIVATE: ORDERS
    # --------------------------------------------------------

    async def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: Any,
        price: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Order:
        """
        Place an order.

        Args:
            symbol: Unified symbol
            type: "limit" or "market"
            side: "buy" or "sell"
            amount: Contract count (>= 1)
            price: Limit price (limit orders only)
            params: clientOid, stopPrice/triggerPrice, stopPriceType,
                timeInForce, postOnly, hidden, iceberg, visibleSize,
                reduceOnly, closeOrder, forceHold, remark

        Returns:
            Order skeleton with only `id` set

        Raises:
            InvalidOrder: If amount is below one contract
            ArgumentsRequired: If a required price is missing
            BadRequest: If postOnly is combined with hidden
        """
        params = dict(params or {})

        size = to_decimal(amount)
        if size is None or size < 1:
            raise InvalidOrder("poloniexfutures create_order() minimum contract order amount is 1")

        stop_price = safe_value(params, "triggerPrice", safe_value(params, "stopPrice"))
        if safe_value(params, "stop") and not stop_price:
            raise ArgumentsRequired("poloniexfutures create_order() requires a stopPrice for stop orders")
        if not safe_value(params, "stop"):
            params.pop("stop", None)

        if type == "limit" and price is None:
            raise ArgumentsRequired("poloniexfutures create_order() requires a price argument for limit orders")

        if safe_value(params, "postOnly", False) and safe_value(params, "hidden") is not None:
            raise BadRequest(
                "poloniexfutures create_order() does not support the postOnly parameter together with a hidden parameter"
            )

        if safe_value(params, "iceberg") and safe_value(params, "visibleSize") is None:
            raise ArgumentsRequired("poloniexfutures create_order() requires a visibleSize parameter for iceberg orders")

        await self.load_markets()
        market = self.market(symbol)

        client_order_id = safe_string_2(params, "clientOid", "clientOrderId") or uuid()
        request: Dict[str, Any] = {
            "clientOid": client_order_id,
            "side": side,
            "symbol": market.id,
            "type": type,
            "size": int(to_decimal(to_precision(size, market.precision.amount, TRUNCATE))),
            "leverage": 1,
        }

        if stop_price:
            request["stop"] = "up" if side == "buy" else "down"
            request["stopPriceType"] = safe_string(params, "stopPriceType", "TP")
            request["stopPrice"] = to_precision(stop_price, market.precision.price, ROUND)

        if type == "limit":
            request["price"] = to_precision(price, market.precision.price, ROUND)
            time_in_force = safe_string_upper(params, "timeInForce")
            if time_in_force is not None:
                request["timeInForce"] = time_in_force

        # timeInForce is rejected by the venue on market orders
        params = omit(params, "clientOid", "clientOrderId", "timeInForce", "stopPrice", "triggerPrice")

        response = await self._request("orders", "private", "POST", extend(request, params))
        data = safe_value(response, "data", {})
        order = empty_order(safe_string(data, "orderId"), response)

        self._metrics.record_order_created()
        self._logger.log_order(
            operation="create",
            client_order_id=client_order_id,
            exchange_order_id=order.id,
            symbol=market.symbol,
            side=side,
            order_type=type,
            amount=str(request["size"]),
            price=request.get("price"),
        )
        return order

    async def cancel_order(
        self,
        id: str,
        symbol: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Order:
        """
        Cancel an order by exchange id.

        Raises:
            InvalidOrder: If the venue reports no cancelled ids
        """
        request = {"order-id": id}
        response = await self._request("orders/{order-id}", "private", "DELETE", extend(request, params))
        data = safe_value(response, "data", {})
        cancelled = safe_value(data, "cancelledOrderIds", [])
        if not cancelled:
            raise InvalidOrder("poloniexfutures cancel_order() order already cancelled")

        order = empty_order(safe_string(cancelled, 0), response)
        self._metrics.record_orders_canceled()
        self._logger.log_order(operation="cancel", exchange_order_id=order.id)
        return order

    async def cancel_all_orders(
        self,
        symbol: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Order]:
        """
        Cancel all open orders, or all untriggered stop orders
        when params["stop"] is true.

        Returns:
            One order skeleton per cancelled id
        """
        stop = bool(safe_value(params, "stop"))
        params = omit(params, "stop")

        request: Dict[str, Any] = {}
        if symbol is not None:
            await self.load_markets()
            request["symbol"] = self._registry.market_id(symbol)

        endpoint = select_order_endpoint(stop)
        response = await self._request(endpoint.value, "private", "DELETE", extend(request, params))
        data = safe_value(response, "data", {})
        orders = [
            empty_order(order_id, response)
            for order_id in safe_value(data, "cancelledOrderIds", [])
        ]

        self._metrics.record_orders_canceled(len(orders))
        self._logger.log_order(operation="cancel_all", symbol=symbol)
        return orders

    async def fetch_orders_by_status(
        self,
        status: str,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Order]:
        """
        Fetch orders by status.

        Args:
            status: "open"/"active" or "closed"/"done"
            symbol: Unified symbol filter
            since: Earliest creation time in ms
            limit: Max orders
            params: `stop` for untriggered stop orders (active only),
                `until`/`till` end time in ms, `side`, `type`

        Note:
            The "done" view drops orders with cancelExist set, so
            server-canceled orders never appear as closed.

        Raises:
            BadRequest: If stop orders are requested with a non-active status
        """
        stop = bool(safe_value(params, "stop"))
        until = safe_integer_2(params, "until", "till")
        params = omit(params, "stop", "until", "till")

        status = ORDER_STATUS_MAP.get(status, status)
        request: Dict[str, Any] = {}
        if not stop:
            request["status"] = status
        elif status != "active":
            raise BadRequest("poloniexfutures fetch_orders_by_status() can only fetch untriggered stop orders")

        await self.load_markets()
        market = None
        if symbol is not None:
            market = self.market(symbol)
            request["symbol"] = market.id
        if since is not None:
            request["startAt"] = since
        if until is not None:
            request["endAt"] = until

        endpoint = select_order_endpoint(stop)
        response = await self._request(endpoint.value, "private", "GET", extend(request, params))
        items = safe_value(safe_value(response, "data", {}), "items", [])
        if status == "done":
            items = [item for item in items if not safe_value(item, "cancelExist", False)]

        return parse_orders(items, self._registry, market, since, limit)

    async def fetch_open_orders(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Order]:
        return await self.fetch_orders_by_status("open", symbol, since, limit, params)

    async def fetch_closed_orders(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Order]:
        return await self.fetch_orders_by_status("closed", symbol, since, limit, params)

    async def fetch_order(
        self,
        id: Optional[str] = None,
        symbol: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Order:
        """
        Fetch one order by exchange id or by params["clientOid"].

        Raises:
            InvalidOrder: If neither id nor clientOid is given
        """
        if id is None:
            client_order_id = safe_string_2(params, "clientOid", "clientOrderId")
            if client_order_id is None:
                raise InvalidOrder("poloniexfutures fetch_order() requires parameter id or params.clientOid")
            path = "clientOrderId/{clientOid}"
            request = {"clientOid": client_order_id}
            params = omit(params, "clientOid", "clientOrderId")
        else:
            path = "orders/{order-id}"
            request = {"order-id": id}

        await self.load_markets()
        market = self.market(symbol) if symbol is not None else None
        response = await self._request(path, "private", "GET", extend(request, params))
        return parse_order(safe_value(response, "data", {}), self._registry, market)

    async def fetch_my_trades(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Trade]:
        """Fetch account fills."""
        await self.load_markets()
        request: Dict[str, Any] = {}
        market = None
        if symbol is not None:
            market = self.market(symbol)
            request["symbol"] = market.id
        if since is not None:
            request["startAt"] = since

        response = await self._request("fills", "private", "GET", extend(request, params))
        items = safe_value(safe_value(response, "data", {}), "items", [])
        return parse_trades(items, self._registry, market, since, limit)
