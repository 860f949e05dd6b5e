"""
Poloniex Futures - Exchange Adapter Base.

============================================================
PURPOSE
============================================================
Generic exchange base every venue adapter builds on:
- aiohttp session lifecycle
- Market registry loading and lookup
- Request pipeline: sign -> send -> parse -> classify
- Request/response logging and metrics
- Declared capability table

Venue adapters supply `sign`, `handle_errors` and the
unified operations.

============================================================
REQUEST PIPELINE
============================================================
1. sign(path, api, method, params) -> SignedRequest
2. _send(request) -> (http_status, body)
3. JSON parse (floats as Decimal)
4. handle_errors(http_status, body, response)
5. raise_for_http_status fallback for unclassified >= 400
6. Metrics and structured log entries for every outcome

No retries are performed at any step.

============================================================
"""

import asyncio
import itertools
import json
import time
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import aiohttp

from .config import AdapterConfig
from .endpoints import endpoint_weight
from .errors import (
    ExchangeException,
    create_network_error,
    create_timeout_error,
    raise_for_http_status,
)
from .logging_utils import AdapterLogger
from .markets import MarketRegistry
from .metrics import AdapterMetrics, get_global_aggregator
from .types import Balances, Market, Order, OrderBook, SignedRequest, Ticker


def parse_json(body: Optional[str]) -> Any:
    """Parse a response body; None when empty or not JSON."""
    if not body:
        return None
    try:
        return json.loads(body, parse_float=Decimal)
    except ValueError:
        return None


class ExchangeAdapter(ABC):
    """
    Abstract base for REST exchange adapters.

    Usage:
        async with PoloniexFuturesAdapter(config) as exchange:
            ticker = await exchange.fetch_ticker("BTC/USDT:USDT")
    """

    EXCHANGE_ID = "exchange"

    _instance_ids = itertools.count(1)

    # Declared capabilities: feature -> supported
    HAS: Dict[str, Optional[bool]] = {}

    def __init__(
        self,
        config: Optional[AdapterConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Args:
            config: Adapter configuration (credentials optional)
            session: Shared aiohttp session; created lazily if None
        """
        self._config = config or AdapterConfig()
        self._session = session
        self._owns_session = session is None

        self._registry = MarketRegistry()

        self._metrics = AdapterMetrics(self.exchange_id)
        self._logger = AdapterLogger(self.exchange_id)
        self._metrics_key = f"{self.exchange_id}-{next(self._instance_ids)}"
        get_global_aggregator().register(self._metrics_key, self._metrics)

    # --------------------------------------------------------
    # PROPERTIES
    # --------------------------------------------------------

    @property
    def exchange_id(self) -> str:
        return self.EXCHANGE_ID

    @property
    def config(self) -> AdapterConfig:
        return self._config

    @property
    def metrics(self) -> AdapterMetrics:
        return self._metrics

    @property
    def metrics_key(self) -> str:
        """Key of this instance in the global metrics aggregator."""
        return self._metrics_key

    @property
    def markets(self) -> Dict[str, Market]:
        return self._registry.markets

    @property
    def is_connected(self) -> bool:
        return self._session is not None and not self._session.closed

    @property
    def has(self) -> Dict[str, Optional[bool]]:
        return dict(self.HAS)

    def supports(self, feature: str) -> bool:
        """Whether the adapter declares a unified operation."""
        return bool(self.HAS.get(feature))

    # --------------------------------------------------------
    # CONNECTION
    # --------------------------------------------------------

    async def connect(self) -> None:
        """Open the HTTP session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
            self._logger.info("Session opened")

    async def disconnect(self) -> None:
        """Close the HTTP session if this adapter created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._logger.info("Session closed")
        self._session = None

    async def __aenter__(self) -> "ExchangeAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()

    # --------------------------------------------------------
    # MARKETS
    # --------------------------------------------------------

    async def load_markets(self, reload: bool = False) -> Dict[str, Market]:
        """
        Load markets once; refresh only on explicit reload.

        Returns:
            Markets keyed by unified symbol
        """
        if reload or not self._registry.loaded:
            markets = await self.fetch_markets()
            self._registry.load(markets)
            self._logger.info(f"Loaded {len(self._registry)} markets")
        return self._registry.markets

    def market(self, symbol: str) -> Market:
        """
        Raises:
            BadSymbol: If the symbol is not a loaded market
        """
        return self._registry.market(symbol)

    def check_required_credentials(self) -> None:
        self._config.check_required_credentials()

    # --------------------------------------------------------
    # REQUEST HANDLING
    # --------------------------------------------------------

    @abstractmethod
    def sign(
        self,
        path: str,
        api: str = "public",
        method: str = "GET",
        params: Optional[Dict[str, Any]] = None,
    ) -> SignedRequest:
        """Build the outgoing request descriptor."""

    @abstractmethod
    def handle_errors(self, http_status: Optional[int], body: Optional[str], response: Any) -> None:
        """Raise the matched ExchangeException for an error response."""

    async def _send(self, request: SignedRequest) -> Tuple[int, str]:
        """
        Execute one HTTP round trip.

        Returns:
            (http_status, response_text)
        """
        if self._session is None or self._session.closed:
            await self.connect()
        async with self._session.request(
            request.method,
            request.url,
            headers=request.headers or None,
            data=request.body,
        ) as resp:
            return resp.status, await resp.text()

    async def _request(
        self,
        path: str,
        api: str = "public",
        method: str = "GET",
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Signed round trip returning the parsed JSON response.

        Raises:
            ExchangeException: Classified failure
        """
        request = self.sign(path, api, method, params)
        weight = endpoint_weight(api, method, path)

        request_id = self._logger.log_request(
            operation=path,
            method=request.method,
            url=request.url,
            headers=request.headers,
            params=params,
            body=request.body,
            weight=weight,
        )

        start_time = time.time()
        try:
            http_status, body = await self._send(request)
        except asyncio.TimeoutError as e:
            error = create_timeout_error(int(self._config.timeout_seconds * 1000), path)
            self._record_failure(path, request_id, start_time, None, error, weight)
            raise error from e
        except aiohttp.ClientError as e:
            error = create_network_error(str(e), path)
            self._record_failure(path, request_id, start_time, None, error, weight)
            raise error from e

        response = parse_json(body)
        try:
            self.handle_errors(http_status, body, response)
            raise_for_http_status(http_status, body, request.url)
        except ExchangeException as e:
            e.error.operation = path
            self._record_failure(path, request_id, start_time, http_status, e, weight)
            raise

        latency_ms = (time.time() - start_time) * 1000
        self._metrics.record_request(
            endpoint=path,
            latency_ms=latency_ms,
            success=True,
            status_code=http_status,
            weight=weight,
        )
        self._logger.log_response(
            operation=path,
            request_id=request_id,
            status_code=http_status,
            latency_ms=latency_ms,
            success=True,
            response_body=body,
        )
        return response

    def _record_failure(
        self,
        path: str,
        request_id: str,
        start_time: float,
        http_status: Optional[int],
        error: ExchangeException,
        weight: Optional[float],
    ) -> None:
        latency_ms = (time.time() - start_time) * 1000
        self._metrics.record_request(
            endpoint=path,
            latency_ms=latency_ms,
            success=False,
            status_code=http_status,
            error_category=error.error.category,
            error_code=error.error.exchange_code or error.error.code,
            weight=weight,
        )
        self._logger.log_response(
            operation=path,
            request_id=request_id,
            status_code=http_status,
            latency_ms=latency_ms,
            success=False,
            error_code=error.error.code,
            error_message=str(error),
        )

    # --------------------------------------------------------
    # UNIFIED OPERATIONS
    # --------------------------------------------------------

    @abstractmethod
    async def fetch_markets(self, params: Optional[Dict[str, Any]] = None) -> List[Market]:
        """Fetch all listed markets."""

    @abstractmethod
    async def fetch_ticker(self, symbol: str, params: Optional[Dict[str, Any]] = None) -> Ticker:
        """Fetch ticker for one market."""

    @abstractmethod
    async def fetch_order_book(
        self,
        symbol: str,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> OrderBook:
        """Fetch order book snapshot."""

    @abstractmethod
    async def fetch_balance(self, params: Optional[Dict[str, Any]] = None) -> Balances:
        """Fetch account balances."""

    @abstractmethod
    async def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: Any,
        price: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Order:
        """Place an order."""

    @abstractmethod
    async def cancel_order(
        self,
        id: str,
        symbol: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Order:
        """Cancel an order."""
