"""
Poloniex Futures - Unified Exchange Adapter.

============================================================
PURPOSE
============================================================
Translates the Poloniex Futures REST API into normalized,
exchange-agnostic records.

ADAPTER:
- PoloniexFuturesAdapter: Public and private operations

CORE:
- EndpointSigner: Request building and HMAC signing
- parsers: Response normalizers
- errors: Error classifier and exception taxonomy

UTILITIES:
- AdapterConfig: Configuration and environment loading
- AdapterMetrics: Metrics collection
- AdapterLogger: Secure logging

============================================================
"""

# Configuration
from .config import AdapterConfig

# Adapters
from .base import ExchangeAdapter
from .poloniex import PoloniexFuturesAdapter, TIMEFRAMES

# Signing
from .signer import EndpointSigner
from .endpoints import ENDPOINTS, OrderEndpoint, endpoint_weight, select_order_endpoint

# Markets
from .markets import MarketRegistry, currency_id, safe_currency_code

# Types
from .types import (
    Balances,
    BalanceEntry,
    Candle,
    Fee,
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

# Errors
from .errors import (
    ErrorCategory,
    ExchangeError,
    ExchangeException,
    BadRequest,
    ArgumentsRequired,
    BadSymbol,
    AuthenticationError,
    InvalidNonce,
    AccountSuspended,
    InvalidOrder,
    OrderNotFound,
    NotSupported,
    RateLimitExceeded,
    NetworkError,
    ExchangeNotAvailable,
    RequestTimeout,
)

# Utilities
from .metrics import AdapterMetrics, MetricsAggregator, get_global_aggregator
from .logging_utils import AdapterLogger, mask_headers, mask_params, mask_url


__all__ = [
    # Configuration
    "AdapterConfig",
    # Adapters
    "ExchangeAdapter",
    "PoloniexFuturesAdapter",
    "TIMEFRAMES",
    # Signing
    "EndpointSigner",
    "ENDPOINTS",
    "OrderEndpoint",
    "endpoint_weight",
    "select_order_endpoint",
    # Markets
    "MarketRegistry",
    "currency_id",
    "safe_currency_code",
    # Types
    "Balances",
    "BalanceEntry",
    "Candle",
    "Fee",
    "FundingPayment",
    "FundingRate",
    "Market",
    "Order",
    "OrderBook",
    "Position",
    "SignedRequest",
    "Ticker",
    "Trade",
    # Errors
    "ErrorCategory",
    "ExchangeError",
    "ExchangeException",
    "BadRequest",
    "ArgumentsRequired",
    "BadSymbol",
    "AuthenticationError",
    "InvalidNonce",
    "AccountSuspended",
    "InvalidOrder",
    "OrderNotFound",
    "NotSupported",
    "RateLimitExceeded",
    "NetworkError",
    "ExchangeNotAvailable",
    "RequestTimeout",
    # Utilities
    "AdapterMetrics",
    "MetricsAggregator",
    "get_global_aggregator",
    "AdapterLogger",
    "mask_headers",
    "mask_params",
    "mask_url",
]

__version__ = "1.0.0"
