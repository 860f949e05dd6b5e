"""
Poloniex Futures - Endpoint Table.

============================================================
PURPOSE
============================================================
Declarative REST endpoint metadata:
- Every (api, method, path) the adapter may call
- Rate limit weight per endpoint, in multiples of the
  base request cost (30 requests per second)
- API version overrides

Weights are bookkeeping only; throttling belongs to the
HTTP layer.

============================================================
"""

from enum import Enum
from typing import Dict, Optional, Tuple


DEFAULT_VERSION = "v1"

# Base request cost in ms (30 requests per second)
RATE_LIMIT_MS = 33.3


# ============================================================
# ENDPOINTS
# ============================================================

ENDPOINTS: Dict[str, Dict[str, Dict[str, float]]] = {
    "public": {
        "GET": {
            "contracts/active": 10,
            "contracts/{symbol}": 10,
            "ticker": 10,
            "tickers": 10,
            "level2/snapshot": 180.002,
            "level2/depth": 180.002,
            "level2/message/query": 180.002,
            "level3/snapshot": 180.002,
            "trade/history": 10,
            "interest/query": 10,
            "index/query": 10,
            "mark-price/{symbol}/current": 10,
            "premium/query": 10,
            "funding-rate/{symbol}/current": 10,
            "timestamp": 10,
            "status": 10,
            "kline/query": 10,
        },
        "POST": {
            "bullet-public": 10,
        },
    },
    "private": {
        "GET": {
            "account-overview": 1,
            "transaction-history": 1,
            "orders": 1,
            "stopOrders": 1,
            "recentDoneOrders": 1,
            "orders/{order-id}": 1,
            "clientOrderId/{clientOid}": 1,
            "fills": 1,
            "openOrderStatistics": 1,
            "position": 1.5,
            "positions": 1.5,
            "funding-history": 1,
            "marginType/query": 1,
        },
        "POST": {
            "orders": 1.5,
            "batchOrders": 1.5,
            "position/margin/auto-deposit-status": 1.5,
            "position/margin/deposit-margin": 1.5,
            "bullet-private": 1,
            "marginType/change": 1,
        },
        "DELETE": {
            "orders/{order-id}": 1.5,
            "orders": 150.016,
            "stopOrders": 150.016,
        },
    },
}

# (api, method, path) -> version
VERSION_OVERRIDES: Dict[Tuple[str, str, str], str] = {
    ("public", "GET", "ticker"): "v2",
    ("public", "GET", "tickers"): "v2",
    ("public", "GET", "level3/snapshot"): "v2",
}


def endpoint_weight(api: str, method: str, path: str) -> Optional[float]:
    """
    Get declared rate limit weight.

    Returns:
        Weight, or None if the endpoint is not declared
    """
    return ENDPOINTS.get(api, {}).get(method.upper(), {}).get(path)


def resolve_version(
    api: str,
    method: str,
    path: str,
    default: str = DEFAULT_VERSION,
) -> str:
    """Declared version for an endpoint, falling back to the default."""
    return VERSION_OVERRIDES.get((api, method.upper(), path), default)


# ============================================================
# ORDER ENDPOINT VARIANT
# ============================================================

class OrderEndpoint(Enum):
    """Regular vs untriggered-stop order collection."""

    REGULAR = "orders"
    STOP = "stopOrders"


def select_order_endpoint(stop: bool) -> OrderEndpoint:
    """Pick the order collection for the stop flag."""
    return OrderEndpoint.STOP if stop else OrderEndpoint.REGULAR
