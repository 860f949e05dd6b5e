"""
Poloniex Futures - Secure Logging Utilities.

============================================================
PURPOSE
============================================================
Structured logging for adapter round trips with:
- Credential masking (PF-API-KEY, PF-API-SIGN, PF-API-PASSPHRASE)
- Query string and parameter sanitization
- Correlation ids linking request and response entries

============================================================
SECURITY REQUIREMENTS
============================================================
1. NEVER log the API key, secret, passphrase or signature
2. Log a hash of the request body, never the body itself
3. Truncate response previews

============================================================
"""

import hashlib
import json
import logging
import re
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# ============================================================
# SENSITIVE DATA PATTERNS
# ============================================================

# Header names that should be masked
SENSITIVE_HEADERS = {
    "pf-api-key",
    "pf-api-sign",
    "pf-api-passphrase",
    "authorization",
}

# Parameter names that should be masked
SENSITIVE_PARAMS = {
    "apikey",
    "api_key",
    "secret",
    "api_secret",
    "password",
    "passphrase",
    "signature",
    "sign",
    "token",
}

# Base64 HMAC-SHA256 digests are 44 characters ending in "="
_SIGNATURE_PATTERN = re.compile(r"[A-Za-z0-9+/]{43}=")


# ============================================================
# MASKING FUNCTIONS
# ============================================================

def mask_value(value: str, show_chars: int = 4) -> str:
    """
    Mask a sensitive value, showing only first few chars.

    Args:
        value: Value to mask
        show_chars: Number of chars to show at start

    Returns:
        Masked value
    """
    if not value or len(value) <= show_chars:
        return "***"
    return f"{value[:show_chars]}...***"


def mask_headers(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    """Mask sensitive request headers."""
    if not headers:
        return {}
    return {
        key: mask_value(str(value)) if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


def mask_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Mask sensitive parameters, recursing into nested dicts.

    String values that look like a signature digest are
    replaced as well.
    """
    if not params:
        return {}

    masked: Dict[str, Any] = {}
    for key, value in params.items():
        if key.lower() in SENSITIVE_PARAMS:
            masked[key] = mask_value(str(value)) if value else value
        elif isinstance(value, dict):
            masked[key] = mask_params(value)
        elif isinstance(value, str):
            masked[key] = _SIGNATURE_PATTERN.sub("***SIGN***", value)
        else:
            masked[key] = value
    return masked


def mask_url(url: str) -> str:
    """Mask sensitive query string parameters in a URL."""
    if not url:
        return url
    for param in SENSITIVE_PARAMS:
        pattern = re.compile(f"({param}=)([^&]+)", re.IGNORECASE)
        url = pattern.sub(lambda m: f"{m.group(1)}***", url)
    return url


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================
# LOG ENTRY STRUCTURES
# ============================================================

class _LogEntry:
    """JSON rendering shared by all entries; unset fields are dropped."""

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


@dataclass
class RequestLogEntry(_LogEntry):
    """Structured log entry for requests."""

    timestamp: str
    exchange_id: str
    operation: str
    method: str
    url: str
    request_id: str

    # Request details (masked)
    headers: Optional[Dict[str, str]] = None
    params: Optional[Dict[str, Any]] = None
    body_hash: Optional[str] = None
    weight: Optional[float] = None


@dataclass
class ResponseLogEntry(_LogEntry):
    """Structured log entry for responses."""

    timestamp: str
    exchange_id: str
    operation: str
    request_id: str

    status_code: Optional[int]
    latency_ms: float
    success: bool

    error_code: Optional[str] = None
    error_message: Optional[str] = None
    response_preview: Optional[str] = None


@dataclass
class OrderLogEntry(_LogEntry):
    """Structured log entry for order operations."""

    timestamp: str
    exchange_id: str
    operation: str  # create, cancel, cancel_all

    client_order_id: Optional[str] = None
    exchange_order_id: Optional[str] = None
    symbol: Optional[str] = None
    side: Optional[str] = None
    order_type: Optional[str] = None
    amount: Optional[str] = None
    price: Optional[str] = None

    error_code: Optional[str] = None
    error_message: Optional[str] = None


# ============================================================
# ADAPTER LOGGER
# ============================================================

class AdapterLogger:
    """
    Secure logger for adapter operations.

    Wraps a standard `logging` logger named
    `exchange_adapter.<exchange_id>` and masks credentials in
    every structured entry.
    """

    def __init__(self, exchange_id: str, logger_name: Optional[str] = None):
        self._exchange_id = exchange_id
        self._logger = logging.getLogger(logger_name or f"exchange_adapter.{exchange_id}")
        self._request_counter = 0

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def _generate_request_id(self) -> str:
        self._request_counter += 1
        return f"{self._exchange_id}-{self._request_counter}"

    @staticmethod
    def _hash_body(body: Optional[str]) -> Optional[str]:
        if not body:
            return None
        return hashlib.sha256(body.encode()).hexdigest()[:16]

    def log_request(
        self,
        operation: str,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[str] = None,
        weight: Optional[float] = None,
    ) -> str:
        """
        Log outgoing request.

        Args:
            operation: Endpoint path template (e.g., "orders/{order-id}")
            method: HTTP method
            url: Full request URL
            headers: Request headers (masked before logging)
            params: Caller parameters (masked before logging)
            body: Request body (only its hash is logged)
            weight: Declared rate limit weight

        Returns:
            Request ID for correlation
        """
        request_id = self._generate_request_id()

        entry = RequestLogEntry(
            timestamp=_now(),
            exchange_id=self._exchange_id,
            operation=operation,
            method=method,
            url=mask_url(url),
            request_id=request_id,
            headers=mask_headers(headers) if headers else None,
            params=mask_params(params) if params else None,
            body_hash=self._hash_body(body),
            weight=weight,
        )

        self._logger.debug(f"REQUEST: {entry.to_json()}")
        return request_id

    def log_response(
        self,
        operation: str,
        request_id: str,
        status_code: Optional[int],
        latency_ms: float,
        success: bool,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        response_body: Optional[str] = None,
    ) -> None:
        """Log incoming response; failures are logged at WARNING."""
        entry = ResponseLogEntry(
            timestamp=_now(),
            exchange_id=self._exchange_id,
            operation=operation,
            request_id=request_id,
            status_code=status_code,
            latency_ms=round(latency_ms, 3),
            success=success,
            error_code=error_code,
            error_message=error_message[:200] if error_message else None,
            response_preview=response_body[:200] if response_body else None,
        )

        if success:
            self._logger.debug(f"RESPONSE: {entry.to_json()}")
        else:
            self._logger.warning(f"RESPONSE_ERROR: {entry.to_json()}")

    def log_order(
        self,
        operation: str,
        client_order_id: Optional[str] = None,
        exchange_order_id: Optional[str] = None,
        symbol: Optional[str] = None,
        side: Optional[str] = None,
        order_type: Optional[str] = None,
        amount: Optional[str] = None,
        price: Optional[str] = None,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> None:
        """Log order operation."""
        entry = OrderLogEntry(
            timestamp=_now(),
            exchange_id=self._exchange_id,
            operation=operation,
            client_order_id=client_order_id,
            exchange_order_id=exchange_order_id,
            symbol=symbol,
            side=side,
            order_type=order_type,
            amount=amount,
            price=price,
            error_code=error_code,
            error_message=error_message[:200] if error_message else None,
        )

        if error_code:
            self._logger.warning(f"ORDER_ERROR: {entry.to_json()}")
        else:
            self._logger.info(f"ORDER: {entry.to_json()}")

    def info(self, message: str) -> None:
        self._logger.info(f"[{self._exchange_id}] {message}")
