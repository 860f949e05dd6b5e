"""
Poloniex Futures - Error Handling and Mapping.

============================================================
PURPOSE
============================================================
Standardized error handling for the adapter with:
- Unified exception taxonomy
- Exchange-specific error code and message mapping
- Error context preservation

============================================================
MATCHING ORDER
============================================================
1. Exact match on response message
2. Exact match on response code
3. Broad (substring) match on the raw body

An empty response body only gets the broad check. The first
match raises; no match means the call is treated as success.

============================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Type


EXCHANGE_ID = "poloniexfutures"


# ============================================================
# ERROR TAXONOMY
# ============================================================

class ErrorCategory(Enum):
    """Standardized error categories."""

    BAD_REQUEST = "BAD_REQUEST"
    ARGUMENTS_REQUIRED = "ARGUMENTS_REQUIRED"
    BAD_SYMBOL = "BAD_SYMBOL"
    AUTHENTICATION = "AUTHENTICATION"
    INVALID_NONCE = "INVALID_NONCE"
    ACCOUNT_SUSPENDED = "ACCOUNT_SUSPENDED"
    INVALID_ORDER = "INVALID_ORDER"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    NOT_SUPPORTED = "NOT_SUPPORTED"
    RATE_LIMIT = "RATE_LIMIT"
    NETWORK = "NETWORK"
    EXCHANGE_NOT_AVAILABLE = "EXCHANGE_NOT_AVAILABLE"
    TIMEOUT = "TIMEOUT"
    UNKNOWN = "UNKNOWN"


# ============================================================
# EXCHANGE ERROR
# ============================================================

@dataclass
class ExchangeError:
    """
    Standardized exchange error.

    Carried by every ExchangeException raised from the adapter.
    """

    # Core fields
    category: ErrorCategory
    code: str               # Normalized error code
    message: str            # Human-readable message

    # Original error info
    exchange_code: Optional[str] = None     # Original exchange error code
    exchange_message: Optional[str] = None  # Original exchange message
    http_status: Optional[int] = None

    # Context
    exchange_id: Optional[str] = EXCHANGE_ID
    operation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "category": self.category.value,
            "code": self.code,
            "message": self.message,
            "exchange_code": self.exchange_code,
            "exchange_message": self.exchange_message,
            "http_status": self.http_status,
            "exchange_id": self.exchange_id,
            "operation": self.operation,
        }

    def __str__(self) -> str:
        """String representation."""
        return f"[{self.category.value}] {self.code}: {self.message}"


class ExchangeException(Exception):
    """Base exception for all adapter failures."""

    category = ErrorCategory.UNKNOWN

    def __init__(self, message: str, error: Optional[ExchangeError] = None):
        if error is None:
            error = ExchangeError(
                category=self.category,
                code=f"POLONIEXFUTURES_{self.category.value}",
                message=message,
            )
        self.error = error
        super().__init__(message)


class BadRequest(ExchangeException):
    """Malformed or invalid parameters (caller-side or server 400-class)."""
    category = ErrorCategory.BAD_REQUEST


class ArgumentsRequired(BadRequest):
    """Mandatory caller argument missing; raised before any network call."""
    category = ErrorCategory.ARGUMENTS_REQUIRED


class BadSymbol(BadRequest):
    """Unknown market symbol."""
    category = ErrorCategory.BAD_SYMBOL


class AuthenticationError(ExchangeException):
    """Missing/invalid credentials, bad signature, IP or permission denied."""
    category = ErrorCategory.AUTHENTICATION


class InvalidNonce(ExchangeException):
    """Request timestamp differs from server time beyond tolerance."""
    category = ErrorCategory.INVALID_NONCE


class AccountSuspended(ExchangeException):
    category = ErrorCategory.ACCOUNT_SUSPENDED


class InvalidOrder(ExchangeException):
    """Order business-rule violation."""
    category = ErrorCategory.INVALID_ORDER


class OrderNotFound(InvalidOrder):
    """Order or position does not exist."""
    category = ErrorCategory.ORDER_NOT_FOUND


class NotSupported(ExchangeException):
    """Unimplemented or forbidden endpoint."""
    category = ErrorCategory.NOT_SUPPORTED


class RateLimitExceeded(ExchangeException):
    category = ErrorCategory.RATE_LIMIT


class NetworkError(ExchangeException):
    """Communication failure."""
    category = ErrorCategory.NETWORK


class ExchangeNotAvailable(NetworkError):
    """Server error or maintenance."""
    category = ErrorCategory.EXCHANGE_NOT_AVAILABLE


class RequestTimeout(NetworkError):
    category = ErrorCategory.TIMEOUT


# ============================================================
# POLONIEX FUTURES ERROR MAPPING
# ============================================================

# Exact matches on response code or message
POLONIEX_EXACT_ERRORS: Dict[str, Type[ExchangeException]] = {
    # HTTP-like codes
    "400": BadRequest,               # Invalid request format
    "401": AuthenticationError,      # Invalid API key
    "403": NotSupported,             # Request forbidden
    "404": NotSupported,             # Resource not found
    "405": NotSupported,             # Method not allowed
    "415": BadRequest,               # Content-Type must be application/json
    "429": RateLimitExceeded,        # Access limit breached
    "500": ExchangeNotAvailable,     # Internal server error
    "503": ExchangeNotAvailable,     # Maintenance

    # Authentication
    "400001": AuthenticationError,   # Signature header missing
    "400002": InvalidNonce,          # Timestamp differs by more than 5 seconds
    "400003": AuthenticationError,   # API key does not exist
    "400004": AuthenticationError,   # Passphrase error
    "400005": AuthenticationError,   # Signature error
    "400006": AuthenticationError,   # IP not in whitelist
    "400007": AuthenticationError,   # Insufficient permission

    # Request
    "404000": NotSupported,          # URL not found
    "400100": BadRequest,            # Parameter error

    # Account
    "411100": AccountSuspended,      # User is frozen

    # Exchange internal
    "500000": ExchangeNotAvailable,
}

# Substring matches on the raw response body
POLONIEX_BROAD_ERRORS: Dict[str, Type[ExchangeException]] = {
    # {"code": "200000", "msg": "Position does not exist"}
    "Position does not exist": OrderNotFound,
}


def _build_error(
    exception_class: Type[ExchangeException],
    message: str,
    exchange_code: Optional[str],
    exchange_message: Optional[str],
    http_status: Optional[int],
) -> ExchangeException:
    error = ExchangeError(
        category=exception_class.category,
        code=f"POLONIEXFUTURES_{exchange_code}" if exchange_code else f"POLONIEXFUTURES_{exception_class.category.value}",
        message=message,
        exchange_code=exchange_code,
        exchange_message=exchange_message,
        http_status=http_status,
    )
    return exception_class(message, error)


def throw_exactly_matched_exception(
    table: Dict[str, Type[ExchangeException]],
    key: Optional[str],
    message: str,
    exchange_code: Optional[str] = None,
    exchange_message: Optional[str] = None,
    http_status: Optional[int] = None,
) -> None:
    """
    Raise the exception mapped to key, if any.

    Args:
        table: Exact-match table
        key: Response code or message
        message: Composed error message
        exchange_code: Original exchange code
        exchange_message: Original exchange message
        http_status: HTTP status code

    Raises:
        ExchangeException: Subclass mapped to key
    """
    if key is not None and key in table:
        raise _build_error(table[key], message, exchange_code, exchange_message, http_status)


def throw_broadly_matched_exception(
    table: Dict[str, Type[ExchangeException]],
    body: Optional[str],
    message: str,
    exchange_code: Optional[str] = None,
    exchange_message: Optional[str] = None,
    http_status: Optional[int] = None,
) -> None:
    """Raise the exception of the first table key found inside body."""
    if not body:
        return
    for needle, exception_class in table.items():
        if needle in body:
            raise _build_error(exception_class, message, exchange_code, exchange_message, http_status)


def handle_errors(
    http_status: Optional[int],
    body: Optional[str],
    response: Optional[Any],
) -> None:
    """
    Classify a Poloniex Futures response.

    Args:
        http_status: HTTP status code
        body: Raw response text
        response: Parsed JSON response (None/empty if unparseable)

    Raises:
        ExchangeException: Matched taxonomy kind
    """
    if not response:
        throw_broadly_matched_exception(
            POLONIEX_BROAD_ERRORS, body, body or "", http_status=http_status,
        )
        return

    #     bad: {"code": "400100", "msg": "validation.createOrder.clientOidIsRequired"}
    #     good: {"code": "200000", "data": {...}}
    error_code = None
    message = ""
    if isinstance(response, dict):
        code = response.get("code")
        error_code = str(code) if code is not None else None
        msg = response.get("msg")
        message = str(msg) if msg is not None else ""

    feedback = f"{EXCHANGE_ID} {message}"

    throw_exactly_matched_exception(
        POLONIEX_EXACT_ERRORS, message, feedback, error_code, message, http_status,
    )
    throw_exactly_matched_exception(
        POLONIEX_EXACT_ERRORS, error_code, feedback, error_code, message, http_status,
    )
    throw_broadly_matched_exception(
        POLONIEX_BROAD_ERRORS, body, feedback, error_code, message, http_status,
    )


# ============================================================
# HTTP STATUS FALLBACK
# ============================================================

def raise_for_http_status(http_status: int, body: Optional[str], url: str = "") -> None:
    """
    Raise a generic failure for an unclassified HTTP error.

    Called after handle_errors found no match.
    """
    if http_status < 400:
        return

    message = f"{EXCHANGE_ID} {http_status} {url} {(body or '')[:200]}".strip()

    if http_status in (401, 403):
        exception_class: Type[ExchangeException] = AuthenticationError
    elif http_status in (418, 429):
        exception_class = RateLimitExceeded
    elif http_status == 504:
        exception_class = RequestTimeout
    elif http_status >= 500:
        exception_class = ExchangeNotAvailable
    else:
        exception_class = ExchangeException

    raise _build_error(exception_class, message, str(http_status), body, http_status)


# ============================================================
# NETWORK ERROR HELPERS
# ============================================================

def create_network_error(message: str, operation: str = None) -> NetworkError:
    """Create network error."""
    return NetworkError(
        message,
        ExchangeError(
            category=ErrorCategory.NETWORK,
            code="POLONIEXFUTURES_NETWORK_ERROR",
            message=message,
            operation=operation,
        ),
    )


def create_timeout_error(timeout_ms: int, operation: str = None) -> RequestTimeout:
    """Create timeout error."""
    message = f"Request timed out after {timeout_ms}ms"
    return RequestTimeout(
        message,
        ExchangeError(
            category=ErrorCategory.TIMEOUT,
            code="POLONIEXFUTURES_TIMEOUT",
            message=message,
            operation=operation,
        ),
    )
