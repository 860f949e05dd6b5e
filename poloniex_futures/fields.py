"""
Poloniex Futures - Safe Field Access.

============================================================
PURPOSE
============================================================
Generic helpers for reading raw exchange payloads.

Any field of an exchange response may be absent. Every
accessor here returns a default on absence instead of
raising, so normalizers never assume a payload shape.

============================================================
"""

import re
import time
import uuid as _uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence
from urllib.parse import urlencode as _urlencode

from .precise import to_decimal, to_string


# ============================================================
# RAW ACCESS
# ============================================================

def _lookup(container: Any, key: Any) -> Any:
    if container is None:
        return None
    if isinstance(container, dict):
        return container.get(key)
    if isinstance(container, (list, tuple)):
        if isinstance(key, int) and -len(container) <= key < len(container):
            return container[key]
        return None
    return None


def _present(value: Any) -> bool:
    return value is not None and value != ""


def safe_value(container: Any, key: Any, default: Any = None) -> Any:
    """Get raw value, or default when absent/None/empty string."""
    value = _lookup(container, key)
    return value if _present(value) else default


def safe_string(container: Any, key: Any, default: Optional[str] = None) -> Optional[str]:
    """
    Get value as text.

    Decimals and ints are rendered exactly; booleans as
    lowercase text.
    """
    value = _lookup(container, key)
    if not _present(value):
        return default
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return to_string(value)
    if isinstance(value, float):
        return repr(value)
    return str(value)


def safe_string_2(
    container: Any,
    key1: Any,
    key2: Any,
    default: Optional[str] = None,
) -> Optional[str]:
    value = safe_string(container, key1)
    if value is None:
        value = safe_string(container, key2, default)
    return value


def safe_string_upper(container: Any, key: Any, default: Optional[str] = None) -> Optional[str]:
    value = safe_string(container, key, default)
    return value.upper() if value is not None else None


def safe_number(container: Any, key: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """Get value as Decimal."""
    value = to_decimal(safe_string(container, key))
    return value if value is not None else default


def safe_integer(container: Any, key: Any, default: Optional[int] = None) -> Optional[int]:
    """Get value as int, truncating any fractional part."""
    value = to_decimal(safe_string(container, key))
    if value is None:
        return default
    return int(value)


def safe_integer_2(
    container: Any,
    key1: Any,
    key2: Any,
    default: Optional[int] = None,
) -> Optional[int]:
    value = safe_integer(container, key1)
    if value is None:
        value = safe_integer(container, key2, default)
    return value


def safe_integer_product(
    container: Any,
    key: Any,
    factor: Any,
    default: Optional[int] = None,
) -> Optional[int]:
    """
    Get value multiplied by a factor, truncated to int.

    Used for nanosecond -> millisecond conversion with an
    exact factor of 0.000001.
    """
    value = to_decimal(safe_string(container, key))
    if value is None:
        return default
    return int(value * to_decimal(factor))


def parse_number(value: Any) -> Optional[Decimal]:
    """Convert decimal text to Decimal, None when absent."""
    return to_decimal(value)


# ============================================================
# DICT HELPERS
# ============================================================

def omit(params: Optional[Dict[str, Any]], *keys: Any) -> Dict[str, Any]:
    """Copy of params without the given keys (lists are flattened)."""
    excluded = set()
    for key in keys:
        if isinstance(key, (list, tuple, set)):
            excluded.update(key)
        else:
            excluded.add(key)
    return {k: v for k, v in (params or {}).items() if k not in excluded}


def extend(*dicts: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge dicts left to right."""
    result: Dict[str, Any] = {}
    for d in dicts:
        if d:
            result.update(d)
    return result


# ============================================================
# TIME
# ============================================================

def milliseconds() -> int:
    """Current UTC time in milliseconds."""
    return int(time.time() * 1000)


def iso8601(timestamp: Optional[int]) -> Optional[str]:
    """
    Format millisecond timestamp as ISO-8601.

    Example: 1671203410721 -> 2022-12-16T15:10:10.721Z
    """
    if timestamp is None or isinstance(timestamp, bool):
        return None
    try:
        ms = int(timestamp)
        dt = datetime.fromtimestamp(ms // 1000, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None
    return dt.strftime("%Y-%m-%dT%H:%M:%S") + ".{:03d}Z".format(ms % 1000)


_TIMEFRAME_UNITS = {
    "y": 60 * 60 * 24 * 365,
    "M": 60 * 60 * 24 * 30,
    "w": 60 * 60 * 24 * 7,
    "d": 60 * 60 * 24,
    "h": 60 * 60,
    "m": 60,
    "s": 1,
}


def parse_timeframe(timeframe: str) -> int:
    """
    Convert timeframe string to seconds.

    Args:
        timeframe: e.g. "1m", "4h", "1w"

    Returns:
        Duration in seconds

    Raises:
        ValueError: If timeframe unit is unknown
    """
    match = re.fullmatch(r"(\d+)([yMwdhms])", timeframe or "")
    if not match:
        raise ValueError(f"Invalid timeframe: {timeframe}")
    return int(match.group(1)) * _TIMEFRAME_UNITS[match.group(2)]


# ============================================================
# URL HELPERS
# ============================================================

def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return to_string(value)
    return value


def urlencode(params: Optional[Dict[str, Any]]) -> str:
    """Urlencode params; booleans rendered as true/false."""
    if not params:
        return ""
    return _urlencode({k: _query_value(v) for k, v in params.items()})


_PLACEHOLDER = re.compile(r"\{([^}]+)\}")


def extract_params(path: str) -> List[str]:
    """Names of {placeholders} in a path template."""
    return _PLACEHOLDER.findall(path)


def implode_params(path: str, params: Dict[str, Any]) -> str:
    """Substitute {placeholders} from params."""
    def replace(match):
        key = match.group(1)
        value = params.get(key)
        if value is None or isinstance(value, (dict, list)):
            return match.group(0)
        return str(_query_value(value))

    return _PLACEHOLDER.sub(replace, path)


# ============================================================
# LIST HELPERS
# ============================================================

def sort_by(items: Iterable[Any], key: str) -> List[Any]:
    """Sort records by attribute/key; missing values sort first."""
    def sort_key(item):
        value = item.get(key) if isinstance(item, dict) else getattr(item, key, None)
        return (value is not None, value if value is not None else 0)

    return sorted(items, key=sort_key)


def filter_by_since_limit(
    items: Sequence[Any],
    since: Optional[int] = None,
    limit: Optional[int] = None,
    key: str = "timestamp",
    tail: bool = False,
) -> List[Any]:
    """
    Keep items at or after since, then cut to limit.

    Args:
        items: Records sorted ascending by key
        since: Minimum timestamp in ms
        limit: Maximum number of records
        key: Timestamp attribute
        tail: Keep the last `limit` records instead of the first

    Returns:
        Filtered list
    """
    def stamp(item):
        return item.get(key) if isinstance(item, dict) else getattr(item, key, None)

    result = list(items)
    if since is not None:
        result = [item for item in result if stamp(item) is not None and stamp(item) >= since]
    if limit is not None:
        if limit <= 0:
            return []
        result = result[-limit:] if tail else result[:limit]
    return result


def uuid() -> str:
    """Random client order id."""
    return str(_uuid.uuid4())
