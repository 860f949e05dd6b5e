"""
Poloniex Futures - Decimal String Arithmetic.

============================================================
PURPOSE
============================================================
Exact arithmetic on decimal values carried as text.

All money math in the adapter (cost, average price, margin
percentages) goes through these helpers. Binary floats are
never used for prices, sizes or costs.

RULES:
- Absent operand -> None (comparisons -> False)
- Division by zero -> None
- Division truncated to 18 decimal places
- Results are canonical text: no exponent, no trailing zeros

============================================================
"""

from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_UP, localcontext
from typing import Optional, Union


Number = Union[str, int, Decimal]

DIVISION_PRECISION = 18

TRUNCATE = ROUND_DOWN
ROUND = ROUND_HALF_UP


# ============================================================
# CONVERSION
# ============================================================

def to_decimal(value: Optional[Number]) -> Optional[Decimal]:
    """
    Convert decimal text to Decimal.

    Args:
        value: Decimal text, int or Decimal

    Returns:
        Decimal, or None if absent or unparseable
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    text = str(value).strip()
    if text == "":
        return None
    try:
        result = Decimal(text)
    except InvalidOperation:
        return None
    if not result.is_finite():
        return None
    return result


def to_string(value: Optional[Decimal]) -> Optional[str]:
    """Render Decimal as canonical text (no exponent, no trailing zeros)."""
    if value is None:
        return None
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


# ============================================================
# ARITHMETIC
# ============================================================

def _binary(a: Optional[Number], b: Optional[Number]):
    left = to_decimal(a)
    right = to_decimal(b)
    if left is None or right is None:
        return None, None
    return left, right


def string_add(a: Optional[Number], b: Optional[Number]) -> Optional[str]:
    left, right = _binary(a, b)
    if left is None:
        return None
    with localcontext() as ctx:
        ctx.prec = 60
        return to_string(left + right)


def string_sub(a: Optional[Number], b: Optional[Number]) -> Optional[str]:
    left, right = _binary(a, b)
    if left is None:
        return None
    with localcontext() as ctx:
        ctx.prec = 60
        return to_string(left - right)


def string_mul(a: Optional[Number], b: Optional[Number]) -> Optional[str]:
    left, right = _binary(a, b)
    if left is None:
        return None
    with localcontext() as ctx:
        ctx.prec = 60
        return to_string(left * right)


def string_div(
    a: Optional[Number],
    b: Optional[Number],
    precision: int = DIVISION_PRECISION,
) -> Optional[str]:
    """
    Divide two decimal strings.

    Args:
        a: Numerator
        b: Denominator
        precision: Decimal places kept (truncated)

    Returns:
        Quotient text, or None when an operand is absent or b is zero
    """
    left, right = _binary(a, b)
    if left is None or right == 0:
        return None
    with localcontext() as ctx:
        ctx.prec = 60
        quotient = (left / right).quantize(
            Decimal(1).scaleb(-precision),
            rounding=ROUND_DOWN,
        )
        return to_string(quotient)


def string_abs(a: Optional[Number]) -> Optional[str]:
    value = to_decimal(a)
    if value is None:
        return None
    return to_string(abs(value))


def string_neg(a: Optional[Number]) -> Optional[str]:
    value = to_decimal(a)
    if value is None:
        return None
    return to_string(-value)


# ============================================================
# COMPARISON
# ============================================================

def string_gt(a: Optional[Number], b: Optional[Number]) -> bool:
    left, right = _binary(a, b)
    return left is not None and left > right


def string_ge(a: Optional[Number], b: Optional[Number]) -> bool:
    left, right = _binary(a, b)
    return left is not None and left >= right


def string_lt(a: Optional[Number], b: Optional[Number]) -> bool:
    left, right = _binary(a, b)
    return left is not None and left < right


def string_le(a: Optional[Number], b: Optional[Number]) -> bool:
    left, right = _binary(a, b)
    return left is not None and left <= right


def string_eq(a: Optional[Number], b: Optional[Number]) -> bool:
    left, right = _binary(a, b)
    return left is not None and left == right


# ============================================================
# TICK SIZE PRECISION
# ============================================================

def to_precision(
    value: Optional[Number],
    tick: Optional[Number],
    rounding: str = TRUNCATE,
) -> Optional[str]:
    """
    Snap a value to a multiple of a tick size.

    Amounts are truncated to the lot size, prices rounded to
    the nearest tick.

    Args:
        value: Value to snap
        tick: Tick or lot size (unset or zero leaves value as is)
        rounding: TRUNCATE or ROUND

    Returns:
        Snapped value as text
    """
    number = to_decimal(value)
    if number is None:
        return None
    step = to_decimal(tick)
    if step is None or step == 0:
        return to_string(number)
    with localcontext() as ctx:
        ctx.prec = 60
        units = (number / step).quantize(Decimal(1), rounding=rounding)
        return to_string(units * step)
