"""Lenient parsing and formatting of operator-entered amounts"""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext

ZERO = Decimal("0")
TWOPLACES = Decimal("0.01")

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_LEADING_NUMBER = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")


def parse_amount(text) -> Decimal:
    """
    Read the numeric value out of free-form text.

    Everything except digits, '.' and '-' is discarded, then the leading
    number is parsed. Unparsable or empty input yields 0; this never raises.

    Examples:
        "27 MT G"   -> 27
        "₹1,500.00" -> 1500.00
        "FIX+RTO"   -> 0
    """
    if text is None:
        return ZERO
    if isinstance(text, Decimal):
        return text if text.is_finite() else ZERO
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        try:
            value = Decimal(str(text))
        except InvalidOperation:
            return ZERO
        return value if value.is_finite() else ZERO

    cleaned = _NON_NUMERIC.sub("", str(text))
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return ZERO
    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        return ZERO


def quantize(value: Decimal) -> Decimal:
    """Round to 2dp; precision widens so long figures never overflow the context"""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 4)
        return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def format_amount(value) -> str:
    """Render a computed amount the way it is stored: 2dp max, no trailing zeros"""
    text = format(quantize(parse_amount(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text
