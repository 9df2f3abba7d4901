"""
Shared utility functions.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


def safe_error_detail(exc: Exception, fallback: str = "An internal error occurred. Please try again later.") -> str:
    """
    Return a sanitized error message safe for client consumption.
    Logs the real exception detail server-side.
    """
    logger.error(f"Operation failed: {exc}", exc_info=True)
    return fallback


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def is_number(value: Any) -> bool:
    """True for real ints/floats. Booleans and NaN are not numbers here."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and not math.isnan(value)


def numeric_or_zero(value: Any) -> float | int:
    """Numeric value of a row cell; missing or non-numeric cells count as 0."""
    return value if is_number(value) else 0


def parse_float(value: Any, default: float = 0.0) -> float:
    """
    Lenient float parsing for CSV cells ("1,200.50", " 3 ", "" ...).
    Falls back to ``default`` instead of raising.
    """
    if value is None:
        return default
    if is_number(value):
        return float(value)
    text = str(value).strip().replace(",", "")
    if not text:
        return default
    try:
        result = float(text)
    except ValueError:
        return default
    return default if math.isnan(result) else result


def parse_int(value: Any, default: int = 0) -> int:
    """Lenient int parsing; decimals are truncated ("12.9" -> 12)."""
    result = parse_float(value, default=float(default))
    if math.isinf(result):
        return default
    return int(result)


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in ("true", "1", "yes")
