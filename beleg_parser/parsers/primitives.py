"""Primitive number and date parsers shared by the field extractors."""

import re
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

MIN_AMOUNT = Decimal("0")
MAX_AMOUNT = Decimal("1000000")

_WHITESPACE = re.compile(r"\s+")


def parse_decimal(raw: str,
                  decimal_separator: str = ",",
                  thousands_separator: str = ".") -> Optional[Decimal]:
    """
    Parse a locale-formatted number into a Decimal.

    Args:
        raw: Number as it appears in the text, e.g. "1.234,56"
        decimal_separator: Character separating the fraction
        thousands_separator: Grouping character to strip (may be empty)

    Returns:
        Decimal value, or None if the string is not a finite number

    Examples:
        >>> parse_decimal("1.234,56")
        Decimal('1234.56')
        >>> parse_decimal("123.45", decimal_separator=".", thousands_separator="")
        Decimal('123.45')
    """
    if not raw:
        return None

    cleaned = _WHITESPACE.sub("", raw)
    if thousands_separator:
        cleaned = cleaned.replace(thousands_separator, "")
    if decimal_separator != ".":
        cleaned = cleaned.replace(decimal_separator, ".")

    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        logger.debug(f"Discarding malformed number: {raw!r}")
        return None

    if not value.is_finite():
        return None
    return value


def is_plausible_amount(value: Optional[Decimal]) -> bool:
    """Amounts must lie in the open interval (0, 1,000,000)."""
    return value is not None and MIN_AMOUNT < value < MAX_AMOUNT


def normalize_date(parts: Sequence[str],
                   min_year: int = 1990,
                   max_year: Optional[int] = None) -> Optional[str]:
    """
    Turn three numeric date fields into a canonical ISO date.

    A 4-digit leading group is read as year-month-day, anything else as
    day-month-year.

    Returns:
        "YYYY-MM-DD", or None when the fields do not form a plausible date
    """
    if len(parts) != 3:
        return None

    try:
        if len(parts[0]) == 4:
            year, month, day = (int(p) for p in parts)
        else:
            day, month, year = (int(p) for p in parts)
    except ValueError:
        return None

    if max_year is None:
        max_year = datetime.now().year + 1

    if not (1 <= month <= 12 and 1 <= day <= 31):
        return None
    if not (min_year <= year <= max_year):
        return None

    # 31.02. passes the range checks above but is not a calendar date
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None
