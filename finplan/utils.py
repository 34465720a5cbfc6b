"""General utilities for FinPlan

Contents
--------
- Rate conversions (percent -> fraction, nominal monthly, compounding)
- Calendar helpers (month index, month stepping)
- Number formatting (grouped thousands, Indian lakh/crore grouping)
- Lenient parsing (grouped numbers, booleans) for imported plans
- Matplotlib formatters
"""

from __future__ import annotations

import math
import re
from datetime import date
from typing import Any, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .constants import MONTHS_PER_YEAR

__all__ = [
    # Rates
    "pct_to_rate",
    "monthly_rate",
    "compound_factor",
    "rate_or_zero",
    "value_at",
    # Calendar
    "next_month",
    "month_index",
    # Formatting
    "resolve_grouping",
    "format_grouped",
    "format_currency",
    "axis_formatter",
    # Parsing
    "parse_number",
    "parse_bool",
]

# ---------------------------------------------------------------------------
# Rate conversions
# ---------------------------------------------------------------------------

def pct_to_rate(pct: float) -> float:
    """Convert a percentage (7.5) to a fraction (0.075)."""
    return float(pct) / 100.0


def monthly_rate(annual_pct: float) -> float:
    """Nominal monthly rate from an annual percentage: apr / 12 / 100.

    This is the simple (non-compounded) split used by loan EMIs and SIP
    calculators, not (1 + r) ** (1/12) - 1.
    """
    return float(annual_pct) / MONTHS_PER_YEAR / 100.0


def compound_factor(rate_pct: float, periods: int) -> float:
    """Return (1 + rate_pct/100) ** periods."""
    return float((1.0 + pct_to_rate(rate_pct)) ** periods)


def rate_or_zero(raw: Any) -> float:
    """Coerce an override entry to a float, treating None/NaN/garbage as 0."""
    if raw is None:
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(value) else value


def value_at(seq: Optional[Sequence[Any]], idx: int) -> float:
    """Return ``rate_or_zero(seq[idx])``; out-of-range or negative idx gives 0."""
    if seq is None or idx < 0 or idx >= len(seq):
        return 0.0
    return rate_or_zero(seq[idx])


# ---------------------------------------------------------------------------
# Calendar helpers
# ---------------------------------------------------------------------------

def next_month(year: int, month: int) -> Tuple[int, int]:
    """Step a (year, month) pair forward by one month."""
    if month == 12:
        return year + 1, 1
    return year, month + 1


def month_index(start: date, months: int) -> pd.DatetimeIndex:
    """Construct a first-of-month DatetimeIndex for *months* periods."""
    if months <= 0:
        return pd.DatetimeIndex([], dtype="datetime64[ns]")
    first = pd.Timestamp(start.year, start.month, 1)
    return pd.date_range(start=first, periods=months, freq="MS")


# ---------------------------------------------------------------------------
# Number formatting
# ---------------------------------------------------------------------------

_INDIAN_CURRENCIES = {"INR"}
_CURRENCY_SYMBOLS = {"INR": "₹", "USD": "$", "EUR": "€", "GBP": "£"}


def resolve_grouping(currency: str, grouping: str = "auto") -> str:
    """Pick "indian" or "international" digit grouping for *currency*."""
    if grouping != "auto":
        return grouping
    return "indian" if currency.upper() in _INDIAN_CURRENCIES else "international"


def format_grouped(value: float, decimals: int = 2, grouping: str = "indian") -> str:
    """
    Format a number with grouped thousands and a fixed number of decimals.

    Parameters
    ----------
    value : float
        Number to format. NaN formats as "".
    decimals : int, default 2
        Digits after the decimal point (always shown).
    grouping : {"indian", "international"}, default "indian"
        "indian" groups the last three digits, then pairs (12,34,567.00);
        "international" groups in threes (1,234,567.00).

    Examples
    --------
    >>> format_grouped(1234567)
    '12,34,567.00'
    >>> format_grouped(1234567, grouping="international")
    '1,234,567.00'
    >>> format_grouped(-500.5, decimals=1)
    '-500.5'
    """
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    if grouping == "international":
        return f"{value:,.{decimals}f}"
    if grouping != "indian":
        raise ValueError(f"Unknown grouping: {grouping}")

    sign = "-" if value < 0 else ""
    fixed = f"{abs(value):.{decimals}f}"
    int_part, _, frac_part = fixed.partition(".")
    last_three, other = int_part[-3:], int_part[:-3]
    if other:
        other = re.sub(r"\B(?=(\d{2})+(?!\d))", ",", other)
        int_part = f"{other},{last_three}"
    if decimals > 0:
        return f"{sign}{int_part}.{frac_part}"
    return f"{sign}{int_part}"


def format_currency(value: float, currency: str = "INR", decimals: int = 0,
                    grouping: str = "auto") -> str:
    """
    Format a money amount with its currency symbol.

    >>> format_currency(150000)
    '₹1,50,000'
    >>> format_currency(150000, currency="USD", decimals=2)
    '$150,000.00'
    """
    symbol = _CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    body = format_grouped(abs(value), decimals, resolve_grouping(currency, grouping))
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{body}"


def axis_formatter(currency: str = "INR"):
    """
    Return a matplotlib tick function compacting large amounts.

    INR axes use lakh (L, 1e5) and crore (Cr, 1e7); other currencies use
    K and M.
    """
    indian = currency.upper() in _INDIAN_CURRENCIES
    units = [(1e7, "Cr"), (1e5, "L")] if indian else [(1e6, "M"), (1e3, "K")]

    def _fmt(x, pos):
        if x == 0:
            return "0"
        for scale, suffix in units:
            if abs(x) >= scale:
                val = x / scale
                return f"{val:.0f}{suffix}" if val == int(val) else f"{val:.1f}{suffix}"
        return f"{x:.0f}"

    return _fmt


# ---------------------------------------------------------------------------
# Lenient parsing
# ---------------------------------------------------------------------------

_NON_NUMERIC = re.compile(r"[,₹\sA-Za-z%]")


def parse_number(raw: Any) -> Optional[float]:
    """
    Parse a grouped numeric string into a float, or None if unparsable.

    Plain numerals (including scientific notation such as "1.5e6") are read
    as is. Anything else has group separators, currency symbols/letters,
    whitespace and percent signs stripped before parsing.

    >>> parse_number("₹1,23,456.78")
    123456.78
    >>> parse_number("INR 50,000")
    50000.0
    >>> parse_number("7.5%")
    7.5
    >>> parse_number("5e5")
    500000.0
    >>> parse_number("") is None
    True
    """
    if raw is None:
        return None
    if isinstance(raw, (int, float, np.number)) and not isinstance(raw, bool):
        value = float(raw)
        return None if math.isnan(value) else value
    text = str(raw).strip()
    try:
        value = float(text)
    except ValueError:
        pass
    else:
        return value if math.isfinite(value) else None
    cleaned = _NON_NUMERIC.sub("", text)
    if cleaned in ("", "-", ".", "-."):
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_bool(raw: Any) -> bool:
    """Interpret true/1/yes (any case) as True; everything else as False."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return raw != 0
    return str(raw).strip().lower() in ("true", "1", "yes")
