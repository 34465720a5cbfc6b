"""
Global constants for FinPlan.

Purpose
-------
Centralizes default values and magic numbers used throughout the FinPlan
codebase: plan defaults seeded by the import layer, calendar constants used
by the calculators, and plotting defaults.

Usage
-----
>>> from finplan.constants import MONTHS_PER_YEAR, DEFAULT_FIGSIZE
>>> annual = monthly * MONTHS_PER_YEAR

Categories
----------
- Time: months per year, absolute-year threshold
- Plan defaults: horizon, inflation, growth, return, currency
- Loans: home-loan keyword
- Plotting: figure sizes, colors
"""

from typing import Tuple

__all__ = [
    # Time
    "MONTHS_PER_YEAR",
    "ABSOLUTE_YEAR_THRESHOLD",
    # Plan defaults
    "DEFAULT_HORIZON_YEARS",
    "MAX_HORIZON_YEARS",
    "DEFAULT_CURRENCY",
    "DEFAULT_INFLATION_RATE",
    "DEFAULT_GROWTH_RATE",
    "DEFAULT_EXPECTED_RETURN",
    # Loans
    "HOME_LOAN_KEYWORD",
    # Plotting
    "DEFAULT_FIGSIZE",
    "DEFAULT_CHART_COLOR",
    "DEFAULT_CHART_FILL",
]


# =============================================================================
# Time
# =============================================================================

MONTHS_PER_YEAR: int = 12
"""Number of months in a year (used for annualization and compounding)."""

ABSOLUTE_YEAR_THRESHOLD: int = 1900
"""Big-expense years at or above this value are calendar years; below, offsets."""


# =============================================================================
# Plan Defaults
# =============================================================================

DEFAULT_HORIZON_YEARS: int = 10
"""Default projection horizon in years."""

MAX_HORIZON_YEARS: int = 50
"""Longest projection horizon accepted by the plan records."""

DEFAULT_CURRENCY: str = "INR"
"""Default plan currency (ISO 4217 code)."""

DEFAULT_INFLATION_RATE: float = 5.0
"""Default annual inflation, in percent."""

DEFAULT_GROWTH_RATE: float = 7.0
"""Default annual salary growth, in percent."""

DEFAULT_EXPECTED_RETURN: float = 8.0
"""Default expected annual investment return, in percent."""


# =============================================================================
# Loans
# =============================================================================

HOME_LOAN_KEYWORD: str = "home"
"""Legacy marker: a loan whose name contains this word is the home loan
when no loan carries the explicit primary-residence flag."""


# =============================================================================
# Plotting Defaults
# =============================================================================

DEFAULT_FIGSIZE: Tuple[int, int] = (14, 10)
"""Default figure size (width, height) in inches for the results dashboard."""

DEFAULT_CHART_COLOR: str = "#1976d2"
"""Line/bar color for result charts."""

DEFAULT_CHART_FILL: str = "#90caf9"
"""Fill color for area charts."""
