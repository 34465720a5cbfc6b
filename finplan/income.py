"""
Income projection module for FinPlan.

Purpose
-------
Computes gross annual income per person for each plan year. Salary, bonus,
stock and RSU components all scale with the same compounded growth factor;
none of them is separately inflation-adjusted.

Growth model
------------
- Flat: factor_i = (1 + g/100) ** i, with g the income's annual_growth_rate.
- Per-year overrides: factor_i = prod_{j < i} (1 + rate_j/100). Once an
  override sequence is supplied, the flat rate is ignored entirely and any
  missing or non-numeric entry counts as 0% for its transition.

Example
-------
>>> from finplan.config import Income
>>> from finplan.income import annual_income
>>> inc = Income(person="you", base_amount=100_000, annual_growth_rate=10)
>>> annual_income(inc, 0)
1200000.0
>>> annual_income(inc, 1, growth_overrides=[50])
1800000.0
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np

from .config import Income
from .constants import MONTHS_PER_YEAR
from .utils import compound_factor, pct_to_rate, value_at

__all__ = [
    "find_income",
    "growth_factor",
    "base_annual",
    "annual_income",
]


def find_income(incomes: Iterable[Income], person: str) -> Optional[Income]:
    """Return the first income record for *person*, or None."""
    return next((inc for inc in incomes if inc.person == person), None)


def growth_factor(
    year_index: int,
    annual_growth_rate: float,
    overrides: Optional[Sequence[Optional[float]]] = None,
) -> float:
    """
    Compounded growth factor from year 0 to *year_index*.

    Parameters
    ----------
    year_index : int
        0-based plan year. Year 0 always has factor 1.
    annual_growth_rate : float
        Flat growth in percent; used only when *overrides* is None.
    overrides : sequence of float, optional
        Growth percent per year transition (index 0 = year 0 -> year 1).
    """
    if year_index <= 0:
        return 1.0
    if overrides is None:
        return compound_factor(annual_growth_rate, year_index)
    rates = np.array([pct_to_rate(value_at(overrides, j)) for j in range(year_index)])
    return float(np.prod(1.0 + rates))


def base_annual(income: Income) -> float:
    """Annualized base salary."""
    if income.base_is_monthly:
        return income.base_amount * MONTHS_PER_YEAR
    return income.base_amount


def annual_income(
    income: Optional[Income],
    year_index: int,
    growth_overrides: Optional[Sequence[Optional[float]]] = None,
) -> float:
    """
    Gross income for one person in plan year *year_index*.

    Returns 0 for a missing record.
    """
    if income is None:
        return 0.0
    factor = growth_factor(year_index, income.annual_growth_rate, growth_overrides)
    components = (
        base_annual(income)
        + income.bonus_annual
        + income.stocks_annual
        + income.rsus_annual
    )
    return components * factor
