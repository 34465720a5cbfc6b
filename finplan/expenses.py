"""
Expense aggregation module for FinPlan.

Purpose
-------
Annual expense totals for a plan year, from two kinds of records:

- MonthlyExpense: recurring monthly spend (groceries, fuel, services),
  annualized as amount * 12 and, when inflation-linked, grown by
  (1 + inflation/100) ** year_index.

- BigExpense: lump sums anchored to a calendar year (absolute when the
  record's year is >= 1900, otherwise an offset from the plan start year),
  optionally recurring every N years. Inflation-linked big expenses grow from
  their first occurrence, not from the plan start:

      C_y = amount * (1 + inflation/100) ** (y - first_year)

Tentative monthly expenses are not an engine concept: callers choose which
subset to aggregate (see ``split_tentative``).

Example
-------
>>> from finplan.config import BigExpense
>>> fees = BigExpense(name="School Fees", amount=100_000, year=0, recurrence_years=5)
>>> [annual_big_expenses([fees], y, 2025, 0.0) for y in (2025, 2026, 2030)]
[100000.0, 0.0, 100000.0]
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

from .config import BigExpense, MonthlyExpense
from .constants import ABSOLUTE_YEAR_THRESHOLD, MONTHS_PER_YEAR
from .utils import compound_factor

__all__ = [
    "split_tentative",
    "annual_monthly_expenses",
    "first_occurrence_year",
    "occurs_in",
    "annual_big_expenses",
]


def split_tentative(
    expenses: Iterable[MonthlyExpense],
) -> Tuple[List[MonthlyExpense], List[MonthlyExpense]]:
    """Split monthly expenses into (fixed, tentative) lists, order preserved."""
    fixed: List[MonthlyExpense] = []
    tentative: List[MonthlyExpense] = []
    for exp in expenses:
        (tentative if exp.tentative else fixed).append(exp)
    return fixed, tentative


def annual_monthly_expenses(
    expenses: Iterable[MonthlyExpense],
    year_index: int,
    inflation_rate: float,
) -> float:
    """
    Annual total of recurring monthly expenses in plan year *year_index*.

    Parameters
    ----------
    expenses : iterable of MonthlyExpense
        The subset to aggregate (e.g. fixed only).
    year_index : int
        0-based plan year.
    inflation_rate : float
        Annual inflation in percent.
    """
    inflation = compound_factor(inflation_rate, year_index)
    total = 0.0
    for exp in expenses:
        annual = exp.amount_monthly * MONTHS_PER_YEAR
        total += annual * inflation if exp.inflation_linked else annual
    return total


def first_occurrence_year(expense: BigExpense, start_year: int) -> int:
    """Resolve the calendar year of an expense's first occurrence."""
    if expense.year >= ABSOLUTE_YEAR_THRESHOLD:
        return expense.year
    return start_year + expense.year


def occurs_in(expense: BigExpense, calendar_year: int, start_year: int) -> bool:
    """True when *expense* falls in *calendar_year*."""
    first = first_occurrence_year(expense, start_year)
    if calendar_year < first:
        return False
    if expense.recurrence_years:
        return (calendar_year - first) % expense.recurrence_years == 0
    return calendar_year == first


def annual_big_expenses(
    big_expenses: Iterable[BigExpense],
    calendar_year: int,
    start_year: int,
    inflation_rate: float,
) -> float:
    """Sum of big expenses occurring in *calendar_year*."""
    total = 0.0
    for exp in big_expenses:
        if not occurs_in(exp, calendar_year, start_year):
            continue
        if exp.inflation_linked:
            years_since_first = calendar_year - first_occurrence_year(exp, start_year)
            total += exp.amount * compound_factor(inflation_rate, years_since_first)
        else:
            total += exp.amount
    return total
