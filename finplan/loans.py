"""
Loan amortization module for FinPlan.

Purpose
-------
Builds month-by-month amortization schedules for level-payment loans, with
optional January lump-sum prepayments on the home loan, and rolls schedules
up into per-calendar-year interest/principal totals for the projection.

Key Mathematical Framework
--------------------------
- Monthly rate: r = apr / 12 / 100
- Level payment (EMI) over n months:
      EMI = P * r * (1 + r)^n / ((1 + r)^n - 1),   EMI = P / n when r = 0
- Monthly step, starting at (start_year, start_month):
      January only: B <- max(0, B - prepay[year - plan_start_year])
      interest  = B * r
      principal = min(EMI - interest, B)
      B <- max(0, B - principal)
- The walk stops when B reaches 0 or after n months. Prepayments shorten the
  schedule; they never change the EMI.

Home loan
---------
The loan flagged ``primary_residence`` is the home loan. Plans without a flag
fall back to the first loan whose name contains "home" (case-insensitive).

Example
-------
>>> from finplan.config import Loan
>>> loan = Loan(name="Car", principal=120_000, apr=0, tenure_months=12, start_year=2025)
>>> schedule = amortize(loan)
>>> len(schedule), schedule[-1].ending_balance
(12, 0.0)
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence

import pandas as pd

from .config import Loan
from .constants import HOME_LOAN_KEYWORD
from .utils import month_index, monthly_rate, next_month, value_at

__all__ = [
    "AmortizationEntry",
    "LoanYear",
    "emi",
    "amortize",
    "select_home_loan",
    "yearly_loan_totals",
    "schedule_frame",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AmortizationEntry:
    """One month of a loan schedule."""
    month_index: int
    calendar_year: int
    calendar_month: int
    interest_portion: float
    principal_portion: float
    ending_balance: float
    prepayment: float = 0.0

    @property
    def payment(self) -> float:
        """Installment paid this month (interest + principal, excluding prepayment)."""
        return self.interest_portion + self.principal_portion


@dataclass(frozen=True)
class LoanYear:
    """Interest and principal paid across all loans in one calendar year."""
    interest: float = 0.0
    principal: float = 0.0

    @property
    def total(self) -> float:
        return self.interest + self.principal


def emi(principal: float, apr: float, tenure_months: int) -> float:
    """
    Level monthly installment for a fully amortizing loan.

    Returns 0 for non-positive principal or tenure.
    """
    if principal <= 0 or tenure_months <= 0:
        return 0.0
    r = monthly_rate(apr)
    growth = (1 + r) ** tenure_months
    # Rates too small to move (1 + r) off 1.0 amortize as interest-free.
    if r == 0 or growth == 1.0:
        return principal / tenure_months
    return principal * r * growth / (growth - 1)


def amortize(
    loan: Loan,
    plan_start_year: Optional[int] = None,
    prepayments: Optional[Sequence[float]] = None,
) -> List[AmortizationEntry]:
    """
    Month-by-month amortization schedule.

    Parameters
    ----------
    loan : Loan
        Loan terms.
    plan_start_year : int, optional
        Calendar year that ``prepayments[0]`` belongs to. Prepayments are
        ignored unless both this and *prepayments* are given.
    prepayments : sequence of float, optional
        Lump sum per plan year, applied in January before that month's
        interest. Missing entries (and years before the plan) mean none.

    Returns
    -------
    list of AmortizationEntry
        One entry per month until payoff or the end of the tenure. Empty for
        zero principal or zero tenure.
    """
    payment = emi(loan.principal, loan.apr, loan.tenure_months)
    if payment == 0:
        return []

    r = monthly_rate(loan.apr)
    apply_prepay = prepayments is not None and plan_start_year is not None
    balance = float(loan.principal)
    year, month = loan.start_year, loan.start_month
    schedule: List[AmortizationEntry] = []

    for m in range(1, loan.tenure_months + 1):
        if balance <= 0:
            break
        prepaid = 0.0
        if apply_prepay and month == 1:
            prepaid = min(value_at(prepayments, year - plan_start_year), balance)
            prepaid = max(prepaid, 0.0)
            balance -= prepaid
            if balance <= 0:
                # Lump sum closed the loan; no installment falls due.
                schedule.append(AmortizationEntry(m, year, month, 0.0, 0.0, 0.0, prepaid))
                break

        interest = balance * r
        principal_paid = min(payment - interest, balance)
        balance = max(balance - principal_paid, 0.0)
        schedule.append(
            AmortizationEntry(m, year, month, interest, principal_paid, balance, prepaid)
        )
        year, month = next_month(year, month)

    return schedule


def select_home_loan(loans: Sequence[Loan]) -> Optional[Loan]:
    """
    Pick the home loan: the flagged loan, else the first "home" name match.

    Emits a UserWarning when several unflagged loan names match, since the
    name convention is then ambiguous.
    """
    flagged = [loan for loan in loans if loan.primary_residence]
    if flagged:
        return flagged[0]
    matches = [loan for loan in loans if HOME_LOAN_KEYWORD in loan.name.lower()]
    if len(matches) > 1:
        warnings.warn(
            f"{len(matches)} loans look like home loans by name "
            f"({[loan.name for loan in matches]}); using '{matches[0].name}'. "
            f"Set isPrimaryResidenceLoan on one loan to disambiguate.",
            UserWarning,
        )
    return matches[0] if matches else None


def yearly_loan_totals(
    loans: Sequence[Loan],
    start_year: int,
    end_year: int,
    home_loan: Optional[Loan] = None,
    prepayments: Optional[Sequence[float]] = None,
    plan_start_year: Optional[int] = None,
    *,
    home_schedule: Optional[Sequence[AmortizationEntry]] = None,
) -> Dict[int, LoanYear]:
    """
    Interest and principal per calendar year, summed across *loans*.

    Only *home_loan* (compared by identity) is amortized with *prepayments*;
    every other loan follows its contractual schedule. ``prepayments[0]``
    belongs to *plan_start_year* (default: *start_year*). Every year in
    [start_year, end_year] is present in the result.

    A precomputed *home_schedule* (already amortized with *prepayments*) is
    used as is for *home_loan* instead of amortizing it again.
    """
    anchor = start_year if plan_start_year is None else plan_start_year
    interest = {y: 0.0 for y in range(start_year, end_year + 1)}
    principal = dict(interest)
    for loan in loans:
        if loan is home_loan and home_schedule is not None:
            schedule = list(home_schedule)
        elif loan is home_loan:
            schedule = amortize(loan, anchor, prepayments)
        else:
            schedule = amortize(loan)
        logger.debug("Amortized %s: %d months", loan.name, len(schedule))
        for entry in schedule:
            if entry.calendar_year in interest:
                interest[entry.calendar_year] += entry.interest_portion
                principal[entry.calendar_year] += entry.principal_portion
    return {y: LoanYear(interest[y], principal[y]) for y in interest}


def schedule_frame(schedule: Sequence[AmortizationEntry]) -> pd.DataFrame:
    """
    Tabulate a schedule as a DataFrame indexed by first-of-month dates.

    Columns: interest, principal, prepayment, payment, balance.
    """
    if not schedule:
        return pd.DataFrame(
            columns=["interest", "principal", "prepayment", "payment", "balance"],
            index=pd.DatetimeIndex([], dtype="datetime64[ns]"),
        )
    first = schedule[0]
    idx = month_index(date(first.calendar_year, first.calendar_month, 1), len(schedule))
    return pd.DataFrame(
        {
            "interest": [e.interest_portion for e in schedule],
            "principal": [e.principal_portion for e in schedule],
            "prepayment": [e.prepayment for e in schedule],
            "payment": [e.payment for e in schedule],
            "balance": [e.ending_balance for e in schedule],
        },
        index=idx,
    )
