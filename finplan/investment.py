"""
Investment projection module for FinPlan.

Purpose
-------
Projects the investment corpus year by year under monthly compounding, with
contributions from a base monthly amount plus all SIPs, stepped up once a
year by the contribution growth rate.

Key Mathematical Framework
--------------------------
- Base monthly contribution: A = monthly_contribution + sum(sip.amount_monthly)
- Contribution in plan year y: A_y = A * (1 + g) ** y, g = contribution_growth_rate/100
- Monthly rate: m = expected_annual_return / 12 / 100 (nominal split)
- Monthly step (deposit first, then the month's return):
      W <- (W + A_y) * (1 + m)
- The corpus carries across years; W_0 = current_corpus.

Example
-------
>>> from finplan.config import InvestmentPlan
>>> plan = InvestmentPlan(current_corpus=100_000, expected_annual_return=0)
>>> project_investment(plan, 2025, 2)
[YearlyInvestment(investment_contrib=0.0, corpus_end=100000.0), YearlyInvestment(investment_contrib=0.0, corpus_end=100000.0)]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .config import InvestmentPlan
from .constants import MONTHS_PER_YEAR
from .utils import compound_factor, monthly_rate

__all__ = [
    "YearlyInvestment",
    "base_monthly_contribution",
    "project_investment",
]


@dataclass(frozen=True)
class YearlyInvestment:
    """Contributions made during a plan year and the corpus at its end."""
    investment_contrib: float
    corpus_end: float


def base_monthly_contribution(plan: InvestmentPlan) -> float:
    """Monthly contribution plus all SIPs, before yearly step-ups."""
    return plan.monthly_contribution + sum(sip.amount_monthly for sip in plan.sips)


def project_investment(
    plan: InvestmentPlan,
    start_year: int,
    horizon_years: int,
) -> List[YearlyInvestment]:
    """
    Year-by-year contributions and ending corpus.

    Parameters
    ----------
    plan : InvestmentPlan
        Corpus, contributions and return assumptions.
    start_year : int
        First calendar year (contributions start in its January).
    horizon_years : int
        Number of years to project. Non-positive values give an empty list.

    Returns
    -------
    list of YearlyInvestment
        One entry per plan year, in order.
    """
    base = base_monthly_contribution(plan)
    m = monthly_rate(plan.expected_annual_return)

    corpus = plan.current_corpus
    yearly: List[YearlyInvestment] = []
    for y in range(max(horizon_years, 0)):
        effective = base * compound_factor(plan.contribution_growth_rate, y)
        contrib = 0.0
        for _ in range(MONTHS_PER_YEAR):
            corpus += effective
            contrib += effective
            corpus *= 1.0 + m
        yearly.append(YearlyInvestment(investment_contrib=contrib, corpus_end=corpus))
    return yearly
