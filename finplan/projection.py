"""
Plan projection module for FinPlan.

Purpose
-------
Orchestrates the calculators into a year-by-year household forecast. Given a
validated PlanInput (and optional per-session PlanOverrides), produces one
YearResult per calendar year of the horizon.

Pipeline
--------
1. Resolve the home loan; amortize it with the January prepayment schedule
   and every other loan without.
2. Roll the schedules up into per-year interest/principal totals.
3. Project the investment corpus once for the whole horizon.
4. For each plan year i (calendar year y = start_year + i):
   - gross income per person, grown flat or by per-year overrides
   - tax per person under the configured regime
   - fixed/tentative monthly expenses and big expenses
   - loan totals, investment contribution, ending corpus
   - home-loan EMI and pending principal for that year

Savings identity
----------------
    net_savings = total_final_income
                  - (fixed + tentative + big + loans_total + investment_contrib)

The projection is a pure function: no I/O, no mutation of its inputs, and
identical inputs always give identical outputs.

Example
-------
>>> from finplan.config import PlanInput
>>> from finplan.projection import project_plan
>>> plan = PlanInput.model_validate({
...     "settings": {"startYear": 2025, "horizonYears": 1},
...     "incomes": [{"person": "you", "baseAmount": 100_000, "annualGrowthRate": 0}],
... })
>>> out = project_plan(plan)
>>> out.results[0].total_income, round(out.results[0].total_tax, 2)
(1200000.0, 163800.0)
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from typing import Dict, Iterator, List, Optional, Tuple

import pandas as pd
from pydantic.alias_generators import to_camel

from .config import PlanInput, PlanOverrides
from .expenses import annual_big_expenses, annual_monthly_expenses, split_tentative
from .income import annual_income, find_income
from .investment import project_investment
from .loans import AmortizationEntry, amortize, select_home_loan, yearly_loan_totals
from .tax import OLD_REGIME, TaxRegime
from .types import PlanOutputDict, YearResultDict

__all__ = [
    "YearResult",
    "PlanOutput",
    "project_plan",
]

logger = logging.getLogger(__name__)

# Serialized names that do not follow the plain snake -> camel mapping.
_KEY_OVERRIDES = {"home_loan_emi": "homeLoanEMI"}


def _key(field_name: str) -> str:
    return _KEY_OVERRIDES.get(field_name, to_camel(field_name))


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class YearResult:
    """
    Projected figures for one calendar year.

    Invariants
    ----------
    - total_income = income_you + income_wife
    - total_tax = tax_you + tax_wife
    - final_income_x = income_x - tax_x
    - loans_total = loan_interest + loan_principal
    - net_savings = total_final_income - (fixed_annual + tentative_annual
      + big_annual + loans_total + investment_contrib)
    """
    year: int
    income_you: float
    income_wife: float
    total_income: float
    tax_you: float
    tax_wife: float
    total_tax: float
    final_income_you: float
    final_income_wife: float
    total_final_income: float
    fixed_annual: float
    tentative_annual: float
    big_annual: float
    loan_interest: float
    loan_principal: float
    loans_total: float
    investment_contrib: float
    net_savings: float
    corpus_end: float
    home_loan_emi: float
    home_loan_pending_principal: float

    @property
    def total_expenses(self) -> float:
        """Living expenses plus loan payments (excludes investment contributions)."""
        return self.fixed_annual + self.tentative_annual + self.big_annual + self.loans_total

    def to_dict(self) -> YearResultDict:
        """camelCase mapping matching the serialized output schema."""
        return {_key(k): v for k, v in asdict(self).items()}  # type: ignore[return-value]


@dataclass(frozen=True)
class PlanOutput:
    """Ordered projection results, one YearResult per year."""
    results: Tuple[YearResult, ...]

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[YearResult]:
        return iter(self.results)

    @property
    def years(self) -> List[int]:
        return [r.year for r in self.results]

    def to_dict(self) -> PlanOutputDict:
        """Serialize as ``{"results": [...]}`` with camelCase keys."""
        return {"results": [r.to_dict() for r in self.results]}

    def to_frame(self) -> pd.DataFrame:
        """
        Tabulate results as a DataFrame indexed by calendar year.

        Columns are the snake_case YearResult fields (minus ``year``) plus
        ``total_expenses``.
        """
        columns = [f.name for f in fields(YearResult) if f.name != "year"]
        df = pd.DataFrame(
            [[getattr(r, c) for c in columns] for r in self.results],
            columns=columns,
            index=pd.Index(self.years, name="year"),
        )
        df["total_expenses"] = [r.total_expenses for r in self.results]
        return df


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------

def _home_loan_by_year(
    schedule: List[AmortizationEntry],
) -> Dict[int, Tuple[float, float]]:
    """Map calendar year -> (installments paid, balance after the year's last month)."""
    by_year: Dict[int, Tuple[float, float]] = {}
    for entry in schedule:
        paid, _ = by_year.get(entry.calendar_year, (0.0, 0.0))
        by_year[entry.calendar_year] = (paid + entry.payment, entry.ending_balance)
    return by_year


def project_plan(
    plan: PlanInput,
    overrides: Optional[PlanOverrides] = None,
    *,
    include_tentative: bool = True,
    tax_regime: TaxRegime = OLD_REGIME,
) -> PlanOutput:
    """
    Project a household plan year by year.

    Parameters
    ----------
    plan : PlanInput
        Validated plan.
    overrides : PlanOverrides, optional
        Per-year growth rates per person and home-loan prepayments. None
        projects with flat growth rates and no prepayments.
    include_tentative : bool, default True
        Count tentative monthly expenses. When False, ``tentative_annual``
        is 0 in every year.
    tax_regime : TaxRegime, default OLD_REGIME
        Policy used to tax each person's gross income.

    Returns
    -------
    PlanOutput
        One YearResult per year in [start_year, start_year + horizon - 1].
    """
    overrides = overrides or PlanOverrides()
    settings = plan.settings
    start_year, horizon = settings.start_year, settings.horizon_years
    end_year = start_year + horizon - 1
    prepayments = overrides.home_loan_prepayment

    home_loan = select_home_loan(plan.loans)
    logger.debug(
        "Projecting %d-%d: %d loans, home loan=%s",
        start_year, end_year, len(plan.loans),
        home_loan.name if home_loan else None,
    )

    home_schedule = (
        amortize(home_loan, start_year, prepayments) if home_loan is not None else []
    )
    loan_years = yearly_loan_totals(
        plan.loans, start_year, end_year, home_loan, prepayments, start_year,
        home_schedule=home_schedule,
    )
    home_by_year = _home_loan_by_year(home_schedule)
    investments = project_investment(plan.investment, start_year, horizon)

    fixed, tentative = split_tentative(plan.monthly_expenses)
    you = find_income(plan.incomes, "you")
    wife = find_income(plan.incomes, "wife")

    results: List[YearResult] = []
    for i, yr in enumerate(range(start_year, end_year + 1)):
        income_you = annual_income(you, i, overrides.growth_rates_you)
        income_wife = annual_income(wife, i, overrides.growth_rates_wife)
        tax_you = tax_regime.compute(income_you)
        tax_wife = tax_regime.compute(income_wife)
        final_you = income_you - tax_you
        final_wife = income_wife - tax_wife
        total_final = final_you + final_wife

        fixed_annual = annual_monthly_expenses(fixed, i, settings.inflation_rate)
        tentative_annual = (
            annual_monthly_expenses(tentative, i, settings.inflation_rate)
            if include_tentative else 0.0
        )
        big_annual = annual_big_expenses(
            plan.big_expenses, yr, start_year, settings.inflation_rate
        )

        loans = loan_years[yr]
        invest = investments[i]
        net_savings = total_final - (
            fixed_annual + tentative_annual + big_annual
            + loans.total + invest.investment_contrib
        )
        emi_paid, pending = home_by_year.get(yr, (0.0, 0.0))

        results.append(YearResult(
            year=yr,
            income_you=income_you,
            income_wife=income_wife,
            total_income=income_you + income_wife,
            tax_you=tax_you,
            tax_wife=tax_wife,
            total_tax=tax_you + tax_wife,
            final_income_you=final_you,
            final_income_wife=final_wife,
            total_final_income=total_final,
            fixed_annual=fixed_annual,
            tentative_annual=tentative_annual,
            big_annual=big_annual,
            loan_interest=loans.interest,
            loan_principal=loans.principal,
            loans_total=loans.total,
            investment_contrib=invest.investment_contrib,
            net_savings=net_savings,
            corpus_end=invest.corpus_end,
            home_loan_emi=emi_paid,
            home_loan_pending_principal=pending,
        ))

    return PlanOutput(results=tuple(results))
