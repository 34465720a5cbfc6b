"""
Pytest configuration and fixtures for FinPlan test suite.

This module provides reusable fixtures for testing all FinPlan components.
Fixtures follow the principle of "arrange-act-assert" with clear separation.
"""

import json
from pathlib import Path

import pytest

from finplan.config import (
    BigExpense,
    Income,
    InvestmentPlan,
    Loan,
    MonthlyExpense,
    PlanInput,
    PlanOverrides,
    SIP,
    Settings,
)


# ---------------------------------------------------------------------------
# Calendar Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def start_year() -> int:
    """Standard plan start year for tests."""
    return 2025


@pytest.fixture
def horizon() -> int:
    """Standard projection horizon for tests."""
    return 5


# ---------------------------------------------------------------------------
# Income Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def income_you() -> Income:
    """
    Flat salary for "you".

    Base: 1,00,000/month, no growth, no bonus
    """
    return Income(person="you", base_amount=100_000, annual_growth_rate=0)


@pytest.fixture
def income_wife() -> Income:
    """
    Salary for "wife" with growth and variable components.

    Base: 80,000/month, 10% growth, 1,00,000 bonus, 50,000 RSUs
    """
    return Income(
        person="wife",
        base_amount=80_000,
        annual_growth_rate=10,
        bonus_annual=100_000,
        rsus_annual=50_000,
    )


# ---------------------------------------------------------------------------
# Loan Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def home_loan(start_year) -> Loan:
    """50 lakh home loan at 8% over 20 years, flagged as primary residence."""
    return Loan(
        name="Home Loan",
        principal=5_000_000,
        apr=8,
        tenure_months=240,
        start_year=start_year,
        start_month=1,
        primary_residence=True,
    )


@pytest.fixture
def car_loan(start_year) -> Loan:
    """Interest-free car loan: 1,20,000 over 12 months starting in July."""
    return Loan(
        name="Car Loan",
        principal=120_000,
        apr=0,
        tenure_months=12,
        start_year=start_year,
        start_month=7,
    )


# ---------------------------------------------------------------------------
# Plan Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def simple_plan(start_year, income_you) -> PlanInput:
    """One-year plan with a single flat income and nothing else."""
    return PlanInput(
        settings=Settings(start_year=start_year, horizon_years=1),
        incomes=[income_you],
    )


@pytest.fixture
def household_plan(start_year, horizon, income_you, income_wife, home_loan, car_loan) -> PlanInput:
    """
    Full household plan exercising every calculator.

    - Two incomes
    - Fixed and tentative monthly expenses
    - Recurring and one-off big expenses
    - Home loan (flagged) and a car loan
    - Investment corpus with SIPs and contribution growth
    """
    return PlanInput(
        settings=Settings(start_year=start_year, horizon_years=horizon, inflation_rate=6),
        incomes=[income_you, income_wife],
        monthly_expenses=[
            MonthlyExpense(name="Groceries", amount_monthly=30_000),
            MonthlyExpense(name="Rent", amount_monthly=20_000, inflation_linked=False),
            MonthlyExpense(name="Vacation fund", amount_monthly=10_000, tentative=True),
        ],
        big_expenses=[
            BigExpense(name="School Fees", amount=200_000, year=0, recurrence_years=2),
            BigExpense(name="Car", amount=800_000, year=start_year + 3, inflation_linked=False),
        ],
        investment=InvestmentPlan(
            current_corpus=1_000_000,
            monthly_contribution=20_000,
            expected_annual_return=10,
            contribution_growth_rate=5,
            sips=[SIP(name="Index fund", amount_monthly=15_000)],
        ),
        loans=[home_loan, car_loan],
    )


@pytest.fixture
def household_overrides(household_plan) -> PlanOverrides:
    """Default overrides with a 5 lakh home-loan prepayment in year 2."""
    defaults = PlanOverrides.for_plan(household_plan)
    prepay = list(defaults.home_loan_prepayment)
    prepay[1] = 500_000
    return defaults.model_copy(update={"home_loan_prepayment": prepay})


# ---------------------------------------------------------------------------
# File Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def plan_json_file(tmp_path, household_plan) -> Path:
    """Household plan written as camelCase JSON (no schema_version)."""
    path = tmp_path / "plan.json"
    path.write_text(json.dumps(household_plan.model_dump(mode="json", by_alias=True)))
    return path


@pytest.fixture
def overrides_json_file(tmp_path) -> Path:
    """Overrides file with growth rates for "you" and two prepayments."""
    path = tmp_path / "overrides.json"
    path.write_text(json.dumps({
        "growthRatesYou": [10, 10, 10, 10],
        "homeLoanPrepayment": [0, 500_000],
    }))
    return path
