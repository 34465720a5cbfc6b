"""
Unit tests for config.py module.

Tests the plan records, overrides, tax regime configs, validation wrappers
and application settings.
"""

import logging
import math

import pytest
from pydantic import ValidationError as PydanticValidationError

from finplan.config import (
    AppSettings,
    BigExpense,
    Income,
    InvestmentPlan,
    Loan,
    PlanInput,
    PlanOverrides,
    Settings,
    configure_logging,
    validate_overrides,
    validate_plan,
)
from finplan.exceptions import FinPlanError, ValidationError
from finplan.loans import amortize


def _plan_dict(**extra):
    data = {
        "settings": {"startYear": 2025, "horizonYears": 3},
        "incomes": [{"person": "you", "baseAmount": 100_000}],
    }
    data.update(extra)
    return data


# ============================================================================
# PLAN RECORDS
# ============================================================================

class TestPlanRecords:
    """Test field defaults, aliases and constraints."""

    def test_defaults(self):
        """Test defaults for optional fields."""
        plan = PlanInput.model_validate(_plan_dict())

        assert plan.settings.currency == "INR"
        assert plan.settings.inflation_rate == 5.0
        assert plan.incomes[0].base_is_monthly is True
        assert plan.incomes[0].annual_growth_rate == 7.0
        assert plan.investment.expected_annual_return == 8.0
        assert plan.investment.sips == []
        assert plan.loans == [] and plan.big_expenses == [] and plan.monthly_expenses == []

    def test_camel_and_snake_keys(self):
        """Test both key styles populate the same fields."""
        camel = Settings.model_validate({"startYear": 2025, "horizonYears": 4})
        snake = Settings.model_validate({"start_year": 2025, "horizon_years": 4})
        assert camel == snake
        assert camel.end_year == 2028

    def test_camel_dump(self):
        """Test dumping by alias restores the camelCase schema."""
        loan = Loan(name="Home", principal=1, apr=8, tenure_months=12,
                    start_year=2025, primary_residence=True)
        dumped = loan.model_dump(by_alias=True)

        assert dumped["tenureMonths"] == 12
        assert dumped["isPrimaryResidenceLoan"] is True

    def test_frozen(self):
        """Test records are immutable."""
        settings = Settings(start_year=2025)
        with pytest.raises(PydanticValidationError):
            settings.start_year = 2030

    def test_unknown_keys_rejected(self):
        """Test typos are reported rather than ignored."""
        with pytest.raises(PydanticValidationError):
            Settings.model_validate({"startYear": 2025, "horizon": 5})

    @pytest.mark.parametrize("model, data", [
        (Settings, {"startYear": 1800}),
        (Settings, {"startYear": 2025, "horizonYears": 0}),
        (Settings, {"startYear": 2025, "horizonYears": 51}),
        (Income, {"person": "partner", "baseAmount": 1}),
        (Income, {"person": "you", "baseAmount": -1}),
        (Loan, {"name": "L", "principal": 1, "apr": 101, "tenureMonths": 12, "startYear": 2025}),
        (Loan, {"name": "L", "principal": 1, "apr": 8, "tenureMonths": 12, "startYear": 2025,
                "startMonth": 13}),
        (BigExpense, {"name": "X", "amount": 1, "year": -1}),
        (InvestmentPlan, {"expectedAnnualReturn": -2}),
    ])
    def test_range_constraints(self, model, data):
        """Test out-of-range values are rejected."""
        with pytest.raises(PydanticValidationError):
            model.model_validate(data)

    def test_null_sips_become_empty(self):
        """Test sips: null is accepted as no SIPs."""
        assert InvestmentPlan.model_validate({"sips": None}).sips == []


class TestPlanInputValidation:
    """Test cross-field plan rules."""

    def test_income_count(self):
        """Test 1-2 incomes are required."""
        with pytest.raises(PydanticValidationError):
            PlanInput.model_validate(_plan_dict(incomes=[]))

    def test_duplicate_person(self):
        """Test each person may appear once."""
        incomes = [{"person": "you", "baseAmount": 1}, {"person": "you", "baseAmount": 2}]
        with pytest.raises(PydanticValidationError, match="only one income"):
            PlanInput.model_validate(_plan_dict(incomes=incomes))

    def test_single_primary_residence(self):
        """Test at most one loan may be flagged as the home loan."""
        loan = {"name": "A", "principal": 1, "apr": 8, "tenureMonths": 12,
                "startYear": 2025, "isPrimaryResidenceLoan": True}
        with pytest.raises(PydanticValidationError, match="primary residence"):
            PlanInput.model_validate(_plan_dict(loans=[loan, dict(loan, name="B")]))

    def test_validate_plan_wraps_errors(self):
        """Test validate_plan raises FinPlan's ValidationError."""
        with pytest.raises(ValidationError, match="Invalid plan"):
            validate_plan({"settings": {}})
        try:
            validate_plan({"settings": {}})
        except FinPlanError as e:
            assert isinstance(e.__cause__, PydanticValidationError)


# ============================================================================
# OVERRIDES
# ============================================================================

class TestPlanOverrides:
    """Test per-session overrides."""

    def test_for_plan_seeds_flat_rates(self):
        """Test defaults mirror each person's flat rate and zero prepayments."""
        plan = PlanInput.model_validate(_plan_dict(incomes=[
            {"person": "you", "baseAmount": 1, "annualGrowthRate": 8},
            {"person": "wife", "baseAmount": 1, "annualGrowthRate": 6},
        ]))
        overrides = PlanOverrides.for_plan(plan)

        assert overrides.growth_rates_you == [8, 8]
        assert overrides.growth_rates_wife == [6, 6]
        assert overrides.home_loan_prepayment == [0, 0, 0]

    def test_for_plan_missing_person(self):
        """Test an absent person gets 0% rates."""
        overrides = PlanOverrides.for_plan(PlanInput.model_validate(_plan_dict()))
        assert overrides.growth_rates_wife == [0, 0]

    def test_growth_rates_for(self):
        """Test lookup by person."""
        overrides = PlanOverrides(growth_rates_you=[1], growth_rates_wife=[2])
        assert overrides.growth_rates_for("you") == [1]
        assert overrides.growth_rates_for("wife") == [2]

    def test_none_entries_allowed(self):
        """Test growth sequences may contain gaps."""
        overrides = validate_overrides({"growthRatesYou": [5, None, 7]})
        assert overrides.growth_rates_you == [5, None, 7]

    def test_prepayment_gaps_allowed(self):
        """Test None and NaN prepayments are kept and amortize as no prepayment."""
        overrides = validate_overrides({"homeLoanPrepayment": [None, 100_000, float("nan")]})
        prepay = overrides.home_loan_prepayment
        assert prepay[0] is None and prepay[1] == 100_000 and math.isnan(prepay[2])

        loan = Loan(name="Home", principal=1_000_000, apr=8, tenure_months=60, start_year=2025)
        with_gaps = amortize(loan, 2025, prepay)
        zeros = amortize(loan, 2025, [0, 100_000, 0])
        assert with_gaps == zeros

    def test_negative_prepayment_rejected(self):
        """Test prepayments must be non-negative."""
        with pytest.raises(ValidationError, match="Invalid overrides"):
            validate_overrides({"homeLoanPrepayment": [-1]})


# ============================================================================
# APPLICATION SETTINGS
# ============================================================================

class TestAppSettings:
    """Test environment-driven settings."""

    def test_defaults(self, monkeypatch):
        """Test defaults without environment variables."""
        for var in ("FINPLAN_LOG_LEVEL", "FINPLAN_DEBUG", "FINPLAN_INCLUDE_TENTATIVE"):
            monkeypatch.delenv(var, raising=False)
        settings = AppSettings(_env_file=None)

        assert settings.log_level == "WARNING"
        assert settings.include_tentative is True
        assert settings.number_grouping == "auto"
        assert settings.chart_type == "line"

    def test_environment_override(self, monkeypatch):
        """Test FINPLAN_* variables are read."""
        monkeypatch.setenv("FINPLAN_LOG_LEVEL", "INFO")
        monkeypatch.setenv("FINPLAN_INCLUDE_TENTATIVE", "false")
        settings = AppSettings(_env_file=None)

        assert settings.log_level == "INFO"
        assert settings.include_tentative is False

    def test_debug_forces_debug_level(self, monkeypatch):
        """Test debug mode overrides the log level."""
        monkeypatch.setenv("FINPLAN_DEBUG", "true")
        assert AppSettings(_env_file=None).effective_log_level == "DEBUG"

    def test_configure_logging(self):
        """Test the package logger level is set."""
        configure_logging("INFO")
        assert logging.getLogger("finplan").level == logging.INFO
        configure_logging("WARNING")
