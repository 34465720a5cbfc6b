"""
Unit tests for serialization.py module.

Tests JSON/CSV plan import, the CSV template, plan save and output export.
"""

import json
import warnings
from datetime import date

import pytest

from pydantic import ValidationError as PydanticValidationError

from finplan.exceptions import (
    ConfigurationError,
    PlanImportError,
    UnsupportedFormatError,
    ValidationError,
)
from finplan.projection import project_plan
from finplan.serialization import (
    CSV_HEADERS,
    SCHEMA_VERSION,
    load_overrides,
    load_plan,
    load_tax_regime,
    plan_csv_template,
    plan_from_csv,
    plan_from_dict,
    save_output_json,
    save_plan,
)


# ============================================================================
# JSON PLANS
# ============================================================================

class TestPlanFromDict:
    """Test mapping validation."""

    def test_default_income_inserted(self):
        """Test a plan without incomes gets a zero "you" income."""
        plan = plan_from_dict({"settings": {"startYear": 2025}})

        assert len(plan.incomes) == 1
        inc = plan.incomes[0]
        assert inc.person == "you"
        assert inc.base_amount == 0
        assert inc.annual_growth_rate == 7

    def test_empty_incomes_replaced(self):
        """Test an empty income list is treated as missing."""
        plan = plan_from_dict({"settings": {"startYear": 2025}, "incomes": []})
        assert plan.incomes[0].person == "you"

    def test_schema_version_dropped(self):
        """Test the version marker is not a plan field."""
        plan = plan_from_dict({"schema_version": SCHEMA_VERSION,
                               "settings": {"startYear": 2025}})
        assert plan.settings.start_year == 2025

    def test_invalid_plan_raises_import_error(self):
        """Test validation failures become PlanImportError."""
        with pytest.raises(PlanImportError, match="validation"):
            plan_from_dict({"settings": {"startYear": 2025, "horizonYears": 0}})

    def test_error_chain(self):
        """Test import errors wrap FinPlan's ValidationError and the pydantic error."""
        with pytest.raises(PlanImportError) as excinfo:
            plan_from_dict({"settings": {"startYear": 2025, "horizonYears": 0}})
        assert isinstance(excinfo.value.__cause__, ValidationError)
        assert isinstance(excinfo.value.__cause__.__cause__, PydanticValidationError)

    def test_non_mapping(self):
        """Test a JSON array is rejected."""
        with pytest.raises(PlanImportError, match="JSON object"):
            plan_from_dict([1, 2])


class TestLoadSavePlan:
    """Test file round trips."""

    def test_json_round_trip(self, tmp_path, household_plan):
        """Test save_plan then load_plan restores an equal plan."""
        path = tmp_path / "out" / "plan.json"
        save_plan(household_plan, path)

        data = json.loads(path.read_text())
        assert data["schema_version"] == SCHEMA_VERSION
        assert "monthlyExpenses" in data
        assert load_plan(path) == household_plan

    def test_loads_camel_json_without_version(self, plan_json_file, household_plan):
        """Test plans without schema_version load silently."""
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert load_plan(plan_json_file) == household_plan

    def test_schema_mismatch_warns(self, tmp_path):
        """Test a different schema_version warns but still loads."""
        path = tmp_path / "old.json"
        path.write_text(json.dumps({"schema_version": "0.0.1",
                                    "settings": {"startYear": 2025}}))
        with pytest.warns(UserWarning, match="schema version"):
            plan = load_plan(path)
        assert plan.settings.start_year == 2025

    def test_invalid_json(self, tmp_path):
        """Test malformed JSON raises PlanImportError."""
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(PlanImportError, match="Invalid JSON"):
            load_plan(path)

    def test_unsupported_suffix(self, tmp_path):
        """Test other formats are rejected before reading."""
        path = tmp_path / "plan.yaml"
        path.write_text("settings: {}")
        with pytest.raises(UnsupportedFormatError):
            load_plan(path)

    def test_loads_csv_by_suffix(self, tmp_path):
        """Test .csv files go through the typed-row parser."""
        path = tmp_path / "plan.csv"
        path.write_text(plan_csv_template(start_year=2025))
        assert load_plan(path).settings.start_year == 2025


# ============================================================================
# TYPED-ROW CSV
# ============================================================================

class TestCsvTemplate:
    """Test the sample template."""

    def test_header(self):
        """Test the header row lists every supported column."""
        header = plan_csv_template(2025).splitlines()[0]
        assert header.split(",") == CSV_HEADERS

    def test_template_round_trip(self):
        """Test the template imports to a valid, complete plan."""
        plan = plan_from_csv(plan_csv_template(start_year=2025))

        assert plan.settings.start_year == 2025
        assert plan.settings.horizon_years == 10
        assert [inc.person for inc in plan.incomes] == ["you", "wife"]
        assert plan.incomes[0].base_amount == 150_000
        assert plan.incomes[0].bonus_annual == 100_000
        assert [e.name for e in plan.monthly_expenses] == ["Grocery + Food", "Gas + Travel"]
        assert plan.big_expenses[0].year == 2026
        assert plan.big_expenses[0].recurrence_years == 1
        assert plan.loans[0].name == "Home Loan"
        assert plan.loans[0].primary_residence is True
        assert plan.loans[0].tenure_months == 240
        assert plan.investment.monthly_contribution == 50_000
        assert plan.investment.expected_annual_return == 10
        assert [s.amount_monthly for s in plan.investment.sips] == [25_000, 25_000]

    def test_template_default_year(self):
        """Test the template defaults to the current year."""
        plan = plan_from_csv(plan_csv_template())
        assert plan.settings.start_year == date.today().year


class TestPlanFromCsv:
    """Test lenient CSV parsing."""

    def test_aliases_and_case(self):
        """Test header aliases and case-insensitive types/headers."""
        text = (
            "TYPE,Person,Base,Frequency,Growth,Principal,ROI,Tenure,LoanStartYear,StartMonth,Name\n"
            "Income,Wife,\"1,50,000\",annual,8%,,,,,,\n"
            "LOAN,,,,,\"₹10,00,000\",9.5,60,2026,14,Car\n"
        )
        plan = plan_from_csv(text)

        inc = plan.incomes[0]
        assert inc.person == "wife"
        assert inc.base_amount == 150_000
        assert inc.base_is_monthly is False
        assert inc.annual_growth_rate == 8
        loan = plan.loans[0]
        assert loan.principal == 1_000_000
        assert loan.apr == 9.5
        assert loan.tenure_months == 60
        assert loan.start_year == 2026
        assert loan.start_month == 12

    def test_first_alias_wins(self):
        """Test the first non-empty alias is used."""
        text = "type,amountMonthly,amount,name\nmonthlyExpense,,500,Fuel\n"
        assert plan_from_csv(text).monthly_expenses[0].amount_monthly == 500

    def test_only_first_income_per_person(self):
        """Test duplicate persons keep the first occurrence."""
        text = (
            "type,person,baseAmount\n"
            "income,you,100\n"
            "income,you,200\n"
            "income,wife,300\n"
            "income,wife,400\n"
        )
        plan = plan_from_csv(text)
        assert [(i.person, i.base_amount) for i in plan.incomes] == [("you", 100), ("wife", 300)]

    def test_no_income_gets_default(self):
        """Test a plan without income rows still validates."""
        plan = plan_from_csv("type,startYearSettings\nsettings,2030\n")
        assert plan.settings.start_year == 2030
        assert plan.incomes[0].person == "you"

    def test_unknown_and_blank_types_ignored(self, caplog):
        """Test rows with unknown or empty type are skipped."""
        text = "type,name,amount\ncomment,hello,1\n,orphan,2\nbigExpense,Trip,300\n"
        plan = plan_from_csv(text)

        assert [b.name for b in plan.big_expenses] == ["Trip"]
        assert any("comment" in m for m in caplog.messages)

    def test_recurrence_kept_only_when_positive(self):
        """Test zero recurrence means one-off."""
        text = "type,name,amount,year,recurrence\nbigExpense,A,1,0,0\nbigExpense,B,1,0,3\n"
        plan = plan_from_csv(text)
        assert [b.recurrence_years for b in plan.big_expenses] == [None, 3]

    def test_boolean_spellings(self):
        """Test yes/1/true are truthy and anything else is false."""
        text = (
            "type,name,amountMonthly,inflationLinked,tentative\n"
            "monthlyExpense,A,1,no,yes\n"
            "monthlyExpense,B,1,1,TRUE\n"
            "monthlyExpense,C,1,,\n"
        )
        flags = [(e.inflation_linked, e.tentative) for e in plan_from_csv(text).monthly_expenses]
        assert flags == [(False, True), (True, True), (True, False)]

    def test_horizon_minimum(self):
        """Test horizon is clamped to at least 1."""
        plan = plan_from_csv("type,horizonYears\nsettings,0\n")
        assert plan.settings.horizon_years == 1

    def test_empty_csv(self):
        """Test empty input raises PlanImportError."""
        with pytest.raises(PlanImportError):
            plan_from_csv("")

    def test_missing_type_column(self):
        """Test the type column is mandatory."""
        with pytest.raises(PlanImportError, match="type"):
            plan_from_csv("name,amount\nA,1\n")

    def test_scientific_notation(self):
        """Test exponent notation is read as a number, not stripped."""
        text = "type,name,principal,apr,tenureMonths,startYear\nloan,Car,5e5,9,60,2025\n"
        assert plan_from_csv(text).loans[0].principal == 500_000

    def test_invalid_values_raise(self):
        """Test a loan without tenure fails validation."""
        with pytest.raises(PlanImportError):
            plan_from_csv("type,name,principal,apr\nloan,Car,100,8\n")


# ============================================================================
# OVERRIDES, TAX REGIMES, OUTPUT
# ============================================================================

class TestAuxiliaryFiles:
    """Test overrides and tax regime loaders."""

    def test_load_overrides(self, overrides_json_file):
        """Test camelCase overrides load."""
        overrides = load_overrides(overrides_json_file)
        assert overrides.growth_rates_you == [10, 10, 10, 10]
        assert overrides.growth_rates_wife is None
        assert overrides.home_loan_prepayment == [0, 500_000]

    def test_invalid_overrides(self, tmp_path):
        """Test negative prepayments are rejected."""
        path = tmp_path / "o.json"
        path.write_text(json.dumps({"homeLoanPrepayment": [-5]}))
        with pytest.raises(PlanImportError):
            load_overrides(path)

    def test_load_tax_regime(self, tmp_path):
        """Test a JSON slab table becomes a working regime."""
        path = tmp_path / "regime.json"
        path.write_text(json.dumps({"name": "flat", "slabs": [{"lower": 0, "rate": 0.1}]}))
        regime = load_tax_regime(path)
        assert regime.compute(1_000) == pytest.approx(100)

    def test_invalid_tax_regime(self, tmp_path):
        """Test unsorted slabs raise ConfigurationError."""
        path = tmp_path / "regime.json"
        path.write_text(json.dumps({"slabs": [{"lower": 10, "rate": 0.1}]}))
        with pytest.raises(ConfigurationError):
            load_tax_regime(path)


class TestSaveOutputJson:
    """Test results export."""

    def test_output_json(self, tmp_path, simple_plan):
        """Test the exported file matches PlanOutput.to_dict()."""
        output = project_plan(simple_plan)
        path = tmp_path / "results.json"
        save_output_json(output, path)

        data = json.loads(path.read_text())
        assert data == json.loads(json.dumps(output.to_dict()))
        assert data["results"][0]["homeLoanEMI"] == 0
