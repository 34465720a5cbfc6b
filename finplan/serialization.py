"""
Serialization module for FinPlan plan persistence.

Purpose
-------
Loads household plans from JSON or from the spreadsheet-friendly "typed-row"
CSV template, writes plans back to JSON, and exports projection results.

Supports:
- JSON plans (camelCase or snake_case keys, optional ``schema_version``)
- Typed-row CSV plans: one row per record, a ``type`` column selecting the
  record kind and lenient, aliased column names
- CSV template generation for new users
- Projection output as JSON (``{"results": [...]}``)

Design Principles
-----------------
- Type-safe: Everything passes through the pydantic plan records
- Lenient on input: Grouped numbers ("1,50,000"), currency symbols and
  header aliases are accepted; unknown row types are skipped
- Strict on failure: Anything that cannot be parsed or validated raises
  PlanImportError with the underlying message
- Backward compatible: Validates schema versions

Example
-------
>>> from pathlib import Path
>>> from finplan.serialization import load_plan, save_plan, plan_csv_template
>>> Path("plan.csv").write_text(plan_csv_template(start_year=2025))
>>> plan = load_plan(Path("plan.csv"))
>>> save_plan(plan, Path("plan.json"))
"""

from __future__ import annotations

import io
import json
import logging
import warnings
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from .config import (
    PlanInput,
    PlanOverrides,
    TaxRegimeConfig,
    validate_overrides,
    validate_plan,
)
from .constants import (
    DEFAULT_CURRENCY,
    DEFAULT_EXPECTED_RETURN,
    DEFAULT_GROWTH_RATE,
    DEFAULT_HORIZON_YEARS,
    DEFAULT_INFLATION_RATE,
)
from .exceptions import (
    ConfigurationError,
    PlanImportError,
    UnsupportedFormatError,
    ValidationError,
)
from .projection import PlanOutput
from .tax import SlabTaxRegime
from .utils import parse_bool, parse_number

__all__ = [
    "SCHEMA_VERSION",
    "plan_from_dict",
    "load_plan",
    "save_plan",
    "plan_from_csv",
    "plan_csv_template",
    "load_overrides",
    "load_tax_regime",
    "save_output_json",
    "CSV_HEADERS",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Schema Version
# ---------------------------------------------------------------------------

SCHEMA_VERSION = "0.1.0"


def _default_income() -> Dict[str, Any]:
    return {
        "person": "you",
        "baseAmount": 0,
        "baseIsMonthly": True,
        "annualGrowthRate": DEFAULT_GROWTH_RATE,
        "bonusAnnual": 0,
        "stocksAnnual": 0,
        "rsusAnnual": 0,
    }


def _validate(data: Mapping[str, Any]) -> PlanInput:
    try:
        return validate_plan(data)
    except ValidationError as e:
        raise PlanImportError(f"Plan failed validation: {e}") from e


# ---------------------------------------------------------------------------
# JSON Plans
# ---------------------------------------------------------------------------

def plan_from_dict(data: Mapping[str, Any]) -> PlanInput:
    """
    Validate a plan mapping into a PlanInput.

    A missing or empty ``incomes`` list is replaced by a single zero "you"
    income so that half-filled plans still load.

    Parameters
    ----------
    data : mapping
        Plan with camelCase or snake_case keys. A top-level
        ``schema_version`` key is accepted and dropped.

    Raises
    ------
    PlanImportError
        If *data* is not a mapping or fails validation.
    """
    if not isinstance(data, Mapping):
        raise PlanImportError(
            f"Plan must be a JSON object, got {type(data).__name__}"
        )
    payload = {k: v for k, v in data.items() if k != "schema_version"}
    incomes = payload.get("incomes")
    if not isinstance(incomes, list) or not incomes:
        payload["incomes"] = [_default_income()]
    return _validate(payload)


def _check_schema_version(config: Mapping[str, Any]) -> None:
    schema_version = config.get("schema_version")
    if schema_version is not None and schema_version != SCHEMA_VERSION:
        warnings.warn(
            f"Config schema version {schema_version} differs from current "
            f"version {SCHEMA_VERSION}. May encounter compatibility issues.",
            UserWarning,
        )


def load_plan(path: Union[str, Path]) -> PlanInput:
    """
    Load a plan from a ``.json`` or ``.csv`` file.

    Parameters
    ----------
    path : str or Path
        Input file path; the suffix selects the format.

    Returns
    -------
    PlanInput
        Validated plan.

    Raises
    ------
    UnsupportedFormatError
        For any other suffix.
    PlanImportError
        If the file cannot be parsed or the plan is invalid.

    Examples
    --------
    >>> plan = load_plan("household.json")
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in (".json", ".csv"):
        raise UnsupportedFormatError(
            f"Unsupported plan format '{path.suffix}'. Use .json or .csv"
        )

    with open(path, "r", encoding="utf-8") as f:
        text = f.read()

    if suffix == ".csv":
        plan = plan_from_csv(text)
    else:
        try:
            config = json.loads(text or "{}")
        except json.JSONDecodeError as e:
            raise PlanImportError(f"Invalid JSON in {path}: {e}") from e
        if isinstance(config, Mapping):
            _check_schema_version(config)
        plan = plan_from_dict(config)

    logger.info(
        "Loaded plan from %s: %d-year horizon, %d loans",
        path, plan.settings.horizon_years, len(plan.loans),
    )
    return plan


def save_plan(plan: PlanInput, path: Union[str, Path]) -> None:
    """
    Save a plan as JSON with camelCase keys and ``schema_version``.

    Examples
    --------
    >>> save_plan(plan, Path("plan.json"))
    """
    path = Path(path)
    config = {"schema_version": SCHEMA_VERSION}
    config.update(plan.model_dump(mode="json", by_alias=True))

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)


# ---------------------------------------------------------------------------
# Typed-row CSV Plans
# ---------------------------------------------------------------------------

CSV_HEADERS = [
    "type",
    "name",
    "person",
    "baseAmount",
    "baseIsMonthly",
    "annualGrowthRate",
    "bonusAnnual",
    "stocksAnnual",
    "rsusAnnual",
    "amountMonthly",
    "inflationLinked",
    "tentative",
    "amount",
    "year",
    "recurrenceYears",
    "principal",
    "apr",
    "tenureMonths",
    "startYear",
    "startMonth",
    "isPrimaryResidenceLoan",
    "currentCorpus",
    "monthlyContribution",
    "expectedAnnualReturn",
    "contributionGrowthRate",
    "currency",
    "startYearSettings",
    "horizonYears",
    "sipName",
    "sipAmountMonthly",
    "inflationRate",
]


class _Row:
    """Case-insensitive, alias-aware view over one CSV record."""

    def __init__(self, record: Mapping[str, Any]):
        self._cells = {}
        for key, value in record.items():
            k = str(key).strip().lower()
            if k not in self._cells:
                self._cells[k] = "" if pd.isna(value) else str(value).strip()

    def text(self, keys: Sequence[str], default: str = "") -> str:
        """First non-empty cell among *keys*, else *default*."""
        for key in keys:
            value = self._cells.get(key.lower(), "")
            if value:
                return value
        return default

    def number(self, keys: Sequence[str], default: float = 0.0) -> float:
        value = parse_number(self.text(keys))
        return default if value is None else value

    def integer(self, keys: Sequence[str], default: int = 0) -> int:
        value = parse_number(self.text(keys))
        return default if value is None else int(value)

    def flag(self, keys: Sequence[str], default: bool) -> bool:
        raw = self.text(keys)
        return parse_bool(raw) if raw else default


def _read_rows(text: str) -> List[_Row]:
    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise PlanImportError(f"Could not parse CSV: {e}") from e
    if not any(str(c).strip().lower() == "type" for c in df.columns):
        raise PlanImportError("CSV header must include a 'type' column")
    return [_Row(record) for record in df.to_dict(orient="records")]


def plan_from_csv(text: str) -> PlanInput:
    """
    Build a plan from typed-row CSV text.

    Each row's ``type`` column (case-insensitive) selects the record kind:
    settings, income, monthlyExpense, bigExpense, loan, investment, sip.
    Rows with an unknown or blank type are ignored. Column lookup is
    case-insensitive and accepts aliases (e.g. ``apr``, ``interestRate`` or
    ``roi`` for a loan rate); the first non-empty alias wins.

    Only the first "you" and first "wife" incomes are kept; a plan without
    incomes gets a zero "you" income.

    Raises
    ------
    PlanImportError
        If the CSV is empty, lacks a ``type`` column, or the resulting plan
        fails validation.

    Examples
    --------
    >>> plan = plan_from_csv(plan_csv_template(start_year=2025))
    >>> [inc.person for inc in plan.incomes]
    ['you', 'wife']
    """
    current_year = date.today().year
    settings: Dict[str, Any] = {
        "startYear": current_year,
        "horizonYears": DEFAULT_HORIZON_YEARS,
        "currency": DEFAULT_CURRENCY,
        "inflationRate": DEFAULT_INFLATION_RATE,
    }
    investment: Dict[str, Any] = {
        "currentCorpus": 0,
        "monthlyContribution": 0,
        "expectedAnnualReturn": DEFAULT_EXPECTED_RETURN,
        "contributionGrowthRate": 0,
        "sips": [],
    }
    incomes: List[Dict[str, Any]] = []
    monthly_expenses: List[Dict[str, Any]] = []
    big_expenses: List[Dict[str, Any]] = []
    loans: List[Dict[str, Any]] = []

    for row in _read_rows(text):
        kind = row.text(["type"]).lower()
        if kind == "settings":
            settings = {
                "startYear": row.integer(["startYearSettings", "startYear"], current_year),
                "horizonYears": max(1, row.integer(["horizonYears", "horizon", "years"],
                                                   DEFAULT_HORIZON_YEARS)),
                "currency": row.text(["currency"], DEFAULT_CURRENCY),
                "inflationRate": row.number(["inflationRate", "inflation"],
                                            DEFAULT_INFLATION_RATE),
            }
        elif kind == "income":
            base_is_monthly = row.flag(["baseIsMonthly", "isMonthly", "frequencyMonthly"], True)
            frequency = row.text(["frequency"]).lower()
            if frequency == "monthly":
                base_is_monthly = True
            elif frequency in ("annual", "yearly"):
                base_is_monthly = False
            incomes.append({
                "person": "wife" if row.text(["person"], "you").lower() == "wife" else "you",
                "baseAmount": row.number(["baseAmount", "base", "amount"]),
                "baseIsMonthly": base_is_monthly,
                "annualGrowthRate": row.number(["annualGrowthRate", "growth", "growthRate"],
                                               DEFAULT_GROWTH_RATE),
                "bonusAnnual": row.number(["bonusAnnual", "bonus"]),
                "stocksAnnual": row.number(["stocksAnnual", "stocks"]),
                "rsusAnnual": row.number(["rsusAnnual", "rsus"]),
            })
        elif kind == "monthlyexpense":
            monthly_expenses.append({
                "name": row.text(["name"], "Expense"),
                "amountMonthly": row.number(["amountMonthly", "amount"]),
                "inflationLinked": row.flag(["inflationLinked"], True),
                "tentative": row.flag(["tentative"], False),
            })
        elif kind == "bigexpense":
            expense = {
                "name": row.text(["name"], "Big Expense"),
                "amount": row.number(["amount"]),
                "year": max(0, row.integer(["year"])),
                "inflationLinked": row.flag(["inflationLinked"], True),
            }
            recurrence = row.integer(["recurrenceYears", "recurrence", "repeatEveryYears"])
            if recurrence > 0:
                expense["recurrenceYears"] = recurrence
            big_expenses.append(expense)
        elif kind == "loan":
            loans.append({
                "name": row.text(["name"], "Loan"),
                "principal": row.number(["principal", "amount"]),
                "apr": row.number(["apr", "interestRate", "roi"]),
                "tenureMonths": max(0, row.integer(["tenureMonths", "months", "tenure"])),
                "startYear": max(0, row.integer(["startYear", "loanStartYear"], current_year)),
                "startMonth": min(12, max(1, row.integer(["startMonth", "loanStartMonth"], 1))),
                "isPrimaryResidenceLoan": row.flag(["isPrimaryResidenceLoan"], False),
            })
        elif kind == "investment":
            investment.update({
                "currentCorpus": row.number(["currentCorpus", "corpus"]),
                "monthlyContribution": row.number(
                    ["monthlyContribution", "monthlyInvest", "otherMonthly"]),
                "expectedAnnualReturn": row.number(
                    ["expectedAnnualReturn", "expectedReturn", "return"],
                    DEFAULT_EXPECTED_RETURN),
                "contributionGrowthRate": row.number(
                    ["contributionGrowthRate", "investGrowth", "contributionGrowth"]),
            })
        elif kind == "sip":
            investment["sips"].append({
                "name": row.text(["sipName", "name"], "SIP"),
                "amountMonthly": row.number(["sipAmountMonthly", "amountMonthly", "amount"]),
            })
        elif kind:
            logger.warning("Ignoring CSV row with unknown type '%s'", kind)

    kept = []
    for person in ("you", "wife"):
        first = next((inc for inc in incomes if inc["person"] == person), None)
        if first is not None:
            kept.append(first)

    return _validate({
        "settings": settings,
        "incomes": kept or [_default_income()],
        "monthlyExpenses": monthly_expenses,
        "bigExpenses": big_expenses,
        "investment": investment,
        "loans": loans,
    })


def plan_csv_template(start_year: Optional[int] = None) -> str:
    """
    Sample typed-row CSV covering every record kind.

    Parameters
    ----------
    start_year : int, optional
        Plan start year used in the sample rows (default: current year).
    """
    year = start_year if start_year is not None else date.today().year
    rows = [
        {"type": "settings", "currency": "INR", "startYearSettings": year,
         "horizonYears": 10, "inflationRate": 5},
        {"type": "income", "person": "you", "baseAmount": 150000, "baseIsMonthly": "true",
         "annualGrowthRate": 7, "bonusAnnual": 100000, "stocksAnnual": 0, "rsusAnnual": 0},
        {"type": "income", "person": "wife", "baseAmount": 100000, "baseIsMonthly": "true",
         "annualGrowthRate": 7, "bonusAnnual": 50000, "stocksAnnual": 0, "rsusAnnual": 0},
        {"type": "monthlyExpense", "name": "Grocery + Food", "amountMonthly": 30000,
         "inflationLinked": "true", "tentative": "false"},
        {"type": "monthlyExpense", "name": "Gas + Travel", "amountMonthly": 15000,
         "inflationLinked": "true", "tentative": "false"},
        {"type": "bigExpense", "name": "School Fees", "amount": 200000, "year": year + 1,
         "recurrenceYears": 1, "inflationLinked": "true"},
        {"type": "loan", "name": "Home Loan", "principal": 5000000, "apr": 8,
         "tenureMonths": 240, "startYear": year, "startMonth": 1,
         "isPrimaryResidenceLoan": "true"},
        {"type": "investment", "currentCorpus": 0, "monthlyContribution": 50000,
         "expectedAnnualReturn": 10, "contributionGrowthRate": 0},
        {"type": "sip", "sipName": "SIP (you)", "sipAmountMonthly": 25000},
        {"type": "sip", "sipName": "SIP (wife)", "sipAmountMonthly": 25000},
    ]
    df = pd.DataFrame(
        [{k: str(v) for k, v in row.items()} for row in rows],
        columns=CSV_HEADERS,
    )
    return df.fillna("").to_csv(index=False, lineterminator="\n")


# ---------------------------------------------------------------------------
# Overrides and Tax Regimes
# ---------------------------------------------------------------------------

def _read_json_object(path: Path) -> Dict[str, Any]:
    if path.suffix.lower() != ".json":
        raise UnsupportedFormatError(f"Expected a .json file, got '{path.name}'")
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise PlanImportError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise PlanImportError(f"{path} must contain a JSON object")
    _check_schema_version(data)
    return {k: v for k, v in data.items() if k != "schema_version"}


def load_overrides(path: Union[str, Path]) -> PlanOverrides:
    """
    Load per-year overrides from JSON.

    Accepts ``growthRatesYou``, ``growthRatesWife`` and ``homeLoanPrepayment``
    (or their snake_case names); absent keys stay None.

    Examples
    --------
    >>> overrides = load_overrides("overrides.json")
    >>> overrides.home_loan_prepayment
    [0.0, 500000.0]
    """
    data = _read_json_object(Path(path))
    try:
        return validate_overrides(data)
    except ValidationError as e:
        raise PlanImportError(f"Overrides failed validation: {e}") from e


def load_tax_regime(path: Union[str, Path]) -> SlabTaxRegime:
    """
    Load a slab tax table from JSON (see TaxRegimeConfig).

    Raises
    ------
    ConfigurationError
        If the table is invalid.
    """
    data = _read_json_object(Path(path))
    try:
        config = TaxRegimeConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid tax regime in {path}: {e}") from e
    return SlabTaxRegime.from_config(config)


# ---------------------------------------------------------------------------
# Projection Output
# ---------------------------------------------------------------------------

def save_output_json(output: PlanOutput, path: Union[str, Path]) -> None:
    """
    Save projection results as ``{"results": [...]}`` with camelCase keys.

    Examples
    --------
    >>> save_output_json(project_plan(plan), Path("results.json"))
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(output.to_dict(), f, indent=2)
