"""
Configuration and plan records for FinPlan.

Purpose
-------
Type-safe, validated records for everything the projection engine consumes,
plus environment-driven application settings. This is the validating
collaborator in front of the engine: the calculators trust these records and
perform no checks of their own.

Design Principles
-----------------
- Type-safe: Pydantic enforces types and ranges (percentages 0-100, months 1-12)
- Immutable: Frozen models; the engine never mutates a plan
- Compatible: Every field accepts its camelCase key (``startYear``,
  ``baseIsMonthly``...) so plans exported by earlier tools load unchanged
- Environment-aware: AppSettings reads ``FINPLAN_*`` variables and ``.env``

Example
-------
>>> from finplan.config import PlanInput
>>> plan = PlanInput.model_validate({
...     "settings": {"startYear": 2025, "horizonYears": 10},
...     "incomes": [{"person": "you", "baseAmount": 150_000}],
... })
>>> plan.settings.inflation_rate
5.0
>>> plan.model_dump(by_alias=True)["settings"]["horizonYears"]
10
"""

from __future__ import annotations

import logging
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_CURRENCY,
    DEFAULT_EXPECTED_RETURN,
    DEFAULT_GROWTH_RATE,
    DEFAULT_HORIZON_YEARS,
    DEFAULT_INFLATION_RATE,
    MAX_HORIZON_YEARS,
)
from .exceptions import ValidationError

__all__ = [
    "Settings",
    "Income",
    "MonthlyExpense",
    "BigExpense",
    "SIP",
    "InvestmentPlan",
    "Loan",
    "PlanInput",
    "PlanOverrides",
    "TaxSlabConfig",
    "TaxRegimeConfig",
    "AppSettings",
    "validate_plan",
    "validate_overrides",
    "configure_logging",
]

Percent = Annotated[float, Field(ge=0, le=100)]
NonNegative = Annotated[float, Field(ge=0)]


class _Record(BaseModel):
    """Shared config: frozen, strict keys, snake_case or camelCase input."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )


# ---------------------------------------------------------------------------
# Plan Records
# ---------------------------------------------------------------------------

class Settings(_Record):
    """
    Plan-wide settings.

    Attributes
    ----------
    start_year : int
        First calendar year of the projection.
    horizon_years : int
        Number of projected years (1-50).
    currency : str
        ISO currency code used for display and report grouping.
    inflation_rate : float
        Annual inflation in percent, applied to inflation-linked expenses.
    """

    start_year: int = Field(ge=1900, description="First projected calendar year")
    horizon_years: int = Field(
        default=DEFAULT_HORIZON_YEARS,
        ge=1,
        le=MAX_HORIZON_YEARS,
        description="Projection horizon (years)"
    )
    currency: str = Field(default=DEFAULT_CURRENCY, min_length=1)
    inflation_rate: Percent = DEFAULT_INFLATION_RATE

    @property
    def end_year(self) -> int:
        return self.start_year + self.horizon_years - 1


class Income(_Record):
    """Salary plus annual bonus/stock/RSU components for one person."""

    person: Literal["you", "wife"]
    base_amount: NonNegative
    base_is_monthly: bool = True
    annual_growth_rate: Percent = DEFAULT_GROWTH_RATE
    bonus_annual: NonNegative = 0.0
    stocks_annual: NonNegative = 0.0
    rsus_annual: NonNegative = 0.0


class MonthlyExpense(_Record):
    """Recurring monthly expense; ``tentative`` ones can be toggled off."""

    name: str = Field(min_length=1)
    amount_monthly: NonNegative
    inflation_linked: bool = True
    tentative: bool = False


class BigExpense(_Record):
    """
    One-off or recurring lump expense.

    ``year`` is an absolute calendar year when >= 1900, otherwise an offset
    from the plan start year. ``recurrence_years`` of None or 0 means the
    expense happens once.
    """

    name: str = Field(min_length=1)
    amount: NonNegative
    year: int = Field(ge=0)
    recurrence_years: Optional[int] = Field(default=None, ge=0)
    inflation_linked: bool = True


class SIP(_Record):
    """Systematic investment plan: a named monthly contribution."""

    name: str = Field(min_length=1)
    amount_monthly: NonNegative


class InvestmentPlan(_Record):
    """Investment corpus and contribution schedule."""

    current_corpus: NonNegative = 0.0
    monthly_contribution: NonNegative = 0.0
    expected_annual_return: Percent = DEFAULT_EXPECTED_RETURN
    contribution_growth_rate: Percent = 0.0
    sips: List[SIP] = Field(default_factory=list)

    @field_validator("sips", mode="before")
    @classmethod
    def _none_is_empty(cls, v):
        return [] if v is None else v


class Loan(_Record):
    """
    Amortizing loan.

    Attributes
    ----------
    principal : float
        Amount borrowed.
    apr : float
        Annual percentage rate (nominal, split evenly across 12 months).
    tenure_months : int
        Number of monthly installments.
    start_year, start_month : int
        Calendar month of the first installment.
    primary_residence : bool
        Marks the home loan (JSON key ``isPrimaryResidenceLoan``). Only the
        home loan takes prepayments and is reported separately.
    """

    name: str = Field(min_length=1)
    principal: NonNegative
    apr: Percent
    tenure_months: int = Field(ge=1)
    start_year: int
    start_month: int = Field(default=1, ge=1, le=12)
    primary_residence: bool = Field(default=False, alias="isPrimaryResidenceLoan")


class PlanInput(_Record):
    """
    Complete household plan: the single input of the projection engine.

    Examples
    --------
    >>> plan = PlanInput(
    ...     settings=Settings(start_year=2025, horizon_years=5),
    ...     incomes=[Income(person="you", base_amount=100_000)],
    ... )
    >>> plan.loans
    []
    """

    settings: Settings
    incomes: List[Income] = Field(min_length=1, max_length=2)
    monthly_expenses: List[MonthlyExpense] = Field(default_factory=list)
    big_expenses: List[BigExpense] = Field(default_factory=list)
    investment: InvestmentPlan = Field(default_factory=InvestmentPlan)
    loans: List[Loan] = Field(default_factory=list)

    @field_validator("incomes")
    @classmethod
    def validate_one_income_per_person(cls, v):
        """Ensure each person appears at most once."""
        persons = [inc.person for inc in v]
        if len(set(persons)) != len(persons):
            raise ValueError(f"each person may have only one income, got {persons}")
        return v

    @model_validator(mode="after")
    def validate_single_primary_residence(self):
        """Ensure at most one loan is flagged as the home loan."""
        flagged = [loan.name for loan in self.loans if loan.primary_residence]
        if len(flagged) > 1:
            raise ValueError(
                f"only one loan may be flagged as the primary residence loan, "
                f"got {len(flagged)}: {flagged}"
            )
        return self


# ---------------------------------------------------------------------------
# Per-session overrides
# ---------------------------------------------------------------------------

class PlanOverrides(_Record):
    """
    Per-year adjustments supplied alongside a plan.

    Attributes
    ----------
    growth_rates_you, growth_rates_wife : list of float, optional
        Growth rate (percent) per year transition; index 0 is applied between
        year 0 and year 1, so the nominal length is ``horizon_years - 1``.
        None keeps the income's flat ``annual_growth_rate``. Missing or None
        entries mean 0% for that transition.
    home_loan_prepayment : list of float, optional
        Lump sum applied each January to the home loan, one per plan year
        (nominal length ``horizon_years``). Missing, None or NaN entries mean
        no prepayment; negative amounts are rejected.
    """

    growth_rates_you: Optional[List[Optional[float]]] = None
    growth_rates_wife: Optional[List[Optional[float]]] = None
    home_loan_prepayment: Optional[List[Optional[float]]] = None

    @field_validator("home_loan_prepayment")
    @classmethod
    def validate_prepayments(cls, v):
        """Reject negative lump sums; None and NaN pass through as gaps."""
        if v is not None:
            negative = [x for x in v if x is not None and x < 0]
            if negative:
                raise ValueError(f"prepayments must be non-negative, got {negative}")
        return v

    @classmethod
    def for_plan(cls, plan: PlanInput) -> "PlanOverrides":
        """
        Seed overrides from a plan: each person's flat rate repeated for every
        year transition, and zero prepayments.
        """
        n = plan.settings.horizon_years
        rates = {inc.person: inc.annual_growth_rate for inc in plan.incomes}
        return cls(
            growth_rates_you=[rates.get("you", 0.0)] * max(n - 1, 0),
            growth_rates_wife=[rates.get("wife", 0.0)] * max(n - 1, 0),
            home_loan_prepayment=[0.0] * n,
        )

    def growth_rates_for(self, person: str) -> Optional[List[Optional[float]]]:
        return self.growth_rates_you if person == "you" else self.growth_rates_wife


# ---------------------------------------------------------------------------
# Tax Regime Configuration
# ---------------------------------------------------------------------------

class TaxSlabConfig(_Record):
    """Marginal ``rate`` (fraction) applied to income above ``lower``."""

    lower: NonNegative
    rate: float = Field(ge=0, le=1)


class TaxRegimeConfig(_Record):
    """
    Serializable progressive tax table.

    Examples
    --------
    >>> cfg = TaxRegimeConfig(
    ...     name="flat-10",
    ...     slabs=[TaxSlabConfig(lower=0, rate=0.10)],
    ... )
    """

    name: str = Field(default="custom", min_length=1)
    standard_deduction: NonNegative = 0.0
    slabs: List[TaxSlabConfig] = Field(min_length=1)
    rebate_limit: Optional[NonNegative] = None
    cess_rate: float = Field(default=0.0, ge=0, le=1)

    @field_validator("slabs")
    @classmethod
    def validate_ascending(cls, v):
        """Ensure slab lower bounds start at 0 and strictly ascend."""
        lowers = [s.lower for s in v]
        if lowers[0] != 0:
            raise ValueError(f"first slab must start at 0, got {lowers[0]}")
        if any(b <= a for a, b in zip(lowers, lowers[1:])):
            raise ValueError(f"slab lower bounds must be strictly ascending, got {lowers}")
        return v


# ---------------------------------------------------------------------------
# Validation entry points
# ---------------------------------------------------------------------------

def validate_plan(data) -> PlanInput:
    """Validate a mapping into a PlanInput, raising FinPlan's ValidationError."""
    try:
        return PlanInput.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid plan: {e}") from e


def validate_overrides(data) -> PlanOverrides:
    """Validate a mapping into PlanOverrides, raising FinPlan's ValidationError."""
    try:
        return PlanOverrides.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid overrides: {e}") from e


# ---------------------------------------------------------------------------
# Application Settings (Environment Variables)
# ---------------------------------------------------------------------------

class AppSettings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Environment variables are prefixed with FINPLAN_ (e.g.,
    FINPLAN_LOG_LEVEL=DEBUG). A local ``.env`` file is read when present.

    Attributes
    ----------
    debug : bool
        Enable debug mode (forces DEBUG logging).
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR".
    include_tentative : bool
        Count tentative monthly expenses in projections by default.
    number_grouping : str
        Digit grouping for reports: "auto" (by currency), "indian",
        "international".
    chart_type : str
        Default chart style: "line", "bar" or "area".

    Examples
    --------
    >>> settings = AppSettings()
    >>> settings.include_tentative
    True
    """

    model_config = SettingsConfigDict(
        env_prefix="FINPLAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level"
    )
    include_tentative: bool = Field(
        default=True,
        description="Include tentative monthly expenses"
    )
    number_grouping: Literal["auto", "indian", "international"] = Field(
        default="auto",
        description="Digit grouping used in CSV reports"
    )
    chart_type: Literal["line", "bar", "area"] = Field(
        default="line",
        description="Default chart type"
    )
    default_currency: str = Field(default=DEFAULT_CURRENCY, min_length=1)

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level


def configure_logging(level: str = "WARNING") -> None:
    """Attach a stderr handler to the ``finplan`` logger at *level*."""
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("finplan").setLevel(level)
