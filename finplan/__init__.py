"""
FinPlan - Household Financial Projection

Projects a household's multi-year finances (income, taxes, expenses, loan
amortization and investment growth) from a declarative plan.

Modules
-------
- config        : Plan records (pydantic) and application settings
- loans         : Amortization schedules, home-loan selection, yearly totals
- investment    : Corpus projection under monthly compounding
- expenses      : Monthly and big (one-off / recurring) expense aggregation
- income        : Gross income with flat or per-year growth
- tax           : Pluggable slab tax regimes (old regime by default)
- projection    : Year-by-year orchestration into PlanOutput
- serialization : JSON / typed-row CSV plan import, template, exports
- report        : Transposed "Metric x Year" report and CSV
- plotting      : Results dashboard (matplotlib)
- utils         : Shared utilities (rates, calendar, formatting, parsing)

"""

from .config import (
    AppSettings,
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
from .exceptions import (
    ConfigurationError,
    FinPlanError,
    PlanImportError,
    UnsupportedFormatError,
    ValidationError,
)
from .loans import AmortizationEntry, amortize, emi, select_home_loan
from .investment import project_investment
from .income import annual_income
from .tax import OLD_REGIME, SlabTaxRegime, TaxRegime, TaxSlab, tax
from .projection import PlanOutput, YearResult, project_plan
from .serialization import load_plan, plan_from_csv, plan_from_dict, save_plan
from . import utils

__version__ = "0.1.0"

__all__ = [
    # Records
    "AppSettings",
    "BigExpense",
    "Income",
    "InvestmentPlan",
    "Loan",
    "MonthlyExpense",
    "PlanInput",
    "PlanOverrides",
    "SIP",
    "Settings",
    # Errors
    "ConfigurationError",
    "FinPlanError",
    "PlanImportError",
    "UnsupportedFormatError",
    "ValidationError",
    # Engine
    "AmortizationEntry",
    "amortize",
    "emi",
    "select_home_loan",
    "project_investment",
    "annual_income",
    "OLD_REGIME",
    "SlabTaxRegime",
    "TaxRegime",
    "TaxSlab",
    "tax",
    "PlanOutput",
    "YearResult",
    "project_plan",
    # I/O
    "load_plan",
    "plan_from_csv",
    "plan_from_dict",
    "save_plan",
    "utils",
]
