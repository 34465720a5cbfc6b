"""
Custom exceptions for FinPlan.

Purpose
-------
Provides a unified exception hierarchy for the collaborators around the
projection engine (plan records, import/export, settings). The engine itself
never raises on validated input: degenerate numeric cases resolve to zero or
empty results.

Exception Hierarchy
-------------------
FinPlanError (base)
├── ConfigurationError - Invalid tax table or application settings
├── ValidationError - A plan or override record fails validation
│   └── PlanImportError - CSV/JSON plan could not be parsed or validated
└── UnsupportedFormatError - Unknown file suffix or export format

Usage
-----
>>> from finplan.exceptions import PlanImportError
>>> try:
...     plan = load_plan(Path("plan.csv"))
... except FinPlanError as e:
...     print(f"FinPlan error: {e}")
"""


class FinPlanError(Exception):
    """
    Base exception for all FinPlan errors.

    Examples
    --------
    >>> try:
    ...     plan = load_plan(path)
    ... except FinPlanError as e:
    ...     logger.error("Could not load plan: %s", e)
    """
    pass


class ConfigurationError(FinPlanError):
    """
    Invalid configuration or parameters.

    Raised when a tax regime table or application setting is invalid, such as:
    - Slab thresholds that do not ascend
    - Slab rates outside [0, 1]

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "slab thresholds must be strictly ascending, got [500000, 250000]"
    ... )
    """
    pass


class ValidationError(FinPlanError):
    """
    A plan or override record failed validation.

    Examples
    --------
    >>> raise ValidationError(
    ...     "only one loan may be flagged as the primary residence loan, "
    ...     "got 2: ['Home Loan', 'Second Home']"
    ... )
    """
    pass


class PlanImportError(ValidationError):
    """
    A plan file could not be parsed or did not validate.

    Wraps JSON decoding failures, malformed CSV and pydantic validation
    errors so callers only need to catch one type.

    Examples
    --------
    >>> raise PlanImportError("CSV is empty")
    """
    pass


class UnsupportedFormatError(FinPlanError):
    """
    Unknown file suffix or export format.

    Examples
    --------
    >>> raise UnsupportedFormatError(
    ...     "Unsupported plan format '.xlsx'. Use .json or .csv."
    ... )
    """
    pass
