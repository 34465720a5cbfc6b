"""
Type definitions for FinPlan.

Purpose
-------
TypedDict definitions for the dictionary shapes FinPlan reads and writes.
Serialized projections use camelCase keys (``totalIncome``, ``homeLoanEMI``)
so results can be consumed by JSON tooling directly.

Usage
-----
>>> from finplan.types import YearResultDict
>>> row: YearResultDict = output.to_dict()["results"][0]
>>> row["totalIncome"], row["homeLoanEMI"]

Type Definitions
----------------
YearResultDict
    One projected year, camelCase keys (``incomeYou``, ``netSavings``...)

PlanOutputDict
    Serialized projection: {"results": [YearResultDict, ...]}

ReportRow
    One row of the transposed report: {"metric", "values"}
"""

from typing import List, Optional

from typing_extensions import TypedDict

__all__ = [
    "YearResultDict",
    "PlanOutputDict",
    "ReportRow",
]


# Functional form: "homeLoanEMI" does not follow the snake->camel mapping of
# the other fields, and the keys must match the serialized schema exactly.
YearResultDict = TypedDict(
    "YearResultDict",
    {
        "year": int,
        "incomeYou": float,
        "incomeWife": float,
        "totalIncome": float,
        "taxYou": float,
        "taxWife": float,
        "totalTax": float,
        "finalIncomeYou": float,
        "finalIncomeWife": float,
        "totalFinalIncome": float,
        "fixedAnnual": float,
        "tentativeAnnual": float,
        "bigAnnual": float,
        "loanInterest": float,
        "loanPrincipal": float,
        "loansTotal": float,
        "investmentContrib": float,
        "netSavings": float,
        "corpusEnd": float,
        "homeLoanEMI": float,
        "homeLoanPendingPrincipal": float,
    },
)


class PlanOutputDict(TypedDict):
    """
    Serialized projection returned by PlanOutput.to_dict().

    Attributes
    ----------
    results : list of YearResultDict
        One entry per projected year, ascending.
    """

    results: List[YearResultDict]


class ReportRow(TypedDict):
    """
    One row of the transposed "Metric x Year" report.

    Attributes
    ----------
    metric : str
        Row label, e.g. "Gross Income - You" or a group header "1. Income".
    values : list of float or None
        One value per projected year; None renders as an empty cell
        (group headers, the first year of growth-rate rows).
    """

    metric: str
    values: List[Optional[float]]
