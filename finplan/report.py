"""
Transposed results report for FinPlan.

Purpose
-------
Lays a projection out as a "Metric x Year" table: one row per metric, one
column per calendar year, grouped into numbered sections:

    1. Income                          gross, tax, after-tax, growth rates
    2. All Expenses                    living expenses and loan repayments
    2.a Home Loan                      yearly EMI, pending principal
    3. Investment                      contribution, corpus
    4. Total Expenses
    5. Total Savings
    6. Corpus at the end of the year

Group header rows carry no values. Growth-rate rows are keyed to the year the
rate takes effect (start_year + idx + 1), so the first year is blank.

CSV cells use grouped thousands with two decimals (Indian lakh/crore grouping
for INR by default); growth rates are written as plain numbers.

Example
-------
>>> from finplan.report import report_csv
>>> print(report_csv(project_plan(plan), plan).splitlines()[0])
Metric,2025,2026,2027
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .config import PlanInput, PlanOverrides
from .projection import PlanOutput, YearResult
from .types import ReportRow
from .utils import format_grouped, resolve_grouping

__all__ = [
    "GROUP_HEADERS",
    "report_rows",
    "report_frame",
    "report_csv",
    "save_report_csv",
]

logger = logging.getLogger(__name__)

GROUP_HEADERS = (
    "1. Income",
    "2. All Expenses",
    "2.a Home Loan",
    "3. Investment",
    "4. Total Expenses",
    "5. Total Savings",
    "6. Corpus at the end of the year",
)

GROWTH_PREFIX = "Growth Rate"


def _rate_row(
    label: str,
    years: Sequence[int],
    start_year: int,
    rates: Optional[Sequence[Optional[float]]],
) -> ReportRow:
    by_year = {start_year + idx + 1: r for idx, r in enumerate(rates or [])}
    values = [by_year.get(y) for y in years]
    return {
        "metric": label,
        "values": [None if v is None or np.isnan(v) else float(v) for v in values],
    }


def report_rows(
    output: PlanOutput,
    plan: Optional[PlanInput] = None,
    overrides: Optional[PlanOverrides] = None,
    tax_label: str = "Old Regime",
) -> List[ReportRow]:
    """
    Build the transposed report rows.

    Parameters
    ----------
    output : PlanOutput
        Projection results.
    plan : PlanInput, optional
        Source plan; required for the growth-rate rows (omitted without it).
    overrides : PlanOverrides, optional
        Overrides used for the projection. Growth sequences left as None
        report each person's flat rate.
    tax_label : str, default "Old Regime"
        Regime name shown in the tax row labels.
    """
    years = output.years
    results = output.results

    def row(label: str, get: Callable[[YearResult], float]) -> ReportRow:
        return {"metric": label, "values": [float(get(r)) for r in results]}

    def group(label: str) -> ReportRow:
        return {"metric": label, "values": [None] * len(years)}

    rows: List[ReportRow] = [
        group("1. Income"),
        row("Income - You (Gross)", lambda r: r.income_you),
        row("Income - Wife (Gross)", lambda r: r.income_wife),
        row("Total Income (Gross)", lambda r: r.total_income),
        row(f"Tax - You ({tax_label})", lambda r: r.tax_you),
        row(f"Tax - Wife ({tax_label})", lambda r: r.tax_wife),
        row("Total Tax", lambda r: r.total_tax),
        row("Final Income - You (After Tax)", lambda r: r.final_income_you),
        row("Final Income - Wife (After Tax)", lambda r: r.final_income_wife),
        row("Total Final Income (After Tax)", lambda r: r.total_final_income),
    ]

    if plan is not None:
        defaults = PlanOverrides.for_plan(plan)
        overrides = overrides or defaults
        start = plan.settings.start_year
        for person, label in (("you", "You"), ("wife", "Wife")):
            rates = overrides.growth_rates_for(person)
            if rates is None:
                rates = defaults.growth_rates_for(person)
            rows.append(_rate_row(f"{GROWTH_PREFIX} - {label} (%)", years, start, rates))

    rows += [
        group("2. All Expenses"),
        row("Fixed Annual Expenses", lambda r: r.fixed_annual),
        row("Tentative Annual Expenses", lambda r: r.tentative_annual),
        row("Big Annual Expenses", lambda r: r.big_annual),
        row("Loan Interest", lambda r: r.loan_interest),
        row("Loan Principal", lambda r: r.loan_principal),
        row("Total Loans", lambda r: r.loans_total),
        group("2.a Home Loan"),
        row("Home Loan Yearly EMI", lambda r: r.home_loan_emi),
        row("Home Loan Pending Principal", lambda r: r.home_loan_pending_principal),
        group("3. Investment"),
        row("Investment Contribution", lambda r: r.investment_contrib),
        row("Investment Corpus (End of Year)", lambda r: r.corpus_end),
        group("4. Total Expenses"),
        row("Total Expenses", lambda r: r.total_expenses),
        group("5. Total Savings"),
        row("Total Savings (Net Savings)", lambda r: r.net_savings),
        group("6. Corpus at the end of the year"),
        row("Corpus at End of Year", lambda r: r.corpus_end),
    ]
    return rows


def report_frame(
    output: PlanOutput,
    plan: Optional[PlanInput] = None,
    overrides: Optional[PlanOverrides] = None,
) -> pd.DataFrame:
    """
    Report as a DataFrame: index "Metric", one float column per year.

    Group headers and blank growth-rate cells are NaN.
    """
    rows = report_rows(output, plan, overrides)
    data = np.array(
        [[np.nan if v is None else v for v in r["values"]] for r in rows],
        dtype=float,
    ).reshape(len(rows), len(output.years))
    return pd.DataFrame(
        data,
        index=pd.Index([r["metric"] for r in rows], name="Metric"),
        columns=output.years,
    )


def _cell(metric: str, value: Optional[float], grouping: str) -> str:
    if value is None:
        return ""
    if metric.startswith(GROWTH_PREFIX):
        return f"{value:g}"
    return format_grouped(value, 2, grouping)


def report_csv(
    output: PlanOutput,
    plan: Optional[PlanInput] = None,
    overrides: Optional[PlanOverrides] = None,
    grouping: str = "auto",
) -> str:
    """
    Render the report as CSV text.

    Parameters
    ----------
    grouping : {"auto", "indian", "international"}, default "auto"
        Digit grouping; "auto" picks Indian grouping for INR plans (and when
        no plan is given), international otherwise.
    """
    currency = plan.settings.currency if plan is not None else "INR"
    style = resolve_grouping(currency, grouping)
    rows = report_rows(output, plan, overrides)
    table = pd.DataFrame(
        [[r["metric"]] + [_cell(r["metric"], v, style) for v in r["values"]] for r in rows],
        columns=["Metric"] + [str(y) for y in output.years],
    )
    return table.to_csv(index=False, lineterminator="\n")


def save_report_csv(
    output: PlanOutput,
    path: Union[str, Path],
    plan: Optional[PlanInput] = None,
    overrides: Optional[PlanOverrides] = None,
    grouping: str = "auto",
) -> None:
    """Write :func:`report_csv` to *path*."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(report_csv(output, plan, overrides, grouping), encoding="utf-8")
    logger.info("Wrote report for %d years to %s", len(output), path)
