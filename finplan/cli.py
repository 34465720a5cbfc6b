"""
Command-Line Interface for FinPlan.

Purpose
-------
Runs projections, inspects loans and taxes, and manages plan files without
writing Python code.

Commands
--------
- project: Project a plan year by year; optional CSV/JSON/chart export
- amortize: Yearly amortization summary for one loan
- tax: Tax and net income for a gross amount
- plan: Validate, display and create plan files
- info: Version and dependency information

Example Usage
-------------
    # Project a plan and export the transposed report
    $ finplan project -p plan.json --csv report.csv

    # Project with per-year growth rates and prepayments
    $ finplan project -p plan.csv --overrides overrides.json --no-tentative

    # Home-loan schedule with prepayments
    $ finplan amortize -p plan.json --prepay overrides.json

    # Start from the CSV template
    $ finplan plan template my_plan.csv

    # Show version
    $ finplan --version
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import AppSettings, configure_logging
from .exceptions import FinPlanError
from .utils import format_currency

# Version
__version__ = "0.1.0"


def _fail(message: str) -> None:
    click.echo(message, err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="finplan")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level (default: FINPLAN_LOG_LEVEL or WARNING)"
)
@click.pass_context
def main(ctx: click.Context, quiet: bool, log_level: Optional[str]) -> None:
    """
    FinPlan - Household Financial Projection.

    Projects income, taxes, expenses, loans and investments year by year
    from a declarative plan (JSON or typed-row CSV).

    Use 'finplan COMMAND --help' for command-specific help.
    """
    try:
        settings = AppSettings()
    except PydanticValidationError as e:
        _fail(f"Invalid FINPLAN_* settings: {e}")
    configure_logging((log_level or settings.effective_log_level).upper())
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["console"] = Console()
    ctx.obj["settings"] = settings


@main.command()
@click.option(
    "--plan", "-p", "plan_file",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to plan file (JSON or CSV)"
)
@click.option(
    "--overrides", "-o", "overrides_file",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Per-year growth rates and home-loan prepayments (JSON)"
)
@click.option(
    "--regime", "regime_file",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Tax slab table (JSON); default: old regime"
)
@click.option("--no-tentative", is_flag=True, help="Exclude tentative monthly expenses")
@click.option("--csv", "csv_out", type=click.Path(path_type=Path), default=None,
              help="Write the transposed report to this CSV file")
@click.option("--json", "json_out", type=click.Path(path_type=Path), default=None,
              help="Write the results to this JSON file")
@click.option("--plot", "plot_out", type=click.Path(path_type=Path), default=None,
              help="Save the dashboard chart to this image file")
@click.option("--chart-type", type=click.Choice(["line", "bar", "area"]), default=None,
              help="Chart style (default: FINPLAN_CHART_TYPE or line)")
@click.pass_context
def project(
    ctx: click.Context,
    plan_file: Path,
    overrides_file: Optional[Path],
    regime_file: Optional[Path],
    no_tentative: bool,
    csv_out: Optional[Path],
    json_out: Optional[Path],
    plot_out: Optional[Path],
    chart_type: Optional[str],
) -> None:
    """
    Project a plan year by year.

    Example:
        finplan project -p plan.json --csv report.csv --plot dashboard.png
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]
    settings = ctx.obj["settings"]

    from .projection import project_plan
    from .report import save_report_csv
    from .serialization import (
        load_overrides,
        load_plan,
        load_tax_regime,
        save_output_json,
    )
    from .tax import OLD_REGIME

    try:
        plan = load_plan(plan_file)
        overrides = load_overrides(overrides_file) if overrides_file else None
        regime = load_tax_regime(regime_file) if regime_file else OLD_REGIME
    except FinPlanError as e:
        _fail(f"Error loading inputs: {e}")

    include_tentative = settings.include_tentative and not no_tentative
    output = project_plan(
        plan, overrides, include_tentative=include_tentative, tax_regime=regime
    )
    currency = plan.settings.currency

    if not quiet:
        table = Table(title="Projection", show_header=True)
        table.add_column("Year", style="cyan")
        for col in ("Income", "Tax", "Expenses", "Investment", "Net Savings", "Corpus"):
            table.add_column(col, justify="right")
        for r in output:
            table.add_row(
                str(r.year),
                format_currency(r.total_income, currency),
                format_currency(r.total_tax, currency),
                format_currency(r.total_expenses, currency),
                format_currency(r.investment_contrib, currency),
                format_currency(r.net_savings, currency),
                format_currency(r.corpus_end, currency),
            )
        console.print(table)

    if csv_out:
        save_report_csv(output, csv_out, plan, overrides, settings.number_grouping)
        if not quiet:
            click.echo(f"Report saved to {csv_out}")
    if json_out:
        save_output_json(output, json_out)
        if not quiet:
            click.echo(f"Results saved to {json_out}")
    if plot_out:
        import matplotlib
        matplotlib.use("Agg")
        from matplotlib import pyplot as plt
        from .plotting import plot_results

        fig, _ = plot_results(
            output,
            chart_type or settings.chart_type,
            currency=currency,
            title=f"Plan {output.years[0]}-{output.years[-1]}",
            save_path=str(plot_out),
            return_fig_ax=True,
        )
        plt.close(fig)
        if not quiet:
            click.echo(f"Chart saved to {plot_out}")


@main.command()
@click.option(
    "--plan", "-p", "plan_file",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to plan file (JSON or CSV)"
)
@click.option("--loan", "loan_name", type=str, default=None,
              help="Loan name (default: the home loan, else the first loan)")
@click.option(
    "--prepay", "prepay_file",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Overrides JSON whose homeLoanPrepayment applies to the home loan"
)
@click.pass_context
def amortize(
    ctx: click.Context,
    plan_file: Path,
    loan_name: Optional[str],
    prepay_file: Optional[Path],
) -> None:
    """
    Show a loan's amortization, summarized by calendar year.

    Example:
        finplan amortize -p plan.json --loan "Car Loan"
    """
    console = ctx.obj["console"]

    from .loans import amortize as amortize_loan, emi, schedule_frame, select_home_loan
    from .serialization import load_overrides, load_plan

    try:
        plan = load_plan(plan_file)
        overrides = load_overrides(prepay_file) if prepay_file else None
    except FinPlanError as e:
        _fail(f"Error loading inputs: {e}")

    if not plan.loans:
        _fail("Plan has no loans")

    home = select_home_loan(plan.loans)
    if loan_name is None:
        loan = home or plan.loans[0]
    else:
        loan = next((l for l in plan.loans if l.name == loan_name), None)
        if loan is None:
            _fail(f"No loan named '{loan_name}' (have: {[l.name for l in plan.loans]})")

    prepayments = overrides.home_loan_prepayment if overrides and loan is home else None
    schedule = amortize_loan(loan, plan.settings.start_year, prepayments)
    df = schedule_frame(schedule)
    yearly = df.groupby(df.index.year).agg(
        {"interest": "sum", "principal": "sum", "prepayment": "sum", "balance": "last"}
    )

    currency = plan.settings.currency
    payment = emi(loan.principal, loan.apr, loan.tenure_months)
    table = Table(
        title=f"{loan.name}: EMI {format_currency(payment, currency, 2)}, "
              f"{len(schedule)} of {loan.tenure_months} months",
        show_header=True,
    )
    table.add_column("Year", style="cyan")
    for col in ("Interest", "Principal", "Prepayment", "Closing Balance"):
        table.add_column(col, justify="right")
    for year, row in yearly.iterrows():
        table.add_row(
            str(year),
            format_currency(row["interest"], currency),
            format_currency(row["principal"], currency),
            format_currency(row["prepayment"], currency),
            format_currency(row["balance"], currency),
        )
    console.print(table)


@main.command()
@click.argument("gross", type=float)
@click.option(
    "--regime", "regime_file",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Tax slab table (JSON); default: old regime"
)
@click.option("--currency", default=None, help="Display currency (default: FINPLAN_DEFAULT_CURRENCY)")
@click.pass_context
def tax(ctx: click.Context, gross: float, regime_file: Optional[Path], currency: Optional[str]) -> None:
    """
    Compute tax and net income for a gross annual amount.

    Example:
        finplan tax 1200000
    """
    console = ctx.obj["console"]
    settings = ctx.obj["settings"]

    from .serialization import load_tax_regime
    from .tax import OLD_REGIME, net_income

    if gross < 0:
        _fail("Gross income must be non-negative")
    try:
        regime = load_tax_regime(regime_file) if regime_file else OLD_REGIME
    except FinPlanError as e:
        _fail(f"Error loading tax regime: {e}")

    currency = currency or settings.default_currency
    payable = regime.compute(gross)
    table = Table(title=f"Tax ({regime.name} regime)", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Gross Income", format_currency(gross, currency, 2))
    table.add_row("Tax", format_currency(payable, currency, 2))
    table.add_row("Net Income", format_currency(net_income(gross, regime), currency, 2))
    console.print(table)


@main.group()
def plan() -> None:
    """
    Plan file commands.

    Validate, display, and create plan files.
    """
    pass


@plan.command("validate")
@click.argument("plan_file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def plan_validate(ctx: click.Context, plan_file: Path) -> None:
    """
    Validate a plan file.

    Example:
        finplan plan validate plan.csv
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]

    from .loans import select_home_loan
    from .serialization import load_plan

    try:
        plan = load_plan(plan_file)
    except FinPlanError as e:
        _fail(f"Plan validation failed: {e}")

    if quiet:
        return
    s = plan.settings
    home = select_home_loan(plan.loans)
    info = (
        f"[bold]Plan Valid[/bold]\n\n"
        f"[cyan]Horizon:[/cyan] {s.start_year}-{s.end_year} ({s.horizon_years} years)\n"
        f"[cyan]Currency:[/cyan] {s.currency}   [cyan]Inflation:[/cyan] {s.inflation_rate}%\n"
        f"[cyan]Incomes:[/cyan] {', '.join(i.person for i in plan.incomes)}\n"
        f"[cyan]Monthly expenses:[/cyan] {len(plan.monthly_expenses)}   "
        f"[cyan]Big expenses:[/cyan] {len(plan.big_expenses)}\n"
        f"[cyan]Loans:[/cyan] {len(plan.loans)} (home loan: {home.name if home else 'none'})\n"
        f"[cyan]SIPs:[/cyan] {len(plan.investment.sips)}"
    )
    console.print(Panel(info, title="Plan Summary", border_style="green"))


@plan.command("show")
@click.argument("plan_file", type=click.Path(exists=True, path_type=Path))
@click.option("--format", "-f", "fmt", type=click.Choice(["json", "table"]), default="table")
@click.pass_context
def plan_show(ctx: click.Context, plan_file: Path, fmt: str) -> None:
    """
    Display a plan.

    Example:
        finplan plan show plan.json --format json
    """
    console = ctx.obj["console"]

    from .serialization import load_plan

    try:
        plan = load_plan(plan_file)
    except FinPlanError as e:
        _fail(f"Error loading plan: {e}")

    if fmt == "json":
        click.echo(json.dumps(plan.model_dump(mode="json", by_alias=True), indent=2))
        return

    cur = plan.settings.currency

    income_table = Table(title="Incomes")
    income_table.add_column("Person", style="cyan")
    income_table.add_column("Base", justify="right")
    income_table.add_column("Growth", justify="right")
    income_table.add_column("Bonus + Stocks + RSUs", justify="right")
    for inc in plan.incomes:
        base = format_currency(inc.base_amount, cur)
        income_table.add_row(
            inc.person,
            f"{base}/{'month' if inc.base_is_monthly else 'year'}",
            f"{inc.annual_growth_rate:.1f}%",
            format_currency(inc.bonus_annual + inc.stocks_annual + inc.rsus_annual, cur),
        )
    console.print(income_table)

    expense_table = Table(title="Expenses")
    expense_table.add_column("Name", style="cyan")
    expense_table.add_column("Amount", justify="right")
    expense_table.add_column("When")
    expense_table.add_column("Inflation-linked")
    for exp in plan.monthly_expenses:
        when = "monthly (tentative)" if exp.tentative else "monthly"
        expense_table.add_row(exp.name, format_currency(exp.amount_monthly, cur), when,
                              "yes" if exp.inflation_linked else "no")
    for big in plan.big_expenses:
        when = f"year {big.year}"
        if big.recurrence_years:
            when += f", every {big.recurrence_years}y"
        expense_table.add_row(big.name, format_currency(big.amount, cur), when,
                              "yes" if big.inflation_linked else "no")
    console.print(expense_table)

    if plan.loans:
        loan_table = Table(title="Loans")
        loan_table.add_column("Name", style="cyan")
        loan_table.add_column("Principal", justify="right")
        loan_table.add_column("APR", justify="right")
        loan_table.add_column("Tenure", justify="right")
        loan_table.add_column("Start")
        for loan in plan.loans:
            name = f"{loan.name} *" if loan.primary_residence else loan.name
            loan_table.add_row(
                name,
                format_currency(loan.principal, cur),
                f"{loan.apr:.2f}%",
                f"{loan.tenure_months} months",
                f"{loan.start_year}-{loan.start_month:02d}",
            )
        console.print(loan_table)

    inv = plan.investment
    console.print(Panel(
        f"Corpus: {format_currency(inv.current_corpus, cur)}\n"
        f"Monthly: {format_currency(inv.monthly_contribution, cur)} "
        f"+ {len(inv.sips)} SIPs ({format_currency(sum(s.amount_monthly for s in inv.sips), cur)})\n"
        f"Expected return: {inv.expected_annual_return:.1f}%   "
        f"Contribution growth: {inv.contribution_growth_rate:.1f}%",
        title="Investment",
    ))


@plan.command("template")
@click.argument("output_file", type=click.Path(path_type=Path))
@click.option("--format", "-f", "fmt", type=click.Choice(["csv", "json"]), default="csv")
@click.option("--start-year", type=int, default=None, help="Start year (default: current year)")
@click.pass_context
def plan_template(ctx: click.Context, output_file: Path, fmt: str, start_year: Optional[int]) -> None:
    """
    Create a sample plan to edit.

    Example:
        finplan plan template my_plan.csv
    """
    quiet = ctx.obj["quiet"]

    from .serialization import plan_csv_template, plan_from_csv, save_plan

    if output_file.exists():
        _fail(f"File {output_file} already exists. Remove it first.")

    template = plan_csv_template(start_year)
    if fmt == "csv":
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(template, encoding="utf-8")
    else:
        save_plan(plan_from_csv(template), output_file)

    if not quiet:
        click.echo(f"Created {fmt} plan template at {output_file}")


@main.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """
    Display package and dependency versions.
    """
    console = ctx.obj["console"]

    info_lines = [
        f"FinPlan Version: {__version__}",
        f"Python: {sys.version.split()[0]}",
    ]
    for dist in ("numpy", "pandas", "pydantic", "pydantic-settings",
                 "matplotlib", "rich", "click"):
        try:
            info_lines.append(f"{dist}: {metadata.version(dist)}")
        except metadata.PackageNotFoundError:
            info_lines.append(f"{dist}: not installed")

    console.print(Panel("\n".join(info_lines), title="System Information"))


if __name__ == "__main__":
    main()
