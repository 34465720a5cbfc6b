"""
Plotting utilities for FinPlan projections.

Purpose
-------
Draws the headline series of a projection as a five-panel dashboard:

- Total Income
- All Expenses (fixed + tentative + big + loans)
- Home Loan - Pending Principal
- Total Savings (Net Savings)
- Total Corpus

Each panel is drawn as a line, bar or area chart. Amount axes are compacted
to lakh/crore for INR and to K/M for other currencies.

matplotlib is imported lazily so that importing FinPlan never requires a
display backend.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from .constants import DEFAULT_CHART_COLOR, DEFAULT_CHART_FILL, DEFAULT_FIGSIZE
from .projection import PlanOutput, YearResult
from .utils import axis_formatter

__all__ = ["CHART_TYPES", "PANELS", "plot_results"]

CHART_TYPES = ("line", "bar", "area")

PANELS: List[Tuple[str, Callable[[YearResult], float]]] = [
    ("Total Income", lambda r: r.total_income),
    ("All Expenses", lambda r: r.total_expenses),
    ("Home Loan - Pending Principal", lambda r: r.home_loan_pending_principal),
    ("Total Savings (Net Savings)", lambda r: r.net_savings),
    ("Total Corpus", lambda r: r.corpus_end),
]


def _draw(ax, years, values, chart_type: str, label: str) -> None:
    if chart_type == "bar":
        ax.bar(years, values, color=DEFAULT_CHART_COLOR, label=label)
    elif chart_type == "area":
        ax.fill_between(years, values, color=DEFAULT_CHART_FILL, alpha=0.6)
        ax.plot(years, values, color=DEFAULT_CHART_COLOR, linewidth=2, label=label)
    else:
        ax.plot(years, values, color=DEFAULT_CHART_COLOR, linewidth=2,
                marker="o", markersize=4, label=label)


def plot_results(
    output: PlanOutput,
    chart_type: str = "line",
    *,
    currency: str = "INR",
    figsize: Optional[tuple] = None,
    title: Optional[str] = None,
    save_path: Optional[str] = None,
    return_fig_ax: bool = False,
):
    """
    Plot the five headline series of a projection.

    Parameters
    ----------
    output : PlanOutput
        Projection to plot.
    chart_type : {"line", "bar", "area"}, default "line"
        Drawing style shared by all panels.
    currency : str, default "INR"
        Selects the axis unit compaction (lakh/crore or K/M).
    figsize : tuple, optional
        Figure size; defaults to DEFAULT_FIGSIZE.
    title : str, optional
        Figure title.
    save_path : str, optional
        Save the figure to this path (PNG at 150 dpi).
    return_fig_ax : bool, default False
        If True, return (fig, axes) with axes keyed by panel title.

    Returns
    -------
    tuple or None
        (fig, dict of axes) when return_fig_ax=True.

    Raises
    ------
    ValueError
        For an unknown chart_type.
    """
    if chart_type not in CHART_TYPES:
        raise ValueError(f"chart_type must be one of {CHART_TYPES}, got '{chart_type}'")

    from matplotlib import pyplot as plt
    from matplotlib.ticker import FuncFormatter, MaxNLocator

    years = output.years
    fig, grid = plt.subplots(3, 2, figsize=figsize or DEFAULT_FIGSIZE)
    flat = grid.ravel()
    axes = {}
    fmt = FuncFormatter(axis_formatter(currency))

    for ax, (panel, getter) in zip(flat, PANELS):
        values = [getter(r) for r in output.results]
        _draw(ax, years, values, chart_type, panel)
        ax.set_title(panel, fontsize=11, fontweight="bold")
        ax.yaxis.set_major_formatter(fmt)
        ax.xaxis.set_major_locator(MaxNLocator(integer=True))
        ax.grid(True, alpha=0.3)
        axes[panel] = ax

    # Five panels on a 3x2 grid; the last cell stays empty.
    flat[-1].axis("off")

    if title:
        fig.suptitle(title, fontsize=14, fontweight="bold")
    fig.tight_layout(rect=[0, 0, 1, 0.96 if title else 1])

    if save_path:
        fig.savefig(save_path, bbox_inches="tight", dpi=150)

    if return_fig_ax:
        return fig, axes
