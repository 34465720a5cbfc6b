"""
Income tax module for FinPlan.

Purpose
-------
Turns gross annual income into tax payable. The projection engine only
depends on the abstract ``TaxRegime`` interface, so alternate bracket tables
can be swapped in without touching the orchestrator.

Key components
--------------
- TaxRegime:
    Abstract policy: ``compute(gross) -> tax``.

- SlabTaxRegime:
    Progressive slab table with standard deduction, a rebate cliff and a flat
    cess on top:

        taxable = max(0, gross - standard_deduction)
        tax     = sum_k rate_k * clip(taxable - lower_k, 0, lower_{k+1} - lower_k)
        tax     = 0                  if taxable <= rebate_limit
        total   = tax * (1 + cess_rate)

- OLD_REGIME:
    Default table (values in INR): 50,000 standard deduction; 0% up to
    2,50,000, 5% to 5,00,000, 20% to 10,00,000, 30% above; full rebate when
    taxable income is at most 5,00,000 (a cliff, not a phase-out); 4% cess.

Example
-------
>>> from finplan.tax import tax, OLD_REGIME
>>> tax(1_200_000)
163800.0
>>> tax(550_000)  # taxable 5,00,000: rebate applies
0.0
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Tuple

from .config import TaxRegimeConfig
from .exceptions import ConfigurationError

__all__ = [
    "TaxRegime",
    "TaxSlab",
    "SlabTaxRegime",
    "OLD_REGIME",
    "tax",
    "net_income",
]


class TaxRegime(ABC):
    """Tax policy interface consumed by the projection engine."""

    name: str = "regime"

    @abstractmethod
    def compute(self, gross_income: float) -> float:
        """Return total tax payable on *gross_income*."""

    def __call__(self, gross_income: float) -> float:
        return self.compute(gross_income)


@dataclass(frozen=True)
class TaxSlab:
    """Marginal ``rate`` applied to the slice of taxable income above ``lower``."""
    lower: float
    rate: float


@dataclass(frozen=True)
class SlabTaxRegime(TaxRegime):
    """
    Cumulative slab computation with deduction, rebate cliff and cess.

    Parameters
    ----------
    slabs : tuple of TaxSlab
        Ascending lower bounds, the first at 0. Each slab taxes only its own
        slice, up to the next slab's lower bound.
    standard_deduction : float, default 0.0
        Subtracted from gross income before slabs apply (floored at 0).
    rebate_limit : float, optional
        When taxable income is at most this amount, tax is forced to 0.
    cess_rate : float, default 0.0
        Surcharge on the (possibly rebated) tax, e.g. 0.04 for 4%.
    name : str
        Identifier for reports.

    Examples
    --------
    >>> flat = SlabTaxRegime(slabs=(TaxSlab(0, 0.1),), name="flat-10")
    >>> flat.compute(1000)
    100.0
    """
    slabs: Tuple[TaxSlab, ...]
    standard_deduction: float = 0.0
    rebate_limit: float | None = None
    cess_rate: float = 0.0
    name: str = "slab"

    def __post_init__(self) -> None:
        if not self.slabs:
            raise ConfigurationError("a slab regime needs at least one slab")
        lowers = [s.lower for s in self.slabs]
        if lowers[0] != 0:
            raise ConfigurationError(f"first slab must start at 0, got {lowers[0]}")
        if any(b <= a for a, b in zip(lowers, lowers[1:])):
            raise ConfigurationError(
                f"slab lower bounds must be strictly ascending, got {lowers}"
            )
        if any(not 0 <= s.rate <= 1 for s in self.slabs):
            raise ConfigurationError("slab rates must be fractions in [0, 1]")
        if self.standard_deduction < 0 or self.cess_rate < 0:
            raise ConfigurationError("standard_deduction and cess_rate must be non-negative")

    @classmethod
    def from_config(cls, config: TaxRegimeConfig) -> "SlabTaxRegime":
        """Build a regime from its serializable configuration."""
        return cls(
            slabs=tuple(TaxSlab(s.lower, s.rate) for s in config.slabs),
            standard_deduction=config.standard_deduction,
            rebate_limit=config.rebate_limit,
            cess_rate=config.cess_rate,
            name=config.name,
        )

    def taxable_income(self, gross_income: float) -> float:
        return max(0.0, gross_income - self.standard_deduction)

    def slab_tax(self, taxable: float) -> float:
        """Tax before rebate and cess."""
        total = 0.0
        uppers = [s.lower for s in self.slabs[1:]] + [float("inf")]
        for slab, upper in zip(self.slabs, uppers):
            if taxable <= slab.lower:
                break
            total += (min(taxable, upper) - slab.lower) * slab.rate
        return total

    def compute(self, gross_income: float) -> float:
        taxable = self.taxable_income(gross_income)
        base = self.slab_tax(taxable)
        if self.rebate_limit is not None and taxable <= self.rebate_limit:
            base = 0.0
        return base + base * self.cess_rate


OLD_REGIME = SlabTaxRegime(
    slabs=(
        TaxSlab(0, 0.0),
        TaxSlab(250_000, 0.05),
        TaxSlab(500_000, 0.20),
        TaxSlab(1_000_000, 0.30),
    ),
    standard_deduction=50_000,
    rebate_limit=500_000,
    cess_rate=0.04,
    name="old",
)


def tax(gross_income: float, regime: TaxRegime = OLD_REGIME) -> float:
    """Tax payable on *gross_income* under *regime* (default: OLD_REGIME)."""
    return regime.compute(gross_income)


def net_income(gross_income: float, regime: TaxRegime = OLD_REGIME) -> float:
    """Gross income minus tax."""
    return gross_income - regime.compute(gross_income)
