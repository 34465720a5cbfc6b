"""
Unit tests for tax.py module.

Tests the default old-regime table, the rebate cliff, cess, and custom
regimes.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from finplan.config import TaxRegimeConfig, TaxSlabConfig
from finplan.exceptions import ConfigurationError
from finplan.tax import OLD_REGIME, SlabTaxRegime, TaxRegime, TaxSlab, net_income, tax


# ============================================================================
# OLD REGIME
# ============================================================================

class TestOldRegime:
    """Test the default slab table."""

    @pytest.mark.parametrize("gross", [0, 49_999, 300_000, 549_999, 550_000])
    def test_rebate_zone_is_tax_free(self, gross):
        """Test taxable income up to 5,00,000 pays nothing."""
        assert tax(gross) == 0.0

    def test_rebate_cliff(self):
        """Test 1,000 above the rebate limit owes the full slab tax plus cess."""
        # taxable 5,01,000: 12,500 + 200 = 12,700; with 4% cess = 13,208
        assert tax(551_000) == pytest.approx(13_208)

    def test_twelve_lakh(self):
        """Test a gross of 12,00,000 (taxable 11,50,000)."""
        # 12,500 + 1,00,000 + 45,000 = 1,57,500; with cess = 1,63,800
        assert tax(1_200_000) == pytest.approx(163_800)

    def test_top_slab(self):
        """Test marginal rate of 30% plus cess above 10 lakh taxable."""
        delta = tax(2_050_000 + 100_000) - tax(2_050_000)
        assert delta == pytest.approx(100_000 * 0.30 * 1.04)

    def test_net_income(self):
        """Test net = gross - tax."""
        assert net_income(1_200_000) == pytest.approx(1_200_000 - 163_800)

    def test_callable(self):
        """Test regimes can be called like functions."""
        assert OLD_REGIME(1_200_000) == tax(1_200_000)


# ============================================================================
# CUSTOM REGIMES
# ============================================================================

class TestSlabTaxRegime:
    """Test slab regime construction and computation."""

    def test_flat_regime(self):
        """Test a single 10% slab without deduction or cess."""
        flat = SlabTaxRegime(slabs=(TaxSlab(0, 0.1),), name="flat-10")
        assert flat.compute(1_000) == pytest.approx(100)

    def test_standard_deduction_floors_at_zero(self):
        """Test income below the deduction is not negative taxable."""
        regime = SlabTaxRegime(slabs=(TaxSlab(0, 0.1),), standard_deduction=1_000)
        assert regime.taxable_income(500) == 0
        assert regime.compute(500) == 0

    @pytest.mark.parametrize("slabs", [
        (),
        (TaxSlab(100, 0.1),),
        (TaxSlab(0, 0.1), TaxSlab(500, 0.2), TaxSlab(500, 0.3)),
        (TaxSlab(0, 1.5),),
    ])
    def test_invalid_tables_raise(self, slabs):
        """Test empty, offset, unsorted and out-of-range tables are rejected."""
        with pytest.raises(ConfigurationError):
            SlabTaxRegime(slabs=slabs)

    def test_from_config_matches_old_regime(self):
        """Test a config reproducing the old regime computes identical tax."""
        config = TaxRegimeConfig(
            name="old",
            standard_deduction=50_000,
            slabs=[
                TaxSlabConfig(lower=0, rate=0),
                TaxSlabConfig(lower=250_000, rate=0.05),
                TaxSlabConfig(lower=500_000, rate=0.20),
                TaxSlabConfig(lower=1_000_000, rate=0.30),
            ],
            rebate_limit=500_000,
            cess_rate=0.04,
        )
        regime = SlabTaxRegime.from_config(config)
        for gross in (0, 551_000, 1_200_000, 5_000_000):
            assert regime.compute(gross) == pytest.approx(OLD_REGIME.compute(gross))

    def test_config_rejects_unsorted(self):
        """Test TaxRegimeConfig validates ascending thresholds."""
        with pytest.raises(PydanticValidationError, match="ascending"):
            TaxRegimeConfig(slabs=[
                TaxSlabConfig(lower=0, rate=0),
                TaxSlabConfig(lower=500_000, rate=0.2),
                TaxSlabConfig(lower=250_000, rate=0.1),
            ])

    def test_custom_regime_interface(self):
        """Test any TaxRegime subclass plugs into tax()."""
        class NoTax(TaxRegime):
            name = "none"

            def compute(self, gross_income):
                return 0.0

        assert tax(10_000_000, NoTax()) == 0.0
