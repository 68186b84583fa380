"""
Tests for the income tax slab calculator and its configuration loader.
"""

import json

import pytest

from fin_assistant.errors import ConfigurationError, ErrorKind, InvalidInputError
from fin_assistant.models import AgeCategory, TaxQuery, TaxRegime
from fin_assistant.tax import (
    TaxCalculator,
    compute_tax,
    load_tax_configuration,
    parse_tax_configuration,
    select_age_category,
)


class TestComputeTax:
    """Tests for the pure computation."""
    
    def test_new_regime_fifteen_lakh(self, tax_config):
        result = compute_tax(1500000, 30, "new", tax_config)
        assert result.age_category == AgeCategory.ALL_AGES
        assert result.slab_description == "Income between ₹12,00,000 and ₹15,00,000"
        assert result.tax_before_rebate == pytest.approx(140000)
        assert result.cess_amount == pytest.approx(5600)
        assert result.tax == pytest.approx(145600)
        assert result.effective_rate_percent == pytest.approx(145600 / 1500000 * 100)
    
    def test_top_slab_is_open_ended(self, tax_config):
        result = compute_tax(2000000, 30, TaxRegime.NEW, tax_config)
        assert result.slab_description == "Income between ₹15,00,000 and above"
        assert result.tax == pytest.approx((140000 + 500000 * 0.3) * 1.04)
    
    def test_super_senior_uses_above_80_table(self, tax_config):
        result = compute_tax(600000, 85, TaxRegime.OLD, tax_config)
        assert result.age_category == AgeCategory.ABOVE_80
        assert result.tax == pytest.approx(20800)
    
    def test_under_60_old_regime(self, tax_config):
        result = compute_tax(600000, 30, TaxRegime.OLD, tax_config)
        assert result.age_category == AgeCategory.LESS_THAN_60
        assert result.tax == pytest.approx(33800)
    
    @pytest.mark.parametrize("age,expected", [
        (59, AgeCategory.LESS_THAN_60),
        (60, AgeCategory.BETWEEN_60_AND_80),
        (79, AgeCategory.BETWEEN_60_AND_80),
        (80, AgeCategory.ABOVE_80),
    ])
    def test_age_category_thresholds(self, age, expected):
        assert select_age_category(TaxRegime.OLD, age) == expected
    
    def test_new_regime_ignores_age(self):
        assert select_age_category(TaxRegime.NEW, 90) == AgeCategory.ALL_AGES
    
    def test_new_regime_rebate_boundary(self, tax_config):
        at_threshold = compute_tax(700000, 30, "new", tax_config)
        assert at_threshold.tax_before_rebate == pytest.approx(20000)
        assert at_threshold.rebate_applied == pytest.approx(20000)
        assert at_threshold.tax == 0
        
        above = compute_tax(700001, 30, "new", tax_config)
        assert above.rebate_applied == 0
        assert above.tax == pytest.approx(20000.1 * 1.04)
    
    def test_old_regime_rebate_boundary(self, tax_config):
        assert compute_tax(500000, 30, "old", tax_config).tax == 0
        assert compute_tax(500001, 30, "old", tax_config).tax == pytest.approx(12500.2 * 1.04)
    
    def test_zero_income(self, tax_config):
        result = compute_tax(0, 30, "new", tax_config)
        assert result.tax == 0
        assert result.effective_rate_percent == 0
    
    @pytest.mark.parametrize("regime,age", [
        ("new", 30),
        ("old", 30),
        ("old", 65),
        ("old", 85),
    ])
    def test_tax_is_monotonic_in_income(self, tax_config, regime, age):
        incomes = [
            0, 250000, 300000, 499999, 500000, 500001, 699999, 700000, 700001,
            1000000, 1200000, 1500000, 1500001, 5000000,
        ]
        taxes = [compute_tax(income, age, regime, tax_config).tax for income in incomes]
        assert taxes == sorted(taxes)
    
    def test_is_deterministic(self, tax_config):
        first = compute_tax(1234567, 42, "old", tax_config)
        second = compute_tax(1234567, 42, "old", tax_config)
        assert first == second
    
    @pytest.mark.parametrize("income", [-1, "abc", None, float("nan")])
    def test_invalid_income(self, tax_config, income):
        with pytest.raises(InvalidInputError):
            compute_tax(income, 30, "new", tax_config)
    
    def test_invalid_regime(self, tax_config):
        with pytest.raises(InvalidInputError, match="taxRegime"):
            compute_tax(100000, 30, "flat", tax_config)
    
    def test_income_below_first_slab(self):
        config = parse_tax_configuration({
            "regimes": {
                "old": {
                    "less_than_60": [{"min_income": 100000, "max_income": None, "rate": 0.1}],
                    "between_60_and_80": [{"min_income": 100000, "max_income": None, "rate": 0.1}],
                    "above_80": [{"min_income": 100000, "max_income": None, "rate": 0.1}],
                },
                "new": {"all_ages": [{"min_income": 100000, "max_income": None, "rate": 0.1}]},
            },
            "rebate_87A": {
                "old": {"max_income": 0, "max_rebate": 0},
                "new": {"max_income": 0, "max_rebate": 0},
            },
            "cess_rate": 0.04,
        })
        result = compute_tax(50000, 30, "new", config)
        assert result.tax == 0
        assert result.slab.min_income == 100000


class TestSlabConfiguration:
    """Tests for loading the slab file."""
    
    def test_bundled_table_loads(self, tax_config):
        assert set(tax_config.regimes) == {TaxRegime.OLD, TaxRegime.NEW}
        assert tax_config.cess_rate == 0.04
        assert tax_config.regimes[TaxRegime.NEW][AgeCategory.ALL_AGES][-1].is_open_ended
    
    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_tax_configuration(tmp_path / "missing.json")
    
    def test_invalid_json(self, tmp_path):
        path = tmp_path / "slabs.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_tax_configuration(path)
    
    def test_missing_regime(self, tmp_path):
        path = tmp_path / "slabs.json"
        path.write_text(json.dumps({
            "regimes": {"new": {"all_ages": [{"min_income": 0, "max_income": None, "rate": 0}]}},
            "rebate_87A": {"new": {"max_income": 0, "max_rebate": 0}},
            "cess_rate": 0.04,
        }), encoding="utf-8")
        with pytest.raises(ConfigurationError, match="malformed"):
            load_tax_configuration(path)


class TestTaxCalculator:
    """Tests for the service wrapper and its structured results."""
    
    @pytest.mark.asyncio
    async def test_defaults_apply(self, tax_config):
        calculator = TaxCalculator(configuration=tax_config)
        result = await calculator.calculate(TaxQuery(incomeAmount=1500000))
        
        assert result.success
        assert result.age == 30
        assert result.tax_regime == TaxRegime.NEW
        assert result.tax_amount == pytest.approx(145600)
        assert result.message == (
            "For an income of ₹15,00,000, under the new tax regime (age 30), the estimated "
            "tax is ₹1,45,600. You fall under the slab: Income between ₹12,00,000 and "
            "₹15,00,000. The effective tax rate is 9.71%."
        )
    
    @pytest.mark.asyncio
    async def test_missing_income(self, tax_config):
        result = await TaxCalculator(configuration=tax_config).calculate(TaxQuery())
        assert not result.success
        assert result.error_kind == ErrorKind.MISSING_REQUIRED_PARAMETER
    
    @pytest.mark.asyncio
    async def test_negative_income(self, tax_config):
        result = await TaxCalculator(configuration=tax_config).calculate(
            TaxQuery(incomeAmount=-5)
        )
        assert not result.success
        assert result.error_kind == ErrorKind.INVALID_INPUT
        assert result.message == (
            "Failed to calculate tax slab: Invalid incomeAmount provided. "
            "Must be a non-negative number."
        )
    
    @pytest.mark.asyncio
    async def test_bad_configuration_is_reported(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FIN_ASSISTANT_TAX_SLABS_PATH", str(tmp_path / "missing.json"))
        calculator = TaxCalculator()
        result = await calculator.calculate(TaxQuery(incomeAmount=100000))
        assert not result.success
        assert result.error_kind == ErrorKind.CONFIGURATION_ERROR
