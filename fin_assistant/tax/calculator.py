"""
Income Tax Slab Calculator (India)

DESIGN DECISION: compute_tax is a PURE function of its inputs and a
TaxConfiguration. Same inputs, same output, no I/O. TaxCalculator wraps
it with configuration loading, defaults and structured error results.

Algorithm:
1. Pick the slab table for (regime, age)
2. Find the slab containing the income; tax = base_tax + excess * rate
3. Income below the lowest slab → zero tax on the lowest slab
4. Section 87A rebate for incomes up to the regime's threshold
5. Health & education cess on what remains
"""

import math
from typing import Optional
from uuid import UUID

import structlog

from fin_assistant.analysis.aggregator import format_inr
from fin_assistant.audit import AuditLogger
from fin_assistant.errors import (
    ConfigurationError,
    FinancialAssistantError,
    InvalidInputError,
    MissingRequiredParameterError,
)
from fin_assistant.models.results import TaxResult
from fin_assistant.models.tax import (
    AgeCategory,
    TaxComputation,
    TaxConfiguration,
    TaxQuery,
    TaxRegime,
    TaxSlab,
)
from fin_assistant.tax.slabs import load_tax_configuration


logger = structlog.get_logger(__name__)


def _require_number(value, name: str) -> float:
    """Accept ints, floats and numeric strings; reject anything non-finite or non-numeric."""
    if isinstance(value, bool) or value is None:
        raise InvalidInputError(f"Invalid {name}: {value!r}. Must be a number.")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Invalid {name}: {value!r}. Must be a number.")
    if not math.isfinite(number):
        raise InvalidInputError(f"Invalid {name}: {value!r}. Must be a finite number.")
    return number


def select_age_category(regime: TaxRegime, age: float) -> AgeCategory:
    """Choose the slab table key; higher age thresholds are checked first."""
    if regime == TaxRegime.NEW:
        return AgeCategory.ALL_AGES
    if age >= 80:
        return AgeCategory.ABOVE_80
    if age >= 60:
        return AgeCategory.BETWEEN_60_AND_80
    return AgeCategory.LESS_THAN_60


def describe_slab(slab: TaxSlab) -> str:
    upper = "above" if slab.is_open_ended else format_inr(slab.max_income)
    return f"Income between {format_inr(slab.min_income)} and {upper}"


def compute_tax(
    income,
    age,
    regime,
    configuration: TaxConfiguration,
) -> TaxComputation:
    """
    Compute income tax for one person.
    
    Raises:
        InvalidInputError: negative or non-numeric income/age, unknown regime
        ConfigurationError: the configuration lacks the needed slab table
    """
    income = _require_number(income, "incomeAmount")
    if income < 0:
        raise InvalidInputError(
            "Invalid incomeAmount provided. Must be a non-negative number."
        )
    age_value = _require_number(age, "age")
    if age_value < 0:
        raise InvalidInputError("Invalid age provided. Must be a non-negative number.")
    try:
        regime = TaxRegime(regime)
    except ValueError:
        raise InvalidInputError(f"Invalid taxRegime {regime!r}. Use 'old' or 'new'.")
    
    age_category = select_age_category(regime, age_value)
    slabs = configuration.regimes.get(regime, {}).get(age_category)
    if not slabs:
        raise ConfigurationError(
            f"No '{age_category.value}' slab table configured for the {regime.value} regime."
        )
    
    slab = next((s for s in slabs if s.contains(income)), None)
    if slab is None:
        # Below the taxable minimum
        slab = slabs[0]
        tax = 0.0
    else:
        tax = slab.tax_for(income)
    tax_before_rebate = tax
    
    rebate = configuration.rebate_87A.get(regime)
    rebate_applied = 0.0
    if rebate is not None and income <= rebate.max_income:
        rebate_applied = min(tax, rebate.max_rebate)
        tax = max(0.0, tax - rebate.max_rebate)
    
    cess_amount = tax * configuration.cess_rate
    tax += cess_amount
    
    effective_rate = (tax / income) * 100 if income > 0 else 0.0
    
    return TaxComputation(
        income=income,
        age=int(age_value),
        regime=regime,
        age_category=age_category,
        slab=slab,
        slab_description=describe_slab(slab),
        tax_before_rebate=tax_before_rebate,
        rebate_applied=rebate_applied,
        cess_amount=cess_amount,
        tax=tax,
        effective_rate_percent=effective_rate,
    )


class TaxCalculator:
    """
    Tax calculation service.
    
    Reads the slab configuration on every call unless one is injected,
    applies defaults for age and regime, and reports failures as
    structured TaxResult errors.
    """
    
    def __init__(
        self,
        configuration: Optional[TaxConfiguration] = None,
        default_age: int = 30,
        default_regime: TaxRegime = TaxRegime.NEW,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._configuration = configuration
        self._default_age = default_age
        self._default_regime = TaxRegime(default_regime)
        self._audit_logger = audit_logger
    
    def _get_configuration(self) -> TaxConfiguration:
        if self._configuration is not None:
            return self._configuration
        return load_tax_configuration()
    
    async def calculate(
        self,
        query: TaxQuery,
        correlation_id: Optional[UUID] = None,
    ) -> TaxResult:
        """Calculate tax for a query; never raises for domain errors."""
        try:
            result = self._calculate(query)
        except FinancialAssistantError as e:
            logger.warning("tax_calculation_failed", error_kind=e.kind.value, error=e.message)
            return TaxResult.from_error(e, prefix="Failed to calculate tax slab")
        
        if self._audit_logger:
            await self._audit_logger.log_tax_calculated(
                regime=result.tax_regime.value,
                age_category=result.age_category.value,
                tax=result.tax_amount,
                correlation_id=correlation_id,
            )
        return result
    
    def _calculate(self, query: TaxQuery) -> TaxResult:
        if query.income_amount is None:
            raise MissingRequiredParameterError("incomeAmount is required.")
        
        age = self._default_age if query.age is None else query.age
        regime = query.tax_regime or self._default_regime
        
        computation = compute_tax(
            query.income_amount,
            age,
            regime,
            self._get_configuration(),
        )
        
        message = (
            f"For an income of {format_inr(computation.income)}, under the "
            f"{computation.regime.value} tax regime (age {computation.age}), the estimated "
            f"tax is {format_inr(computation.tax)}. You fall under the slab: "
            f"{computation.slab_description}. The effective tax rate is "
            f"{computation.effective_rate_percent:.2f}%."
        )
        
        return TaxResult(
            success=True,
            message=message,
            income_amount=computation.income,
            age=computation.age,
            tax_regime=computation.regime,
            age_category=computation.age_category,
            tax_amount=computation.tax,
            tax_slab=computation.slab_description,
            effective_tax_rate=computation.effective_rate_percent,
            rebate_applied=computation.rebate_applied,
            cess_amount=computation.cess_amount,
        )
