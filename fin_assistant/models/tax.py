"""
Income Tax Models

Schemas for the slab configuration file and for tax queries/computations.

DESIGN DECISION: The open-ended top slab is modelled as max_income=None.
Older slab files used a large integer (JavaScript's MAX_SAFE_INTEGER) as
"no upper bound"; it is normalized to None when the file is loaded so the
magic number never reaches the calculator.
"""

from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


LEGACY_UNBOUNDED_SENTINEL = 9007199254740991


class TaxRegime(str, Enum):
    """Indian income tax regimes (FY 2024-25)."""
    OLD = "old"
    NEW = "new"
    
    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value == wanted:
                    return member
        return None


class AgeCategory(str, Enum):
    """Slab table keys inside a regime."""
    LESS_THAN_60 = "less_than_60"
    BETWEEN_60_AND_80 = "between_60_and_80"
    ABOVE_80 = "above_80"
    ALL_AGES = "all_ages"


REQUIRED_TABLES = {
    TaxRegime.OLD: (
        AgeCategory.LESS_THAN_60,
        AgeCategory.BETWEEN_60_AND_80,
        AgeCategory.ABOVE_80,
    ),
    TaxRegime.NEW: (AgeCategory.ALL_AGES,),
}


class TaxSlab(BaseModel):
    """A contiguous income bracket with its marginal rate."""
    model_config = ConfigDict(frozen=True)
    
    min_income: float = Field(..., ge=0)
    max_income: Optional[float] = Field(
        default=None,
        description="Upper bound (inclusive); None means no upper bound"
    )
    rate: float = Field(..., ge=0.0, le=1.0, description="Marginal rate as a fraction")
    base_tax: float = Field(default=0.0, ge=0, description="Tax accrued below min_income")
    
    @field_validator('max_income', mode='before')
    @classmethod
    def normalize_unbounded(cls, v):
        if v is not None and float(v) >= LEGACY_UNBOUNDED_SENTINEL:
            return None
        return v
    
    @model_validator(mode='after')
    def validate_bounds(self) -> 'TaxSlab':
        if self.max_income is not None and self.max_income < self.min_income:
            raise ValueError(
                f"Slab upper bound {self.max_income} is below its lower bound {self.min_income}"
            )
        return self
    
    @property
    def is_open_ended(self) -> bool:
        return self.max_income is None
    
    def contains(self, income: float) -> bool:
        if income < self.min_income:
            return False
        return self.is_open_ended or income <= self.max_income
    
    def tax_for(self, income: float) -> float:
        return self.base_tax + (income - self.min_income) * self.rate


class RebateRule(BaseModel):
    """Section 87A rebate for one regime."""
    model_config = ConfigDict(frozen=True)
    
    max_income: float = Field(..., ge=0)
    max_rebate: float = Field(..., ge=0)


class TaxConfiguration(BaseModel):
    """
    The parsed slab configuration file.
    
    Validated as a whole on load:
    - every regime carries the age-category tables it needs
    - every table is ordered, gap-free and non-overlapping
    - only the last slab of a table may be open-ended
    """
    model_config = ConfigDict(frozen=True)
    
    regimes: dict[TaxRegime, dict[AgeCategory, list[TaxSlab]]]
    rebate_87A: dict[TaxRegime, RebateRule]
    cess_rate: float = Field(..., ge=0.0, le=1.0)
    
    @model_validator(mode='after')
    def validate_tables(self) -> 'TaxConfiguration':
        for regime, categories in REQUIRED_TABLES.items():
            tables = self.regimes.get(regime)
            if tables is None:
                raise ValueError(f"Missing slab tables for the {regime.value} regime")
            if regime not in self.rebate_87A:
                raise ValueError(f"Missing 87A rebate rule for the {regime.value} regime")
            for category in categories:
                if category not in tables:
                    raise ValueError(
                        f"Missing '{category.value}' slab table for the {regime.value} regime"
                    )
        
        for regime, tables in self.regimes.items():
            for category, slabs in tables.items():
                _check_contiguous(f"{regime.value}/{category.value}", slabs)
        return self


def _check_contiguous(table_name: str, slabs: list[TaxSlab]) -> None:
    if not slabs:
        raise ValueError(f"Slab table {table_name} is empty")
    
    for index, (current, following) in enumerate(zip(slabs, slabs[1:])):
        if current.is_open_ended:
            raise ValueError(
                f"Slab table {table_name}: only the last slab may be open-ended "
                f"(slab {index} is not last)"
            )
        if following.min_income != current.max_income:
            problem = "gap" if following.min_income > current.max_income else "overlap"
            raise ValueError(
                f"Slab table {table_name}: {problem} between "
                f"{current.max_income} and {following.min_income}"
            )


class TaxQuery(BaseModel):
    """Parameters accepted by the tax entry point (camelCase aliases for tool calls)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")
    
    income_amount: Optional[float] = Field(
        default=None,
        alias="incomeAmount",
        description="Total taxable income in INR (required, >= 0)"
    )
    age: Optional[int] = Field(default=None, ge=0, le=150)
    tax_regime: Optional[TaxRegime] = Field(default=None, alias="taxRegime")
    
    @field_validator('tax_regime', mode='before')
    @classmethod
    def parse_regime(cls, v):
        if isinstance(v, str):
            return TaxRegime(v) if v.strip() else None
        return v


class TaxComputation(BaseModel):
    """Output of the pure tax computation."""
    model_config = ConfigDict(frozen=True)
    
    income: float
    age: int
    regime: TaxRegime
    age_category: AgeCategory
    slab: TaxSlab
    slab_description: str
    tax_before_rebate: float
    rebate_applied: float
    cess_amount: float
    tax: float
    effective_rate_percent: float
