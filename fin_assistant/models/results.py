"""
Tool Result Models

Every capability (analyze, tax, ingest) answers with one of these models.
They are what the AI agent sees, what the CLI prints and what tests assert on.

CRITICAL: A failed operation is still a result, never an exception.
success=False results carry the error kind, a human-readable message
and, where available, diagnostic detail.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fin_assistant.errors import ErrorKind, FinancialAssistantError
from fin_assistant.models.tax import AgeCategory, TaxRegime
from fin_assistant.models.transaction import AggregationMode, DateRange


class ToolResult(BaseModel):
    """Common envelope for capability results."""
    
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
    
    success: bool
    message: str = Field(
        ...,
        description="Human-readable outcome"
    )
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None
    details: Optional[str] = None
    executed_at: datetime = Field(
        default_factory=datetime.now
    )
    
    @classmethod
    def from_error(cls, exc: FinancialAssistantError, prefix: Optional[str] = None):
        """Build a failed result from a domain error."""
        message = f"{prefix}: {exc.message}" if prefix else exc.message
        return cls(
            success=False,
            message=message,
            error_kind=exc.kind,
            error=message,
            details=exc.details,
        )
    
    def to_payload(self) -> dict:
        """JSON-ready dict with camelCase keys, for AI prompts and CLI output."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AnalysisResult(ToolResult):
    """Result of analyzing a transaction context."""
    
    context_name: Optional[str] = None
    aggregation: Optional[AggregationMode] = None
    result: Optional[float] = Field(
        default=None,
        description="The aggregated value"
    )
    filtered_transactions_count: int = Field(default=0, ge=0)
    total_transactions_count: int = Field(default=0, ge=0)
    date_range: Optional[DateRange] = None


class TaxResult(ToolResult):
    """Result of a tax slab calculation."""
    
    income_amount: Optional[float] = None
    age: Optional[int] = None
    tax_regime: Optional[TaxRegime] = None
    age_category: Optional[AgeCategory] = None
    tax_amount: Optional[float] = None
    tax_slab: Optional[str] = None
    effective_tax_rate: Optional[float] = None
    rebate_applied: Optional[float] = None
    cess_amount: Optional[float] = None


class IngestResult(ToolResult):
    """Result of converting a CSV file into a stored context."""
    
    csv_file_path: Optional[str] = None
    context_name: Optional[str] = None
    output_file_path: Optional[str] = None
    record_count: int = Field(default=0, ge=0)
