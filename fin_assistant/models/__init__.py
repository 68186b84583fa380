"""
Data Models Package

This package contains all Pydantic models used in the Financial Assistant.
All data flowing through the system must conform to these schemas.
"""

from fin_assistant.models.transaction import (
    AggregationMode,
    AggregationResult,
    AnalysisQuery,
    DateRange,
    IngestQuery,
    Transaction,
    TransactionFilter,
    TransactionType,
    parse_amount,
    parse_calendar_date,
)
from fin_assistant.models.tax import (
    AgeCategory,
    RebateRule,
    TaxComputation,
    TaxConfiguration,
    TaxQuery,
    TaxRegime,
    TaxSlab,
)
from fin_assistant.models.results import (
    AnalysisResult,
    IngestResult,
    TaxResult,
    ToolResult,
)
from fin_assistant.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "AggregationMode",
    "AggregationResult",
    "AnalysisQuery",
    "DateRange",
    "IngestQuery",
    "Transaction",
    "TransactionFilter",
    "TransactionType",
    "parse_amount",
    "parse_calendar_date",
    # Tax models
    "AgeCategory",
    "RebateRule",
    "TaxComputation",
    "TaxConfiguration",
    "TaxQuery",
    "TaxRegime",
    "TaxSlab",
    # Results
    "AnalysisResult",
    "IngestResult",
    "TaxResult",
    "ToolResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
