"""
Audit Models for the Financial Assistant

Every tool invocation and every AI round-trip is logged for audit purposes.
This provides:
1. Traceability from a user's question to the data that answered it
2. Debugging information when things go wrong
3. Ability to reconstruct what the assistant did

DESIGN DECISION: Audit events are append-only and emitted to the
structured log stream. There is no separate audit store.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ingestion
    CSV_INGESTED = "csv_ingested"
    
    # Analysis
    CONTEXT_LOADED = "context_loaded"
    ANALYSIS_EXECUTED = "analysis_executed"
    
    # Tax
    TAX_CALCULATED = "tax_calculated"
    
    # Tool boundary
    TOOL_FAILED = "tool_failed"
    
    # AI round-trip
    QUESTION_PARSED = "question_parsed"
    
    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.
    
    Every significant action creates one of these.
    """
    
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO
    
    # What entity is this about? (a context name, a tool name, ...)
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one question and its tool call)"
    )
    
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    
    is_user_action: bool = False
    
    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.
    
    Usage:
        event = AuditEventBuilder.csv_ingested("my_transactions", "tx.csv", 42)
        event = AuditEventBuilder.tool_failed("calculate_tax", "invalid_input", "...")
    """
    
    @staticmethod
    def csv_ingested(
        context_name: str,
        csv_file_path: str,
        record_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CSV_INGESTED,
            entity_type="context",
            entity_id=context_name,
            correlation_id=correlation_id,
            description=f"CSV ingested into context '{context_name}'",
            details={
                "csv_file_path": csv_file_path,
                "record_count": record_count,
            },
            is_user_action=True,
        )
    
    @staticmethod
    def context_loaded(
        context_name: str,
        record_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONTEXT_LOADED,
            severity=AuditSeverity.DEBUG,
            entity_type="context",
            entity_id=context_name,
            correlation_id=correlation_id,
            description=f"Loaded {record_count} transactions from '{context_name}'",
            details={"record_count": record_count},
        )
    
    @staticmethod
    def analysis_executed(
        context_name: str,
        aggregation: str,
        matched: int,
        value: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ANALYSIS_EXECUTED,
            entity_type="context",
            entity_id=context_name,
            correlation_id=correlation_id,
            description=f"Analysis ({aggregation}) matched {matched} transactions",
            details={
                "aggregation": aggregation,
                "matched": matched,
                "value": value,
            },
        )
    
    @staticmethod
    def tax_calculated(
        regime: str,
        age_category: str,
        tax: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        # Income is deliberately not logged
        return AuditEvent(
            event_type=AuditEventType.TAX_CALCULATED,
            entity_type="tax",
            entity_id=regime,
            correlation_id=correlation_id,
            description=f"Tax calculated under the {regime} regime ({age_category})",
            details={
                "regime": regime,
                "age_category": age_category,
                "tax": tax,
            },
        )
    
    @staticmethod
    def tool_failed(
        tool_name: str,
        error_kind: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TOOL_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="tool",
            entity_id=tool_name,
            correlation_id=correlation_id,
            description=f"Tool {tool_name} failed: {error_kind}",
            error_code=error_kind,
            error_message=error_message,
        )
    
    @staticmethod
    def question_parsed(
        tool_name: str,
        arguments: dict,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.QUESTION_PARSED,
            entity_type="tool",
            entity_id=tool_name,
            correlation_id=correlation_id,
            description=f"Question mapped to tool {tool_name}",
            details={"arguments": arguments},
            is_user_action=True,
        )
    
    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
    
