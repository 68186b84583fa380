"""
Audit Logger

DESIGN DECISION: Every tool invocation in the system is logged.
This provides:
1. Traceability from question to data
2. Debugging capability
3. A record of which contexts and regimes were used

The audit logger:
- Writes structured JSON lines through structlog
- Never raises into the calling flow
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from fin_assistant.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route stdlib logging (which structlog writes through) to stderr at `level`."""
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditLogger:
    """Central audit logging service."""
    
    def __init__(self, logger_name: str = "fin_assistant.audit"):
        self._logger = structlog.get_logger(logger_name)
    
    async def log(self, event: AuditEvent) -> None:
        """Log an audit event at the level matching its severity."""
        log_dict = event.to_log_dict()
        
        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)
    
    async def log_csv_ingested(
        self,
        context_name: str,
        csv_file_path: str,
        record_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful CSV ingestion."""
        await self.log(AuditEventBuilder.csv_ingested(
            context_name=context_name,
            csv_file_path=csv_file_path,
            record_count=record_count,
            correlation_id=correlation_id,
        ))
    
    async def log_context_loaded(
        self,
        context_name: str,
        record_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.context_loaded(
            context_name=context_name,
            record_count=record_count,
            correlation_id=correlation_id,
        ))
    
    async def log_analysis_executed(
        self,
        context_name: str,
        aggregation: str,
        matched: int,
        value: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.analysis_executed(
            context_name=context_name,
            aggregation=aggregation,
            matched=matched,
            value=value,
            correlation_id=correlation_id,
        ))
    
    async def log_tax_calculated(
        self,
        regime: str,
        age_category: str,
        tax: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.tax_calculated(
            regime=regime,
            age_category=age_category,
            tax=tax,
            correlation_id=correlation_id,
        ))
    
    async def log_tool_failed(
        self,
        tool_name: str,
        error_kind: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a tool invocation that returned an error result."""
        await self.log(AuditEventBuilder.tool_failed(
            tool_name=tool_name,
            error_kind=error_kind,
            error_message=error_message,
            correlation_id=correlation_id,
        ))
    
    async def log_question_parsed(
        self,
        tool_name: str,
        arguments: dict,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.question_parsed(
            tool_name=tool_name,
            arguments=arguments,
            correlation_id=correlation_id,
        ))
    
    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.
    
    Use this at the start of a new user action (e.g., a question).
    Pass it through all subsequent operations.
    """
    return uuid4()
