"""
Analysis Execution Engine

DESIGN DECISION: Analysis is DETERMINISTIC.
The LLM converts natural language to an AnalysisQuery.
This engine executes that query on the stored transactions.
The LLM then phrases the response.

At no point does the LLM compute an answer itself.
It only sees what this engine returns.

Flow: load context → resolve period → filter → aggregate → describe
"""

from datetime import date
from typing import Optional
from uuid import UUID

import structlog

from fin_assistant.analysis.aggregator import aggregate, describe_aggregation
from fin_assistant.analysis.filters import filter_transactions
from fin_assistant.analysis.loader import TransactionLoader
from fin_assistant.analysis.periods import resolve_period
from fin_assistant.audit import AuditLogger
from fin_assistant.errors import FinancialAssistantError, MissingRequiredParameterError
from fin_assistant.models.results import AnalysisResult
from fin_assistant.models.transaction import AnalysisQuery, DateRange, TransactionFilter
from fin_assistant.services.storage import validate_context_name


logger = structlog.get_logger(__name__)


class TransactionAnalyzer:
    """
    Executes analysis queries against stored transaction contexts.
    
    GUARANTEES:
    - Only reports numbers computed from stored data
    - Returns a structured error result instead of raising
    - Re-reads the context on every call
    """
    
    def __init__(
        self,
        loader: TransactionLoader,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._loader = loader
        self._audit_logger = audit_logger
    
    async def analyze(
        self,
        query: AnalysisQuery,
        today: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AnalysisResult:
        """
        Execute an analysis query and return its result.
        
        Errors (missing context name, unreadable file, bad records, bad
        dates) come back as success=False results.
        """
        if not query.context_name:
            return AnalysisResult.from_error(
                MissingRequiredParameterError("contextName is required to analyze transactions.")
            )
        
        try:
            return await self._execute(query, today, correlation_id)
        except FinancialAssistantError as e:
            logger.warning(
                "analysis_failed",
                context=query.context_name,
                error_kind=e.kind.value,
                error=e.message,
            )
            result = AnalysisResult.from_error(
                e,
                prefix=f"Failed to analyze transactions from context '{query.context_name}'",
            )
            result.context_name = query.context_name
            return result
    
    async def _execute(
        self,
        query: AnalysisQuery,
        today: Optional[date],
        correlation_id: Optional[UUID],
    ) -> AnalysisResult:
        context_name = validate_context_name(query.context_name)
        
        date_range = resolve_period(
            time_period=query.time_period,
            start_date=query.start_date,
            end_date=query.end_date,
            today=today,
        )
        
        transactions = await self._loader.load(context_name, correlation_id=correlation_id)
        
        criteria = TransactionFilter(
            transaction_type=query.transaction_type,
            category=query.category,
            date_range=date_range,
        )
        matched = filter_transactions(transactions, criteria)
        aggregation = aggregate(matched, query.aggregation)
        
        message = describe_aggregation(
            aggregation,
            context_name=context_name,
            category=query.category,
            transaction_type=query.transaction_type,
            period_label=self._period_label(query, date_range),
        )
        
        if self._audit_logger:
            await self._audit_logger.log_analysis_executed(
                context_name=context_name,
                aggregation=aggregation.mode.value,
                matched=aggregation.count,
                value=aggregation.value,
                correlation_id=correlation_id,
            )
        
        return AnalysisResult(
            success=True,
            message=message,
            context_name=context_name,
            aggregation=aggregation.mode,
            result=aggregation.value,
            filtered_transactions_count=len(matched),
            total_transactions_count=len(transactions),
            date_range=date_range,
        )
    
    def _period_label(self, query: AnalysisQuery, date_range: Optional[DateRange]) -> Optional[str]:
        """Phrase the time window for the summary message."""
        explicit = query.start_date and query.end_date
        if query.time_period and not explicit:
            if date_range is None:
                return f"(no date filter applied: unrecognized period '{query.time_period}')"
            return f"for {query.time_period}"
        if date_range is not None:
            return date_range.describe()
        return None
