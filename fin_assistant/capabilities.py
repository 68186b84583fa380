"""
Capability Interface

The three operations the assistant can perform, exposed as plain
coroutines taking keyword arguments:

- analyze_transactions: filter + aggregate a stored context
- calculate_tax: income tax slab computation
- ingest_csv: store a CSV statement as a context

DESIGN DECISION: There is no process-wide tool registry. Whoever needs
the capabilities (the AI orchestrator, the CLI, the Streamlit app)
receives a FinancialCapabilities instance and calls it directly, or
through invoke() with a tool name and an argument mapping.

CRITICAL: Every call returns a ToolResult. Errors are reported, never
raised, so a bad tool call from the AI cannot crash the host process.
"""

from typing import Any, Optional
from uuid import UUID

import structlog
from pydantic import BaseModel, Field, ValidationError

from fin_assistant.analysis import TransactionAnalyzer
from fin_assistant.audit import AuditLogger
from fin_assistant.errors import ErrorKind, FinancialAssistantError
from fin_assistant.models.results import AnalysisResult, IngestResult, TaxResult, ToolResult
from fin_assistant.models.tax import TaxQuery
from fin_assistant.models.transaction import AnalysisQuery, IngestQuery
from fin_assistant.services.ingest import CsvIngestor
from fin_assistant.services.storage import TransactionContextStore
from fin_assistant.tax import TaxCalculator


logger = structlog.get_logger(__name__)


class ToolSpec(BaseModel):
    """Description of a capability, shown to the AI when it picks a tool."""
    
    name: str
    description: str
    parameters: dict[str, str] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)


TOOL_SPECS = [
    ToolSpec(
        name="analyze_transactions",
        description=(
            "Analyzes stored transaction data (spending, income, habits). "
            "Filters by category, time, type. Aggregates (sum, count, average)."
        ),
        parameters={
            "contextName": "Name of the stored transaction context, e.g. 'my_transactions'.",
            "category": "Category to filter by, e.g. 'Food', 'Transport', 'Coffee'.",
            "timePeriod": "'last week', 'last month', 'this month', 'this year' or 'YYYY-MM-DD to YYYY-MM-DD'.",
            "transactionType": "'Expense' or 'Income'.",
            "aggregation": "'sum' (default), 'count' or 'average'.",
            "startDate": "Custom start date YYYY-MM-DD, used with endDate.",
            "endDate": "Custom end date YYYY-MM-DD, used with startDate.",
        },
        required=["contextName"],
    ),
    ToolSpec(
        name="calculate_tax",
        description=(
            "Calculates the income tax liability and identifies the tax slab based on income, "
            "age, and chosen tax regime for India (AY 2025-26 / FY 2024-25)."
        ),
        parameters={
            "incomeAmount": "Total taxable income in Indian Rupees (INR), non-negative.",
            "age": "Age of the individual. Defaults to 30.",
            "taxRegime": "'old' or 'new'. Defaults to 'new'.",
        },
        required=["incomeAmount"],
    ),
    ToolSpec(
        name="ingest_csv",
        description=(
            "Reads a CSV file of transactions and stores it as a named context "
            "for later analysis."
        ),
        parameters={
            "csvFilePath": "Path to the CSV file to be processed.",
            "contextName": "Optional name for the context; defaults to the CSV file name.",
        },
        required=["csvFilePath"],
    ),
]


def _invalid_arguments(result_cls: type[ToolResult], tool_name: str, error: ValidationError) -> ToolResult:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in issue['loc'])}: {issue['msg']}"
        for issue in error.errors()
    )
    message = f"Invalid arguments for {tool_name}: {problems}"
    return result_cls(
        success=False,
        message=message,
        error_kind=ErrorKind.INVALID_INPUT,
        error=message,
        details=str(error),
    )


class FinancialCapabilities:
    """
    The assistant's operations, wired to their collaborators.
    
    Construct once (see orchestrator.create_app_components) and share.
    """
    
    def __init__(
        self,
        analyzer: TransactionAnalyzer,
        tax_calculator: TaxCalculator,
        ingestor: CsvIngestor,
        store: TransactionContextStore,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._analyzer = analyzer
        self._tax_calculator = tax_calculator
        self._ingestor = ingestor
        self._store = store
        self._audit_logger = audit_logger
        self._handlers = {
            "analyze_transactions": self.analyze_transactions,
            "calculate_tax": self.calculate_tax,
            "ingest_csv": self.ingest_csv,
        }
    
    @property
    def tool_specs(self) -> list[ToolSpec]:
        return list(TOOL_SPECS)
    
    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)
    
    async def list_contexts(self) -> list[str]:
        return await self._store.list_contexts()
    
    async def analyze_transactions(
        self,
        correlation_id: Optional[UUID] = None,
        **arguments: Any,
    ) -> AnalysisResult:
        """Analyze a stored context (see AnalysisQuery for arguments)."""
        try:
            query = AnalysisQuery.model_validate(arguments)
        except ValidationError as e:
            result = _invalid_arguments(AnalysisResult, "analyze_transactions", e)
        else:
            result = await self._analyzer.analyze(query, correlation_id=correlation_id)
        return await self._audited("analyze_transactions", result, correlation_id)
    
    async def calculate_tax(
        self,
        correlation_id: Optional[UUID] = None,
        **arguments: Any,
    ) -> TaxResult:
        """Calculate income tax (see TaxQuery for arguments)."""
        try:
            query = TaxQuery.model_validate(arguments)
        except ValidationError as e:
            result = _invalid_arguments(TaxResult, "calculate_tax", e)
        else:
            result = await self._tax_calculator.calculate(query, correlation_id=correlation_id)
        return await self._audited("calculate_tax", result, correlation_id)
    
    async def ingest_csv(
        self,
        correlation_id: Optional[UUID] = None,
        **arguments: Any,
    ) -> IngestResult:
        """Store a CSV file as a transaction context (see IngestQuery for arguments)."""
        try:
            query = IngestQuery.model_validate(arguments)
        except ValidationError as e:
            return await self._audited(
                "ingest_csv", _invalid_arguments(IngestResult, "ingest_csv", e), correlation_id
            )
        
        try:
            result = await self._ingestor.ingest(query.csv_file_path, query.context_name)
        except FinancialAssistantError as e:
            result = IngestResult.from_error(e, prefix="Failed to process CSV file")
            result.csv_file_path = query.csv_file_path
        else:
            if self._audit_logger:
                await self._audit_logger.log_csv_ingested(
                    context_name=result.context_name,
                    csv_file_path=result.csv_file_path,
                    record_count=result.record_count,
                    correlation_id=correlation_id,
                )
        return await self._audited("ingest_csv", result, correlation_id)
    
    async def invoke(
        self,
        tool_name: str,
        arguments: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ToolResult:
        """
        Dispatch a tool call by name.
        
        Unknown tools and unexpected failures come back as error results.
        """
        handler = self._handlers.get(tool_name)
        if handler is None:
            message = f"Unknown tool '{tool_name}'. Available tools: {', '.join(self._handlers)}."
            return await self._audited(
                tool_name,
                ToolResult(
                    success=False,
                    message=message,
                    error_kind=ErrorKind.INVALID_INPUT,
                    error=message,
                ),
                correlation_id,
            )
        
        # correlation_id is supplied by the caller, never by tool arguments
        arguments = {
            key: value for key, value in (arguments or {}).items()
            if key != "correlation_id"
        }
        try:
            return await handler(correlation_id=correlation_id, **arguments)
        except Exception as e:
            logger.exception("tool_invocation_crashed", tool=tool_name)
            if self._audit_logger:
                await self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    details={"tool": tool_name},
                    correlation_id=correlation_id,
                )
            message = f"Unexpected error while running {tool_name}: {e}"
            return ToolResult(
                success=False,
                message=message,
                error_kind=ErrorKind.INTERNAL_ERROR,
                error=message,
                details=type(e).__name__,
            )
    
    async def _audited(
        self,
        tool_name: str,
        result: ToolResult,
        correlation_id: Optional[UUID],
    ):
        if not result.success and self._audit_logger:
            await self._audit_logger.log_tool_failed(
                tool_name=tool_name,
                error_kind=result.error_kind.value if result.error_kind else "unknown",
                error_message=result.message,
                correlation_id=correlation_id,
            )
        return result
