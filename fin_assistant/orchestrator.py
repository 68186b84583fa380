"""
Main Orchestrator for the Financial Assistant

This module ties together all the components and defines the
end-to-end question flow:

    question → AI picks tool → capability runs on stored data → AI phrases result

DESIGN DECISION: The orchestrator enforces the boundaries:
- No answer without a tool result (or an explicit "couldn't do that")
- Tool errors are shown to the user, not hidden by the LLM
- Every step is audited under one correlation id
"""

from datetime import date
from pathlib import Path
from typing import Optional, Union
from uuid import UUID

import structlog

from fin_assistant.agents import FinancialAssistantAgent, ToolCall
from fin_assistant.analysis import TransactionAnalyzer, TransactionLoader
from fin_assistant.audit import AuditLogger, create_correlation_id
from fin_assistant.capabilities import FinancialCapabilities
from fin_assistant.config import get_settings
from fin_assistant.models.results import ToolResult
from fin_assistant.models.tax import TaxConfiguration, TaxRegime
from fin_assistant.services.ingest import CsvIngestor
from fin_assistant.services.storage import JsonContextStore
from fin_assistant.tax import TaxCalculator


logger = structlog.get_logger(__name__)


class AssistantFlow:
    """
    Orchestrates the question-answering flow.
    
    CRITICAL BOUNDARIES:
    1. User question → LLM picks a tool
    2. Tool → executes on stored data (deterministic)
    3. Result → LLM generates the response
    
    The LLM is NEVER allowed to answer financial questions directly.
    """
    
    def __init__(
        self,
        capabilities: FinancialCapabilities,
        agent: FinancialAssistantAgent,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._capabilities = capabilities
        self._agent = agent
        self._audit_logger = audit_logger
    
    async def answer_question(
        self,
        question: str,
        correlation_id: Optional[UUID] = None,
        today: Optional[date] = None,
    ) -> tuple[str, ToolCall, Optional[ToolResult]]:
        """
        Answer a user's question.
        
        Returns:
            (answer, tool_call, tool_result) - tool_result is None when
            no tool was run
        """
        correlation_id = correlation_id or create_correlation_id()
        
        # Step 1: Question → tool call
        known_contexts = await self._capabilities.list_contexts()
        tool_call = await self._agent.parse_question(question, known_contexts, today)
        
        if self._audit_logger:
            await self._audit_logger.log_question_parsed(
                tool_name=tool_call.tool,
                arguments=tool_call.arguments,
                correlation_id=correlation_id,
            )
        
        # Step 2: Execute on real data
        result = None
        if tool_call.is_tool:
            result = await self._capabilities.invoke(
                tool_call.tool,
                tool_call.arguments,
                correlation_id=correlation_id,
            )
        
        # Step 3: Result → answer
        response = await self._agent.generate_response(question, tool_call, result)
        return response.response, tool_call, result


def create_app_components(
    use_ai: bool = True,
    context_dir: Optional[Union[str, Path]] = None,
    tax_configuration: Optional[TaxConfiguration] = None,
    agent: Optional[FinancialAssistantAgent] = None,
) -> tuple[FinancialCapabilities, Optional[AssistantFlow]]:
    """
    Factory function to create all application components.
    
    Args:
        use_ai: Whether to build the AI question flow. When the Gemini
                key is not configured the flow is skipped with a warning.
        context_dir: Override for where contexts are stored
        tax_configuration: Fixed slab configuration (otherwise read per call)
        agent: Pre-built agent (tests inject one with a fake model)
        
    Returns:
        (capabilities, assistant_flow)
    """
    app_settings = get_settings().app
    audit_logger = AuditLogger()
    
    store = JsonContextStore(context_dir or app_settings.context_dir)
    loader = TransactionLoader(store, audit_logger=audit_logger)
    analyzer = TransactionAnalyzer(loader, audit_logger=audit_logger)
    tax_calculator = TaxCalculator(
        configuration=tax_configuration,
        default_age=app_settings.default_age,
        default_regime=TaxRegime(app_settings.default_tax_regime),
        audit_logger=audit_logger,
    )
    ingestor = CsvIngestor(store)
    
    capabilities = FinancialCapabilities(
        analyzer=analyzer,
        tax_calculator=tax_calculator,
        ingestor=ingestor,
        store=store,
        audit_logger=audit_logger,
    )
    
    assistant_flow = None
    if use_ai or agent is not None:
        try:
            agent = agent or FinancialAssistantAgent()
        except Exception as e:
            # AI not configured - the deterministic tools still work
            logger.warning("ai_not_configured", error=str(e))
        else:
            assistant_flow = AssistantFlow(capabilities, agent, audit_logger=audit_logger)
    
    return capabilities, assistant_flow
