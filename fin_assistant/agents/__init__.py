"""AI Agents package."""

from fin_assistant.agents.ai_agents import (
    NO_TOOL,
    FinancialAssistantAgent,
    NaturalLanguageResponse,
    ToolCall,
    extract_json_object,
)

__all__ = [
    "NO_TOOL",
    "FinancialAssistantAgent",
    "NaturalLanguageResponse",
    "ToolCall",
    "extract_json_object",
]
