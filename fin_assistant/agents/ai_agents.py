"""
AI Agent for the Financial Assistant

DESIGN DECISION: The LLM is a TRANSLATOR, not an ORACLE.

1. It turns a question into a tool call (tool name + arguments)
2. The deterministic capabilities execute the call on real data
3. It phrases the tool result as a natural-language answer

CRITICAL BOUNDARIES:
- CAN: pick a tool and fill its arguments from the question
- CAN: rephrase numbers it was given
- CANNOT: compute totals or tax itself
- CANNOT: invent transactions or amounts
- MUST: report tool errors as they are

The provider (Google Gemini) is injectable so tests never touch the network.
"""

import json
from datetime import date
from typing import Any, Optional

import google.generativeai as genai
import structlog
from pydantic import BaseModel, Field, ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from fin_assistant.capabilities import TOOL_SPECS, ToolSpec
from fin_assistant.config import GeminiSettings, get_settings
from fin_assistant.models.results import ToolResult


logger = structlog.get_logger(__name__)

NO_TOOL = "none"


class ToolCall(BaseModel):
    """
    The tool the LLM picked for a question.
    
    tool == "none" means the question is not answerable with a tool;
    `reply` then carries what to tell the user (e.g., a clarification).
    """
    
    tool: str = Field(default=NO_TOOL)
    arguments: dict[str, Any] = Field(default_factory=dict)
    reasoning: Optional[str] = None
    reply: Optional[str] = None
    
    @property
    def is_tool(self) -> bool:
        return self.tool != NO_TOOL


class NaturalLanguageResponse(BaseModel):
    """
    AI-generated answer based on a tool result.
    
    The LLM generates this FROM the result. It never invents data.
    """
    
    response: str
    confidence: float = Field(ge=0.0, le=1.0)
    data_used: bool


def extract_json_object(text: str) -> dict:
    """Pull the outermost {...} block out of a model reply."""
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        raise ValueError("No JSON object in model reply")
    data = json.loads(text[start:end])
    if not isinstance(data, dict):
        raise ValueError("Model reply JSON is not an object")
    return data


def _render_tools(specs: list[ToolSpec]) -> str:
    blocks = []
    for spec in specs:
        params = "\n".join(
            f"    - {name}{' (required)' if name in spec.required else ''}: {text}"
            for name, text in spec.parameters.items()
        )
        blocks.append(f"- {spec.name}: {spec.description}\n  Arguments:\n{params}")
    return "\n".join(blocks)


class FinancialAssistantAgent:
    """
    AI agent for question answering.
    
    FLOW:
    1. User asks question → LLM returns a ToolCall
    2. ToolCall executes on stored data (deterministic, outside this class)
    3. ToolResult → LLM generates the natural-language answer
    
    The LLM is sandwiched between deterministic steps.
    """
    
    def __init__(
        self,
        model: Optional[Any] = None,
        settings: Optional[GeminiSettings] = None,
        tool_specs: Optional[list[ToolSpec]] = None,
    ):
        """
        Args:
            model: Object with an async generate_content_async(prompt) method.
                   Defaults to a configured Gemini GenerativeModel.
            settings: Gemini settings; read from the environment when omitted.
            tool_specs: Tools offered to the model.
        """
        self._tool_specs = tool_specs or list(TOOL_SPECS)
        self._model = model if model is not None else self._configure_genai(settings)
    
    def _configure_genai(self, settings: Optional[GeminiSettings]):
        """Configure Google Generative AI."""
        settings = settings or get_settings().gemini
        genai.configure(api_key=settings.api_key)
        return genai.GenerativeModel(
            model_name=settings.model_name,
            generation_config={
                "temperature": settings.temperature,
                "max_output_tokens": settings.max_tokens,
            }
        )
    
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _generate(self, prompt: str) -> str:
        response = await self._model.generate_content_async(prompt)
        return response.text.strip()
    
    def build_parse_prompt(
        self,
        question: str,
        known_contexts: Optional[list[str]] = None,
        today: Optional[date] = None,
    ) -> str:
        today = today or date.today()
        contexts = ", ".join(known_contexts) if known_contexts else "none stored yet"
        tool_names = ", ".join(spec.name for spec in self._tool_specs)
        
        return f"""You are the tool router of a personal finance assistant for an Indian user.

Today's date: {today.isoformat()}
Stored transaction contexts: {contexts}

Available tools:
{_render_tools(self._tool_specs)}

Question: "{question}"

Pick exactly one tool ({tool_names}) and fill its arguments from the question.
Rules:
- Use argument names exactly as listed above.
- Only include arguments the question actually implies.
- If the question names a context that is not stored, still use the name given.
- If only one context is stored and the question is about transactions, use it.
- Amounts are in Indian Rupees; "15 lakh" is 1500000.
- If no tool fits or a required argument is missing, use tool "{NO_TOOL}" and put a short
  question or explanation for the user in "reply".

Respond with ONLY a JSON object in this exact format:
{{"tool": "tool_name", "arguments": {{}}, "reasoning": "brief explanation", "reply": null}}"""
    
    async def parse_question(
        self,
        question: str,
        known_contexts: Optional[list[str]] = None,
        today: Optional[date] = None,
    ) -> ToolCall:
        """
        Parse a natural language question into a tool call.
        
        Falls back to tool "none" when the model fails or answers nonsense.
        """
        prompt = self.build_parse_prompt(question, known_contexts, today)
        
        try:
            text = await self._generate(prompt)
            call = ToolCall.model_validate(extract_json_object(text))
        except (ValueError, ValidationError) as e:
            logger.warning("question_parse_unusable_reply", error=str(e))
            return self._fallback_call()
        except Exception as e:
            logger.warning("question_parse_provider_failed", error=str(e), error_type=type(e).__name__)
            return self._fallback_call()
        
        known = {spec.name for spec in self._tool_specs}
        if call.is_tool and call.tool not in known:
            logger.warning("question_parse_unknown_tool", tool=call.tool)
            return self._fallback_call()
        return call
    
    def _fallback_call(self) -> ToolCall:
        return ToolCall(
            tool=NO_TOOL,
            reasoning="fallback",
            reply=(
                "Sorry, I couldn't work out what to look up. Try something like "
                "'How much did I spend on Coffee last week in my_transactions?' or "
                "'What is my tax if my income is 1500000 under the new regime?'"
            ),
        )
    
    async def generate_response(
        self,
        question: str,
        tool_call: ToolCall,
        result: Optional[ToolResult],
    ) -> NaturalLanguageResponse:
        """
        Generate a natural language answer from a tool result.
        
        CRITICAL: The LLM can ONLY use the data provided.
        Errors are returned verbatim, without an LLM round-trip.
        """
        if not tool_call.is_tool or result is None:
            return NaturalLanguageResponse(
                response=tool_call.reply or self._fallback_call().reply,
                confidence=1.0,
                data_used=False,
            )
        
        if not result.success:
            detail = f" ({result.details})" if result.details else ""
            return NaturalLanguageResponse(
                response=f"I couldn't complete that: {result.message}{detail}",
                confidence=1.0,
                data_used=False,
            )
        
        payload = json.dumps(result.to_payload(), indent=2, ensure_ascii=False)
        prompt = f"""You are answering a personal finance question using ONLY the tool result below.

Original question: "{question}"

Tool used: {tool_call.tool}
Arguments: {json.dumps(tool_call.arguments, ensure_ascii=False)}

Tool result:
{payload}

Generate a natural, helpful response.
- Use simple language
- Format amounts in Indian Rupees (₹) with Indian digit grouping
- Keep it concise (two or three sentences)

IMPORTANT: Use ONLY the data above. Do NOT add numbers that are not in the result.
If the result does not fully answer the question, say what it does show."""
        
        try:
            text = await self._generate(prompt)
        except Exception as e:
            logger.warning("response_generation_failed", error=str(e), error_type=type(e).__name__)
            return NaturalLanguageResponse(
                response=result.message,
                confidence=0.8,
                data_used=True,
            )
        
        return NaturalLanguageResponse(
            response=text or result.message,
            confidence=0.9,
            data_used=True,
        )
