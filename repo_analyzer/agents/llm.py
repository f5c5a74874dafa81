import logging
import os
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from repo_analyzer.utils.response_formatter import format_response, parse_json_response

logger = logging.getLogger(__name__)

PRECISE_TEMPERATURE = 0.3
CREATIVE_TEMPERATURE = 0.7


def to_langchain_messages(messages: Sequence[Dict[str, str]]) -> List[BaseMessage]:
    """Convert ``{"role", "content"}`` dicts; the legacy ``model`` role maps to assistant."""
    converted: List[BaseMessage] = []
    for msg in messages:
        role = msg.get("role", "user")
        content = msg.get("content", "")
        if role == "system":
            converted.append(SystemMessage(content=content))
        elif role in ("assistant", "model", "ai"):
            converted.append(AIMessage(content=content))
        else:
            converted.append(HumanMessage(content=content))
    return converted


class LanguageModel:
    """Handle over the two chat models the analyzer uses.

    ``precise`` (low temperature) answers JSON-only prompts for file selection
    and security review; ``creative`` streams chat answers.
    """

    def __init__(
        self,
        precise: Optional[BaseChatModel] = None,
        creative: Optional[BaseChatModel] = None,
        model_name: Optional[str] = None,
    ):
        self.model_name = model_name or os.environ.get("LLM_MODEL", "gpt-4o-mini")
        self.precise = precise if precise is not None else self.setup_llm(PRECISE_TEMPERATURE, max_tokens=2000)
        self.creative = creative if creative is not None else self.setup_llm(
            CREATIVE_TEMPERATURE, max_tokens=4000, streaming=True
        )

    def setup_llm(self, temperature: float, max_tokens: int, streaming: bool = False) -> BaseChatModel:
        """Create and return an OpenAI chat model."""
        return ChatOpenAI(
            name="repo-analyzer",
            model=self.model_name,
            temperature=temperature,
            max_tokens=max_tokens,
            streaming=streaming,
        )

    async def complete_json(self, system_prompt: str, prompt: str) -> Any:
        """Run a non-streaming completion and parse the reply as JSON.

        Raises:
            ValueError: if the reply is not valid JSON.
        """
        response = await self.precise.ainvoke([SystemMessage(content=system_prompt), HumanMessage(content=prompt)])
        return parse_json_response(response)

    async def stream_text(self, messages: Sequence[Dict[str, str]]) -> AsyncIterator[str]:
        """Yield answer fragments as the model produces them."""
        async for chunk in self.creative.astream(to_langchain_messages(messages)):
            text = format_response(chunk)
            if text:
                yield text
