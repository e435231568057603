import logging
from typing import Any, Dict, Optional, Protocol

from langchain_openai import ChatOpenAI

from ..config import Settings
from ..core.exceptions import ServiceUnavailableError

logger = logging.getLogger(__name__)


class StructuredTextClient(Protocol):
    """Anything that can answer a prompt with JSON text matching a schema"""

    async def generate_structured(self, prompt: str, schema: Dict[str, Any]) -> Optional[str]:
        ...


class LangChainStructuredClient:
    """
    Structured-output text generation on top of LangChain's ChatOpenAI

    The request is single-shot: the underlying client never retries, and a
    missing API key leaves the client without a model so every call fails
    fast with ServiceUnavailableError.
    """

    def __init__(self, settings: Settings):
        self.model_name = settings.AI_MODEL
        self.llm: Optional[ChatOpenAI] = None

        if settings.ai_configured:
            self.llm = ChatOpenAI(
                model_name=settings.AI_MODEL,
                temperature=settings.AI_TEMPERATURE,
                openai_api_key=settings.OPENAI_API_KEY,
                request_timeout=settings.AI_TIMEOUT_SECONDS,
                max_retries=0,
            )
            logger.info(f"OpenAI LLM initialized ({settings.AI_MODEL})")
        else:
            logger.info("OpenAI not configured - analyses will use the fallback record")

    @property
    def configured(self) -> bool:
        return self.llm is not None

    async def generate_structured(self, prompt: str, schema: Dict[str, Any]) -> Optional[str]:
        if self.llm is None:
            raise ServiceUnavailableError("AI client is not configured")

        structured_llm = self.llm.bind(
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": "ai_analysis",
                    "schema": schema,
                    "strict": True,
                },
            }
        )
        message = await structured_llm.ainvoke(prompt)

        content = message.content
        if isinstance(content, list):
            # Content blocks; keep the text parts only
            content = "".join(
                block.get("text", "") if isinstance(block, dict) else str(block)
                for block in content
            )
        return content or None
