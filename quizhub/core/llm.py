from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from typing import List, Optional
import asyncio
import logging
from quizhub.config import Config
from quizhub.core.errors import UpstreamError

logger = logging.getLogger(__name__)

class GeminiLLMWrapper:
    """
    Gateway to the Gemini text-generation service.

    One round trip per call, bounded by a timeout. Transport errors and
    timeouts surface as UpstreamError so that the caller aborts before
    persisting anything.
    """

    def __init__(
        self,
        llm=None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.llm = llm or ChatGoogleGenerativeAI(
            google_api_key=api_key or Config.GEMINI_API_KEY,
            model=model or Config.GEMINI_MODEL,
            temperature=Config.GEMINI_TEMPERATURE,
            max_output_tokens=Config.GEMINI_MAX_OUTPUT_TOKENS,
        )
        self.timeout = timeout if timeout is not None else Config.GENERATION_TIMEOUT

    async def generate_response(
        self,
        messages: List[BaseMessage],
        **kwargs
    ) -> str:
        try:
            response = await asyncio.wait_for(self.llm.ainvoke(messages, **kwargs), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"LLM generation timed out after {self.timeout}s")
            raise UpstreamError("Quiz generation timed out")
        except Exception as e:
            logger.error(f"LLM generation error: {e}")
            raise UpstreamError(f"Quiz generation failed: {e}")

        content = response.content
        if isinstance(content, list):
            # Multi-part replies come back as a list of text chunks or blocks
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part) for part in content
            )
        return content

    async def generate_text(self, prompt: str, system_message: Optional[str] = None) -> str:
        messages: List[BaseMessage] = []
        if system_message:
            messages.append(SystemMessage(content=system_message))
        messages.append(HumanMessage(content=prompt))
        return await self.generate_response(messages)
