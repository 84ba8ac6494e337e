# gemini client: text-in, text-out wrapper over langchain's ChatGoogleGenerativeAI
# built once at startup and handed to the note service, every failure is a ModelInvocationError

import asyncio
import logging
from typing import Optional

from langchain_core.output_parsers import StrOutputParser
from langchain_google_genai import ChatGoogleGenerativeAI

from innervoice.config import Settings, settings as default_settings
from innervoice.exceptions import ModelInvocationError

logger = logging.getLogger(__name__)


class GeminiClient:
    """one gemini chat model per process"""

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.7,
        max_output_tokens: int = 2048,
        timeout: float = 30.0,
        max_retries: int = 1,
    ):
        self.model = model
        self.timeout = timeout
        self._chain = None
        if not api_key:
            logger.warning("GEMINI_API_KEY is not set, notes will use rule-based analysis")
            return

        llm = ChatGoogleGenerativeAI(
            model=model,
            google_api_key=api_key,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            timeout=timeout,
            max_retries=max_retries,
        )
        self._chain = llm | StrOutputParser()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "GeminiClient":
        s = settings or default_settings
        return cls(
            api_key=s.GEMINI_API_KEY,
            model=s.GEMINI_MODEL,
            temperature=s.GEMINI_TEMPERATURE,
            max_output_tokens=s.GEMINI_MAX_OUTPUT_TOKENS,
            timeout=s.GEMINI_TIMEOUT_SECONDS,
            max_retries=s.GEMINI_MAX_RETRIES,
        )

    @property
    def available(self) -> bool:
        return self._chain is not None

    async def generate(self, prompt: str) -> str:
        """send a prompt and return the reply text"""
        if self._chain is None:
            raise ModelInvocationError("Gemini is not configured")

        try:
            text = await asyncio.wait_for(self._chain.ainvoke(prompt), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise ModelInvocationError(f"Gemini call timed out after {self.timeout}s") from e
        except Exception as e:
            raise ModelInvocationError(f"Gemini call failed: {e}") from e

        if not text or not text.strip():
            raise ModelInvocationError("Gemini returned an empty reply")
        return text
