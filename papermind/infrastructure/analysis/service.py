"""Document analysis and question answering through the Anthropic Messages API."""

import asyncio
from functools import lru_cache
from typing import Any, Optional

from anthropic import APIError, AsyncAnthropic

from ...modules.common.exceptions import AnalysisError, ConfigurationError
from ...modules.document.schemas import DocumentAnalysis
from ..config import get_settings
from ..logging import get_logger
from .parsing import parse_analysis
from .prompts import format_analysis_prompt, format_question_prompt

logger = get_logger(__name__)


class DocumentAnalyzer:
    """Wraps one ``AsyncAnthropic`` client shared by the whole process.

    Calls are not retried; a failed or timed out call raises
    ``AnalysisError`` and the caller decides what to do.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        max_input_chars: Optional[int] = None,
        client: Optional[Any] = None,
    ) -> None:
        settings = get_settings()
        api_key = api_key if api_key is not None else settings.ANTHROPIC_API_KEY
        if client is None and not api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY is not configured")

        self.model = model or settings.ANALYSIS_MODEL
        self.max_tokens = max_tokens or settings.ANALYSIS_MAX_TOKENS
        self.timeout = timeout if timeout is not None else settings.ANALYSIS_TIMEOUT_SECONDS
        self.max_input_chars = max_input_chars or settings.ANALYSIS_MAX_INPUT_CHARS
        self.client = client or AsyncAnthropic(api_key=api_key, max_retries=0)

    async def analyze(self, text: str, timeout: Optional[float] = None) -> DocumentAnalysis:
        """Summarize ``text`` and pull out action items and tags.

        Raises:
            AnalysisError: If the call fails or no JSON object can be parsed.
        """
        response_text = await self._complete(format_analysis_prompt(self._truncate(text)), timeout)
        analysis = parse_analysis(response_text)
        logger.debug(f"Analysis produced {len(analysis.action_items)} action items and {len(analysis.tags)} tags")
        return analysis

    async def ask(self, text: str, question: str, timeout: Optional[float] = None) -> str:
        """Answer ``question`` from ``text`` alone and return the model's answer, trimmed."""
        response_text = await self._complete(format_question_prompt(self._truncate(text), question), timeout)
        return response_text.strip()

    def _truncate(self, text: str) -> str:
        if len(text) <= self.max_input_chars:
            return text
        logger.info(f"Truncating document text from {len(text)} to {self.max_input_chars} characters")
        return text[: self.max_input_chars]

    async def _complete(self, prompt: str, timeout: Optional[float]) -> str:
        timeout = timeout if timeout is not None else self.timeout
        try:
            response = await asyncio.wait_for(
                self.client.messages.create(
                    model=self.model,
                    max_tokens=self.max_tokens,
                    messages=[{"role": "user", "content": prompt}],
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            raise AnalysisError(f"Language model call timed out after {timeout}s") from exc
        except APIError as exc:
            raise AnalysisError(f"Language model call failed: {exc}") from exc

        text = "".join(block.text for block in response.content if getattr(block, "type", None) == "text")
        if not text.strip():
            raise AnalysisError("Language model returned no text content")
        return text

    async def close(self) -> None:
        await self.client.close()


@lru_cache()
def get_document_analyzer() -> DocumentAnalyzer:
    """Build the process-wide analyzer; fails if no API key is configured."""
    return DocumentAnalyzer()
