"""Remote analysis through an OpenAI-compatible inference service."""

import asyncio
import logging
from dataclasses import dataclass

from openai import AsyncOpenAI, APIError

from ..config import Config, DEFAULT_BASE_URL, DEFAULT_MODEL
from ..errors import RemoteAnalysisError
from .prompts import ANALYZE_PROMPT, CATEGORY_DESCRIPTIONS, SYSTEM_PROMPT
from .schema import AnalysisResult, CATEGORIES, parse_analysis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyzerSettings:
    """Read-only settings for the remote analyzer."""
    api_key: str | None = None
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    temperature: float = 0.3
    max_tokens: int = 1200
    app_title: str = "Airdrop Radar"

    @classmethod
    def from_config(cls, config: Config) -> "AnalyzerSettings":
        return cls(
            api_key=config.openrouter_api_key,
            model=config.openrouter_model,
            base_url=config.openrouter_base_url,
        )


def format_categories() -> str:
    return "\n".join(
        f"{i}. **{name}**: {CATEGORY_DESCRIPTIONS[name]}"
        for i, name in enumerate(CATEGORIES, start=1)
    )


def build_messages(content: str) -> list[dict]:
    """System instruction plus the user prompt embedding the corpus."""
    prompt = ANALYZE_PROMPT.format(content=content, categories=format_categories())
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


class RemoteAnalysisStrategy:
    """Classifies a corpus with one chat-completion call. Never retries."""

    name = "remote"

    def __init__(self, settings: AnalyzerSettings, client: AsyncOpenAI | None = None):
        if not settings.api_key and client is None:
            raise ValueError("RemoteAnalysisStrategy requires an API key")
        self.settings = settings
        self.client = client or AsyncOpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout,
            max_retries=0,
            default_headers={"X-Title": settings.app_title},
        )

    async def _complete(self, content: str) -> str | None:
        """Make the chat-completion call, raising RemoteAnalysisError on failure."""
        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.settings.model,
                    messages=build_messages(content),
                    temperature=self.settings.temperature,
                    max_tokens=self.settings.max_tokens,
                ),
                timeout=self.settings.timeout,
            )
        except asyncio.TimeoutError as e:
            raise RemoteAnalysisError(f"Inference call timed out after {self.settings.timeout}s") from e
        except APIError as e:
            raise RemoteAnalysisError(f"Inference call failed: {e}") from e

        try:
            return response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise RemoteAnalysisError("Inference response has no message content") from e

    async def analyze(self, corpus: str) -> AnalysisResult:
        """Analyze a non-empty corpus.

        Raises RemoteAnalysisError or MalformedResponseError; the caller owns
        the fallback.
        """
        logger.info(f"Requesting remote analysis ({self.settings.model})")
        raw = await self._complete(corpus)
        logger.debug(f"Raw response: {raw}")
        return parse_analysis(raw)
