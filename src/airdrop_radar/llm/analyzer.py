"""Opportunity analyzer: remote-first with a deterministic local fallback."""

import logging
from typing import Protocol

from ..config import Config
from ..errors import AnalysisUnavailableError
from .heuristic import LocalHeuristicStrategy
from .remote import AnalyzerSettings, RemoteAnalysisStrategy
from .schema import AnalysisResult, EMPTY_ANALYSIS

logger = logging.getLogger(__name__)


class AnalysisStrategy(Protocol):
    name: str

    async def analyze(self, corpus: str) -> AnalysisResult: ...


class OpportunityAnalyzer:
    """Classifies a corpus with one primary strategy and a local fallback.

    The primary strategy is fixed at construction: the remote one when a
    credential is configured, otherwise the local one. Any
    AnalysisUnavailableError from the primary switches to the fallback for
    that call; there is no retry. Holds no mutable state, so one instance can
    serve concurrent batches.
    """

    def __init__(
        self,
        primary: AnalysisStrategy | None = None,
        fallback: AnalysisStrategy | None = None,
    ):
        self.fallback = fallback or LocalHeuristicStrategy()
        self.primary = primary or self.fallback

    @classmethod
    def from_settings(cls, settings: AnalyzerSettings) -> "OpportunityAnalyzer":
        if not settings.api_key:
            logger.warning("No inference API key configured, using local analysis only")
            return cls()
        return cls(primary=RemoteAnalysisStrategy(settings))

    @property
    def uses_remote(self) -> bool:
        return self.primary is not self.fallback

    async def analyze(self, corpus: str) -> AnalysisResult:
        """Analyze corpus; empty or whitespace-only input yields EMPTY_ANALYSIS."""
        if not corpus or not corpus.strip():
            return EMPTY_ANALYSIS

        logger.info(f"Analyzing {len(corpus)} chars with {self.primary.name} strategy")
        try:
            return await self.primary.analyze(corpus)
        except AnalysisUnavailableError as e:
            logger.warning(f"{self.primary.name} analysis unavailable ({e}), falling back to {self.fallback.name}")
            return await self.fallback.analyze(corpus)


def build_analyzer(config: Config) -> OpportunityAnalyzer:
    """Create the analyzer described by the application config."""
    return OpportunityAnalyzer.from_settings(AnalyzerSettings.from_config(config))
