"""Opportunity analysis of scraped post text."""

from .analyzer import OpportunityAnalyzer, build_analyzer
from .heuristic import LocalHeuristicStrategy, heuristic_analysis
from .remote import AnalyzerSettings, RemoteAnalysisStrategy
from .schema import AnalysisResult, EMPTY_ANALYSIS

__all__ = [
    "OpportunityAnalyzer",
    "build_analyzer",
    "LocalHeuristicStrategy",
    "heuristic_analysis",
    "AnalyzerSettings",
    "RemoteAnalysisStrategy",
    "AnalysisResult",
    "EMPTY_ANALYSIS",
]
