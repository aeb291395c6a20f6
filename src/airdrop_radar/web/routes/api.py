"""JSON API for running and browsing analyses."""

import logging

import httpx
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from ... import __version__, pipeline
from ...config import get_config
from ...db import get_db
from ...llm.analyzer import OpportunityAnalyzer, build_analyzer
from ...sources.urls import is_valid_post_url
from ..auth import auth_enabled

logger = logging.getLogger(__name__)
router = APIRouter()

# Upper bound on URLs per batch request
MAX_URLS = 10


class AnalyzeRequest(BaseModel):
    """Request body for analyzing a batch of post URLs."""
    urls: list[str]
    include_posts: bool = False


class AnalyzeTextRequest(BaseModel):
    """Request body for analyzing raw text."""
    text: str


def get_analyzer(request: Request) -> OpportunityAnalyzer:
    """The app-wide analyzer, built on first use."""
    analyzer = getattr(request.app.state, "analyzer", None)
    if analyzer is None:
        analyzer = build_analyzer(get_config())
        request.app.state.analyzer = analyzer
    return analyzer


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


def _store(result: pipeline.BatchResult, urls: list[str], request: Request) -> str | None:
    """Persist a result when storage is configured. Returns the stored ID."""
    if not get_config().storage_enabled:
        return None

    db = get_db()
    try:
        stored = db.insert_analysis(result, urls, source="web")
        db.log_action(
            "analyze",
            {"urls": urls, "success": result.success, "score": result.analysis.potential_score},
            ip_address=_client_ip(request),
        )
    except httpx.HTTPError as e:
        logger.error(f"Failed to store analysis: {e}")
        return None
    return stored.get("id")


def _require_storage():
    if not get_config().storage_enabled:
        raise HTTPException(status_code=503, detail="Storage is not configured")


# --- Analysis Endpoints ---

@router.post("/analyze")
async def analyze_posts(body: AnalyzeRequest, request: Request):
    """Scrape and analyze a batch of post URLs."""
    urls = [url.strip() for url in body.urls if url.strip()]
    if not urls:
        raise HTTPException(status_code=400, detail="Provide at least one post URL")
    if len(urls) > MAX_URLS:
        raise HTTPException(status_code=400, detail=f"At most {MAX_URLS} URLs per request")

    invalid = [url for url in urls if not is_valid_post_url(url)]
    if invalid:
        raise HTTPException(status_code=400, detail=f"Not a post URL: {', '.join(invalid)}")

    browser_config = pipeline.browser_config_from(get_config())
    result = await pipeline.scrape_and_analyze(urls, get_analyzer(request), browser_config)
    logger.info(f"Analyzed {result.total_posts} posts (score: {result.analysis.potential_score})")

    response = result.to_dict(include_posts=body.include_posts)
    response["id"] = _store(result, urls, request)
    return response


@router.post("/analyze-text")
async def analyze_text(body: AnalyzeTextRequest, request: Request):
    """Analyze raw text without scraping."""
    result = await pipeline.analyze_text(body.text, get_analyzer(request))
    return result.to_dict()


@router.get("/status")
async def status(request: Request):
    """Which analysis path and optional features are active."""
    config = get_config()
    analyzer = get_analyzer(request)
    return {
        "version": __version__,
        "analysis": analyzer.primary.name,
        "model": config.openrouter_model if analyzer.uses_remote else None,
        "storage_enabled": config.storage_enabled,
        "auth_enabled": auth_enabled(),
    }


# --- History Endpoints ---

@router.get("/analyses")
async def list_analyses(limit: int = 20, opportunities_only: bool = False):
    """Recent analyses, newest first."""
    _require_storage()
    analyses = get_db().get_recent_analyses(limit=limit, opportunities_only=opportunities_only)
    return {"analyses": analyses, "count": len(analyses)}


@router.get("/analyses/stats")
async def analysis_stats():
    """Totals across stored analyses."""
    _require_storage()
    return get_db().get_analysis_stats()


@router.get("/analyses/{analysis_id}")
async def get_analysis(analysis_id: str):
    """Get a single stored analysis."""
    _require_storage()
    analysis = get_db().get_analysis(analysis_id)
    if not analysis:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return analysis
