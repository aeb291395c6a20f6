"""Supabase database client for analysis history and the audit log."""

import json
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx

from .config import get_config
from .pipeline import BatchResult


class Database:
    """Supabase REST API client."""

    def __init__(self, url: str | None = None, key: str | None = None, client: httpx.Client | None = None):
        config = get_config()
        url = url or config.supabase_url
        key = key or config.supabase_key
        if not url or not key:
            raise RuntimeError("Supabase is not configured (SUPABASE_URL / SUPABASE_SERVICE_KEY)")

        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }
        self._client = client or httpx.Client(timeout=30.0)
        self._client.headers.update(self.headers)

    def _request(self, method: str, endpoint: str, **kwargs) -> Any:
        """Make a request to the Supabase REST API."""
        url = f"{self.base_url}/{endpoint}"
        response = self._client.request(method, url, **kwargs)
        response.raise_for_status()
        if response.text:
            return response.json()
        return None

    # --- Analyses ---

    def insert_analysis(self, result: BatchResult, urls: list[str], source: str = "cli") -> dict:
        """Store a batch result."""
        analysis = result.analysis
        data = {
            "urls": urls,
            "source": source,
            "success": result.success,
            "total_posts": result.total_posts,
            "corpus": result.corpus[:5000],
            "analysis": analysis.to_dict(),
            "potential_score": analysis.potential_score,
            "has_opportunity": analysis.has_opportunity,
            "category": analysis.category,
            "error": result.error,
            "posts": [post.to_dict() for post in result.posts],
        }
        stored = self._request("POST", "post_analyses", json=data)
        return stored[0] if stored else data

    def get_recent_analyses(self, limit: int = 20, opportunities_only: bool = False) -> list[dict]:
        """Get the most recent analyses, newest first."""
        endpoint = f"post_analyses?order=created_at.desc&limit={limit}"
        if opportunities_only:
            endpoint += "&has_opportunity=eq.true"
        return self._request("GET", endpoint) or []

    def get_analysis(self, analysis_id: str) -> dict | None:
        """Get a single analysis by ID."""
        encoded_id = quote(str(analysis_id), safe="")
        result = self._request("GET", f"post_analyses?id=eq.{encoded_id}")
        return result[0] if result else None

    def get_analysis_stats(self) -> dict:
        """Totals for the dashboard."""
        rows = self._request("GET", "post_analyses?select=potential_score,has_opportunity,success") or []

        total = len(rows)
        scores = [r["potential_score"] for r in rows if r.get("potential_score") is not None]
        return {
            "total": total,
            "with_opportunity": sum(1 for r in rows if r.get("has_opportunity")),
            "failed": sum(1 for r in rows if r.get("success") is False),
            "avg_score": sum(scores) / len(scores) if scores else 0,
        }

    # --- Audit Log ---

    def log_action(self, action: str, details: dict | None = None, ip_address: str | None = None):
        """Record an action in the audit log."""
        data = {
            "action": action,
            "details": json.dumps(details or {}, ensure_ascii=False),
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        if ip_address:
            data["ip_address"] = ip_address
        self._request("POST", "audit_log", json=data)

    def close(self):
        self._client.close()


# Global database instance
_db: Database | None = None


def get_db() -> Database:
    """Get or create the global database instance."""
    global _db
    if _db is None:
        _db = Database()
    return _db
