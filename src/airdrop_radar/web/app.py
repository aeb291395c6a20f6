"""FastAPI application: JSON API under /api/v1 plus the HTML dashboard."""

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .. import __version__
from .auth import AuthMiddleware
from .routes import api, pages

logger = logging.getLogger(__name__)

SERVICE_NAME = "airdrop-radar"

app = FastAPI(
    title="Airdrop Radar",
    description="Score X/Twitter posts for crypto airdrop opportunities",
    version=__version__,
)
app.add_middleware(AuthMiddleware)

static_dir = Path(__file__).parent / "static"
if static_dir.is_dir():
    app.mount("/static", StaticFiles(directory=static_dir), name="static")

app.include_router(api.router, prefix="/api/v1", tags=["api"])
app.include_router(pages.router, tags=["pages"])


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": SERVICE_NAME}
