"""Server-rendered pages: login, dashboard and analysis detail."""

from pathlib import Path

from fastapi import APIRouter, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from ...config import get_config
from ...db import get_db
from ...llm.schema import AnalysisResult
from ..auth import SESSION_COOKIE, SESSION_MAX_AGE, create_session_token, verify_password

router = APIRouter()
templates = Jinja2Templates(directory=Path(__file__).parent.parent / "templates")

RECENT_LIMIT = 20


def _render(request: Request, name: str, status_code: int = 200, **context):
    return templates.TemplateResponse(request, f"pages/{name}", context, status_code=status_code)


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request):
    return _render(request, "login.html", error=None)


@router.post("/login")
async def login_submit(request: Request, password: str = Form(...)):
    if not verify_password(password):
        return _render(request, "login.html", status_code=401, error="Invalid password")

    response = RedirectResponse(url="/", status_code=302)
    response.set_cookie(
        key=SESSION_COOKIE,
        value=create_session_token(),
        max_age=SESSION_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=get_config().is_production,
    )
    return response


@router.get("/logout")
async def logout():
    response = RedirectResponse(url="/login", status_code=302)
    response.delete_cookie(key=SESSION_COOKIE)
    return response


@router.get("/", response_class=HTMLResponse)
async def dashboard(request: Request):
    """Totals and the most recent analyses, when storage is configured."""
    if not get_config().storage_enabled:
        return _render(request, "dashboard.html", storage_enabled=False, stats=None, analyses=[])

    db = get_db()
    return _render(
        request,
        "dashboard.html",
        storage_enabled=True,
        stats=db.get_analysis_stats(),
        analyses=db.get_recent_analyses(limit=RECENT_LIMIT),
    )


@router.get("/analysis/{analysis_id}", response_class=HTMLResponse)
async def analysis_page(request: Request, analysis_id: str):
    if not get_config().storage_enabled:
        raise HTTPException(status_code=404, detail="Storage is not configured")

    record = get_db().get_analysis(analysis_id)
    if not record:
        raise HTTPException(status_code=404, detail="Analysis not found")
    analysis = AnalysisResult.from_dict(record["analysis"])
    return _render(request, "analysis.html", record=record, analysis=analysis)
