"""Password login for the dashboard and API.

Auth is off unless AUTH_PASSWORD is set. A session cookie holds an HMAC of
the password keyed with SECRET_KEY, so changing either one ends every session.
"""

import hashlib
import hmac
import secrets

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ..config import get_config

PUBLIC_PATHS = ("/health", "/login", "/static")

SESSION_COOKIE = "airdrop_radar_session"
SESSION_MAX_AGE = 60 * 60 * 24

# Used when SECRET_KEY is unset; sessions then end on restart
_PROCESS_SECRET = secrets.token_hex(32)


def auth_enabled() -> bool:
    return bool(get_config().auth_password)


def is_public_path(path: str) -> bool:
    return any(path == p or path.startswith(f"{p}/") for p in PUBLIC_PATHS)


def verify_password(password: str) -> bool:
    """Compare a submitted password with AUTH_PASSWORD. Always true when auth is off."""
    expected = get_config().auth_password
    if not expected:
        return True
    return secrets.compare_digest(password.encode(), expected.encode())


def create_session_token() -> str:
    config = get_config()
    key = (config.secret_key or _PROCESS_SECRET).encode()
    message = (config.auth_password or "").encode()
    return hmac.new(key, message, hashlib.sha256).hexdigest()


def is_authenticated(request: Request) -> bool:
    token = request.cookies.get(SESSION_COOKIE)
    return bool(token) and secrets.compare_digest(token, create_session_token())


class AuthMiddleware(BaseHTTPMiddleware):
    """Reject unauthenticated requests: 401 JSON for the API, a login redirect for pages."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if is_public_path(path) or not auth_enabled() or is_authenticated(request):
            return await call_next(request)

        if path.startswith("/api/"):
            return JSONResponse(status_code=401, content={"detail": "Authentication required"})
        return RedirectResponse(url="/login", status_code=302)
