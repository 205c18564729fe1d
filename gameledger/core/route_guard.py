# gameledger/core/route_guard.py
"""
Page-level access control for the browser-facing paths.

Only the session cookie is consulted: a request is "signed in" when it
carries a valid, unexpired access token. Database lookups are left to the
API dependencies.
"""
import logging
from typing import Iterable, Optional

import jwt
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse

from .auth import JWT_AUDIENCE, SESSION_COOKIE_NAME
from .config import settings

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
HOME_PATH = "/dashboard"
SKIPPED_PREFIXES = ("/api", "/_next", "/static", "/assets", "/docs", "/redoc", "/openapi.json", "/favicon")
STATIC_SUFFIXES = (".js", ".css", ".map", ".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".ico", ".woff", ".woff2", ".txt")


def _matches(path: str, prefixes: Iterable[str]) -> bool:
    return any(path == p or path.startswith(p.rstrip("/") + "/") for p in prefixes)

def is_skipped(path: str, media_url: Optional[str] = None) -> bool:
    if media_url and _matches(path, [media_url]):
        return True
    if path.startswith(SKIPPED_PREFIXES):
        return True
    return path.lower().endswith(STATIC_SUFFIXES)

def resolve_redirect(
    path: str,
    has_session: bool,
    protected_paths: Iterable[str] = None,
    auth_paths: Iterable[str] = None,
) -> Optional[str]:
    """Where to send a request for `path`, or None to let it through."""
    protected_paths = settings.PROTECTED_PATHS if protected_paths is None else protected_paths
    auth_paths = settings.AUTH_PATHS if auth_paths is None else auth_paths

    if is_skipped(path, settings.MEDIA_URL):
        return None
    if not has_session and _matches(path, protected_paths):
        return LOGIN_PATH
    if has_session and _matches(path, auth_paths):
        return HOME_PATH
    return None

def has_valid_session(token: Optional[str]) -> bool:
    if not token:
        return False
    try:
        jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=JWT_AUDIENCE,
        )
    except jwt.InvalidTokenError:
        return False
    return True


class RouteGuardMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not is_skipped(path, settings.MEDIA_URL):
            signed_in = has_valid_session(request.cookies.get(SESSION_COOKIE_NAME))
            target = resolve_redirect(path, signed_in)
            if target is not None:
                logger.debug(f"Route guard: {path} -> {target} (signed_in={signed_in})")
                return RedirectResponse(url=target, status_code=307)
        return await call_next(request)
