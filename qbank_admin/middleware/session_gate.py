"""
Session gate: every request outside the public allow-list needs the
session cookie. API callers get a 401, browsers are sent to the login page.
"""
import logging
from urllib.parse import urlencode

from fastapi import Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from qbank_admin.core.auth import has_session
from qbank_admin.core.config import Settings

logger = logging.getLogger(__name__)


def normalize_path(path: str) -> str:
    return path[:-1] if path.endswith("/") and path != "/" else path


def is_public(path: str, settings: Settings) -> bool:
    path = normalize_path(path)
    return path in settings.PUBLIC_PATHS or any(path.startswith(p) for p in settings.PUBLIC_PREFIXES)


class SessionGateMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, settings: Settings):
        super().__init__(app)
        self.settings = settings

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if request.method == "OPTIONS" or is_public(path, self.settings):
            return await call_next(request)

        debug = not self.settings.is_production()
        if has_session(request, self.settings):
            response = await call_next(request)
            response.headers["Cache-Control"] = "no-store"
            if debug:
                response.headers["x-auth-debug"] = "authenticated"
            return response

        if normalize_path(path).startswith(self.settings.API_PREFIX):
            response = JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"error": "Not authenticated"})
            if debug:
                response.headers["x-auth-debug"] = "reject-api"
            return response

        logger.debug(f"Redirecting unauthenticated request for {path} to login")
        response = RedirectResponse(url=f"/login?{urlencode({'redirect': path})}",
                                    status_code=status.HTTP_307_TEMPORARY_REDIRECT)
        if debug:
            response.headers["x-auth-debug"] = "redirect-login"
        return response
