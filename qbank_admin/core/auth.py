import secrets
from typing import Optional

from fastapi import Request, Response

from qbank_admin.core.config import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def credentials_match(settings: Settings, username: Optional[str], password: Optional[str]) -> bool:
    if not isinstance(username, str) or not isinstance(password, str):
        return False
    user_ok = secrets.compare_digest(username.encode(), settings.ADMIN_USERNAME.encode())
    pass_ok = secrets.compare_digest(password.encode(), settings.ADMIN_PASSWORD.encode())
    return user_ok and pass_ok


def has_session(request: Request, settings: Settings) -> bool:
    value = request.cookies.get(settings.SESSION_COOKIE_NAME)
    return value is not None and secrets.compare_digest(value.encode(), settings.SESSION_VALUE.encode())


def set_session_cookie(response: Response, settings: Settings) -> None:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME, settings.SESSION_VALUE,
        max_age=settings.SESSION_MAX_AGE, path="/", httponly=True, samesite="lax",
        secure=settings.is_production(),
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME, "",
        max_age=0, path="/", httponly=True, samesite="lax",
        secure=settings.is_production(),
    )

