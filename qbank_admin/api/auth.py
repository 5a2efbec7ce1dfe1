import logging
from typing import Any

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from qbank_admin.core.auth import (
    clear_session_cookie, credentials_match, get_app_settings, has_session, set_session_cookie,
)

logger = logging.getLogger(__name__)
router = APIRouter()


class Login(BaseModel):
    username: Any = None
    password: Any = None


@router.post("/login")
def login(payload: Login, request: Request, response: Response):
    settings = get_app_settings(request)
    if credentials_match(settings, payload.username, payload.password):
        set_session_cookie(response, settings)
        logger.info("Admin session opened")
        return {"success": True}
    logger.warning("Rejected login attempt")
    return JSONResponse(status_code=401, content={"success": False, "error": "Invalid credentials"})


@router.post("/logout")
def logout(request: Request, response: Response):
    clear_session_cookie(response, get_app_settings(request))
    return {"success": True}


@router.get("/me")
def me(request: Request):
    settings = get_app_settings(request)
    if has_session(request, settings):
        return {"authenticated": True, "user": {"username": settings.ADMIN_USERNAME}}
    return JSONResponse(status_code=401, content={"authenticated": False})
