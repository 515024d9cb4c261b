# -*- coding: utf-8 -*-
"""Auth — cookie session endpoints (refresh / logout)."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from fastapi import APIRouter, Request, Response

from ..config import settings
from ..errors import UnauthorizedError
from ..utils.cookies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    build_clear_cookie_string,
    build_cookie_string,
    secure_cookie_options,
)
from .security import (
    access_token_max_age,
    create_access_token,
    decode_token,
    get_refresh_token_from_request,
    refresh_token_max_age,
)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def set_auth_cookies(response: Response, *, access_token: str, refresh_token: Optional[str] = None) -> None:
    options = secure_cookie_options(settings.is_production)
    response.headers.append(
        "set-cookie",
        build_cookie_string(ACCESS_TOKEN_COOKIE, access_token, replace(options, max_age=access_token_max_age())),
    )
    if refresh_token is not None:
        response.headers.append(
            "set-cookie",
            build_cookie_string(REFRESH_TOKEN_COOKIE, refresh_token, replace(options, max_age=refresh_token_max_age())),
        )


def clear_auth_cookies(response: Response) -> None:
    options = secure_cookie_options(settings.is_production)
    response.headers.append("set-cookie", build_clear_cookie_string(ACCESS_TOKEN_COOKIE, options))
    response.headers.append("set-cookie", build_clear_cookie_string(REFRESH_TOKEN_COOKIE, options))


@router.post("/refresh", summary="Issue a new access token from the refresh cookie")
def refresh(request: Request, response: Response):
    token = get_refresh_token_from_request(request)
    if not token:
        raise UnauthorizedError("Refresh token missing")
    payload = decode_token(token, "refresh")
    user_id = str(payload.get("sub") or "")
    if not user_id:
        raise UnauthorizedError("Invalid token")

    access_token = create_access_token(user_id=user_id)
    set_auth_cookies(response, access_token=access_token)
    return {"success": True, "data": {"accessToken": access_token, "expiresIn": access_token_max_age()}}


@router.post("/logout", summary="Logout")
def logout(response: Response):
    clear_auth_cookies(response)
    return {"success": True}
