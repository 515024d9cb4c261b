# -*- coding: utf-8 -*-
"""Auth — JWT access/refresh tokens + FastAPI helpers.

Logging in is handled elsewhere; this module only signs, verifies and reads
the two tokens (Bearer header or cookie).
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Literal, Optional

from fastapi import Depends, Request

from ..config import settings
from ..errors import UnauthorizedError
from ..utils.cookies import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, get_token_from_cookies

TokenKind = Literal["access", "refresh"]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _secret_for(kind: TokenKind) -> str:
    return settings.jwt_access_secret if kind == "access" else settings.jwt_refresh_secret


def access_token_max_age() -> int:
    return int(settings.access_token_ttl_minutes) * 60


def refresh_token_max_age() -> int:
    return int(settings.refresh_token_ttl_days) * 24 * 60 * 60


def _create_token(*, user_id: str, kind: TokenKind, ttl: timedelta) -> str:
    now = _utc_now()
    payload = {
        "sub": user_id,
        "type": kind,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    return _jwt_encode(payload, _secret_for(kind))


def create_access_token(*, user_id: str) -> str:
    return _create_token(user_id=user_id, kind="access", ttl=timedelta(seconds=access_token_max_age()))


def create_refresh_token(*, user_id: str) -> str:
    return _create_token(user_id=user_id, kind="refresh", ttl=timedelta(seconds=refresh_token_max_age()))


def decode_token(token: str, kind: TokenKind = "access") -> Dict[str, Any]:
    try:
        payload = _jwt_decode(token, _secret_for(kind))
    except Exception as exc:
        raise UnauthorizedError("Invalid token") from exc
    if payload.get("type") != kind:
        raise UnauthorizedError("Invalid token")
    exp = int(payload.get("exp") or 0)
    if exp and exp < int(_utc_now().timestamp()):
        raise UnauthorizedError("Token expired")
    return payload


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64url_decode(data: str) -> bytes:
    pad = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode((data + pad).encode("ascii"))


def _jwt_encode(payload: Dict[str, Any], secret: str) -> str:
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64url_encode(json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    sig = hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()
    return f"{header_b64}.{payload_b64}.{_b64url_encode(sig)}"


def _jwt_decode(token: str, secret: str) -> Dict[str, Any]:
    parts = token.split(".")
    if len(parts) != 3:
        raise ValueError("invalid token")
    header_b64, payload_b64, sig_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    expected_sig = hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()
    if not hmac.compare_digest(expected_sig, _b64url_decode(sig_b64)):
        raise ValueError("bad signature")
    payload = json.loads(_b64url_decode(payload_b64).decode("utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("bad payload")
    return payload


def get_token_from_request(request: Request, cookie_name: str = ACCESS_TOKEN_COOKIE) -> Optional[str]:
    auth = request.headers.get("authorization") or ""
    if cookie_name == ACCESS_TOKEN_COOKIE and auth.lower().startswith("bearer "):
        token = auth.split(" ", 1)[1].strip()
        return token or None
    return get_token_from_cookies(request.headers.get("cookie"), cookie_name)


def get_refresh_token_from_request(request: Request) -> Optional[str]:
    return get_token_from_request(request, REFRESH_TOKEN_COOKIE)


def get_current_user_from_request(request: Request) -> Dict[str, Any]:
    user = getattr(request.state, "user", None)
    if user:
        return user

    token = get_token_from_request(request)
    if not token:
        raise UnauthorizedError("Not authenticated")

    payload = decode_token(token, "access")
    user_id = str(payload.get("sub") or "")
    if not user_id:
        raise UnauthorizedError("Invalid token")

    user = {"id": user_id}
    request.state.user = user
    return user


def get_current_user(user: Dict[str, Any] = Depends(get_current_user_from_request)) -> Dict[str, Any]:
    return user
