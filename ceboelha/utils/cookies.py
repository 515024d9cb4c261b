# -*- coding: utf-8 -*-
"""Cookie helpers for the access/refresh token pair.

Set-Cookie strings are built by hand so the attribute order is fixed:
HttpOnly, Secure, SameSite, Max-Age, Path, Domain.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Literal, Optional
from urllib.parse import quote, unquote

SameSite = Literal["strict", "lax", "none"]

ACCESS_TOKEN_COOKIE = "ceboelha_access_token"
REFRESH_TOKEN_COOKIE = "ceboelha_refresh_token"

# Characters encodeURIComponent leaves untouched (besides alphanumerics).
_UNRESERVED = "-_.!~*'()"


@dataclass(frozen=True)
class CookieOptions:
    http_only: bool = False
    secure: bool = False
    same_site: Optional[SameSite] = None
    max_age: Optional[int] = None
    path: Optional[str] = None
    domain: Optional[str] = None


def secure_cookie_options(is_production: bool) -> CookieOptions:
    # Plain-HTTP localhost needs Secure off and SameSite=lax.
    return CookieOptions(
        http_only=True,
        secure=is_production,
        same_site="strict" if is_production else "lax",
        path="/",
    )


def build_cookie_string(name: str, value: str, options: Optional[CookieOptions] = None) -> str:
    opts = options or CookieOptions()
    parts = [f"{name}={quote(value, safe=_UNRESERVED)}"]
    if opts.http_only:
        parts.append("HttpOnly")
    if opts.secure:
        parts.append("Secure")
    if opts.same_site:
        parts.append(f"SameSite={opts.same_site}")
    if opts.max_age is not None:
        parts.append(f"Max-Age={int(opts.max_age)}")
    if opts.path:
        parts.append(f"Path={opts.path}")
    if opts.domain:
        parts.append(f"Domain={opts.domain}")
    return "; ".join(parts)


def build_clear_cookie_string(name: str, options: Optional[CookieOptions] = None) -> str:
    return build_cookie_string(name, "", replace(options or CookieOptions(), max_age=0))


def parse_cookies(cookie_header: Optional[str]) -> Dict[str, str]:
    """Parse a ``Cookie:`` header into a name -> value mapping.

    Never raises: pairs without ``=`` or with an empty name are skipped.
    """
    if not cookie_header:
        return {}

    cookies: Dict[str, str] = {}
    for pair in cookie_header.split(";"):
        name, sep, raw_value = pair.strip().partition("=")
        name = name.strip()
        if not sep or not name:
            continue
        cookies[name] = unquote(raw_value)
    return cookies


def get_token_from_cookies(cookie_header: Optional[str], token_name: str) -> Optional[str]:
    return parse_cookies(cookie_header).get(token_name) or None
