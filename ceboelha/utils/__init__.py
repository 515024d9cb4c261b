# -*- coding: utf-8 -*-
"""Date, string and format helpers.

Every temporal helper takes the timezone explicitly (``tz``). Aware datetimes
are converted into ``tz``; naive datetimes, dates and ISO strings without an
offset are read as wall-clock time in ``tz``.
"""

from __future__ import annotations

import calendar
import re
import unicodedata
from datetime import date, datetime, time, timezone, tzinfo
from typing import Union

from .cookies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    CookieOptions,
    build_clear_cookie_string,
    build_cookie_string,
    get_token_from_cookies,
    parse_cookies,
    secure_cookie_options,
)

DateLike = Union[datetime, date, str]

TIME_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"
DATE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$"

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_TIME_RE = re.compile(TIME_PATTERN)
_DATE_RE = re.compile(DATE_PATTERN)
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


# ---- Dates ----


def _to_datetime(value: DateLike, tz: tzinfo) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    elif not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    try:
        return value.astimezone(tz)
    except OverflowError:
        # Outside year 1..9999 in UTC: keep the wall-clock reading.
        return value.replace(tzinfo=tz)


def format_date(value: DateLike, tz: tzinfo = timezone.utc) -> str:
    return _to_datetime(value, tz).strftime("%Y-%m-%d")


def format_date_time(value: DateLike, tz: tzinfo = timezone.utc) -> str:
    return _to_datetime(value, tz).strftime("%Y-%m-%d %H:%M:%S")


def get_start_of_day(value: DateLike, tz: tzinfo = timezone.utc) -> datetime:
    return datetime.combine(_to_datetime(value, tz).date(), time.min, tzinfo=tz)


def get_end_of_day(value: DateLike, tz: tzinfo = timezone.utc) -> datetime:
    return datetime.combine(_to_datetime(value, tz).date(), time.max, tzinfo=tz)


def _check_month(month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")


def get_days_in_month(year: int, month: int) -> int:
    _check_month(month)
    return calendar.monthrange(year, month)[1]


def get_start_of_month(year: int, month: int, tz: tzinfo = timezone.utc) -> datetime:
    _check_month(month)
    return datetime(year, month, 1, tzinfo=tz)


def get_end_of_month(year: int, month: int, tz: tzinfo = timezone.utc) -> datetime:
    last_day = date(year, month, get_days_in_month(year, month))
    return datetime.combine(last_day, time.max, tzinfo=tz)


# ---- Strings ----


def slugify(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM_RE.sub("-", stripped).strip("-")


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return f"{text[: max(max_length - 3, 0)]}..."


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:].lower()


# ---- Validation ----


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.fullmatch(email))


def is_valid_time_format(value: str) -> bool:
    return bool(_TIME_RE.fullmatch(value))


def is_valid_date_format(value: str) -> bool:
    # The regex pins the shape; strptime rejects impossible days like 2024-02-30.
    if not _DATE_RE.fullmatch(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


__all__ = [
    "ACCESS_TOKEN_COOKIE",
    "DATE_PATTERN",
    "REFRESH_TOKEN_COOKIE",
    "TIME_PATTERN",
    "CookieOptions",
    "build_clear_cookie_string",
    "build_cookie_string",
    "capitalize_first",
    "format_date",
    "format_date_time",
    "get_days_in_month",
    "get_end_of_day",
    "get_end_of_month",
    "get_start_of_day",
    "get_start_of_month",
    "get_token_from_cookies",
    "is_valid_date_format",
    "is_valid_email",
    "is_valid_time_format",
    "parse_cookies",
    "secure_cookie_options",
    "slugify",
    "truncate",
]
