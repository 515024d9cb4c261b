# -*- coding: utf-8 -*-
"""Application errors and the FastAPI handlers that render them."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from .config import settings

logger = logging.getLogger(__name__)

_LOCATION_ROOTS = {"body", "query", "path", "header", "cookie"}


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: str


class AppError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, *, status_code: Optional[int] = None, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource") -> None:
        super().__init__(f"{resource} not found")


class UnauthorizedError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, violations: Sequence[FieldViolation], message: Optional[str] = None) -> None:
        self.violations: List[FieldViolation] = list(violations)
        if message is None:
            message = self.violations[0].message if self.violations else "Invalid data"
        super().__init__(message)


def _field_path(loc: Iterable[Any]) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in _LOCATION_ROOTS:
        parts = parts[1:]
    return ".".join(parts)


def violations_from_errors(errors: Iterable[Dict[str, Any]]) -> List[FieldViolation]:
    """Flatten pydantic/FastAPI error dicts into field-addressed violations."""
    out: List[FieldViolation] = []
    for err in errors:
        loc = err.get("loc") or ()
        out.append(FieldViolation(field=_field_path(loc), message=str(err.get("msg") or "Invalid value")))
    return out


def _error_body(name: str, code: str, message: str, violations: Optional[List[FieldViolation]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "error": name, "code": code, "message": message}
    if violations:
        body["violations"] = [asdict(v) for v in violations]
    return body


def _validation_response(violations: List[FieldViolation]) -> JSONResponse:
    message = violations[0].message if violations else "Invalid data"
    if violations and violations[0].field:
        message = f"{violations[0].field}: {message}"
    return JSONResponse(
        status_code=400,
        content=_error_body("ValidationError", "VALIDATION_ERROR", message, violations),
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError):  # noqa: ARG001
        violations = exc.violations if isinstance(exc, ValidationError) else None
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(type(exc).__name__, exc.code, exc.message, violations),
        )

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError):  # noqa: ARG001
        return _validation_response(violations_from_errors(exc.errors()))

    @app.exception_handler(PydanticValidationError)
    async def _model_validation(request: Request, exc: PydanticValidationError):  # noqa: ARG001
        return _validation_response(violations_from_errors(exc.errors()))

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = "Internal server error" if settings.is_production else (str(exc) or "Unknown error")
        return JSONResponse(
            status_code=500,
            content=_error_body("InternalServerError", "INTERNAL_ERROR", message),
        )
