from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AssetPortalError(Exception):
    """Base class for domain errors that map onto an HTTP status."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "asset_portal_error"

    def __init__(self, message: str, *, details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class AssetNotFoundError(AssetPortalError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "asset_not_found"


class ItemNotFoundError(AssetPortalError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "item_not_found"


class EventNotFoundError(AssetPortalError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "event_not_found"


class DuplicateAssetError(AssetPortalError):
    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_id"


class ArchiveConflictError(AssetPortalError):
    status_code = status.HTTP_409_CONFLICT
    code = "archive_conflict"

    def __init__(self, item_id: str, expected: int, actual: int) -> None:
        super().__init__(
            f"Archive for {item_id} is at version {actual}, not {expected}",
            details={"id": item_id, "expected_version": expected, "current_version": actual},
        )
        self.expected = expected
        self.actual = actual


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"code": code, "message": message}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


async def domain_exception_handler(request: Request, exc: AssetPortalError):
    return ErrorEnvelope(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if isinstance(detail, str):
        message = detail
    else:
        message = HTTPStatus(exc.status_code).phrase
    details = detail if isinstance(detail, dict) else None
    return ErrorEnvelope(status_code=exc.status_code, code="http_error", message=message, details=details)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return ErrorEnvelope(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code="validation_error",
        message="Validation failed",
        details={"errors": jsonable_errors(exc.errors())},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("request.failed", extra={"extra_data": {"path": request.url.path}})
    return ErrorEnvelope(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="internal_error",
        message="Internal server error",
    )


def jsonable_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Drop the raw ``ctx``/``input`` objects pydantic attaches; they may not serialise."""

    cleaned = []
    for error in errors:
        cleaned.append({key: value for key, value in error.items() if key not in ("ctx", "input", "url")})
    return cleaned
