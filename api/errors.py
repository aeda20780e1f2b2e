"""
API Error Handling

Standardized error handling for the API. Engine exceptions are rendered
with an HTTP status chosen by error code; everything else raised on
purpose by the routes is an APIError.
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.models.responses import ErrorDetail, ErrorResponse
from core.schemas.errors import EmpanelmentException, ErrorCodes


logger = logging.getLogger(__name__)


# Error code -> HTTP status. Codes not listed map to 400.
STATUS_BY_CODE: dict[str, int] = {
    ErrorCodes.FORBIDDEN: 403,
    ErrorCodes.APPLICATION_NOT_FOUND: 404,
    ErrorCodes.PAYMENT_INCOMPLETE: 402,
    # State and concurrency conflicts
    ErrorCodes.ILLEGAL_TRANSITION: 409,
    ErrorCodes.NO_CHANGES_SINCE_REQUEST: 409,
    ErrorCodes.VERIFICATION_PENDING: 409,
    ErrorCodes.VERIFICATION_NOT_REQUIRED: 409,
    ErrorCodes.ALREADY_ASSIGNED: 409,
    ErrorCodes.ALREADY_COMPLETED: 409,
    ErrorCodes.NOT_ASSIGNED: 409,
    ErrorCodes.INCOMPLETE_SCORING: 409,
    ErrorCodes.DUPLICATE_PAYMENT: 409,
    ErrorCodes.APPLICATION_EXISTS: 409,
    ErrorCodes.VERSION_CONFLICT: 409,
    # Payload validation
    ErrorCodes.SCORE_OUT_OF_RANGE: 422,
    ErrorCodes.UNKNOWN_CRITERION: 422,
    ErrorCodes.UNKNOWN_DEVICE_TYPE: 422,
    ErrorCodes.INVALID_RUBRIC: 422,
}


class APIError(Exception):
    """Base API error with structured response."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code=self.code,
                message=self.message,
                details=self.details,
            ),
        )


class InvalidRequestError(APIError):
    """Invalid request parameters."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            code="INVALID_REQUEST",
            message=message,
            status_code=422,
            details=details,
        )


class UnauthenticatedError(APIError):
    """Actor headers missing."""

    def __init__(self, message: str = "X-User-Id and X-User-Role headers are required"):
        super().__init__(
            code="UNAUTHENTICATED",
            message=message,
            status_code=401,
        )


def status_for_code(code: str) -> int:
    return STATUS_BY_CODE.get(code, 400)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
    )


async def engine_error_handler(request: Request, exc: EmpanelmentException) -> JSONResponse:
    """Render an engine failure; the stored snapshot is untouched."""
    model = exc.to_error_model()
    return JSONResponse(
        status_code=status_for_code(exc.code),
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(**model.model_dump(mode="json")),
        ).model_dump(),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures in the standard error shape."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code="INVALID_REQUEST",
                message="Request validation failed",
                details={"errors": [
                    {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
                    for e in exc.errors()
                ]},
            ),
        ).model_dump(),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred",
                details={"type": type(exc).__name__},
            ),
        ).model_dump(),
    )
