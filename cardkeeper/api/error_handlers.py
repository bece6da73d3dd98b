"""
Global exception handlers.

- KnownError -> its own status code with a known_failure envelope
- RequestValidationError -> 400 with the offending fields
- Exception (catch-all) -> 500 unknown_failure, no internal details
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cardkeeper.models.failure import ApiResponse, FailureKind, KnownError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(KnownError)
    async def known_error_handler(request: Request, exc: KnownError) -> JSONResponse:
        logger.warning(
            "%s on %s: %s", exc.kind.value, request.url.path, exc.message
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_response().model_dump(mode="json"),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        fields = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
        logger.warning("Validation error on %s: %s", request.url.path, fields)
        response = ApiResponse.known_failure(
            kind=FailureKind.INVALID_INPUT,
            message="Invalid request parameters.",
            detail=f"Invalid fields: {', '.join(fields)}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=response.model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled exception on %s", request.url.path, exc_info=exc)
        response = ApiResponse.unknown_failure(detail=type(exc).__name__)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=response.model_dump(mode="json"),
        )
