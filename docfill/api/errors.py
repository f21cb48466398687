"""API error type rendered as ``{"error": ..., "details": ...}``."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from docfill.api.schemas import ErrorResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Exception raised by routes to return a JSON error body."""

    def __init__(self, status_code: int, error: str, details: str | None = None) -> None:
        self.status_code = status_code
        self.error = error
        self.details = details
        super().__init__(error)

    def to_response(self) -> JSONResponse:
        return JSONResponse(
            status_code=self.status_code,
            content=ErrorResponse(error=self.error, details=self.details).model_dump(
                exclude_none=True
            ),
        )


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Render an ApiError."""
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.error}")
    return exc.to_response()
