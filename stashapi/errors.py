"""Errors raised by the HTTP handlers and their mapping onto responses."""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response

logger = logging.getLogger(__name__)

FAILED_CONNECTION_MESSAGE = "Internal Server Error: Failed to get connection"


class ApiError(Exception):
    """Base class for errors that turn into a plain-text HTTP response."""

    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    log_label: str | None = None

    def __init__(self, detail: object) -> None:
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{type(self).__name__}({self.detail!r})"

    @property
    def message(self) -> str:
        """The text sent back to the client."""
        return str(self.detail)

    def to_response(self) -> Response:
        """Build the plain-text response for this error, recording it if needed."""
        label = self.log_label
        if label is not None:
            logger.error("%s: %r", label, self.detail)
        return PlainTextResponse(self.message, status_code=int(self.status_code))


class DatabaseError(ApiError):
    """A storage backend rejected or failed an operation."""

    def __init__(self, error: object, backend: str = "Redis") -> None:
        super().__init__(error)
        self.backend = backend

    @property
    def message(self) -> str:
        return f"Internal Server Error: Database operation failed with error: {self.detail}"

    @property
    def log_label(self) -> str:
        return f"{self.backend} error"


class JsonProcessingError(ApiError):
    """A stored or received document could not be decoded or encoded."""

    status_code = HTTPStatus.BAD_REQUEST
    log_label = "JSON error"

    @property
    def message(self) -> str:
        return f"JSON processing error: {self.detail}"


class NotFoundError(ApiError):
    """The requested resource does not exist."""

    status_code = HTTPStatus.NOT_FOUND

    @property
    def message(self) -> str:
        return f"Resource not found: {self.detail}"


class BadRequestError(ApiError):
    """The request itself is malformed; the detail is sent back verbatim."""

    status_code = HTTPStatus.BAD_REQUEST


class PoolError(ApiError):
    """No connection to the backend could be obtained."""

    def __init__(self, detail: object, backend: str = "Redis") -> None:
        super().__init__(detail)
        self.backend = backend

    def __str__(self) -> str:
        return f"{self.backend} Pool Error: {self.detail}"

    @property
    def message(self) -> str:
        return FAILED_CONNECTION_MESSAGE

    @property
    def log_label(self) -> str:
        return f"{self.backend} Pool error"


def install_error_handler(app: FastAPI) -> None:
    """Make every ApiError raised in a route produce its own response."""

    async def _handle(request: Request, exc: Exception) -> Response:
        assert isinstance(exc, ApiError)
        return exc.to_response()

    app.add_exception_handler(ApiError, _handle)