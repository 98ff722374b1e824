"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

UPSTREAM_ERROR_MESSAGE = "Impossibile recuperare i dati da uno o più servizi esterni."


class TrackingError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class InvalidDate(TrackingError):
    """A date or range bound from the query string could not be parsed."""

    def __init__(self, value: str, message: str = "Formato data non valido. Usa YYYY-MM-DD."):
        super().__init__(message, status_code=400)
        self.value = value


class UpstreamUnavailable(TrackingError):
    """The tracking API timed out, answered non-2xx, or sent a body we can't decode.

    The URL and cause stay on the exception for logging; clients only ever
    see the generic message.
    """

    def __init__(self, url: str, reason: str):
        super().__init__(UPSTREAM_ERROR_MESSAGE, status_code=502)
        self.url = url
        self.reason = reason


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(TrackingError)
    async def handle_tracking_error(request: Request, exc: TrackingError):
        if isinstance(exc, UpstreamUnavailable):
            logger.error("%s %s failed upstream at %s: %s", request.method, request.url.path, exc.url, exc.reason)
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
        )
