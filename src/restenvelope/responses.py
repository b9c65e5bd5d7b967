"""FastAPI glue: render envelopes as JSON responses and map exceptions onto them.

Every error leaving the app goes through ``Envelope.set_error_from_exception``,
so classified errors, framework errors and unexpected crashes all share the
same body shape.
"""

from collections.abc import Mapping
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from restenvelope.config import settings
from restenvelope.exceptions import APIError, ErrorField, parse
from restenvelope.logging import get_logger
from restenvelope.schemas.envelope import Envelope

logger = get_logger(__name__)

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def envelope_response(envelope: Envelope[Any], headers: Mapping[str, str] | None = None) -> JSONResponse:
    """Serialize an envelope, using its code as the HTTP status.

    Raises ValueError when the code is not an HTTP status (e.g. an envelope
    whose code was never set).
    """
    if not 100 <= envelope.code <= 599:
        raise ValueError(f"envelope code {envelope.code} is not an HTTP status code")
    return JSONResponse(
        status_code=envelope.code,
        content=envelope.model_dump(mode="json"),
        headers=dict(headers) if headers else None,
    )


def _format_location(location: Any) -> str:
    if not isinstance(location, (tuple, list)):
        return str(location)
    parts = [str(part) for part in location if part not in _LOCATION_PREFIXES]
    if parts:
        return ".".join(parts)
    if not location:
        return "request"
    return str(location[0])


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Return the status and field errors the application asked for."""
    logger.warning("api_error", code=exc.code, error=exc.message, path=request.url.path)
    return envelope_response(Envelope[Any]().set_error_from_exception(exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with one field error per failed input."""
    error_fields = [
        ErrorField(_format_location(issue.get("loc", ())), str(issue.get("msg", "Invalid value")))
        for issue in exc.errors()
    ]
    classified = APIError(422, "Request validation failed", *error_fields)
    return envelope_response(Envelope[Any]().set_error_from_exception(classified))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap routing errors (404, 405, ...) and explicit HTTPExceptions."""
    message = exc.detail if isinstance(exc.detail, str) and exc.detail else "Request failed"
    classified = APIError(exc.status_code, message)
    return envelope_response(Envelope[Any]().set_error_from_exception(classified), headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unhandled exceptions and wrap them in an envelope.

    An exception raised from a classified error keeps that error's code and
    message. Otherwise the exception text is only sent to the client when
    ``expose_internal_errors`` is enabled.
    """
    logger.exception("unhandled_exception", path=request.url.path, method=request.method)
    if parse(exc) is None and not settings.expose_internal_errors:
        return envelope_response(Envelope[Any]().set_error_from_exception(Exception("Internal server error")))
    return envelope_response(Envelope[Any]().set_error_from_exception(exc))


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all envelope exception handlers to a FastAPI app."""
    app.add_exception_handler(APIError, api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
