"""Exceptions raised by the facade and the handlers that render them.

Every failure reaching a client is reported as HTTP 400 with a
``{"message": ...}`` body. Upstream failures, unsupported operations and
malformed parameters are deliberately not told apart.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base class for errors rendered as ``400 {message}``."""

    @property
    def message(self) -> str:
        return str(self)


class ProviderError(CatalogError):
    """Raised when the catalogue provider rejects or fails a call."""


class InvalidParameterError(CatalogError):
    """Raised when a query parameter cannot be interpreted."""


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})


async def catalog_exception_handler(request: Request, exc: CatalogError) -> JSONResponse:
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error_response(exc.message)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = [str(err.get("msg", "")) for err in exc.errors()]
    message = "; ".join(m for m in messages if m) or "Invalid request"
    logger.warning("Validation error on %s %s: %s", request.method, request.url.path, message)
    return _error_response(message)


async def provider_shape_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Provider results that cannot be wrapped in an envelope are reported like any other provider error."""
    messages = [str(err.get("msg", "")) for err in exc.errors()]
    message = "; ".join(m for m in messages if m) or str(exc)
    logger.warning("Unexpected provider result on %s %s: %s", request.method, request.url.path, message)
    return _error_response(message)
