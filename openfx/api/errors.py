"""
HTTP error rendering.

Every error response body is ``{"error": <message>, "code": <code>}``.
Routes convert domain errors with ``http_error``; the handlers registered
in ``openfx.main`` render them.
"""

import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from openfx.errors import OpenFXError

logger = logging.getLogger(__name__)


def http_error(exc: OpenFXError) -> HTTPException:
    """Wrap a domain error in an HTTPException carrying its status and code."""
    return HTTPException(
        status_code=exc.status_code,
        detail={"error": exc.message, "code": exc.code},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        body = exc.detail
    else:
        body = {"error": str(exc.detail), "code": f"HTTP_{exc.status_code}"}
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "body"
    message = f"Invalid request: {field} {first.get('msg', 'is invalid')}".rstrip()
    return JSONResponse(status_code=422, content={"error": message, "code": "INVALID_REQUEST"})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": OpenFXError.default_message, "code": OpenFXError.code},
    )
