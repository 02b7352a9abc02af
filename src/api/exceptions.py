"""Exception handlers for the ClusterRec API.

Turns ClusterRec exceptions and request validation failures into JSON error
responses with a consistent structure.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.cluster.exceptions import ClusterRecException

logger = logging.getLogger(__name__)


async def clusterrec_exception_handler(
    request: Request, exc: ClusterRecException
) -> JSONResponse:
    """Render a ClusterRecException with its status code and details."""
    logger.error(
        "Request raised ClusterRec error",
        extra={
            "path": str(request.url.path),
            "error_type": type(exc).__name__,
            "error": exc.message,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": type(exc).__name__,
            "message": exc.message,
            "details": exc.details,
        },
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation errors in the same structure."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "ValidationError",
            "message": "Invalid request",
            "details": {"errors": jsonable_encoder(exc.errors())},
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers on an application."""
    app.add_exception_handler(ClusterRecException, clusterrec_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
