"""
Global error handling middleware.

Exceptions that escape the JSON API are turned into `{"error", "detail"}`
bodies here. A mint submitted while another one is pending maps to 409;
anything else is logged with its traceback and maps to 500.
"""
import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable

from tree_registry.services.application.registration_workflow import MintInProgressError


logger = logging.getLogger(__name__)


def error_response(status_code: int, error: str, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": detail},
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Maps escaping workflow and server errors to JSON responses."""

    async def dispatch(self, request: Request, call_next: Callable):
        try:
            return await call_next(request)

        except MintInProgressError as e:
            logger.warning(
                f"Mint rejected on {request.method} {request.url.path}: {e}"
            )
            return error_response(status.HTTP_409_CONFLICT, "Mint in progress", str(e))

        except Exception as e:
            logger.exception(
                f"Unhandled exception on {request.method} {request.url.path}: {e}"
            )
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "Internal server error",
                "An unexpected error occurred",
            )
