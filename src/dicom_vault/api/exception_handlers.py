"""
Application exception handlers.

Every error leaves the service as ``{"message": ..., "errorKind": ...}``.
Stack traces are logged, never returned.
"""
from typing import Any, Callable, Dict, Optional
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.exceptions import DicomVaultError, AuthenticationError, get_http_status_code

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


class ExceptionHandlerRegistry:
    """Registry for the application's exception handlers."""

    def __init__(
        self,
        response_formatter: Optional[Callable[[str, str, Optional[Dict[str, Any]]], Dict[str, Any]]] = None,
        is_production: bool = True
    ):
        """
        Initialize exception handler registry.

        Args:
            response_formatter: Function to format error responses
            is_production: Hide exception details from responses when True
        """
        self.response_formatter = response_formatter or self._default_response_formatter
        self.is_production = is_production

    def _default_response_formatter(
        self,
        message: str,
        error_kind: str,
        details: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Default error response formatter."""
        body: Dict[str, Any] = {"message": message, "errorKind": error_kind}
        if details and not self.is_production:
            body["details"] = details
        return body

    def register_handlers(self, app: FastAPI) -> None:
        """Register exception handlers for the application.

        Args:
            app: FastAPI application instance
        """
        @app.exception_handler(DicomVaultError)
        async def dicom_vault_error_handler(request: Request, exc: DicomVaultError):
            """Handle application exceptions."""
            status_code = get_http_status_code(exc)
            if status_code >= 500:
                logger.error(f"{exc.error_kind} on {request.method} {request.url.path}: {exc.message}")
            else:
                logger.info(f"{exc.error_kind} on {request.method} {request.url.path}: {exc.message}")

            headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
            return JSONResponse(
                status_code=status_code,
                content=self.response_formatter(exc.message, exc.error_kind, exc.details),
                headers=headers,
            )

        @app.exception_handler(RequestValidationError)
        async def validation_error_handler(request: Request, exc: RequestValidationError):
            """Handle request validation errors."""
            errors = exc.errors()
            fields = ", ".join(
                ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
                for error in errors
            )
            message = f"Invalid request: {fields}" if fields else "Invalid request"
            return JSONResponse(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                content=self.response_formatter(
                    message,
                    "ValidationError",
                    {"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]},
                ),
            )

        @app.exception_handler(StarletteHTTPException)
        async def http_exception_handler(request: Request, exc: StarletteHTTPException):
            """Handle framework HTTP errors such as unknown routes."""
            return JSONResponse(
                status_code=exc.status_code,
                content=self.response_formatter(str(exc.detail), "HTTPError"),
                headers=getattr(exc, "headers", None),
            )

        @app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle unexpected exceptions."""
            logger.error(f"Unhandled exception: {exc}", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=self.response_formatter(UNEXPECTED_ERROR_MESSAGE, "InternalError"),
            )


def register_exception_handlers(app: FastAPI, is_production: bool = True) -> None:
    """
    Register exception handlers for a FastAPI application.

    Args:
        app: FastAPI application instance
        is_production: Whether running in production mode
    """
    registry = ExceptionHandlerRegistry(is_production=is_production)
    registry.register_handlers(app)
