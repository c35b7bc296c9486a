"""HTTP application wiring."""

from .exception_handlers import ExceptionHandlerRegistry, register_exception_handlers
from .security import SecurityHeadersMiddleware

__all__ = ["ExceptionHandlerRegistry", "register_exception_handlers", "SecurityHeadersMiddleware"]
