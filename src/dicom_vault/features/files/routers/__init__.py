"""File routers."""

from .file_router import router

__all__ = ["router"]
