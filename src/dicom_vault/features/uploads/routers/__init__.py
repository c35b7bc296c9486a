"""Upload routers."""

from .upload_router import router

__all__ = ["router"]
