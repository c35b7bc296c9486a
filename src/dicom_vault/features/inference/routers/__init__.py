"""Inference routers."""

from .inference_router import router

__all__ = ["router"]
