"""Inference services."""

from .inference_service import InferenceService

__all__ = ["InferenceService"]
