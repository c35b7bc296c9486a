"""Inference adapters."""

from .inference_client import InferenceClient

__all__ = ["InferenceClient"]
