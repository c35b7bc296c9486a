"""Bearer token authentication."""

from .token_verifier import TokenVerifier
from .dependencies import require_request_context

__all__ = ["TokenVerifier", "require_request_context"]
