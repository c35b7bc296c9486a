"""Core value objects."""

from .session_key import SessionKey, safe_filename

__all__ = ["SessionKey", "safe_filename"]
