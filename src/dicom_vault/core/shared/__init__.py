"""Shared request-scoped types."""

from .context import RequestContext, SubscriptionTier

__all__ = ["RequestContext", "SubscriptionTier"]
