"""Request context entity.

Carries the verified caller identity through the service layer explicitly
instead of attaching it to the request object.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID

from ...utils.uuid import generate_uuid_v7


class SubscriptionTier(str, Enum):
    """Subscription tiers known to the quota check."""
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SubscriptionTier":
        """Parse a tier claim, treating unknown or missing values as free."""
        try:
            return cls((value or cls.FREE.value).lower())
        except ValueError:
            return cls.FREE


@dataclass(frozen=True)
class RequestContext:
    """Request context entity.

    Represents the authenticated owner of a request.
    """

    owner_id: UUID
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE
    email: Optional[str] = None
    request_id: str = field(default_factory=generate_uuid_v7)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_free_tier(self) -> bool:
        return self.subscription_tier == SubscriptionTier.FREE
