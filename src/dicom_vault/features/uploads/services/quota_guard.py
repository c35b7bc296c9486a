"""Quota guard.

ONLY subscription limits - refuses another file when the owner's tier caps
the number of stored files.
"""

import logging
from typing import Mapping, Optional

from ....core.exceptions import SubscriptionLimitExceeded
from ....core.shared import RequestContext
from ..protocols.uploaded_file_repository import UploadedFileRepository

logger = logging.getLogger(__name__)


class QuotaGuard:
    """Checks an owner's file count against their tier's limit."""

    def __init__(self, repository: UploadedFileRepository, tier_limits: Mapping[str, Optional[int]]):
        self._repository = repository
        self._tier_limits = dict(tier_limits)

    def limit_for(self, context: RequestContext) -> Optional[int]:
        """File limit for the caller's tier, or None for unlimited."""
        return self._tier_limits.get(context.subscription_tier.value)

    async def check(self, context: RequestContext) -> None:
        """Raise if the owner may not store another file.

        Raises:
            SubscriptionLimitExceeded: If the owner is at or above the limit
        """
        limit = self.limit_for(context)
        if limit is None:
            return

        current = await self._repository.count_by_owner(context.owner_id)
        if current >= limit:
            logger.info(
                f"Owner {context.owner_id} reached the {context.subscription_tier.value} tier limit ({current}/{limit})"
            )
            raise SubscriptionLimitExceeded(context.subscription_tier.value, limit, current)
