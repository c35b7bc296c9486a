"""Bearer token verification.

ONLY token verification - turns a signed HS256 token into a RequestContext.
Issuing tokens is someone else's job.
"""

import logging
from typing import Any, Dict
from uuid import UUID

from jose import jwt, JWTError, ExpiredSignatureError

from ...core.exceptions import AuthenticationError
from ...core.shared import RequestContext, SubscriptionTier

logger = logging.getLogger(__name__)


class TokenVerifier:
    """Verifies bearer tokens signed with the shared secret."""

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self._secret = secret
        self._algorithm = algorithm

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as e:
            raise AuthenticationError("Token has expired") from e
        except JWTError as e:
            logger.debug(f"Token rejected: {e}")
            raise AuthenticationError("Invalid token") from e

    def verify(self, token: str) -> RequestContext:
        """Verify a token and build the request context from its claims.

        The owner comes from the ``id`` claim, falling back to ``sub``.

        Raises:
            AuthenticationError: If the token is invalid, expired or names no owner
        """
        claims = self.decode(token)
        raw_owner_id = claims.get("id") or claims.get("sub")
        try:
            owner_id = UUID(str(raw_owner_id))
        except (TypeError, ValueError) as e:
            raise AuthenticationError("Token does not identify a user") from e

        return RequestContext(
            owner_id=owner_id,
            subscription_tier=SubscriptionTier.parse(claims.get("subscriptionTier")),
            email=claims.get("email"),
        )
