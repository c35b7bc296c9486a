"""FastAPI dependencies for authentication.

Builds the typed request context from the bearer token so routes receive it
as an explicit argument.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ...core.exceptions import AuthenticationError
from ...core.shared import RequestContext
from .token_verifier import TokenVerifier

# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)


def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.container.token_verifier


def require_request_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> RequestContext:
    """Require an authenticated caller, raising 401 otherwise."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")
    return verifier.verify(credentials.credentials)
