"""Bearer token and scope dependencies (composition root)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from files_api.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
)
from files_api.infrastructure.security.jwt import token_scopes, verify_token

_http_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Caller identity taken from a verified bearer token."""

    subject: str
    scopes: frozenset[str]


async def get_principal_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> Principal | None:
    """Return the caller from a valid JWT if present; else None."""
    if not credentials:
        return None
    try:
        payload = verify_token(credentials.credentials)
    except ValueError:
        return None
    return Principal(subject=str(payload["sub"]), scopes=frozenset(token_scopes(payload)))


async def get_principal(
    principal: Annotated[Principal | None, Depends(get_principal_optional)],
) -> Principal:
    """Return the caller; raise 401 if the token is missing or invalid."""
    if principal is None:
        raise AuthenticationException("Not authenticated")
    return principal


def require_scope(scope: str):
    """Dependency factory: require a valid token that grants scope."""

    async def _require(
        principal: Annotated[Principal, Depends(get_principal)],
    ) -> Principal:
        if scope not in principal.scopes:
            raise AuthorizationException(scope)
        return principal

    return _require
