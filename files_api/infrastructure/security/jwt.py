"""Bearer token verification (HS256 via python-jose).

Tokens are issued elsewhere; create_access_token exists for operators and
tests that need a locally signed token.
"""

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from files_api.core.config import get_settings

DEFAULT_TOKEN_TTL = timedelta(hours=1)


def create_access_token(
    subject: str,
    scopes: list[str] | None = None,
    expires_delta: timedelta | None = None,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """Create a signed token for subject carrying the given scopes.

    Args:
        subject: Value of the sub claim.
        scopes: Granted scopes (e.g. ['files:write']).
        expires_delta: TTL; defaults to one hour.
        extra_claims: Additional claims merged into the payload.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    to_encode: dict[str, Any] = dict(extra_claims or {})
    to_encode["sub"] = subject
    to_encode["scopes"] = list(scopes or [])
    to_encode["exp"] = datetime.now(UTC) + (expires_delta or DEFAULT_TOKEN_TTL)
    encoded = jwt.encode(
        to_encode,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode a JWT. Returns the payload.

    Enforces presence of exp and sub.

    Raises:
        ValueError: If token is invalid, expired, or missing required claims.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if "sub" not in payload:
        raise ValueError("Token missing required claim: sub")
    return payload


def token_scopes(payload: dict[str, Any]) -> set[str]:
    """Scopes from a 'scopes' list claim or a space-separated 'scope' claim."""
    scopes: set[str] = set()
    listed = payload.get("scopes")
    if isinstance(listed, list):
        scopes.update(str(s) for s in listed)
    spaced = payload.get("scope")
    if isinstance(spaced, str):
        scopes.update(spaced.split())
    return scopes
