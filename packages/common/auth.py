"""Auth helpers for FastAPI endpoints.

Provides:
- `User` Pydantic model for the JWT subject
- `verify_jwt` to decode/validate signed JWTs
- `get_current_user` FastAPI dependency using HTTP Bearer auth
"""

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from pydantic import BaseModel, Field
from .config import get_settings
from .errors import Unauthorized

security = HTTPBearer(auto_error=False)


class User(BaseModel):
    """Authenticated user extracted from a validated JWT."""
    sub: str
    email: str | None = None
    name: str | None = None
    picture: str | None = None
    roles: list[str] = Field(default_factory=list)


def verify_jwt(token: str) -> User:
    """Decode and validate a JWT and return a `User`.

    Validates the signature with the configured algorithm and key, the
    expiration, and the audience / issuer when they are configured.
    Raises `Unauthorized` on any validation failure.

    Args:
        token: Bearer token string (JWT).

    Returns:
        User: Parsed user info from token claims.
    """
    s = get_settings()
    options = {"verify_exp": True, "verify_aud": bool(s.OIDC_AUDIENCE), "require": ["sub", "exp"]}
    try:
        payload = jwt.decode(
            token,
            s.JWT_VERIFY_KEY,
            algorithms=[s.JWT_ALGORITHM],
            audience=s.OIDC_AUDIENCE,
            issuer=s.OIDC_ISSUER,
            options=options,
        )
    except jwt.PyJWTError:
        raise Unauthorized("Invalid token")
    roles = payload.get("roles") or []
    return User(
        sub=str(payload["sub"]),
        email=payload.get("email"),
        name=payload.get("name"),
        picture=payload.get("picture"),
        roles=[str(r) for r in roles] if isinstance(roles, list) else [],
    )


def get_current_user(creds: HTTPAuthorizationCredentials | None = Depends(security)) -> User:
    """FastAPI dependency to extract the current user from Authorization header.

    Raises:
        Unauthorized: if credentials are missing or the token is invalid.
    """
    if not creds:
        raise Unauthorized("Not authenticated")
    return verify_jwt(creds.credentials)
