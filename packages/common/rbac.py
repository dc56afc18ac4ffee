"""RBAC utilities for FastAPI dependencies.

Provides a `require_roles(*roles)` factory that returns a dependency ensuring
the authenticated user (from `get_current_user`) possesses all required roles.
"""

from typing import Callable
from fastapi import Depends
from .auth import get_current_user, User
from .errors import Forbidden


def require_roles(*required: str) -> Callable[[User], User]:
    """Create a dependency that enforces presence of given roles.

    The returned dependency raises `Forbidden` (403) when the user's roles do
    not include every name in `required`, and otherwise returns the `User`.
    """
    def wrapper(user: User = Depends(get_current_user)) -> User:
        missing = set(required) - set(user.roles)
        if missing:
            raise Forbidden(f"Missing role: {', '.join(sorted(missing))}")
        return user

    return wrapper
