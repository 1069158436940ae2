"""Authorization policy for the user resource.

Pure decision logic: no I/O, no Flask. Rules are evaluated in order and the
first match wins:

    1. POST/DELETE on another user by a non-admin     -> 401
    2. DELETE of a user holding admin privileges       -> 403 (any actor)
    3. anything else                                   -> allow
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .models import User

WRITE_METHODS = frozenset({"POST", "DELETE"})

NOT_OWNER_ERROR = "Only admins can edit/remove other users"
ADMIN_DELETE_ERROR = (
    "A user with admin privileges can not be removed. "
    "You have to remove admin privileges first (/api/admin)"
)


@dataclass(frozen=True)
class Decision:
    """Outcome of a policy check."""
    allowed: bool
    status: int = 200
    error: str = ""

    def to_body(self) -> dict:
        return {"error": self.error}


ALLOW = Decision(allowed=True)


def authorize(principal: Optional[User], method: str, target: Optional[User]) -> Decision:
    """Decide whether ``principal`` may run ``method`` against ``target``.

    Args:
        principal: Acting user, None when unauthenticated
        method: HTTP method
        target: Addressed user, None when no object is addressed

    Returns:
        Decision (allowed, or denied with status and error message)
    """
    method = method.upper()
    if target is None:
        return ALLOW

    if method in WRITE_METHODS:
        is_admin = principal is not None and principal.is_admin()
        is_self = principal is not None and principal.is_equal(target)
        if not is_admin and not is_self:
            return Decision(allowed=False, status=401, error=NOT_OWNER_ERROR)

    if method == "DELETE" and target.is_admin():
        return Decision(allowed=False, status=403, error=ADMIN_DELETE_ERROR)

    return ALLOW


def requires_auth(method: str, addressed: bool) -> bool:
    """POST/DELETE need a principal only when they address an existing object.

    Creating a new user (POST without an object) is open.
    """
    if method.upper() in WRITE_METHODS:
        return addressed
    return False
