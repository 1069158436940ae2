"""User domain object."""
from __future__ import annotations
import copy
from dataclasses import dataclass, field
from typing import Any, Optional

from werkzeug.security import check_password_hash, generate_password_hash


@dataclass
class User:
    """A persisted user account.

    The password is write-only: it is kept as a hash and never serialized.
    The creation timestamp lives in ``meta["created"]``.
    """
    email: str
    nick: str
    password_hash: str = field(default="", repr=False)
    admin: bool = False
    meta: dict[str, Any] = field(default_factory=dict)
    id: Optional[int] = None

    @classmethod
    def from_row(cls, row: dict, meta: Optional[dict] = None) -> "User":
        """Build a user from a storage row (``id, email, nick, password, admin``)."""
        return cls(
            id=int(row["id"]),
            email=row["email"],
            nick=row["nick"],
            password_hash=row["password"],
            admin=bool(row["admin"]),
            meta=dict(meta or {}),
        )

    def set_email(self, email: str) -> None:
        self.email = email.strip()

    def set_nick(self, nick: str) -> None:
        self.nick = nick.strip()

    def set_password(self, raw: str) -> None:
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw: str) -> bool:
        if not self.password_hash or not raw:
            return False
        return check_password_hash(self.password_hash, raw)

    def is_admin(self) -> bool:
        return bool(self.admin)

    def is_equal(self, other: Optional["User"]) -> bool:
        """Identity comparison (same persisted id)."""
        if other is None or self.id is None:
            return False
        return self.id == other.id

    def to_dict(self) -> dict:
        """Serializable field map (password excluded)."""
        return {
            "id": self.id,
            "email": self.email,
            "nick": self.nick,
            "admin": self.is_admin(),
            "meta": copy.deepcopy(self.meta),
        }


# The authenticated actor of a request is a user account (or None when anonymous)
Principal = User
