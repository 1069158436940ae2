"""User repository: load/create/update/delete user objects."""
from __future__ import annotations
import importlib
import json
import logging
import sqlite3
from typing import Optional, Union

from .cache import MemoryCache
from .exceptions import ConfigurationError, DuplicationError, ObjectNotFoundError
from .models import User

logger = logging.getLogger(__name__)

Identifier = Union[int, str]

# Range of a SQLite INTEGER column
MAX_ROW_ID = 2**63 - 1


class UserRepository:
    """Default repository backed by sqlite3.

    Uniqueness of e-mail addresses is enforced by the storage layer; a
    violation surfaces as :class:`DuplicationError`. Loaded rows are cached
    by id and e-mail, and every write drops the affected cache keys.
    """

    def __init__(self, db: sqlite3.Connection, cache: Optional[MemoryCache] = None):
        """Initialize repository.

        Args:
            db: Open sqlite3 connection (schema already created)
            cache: Optional cache for loaded rows
        """
        self.db = db
        self.cache = cache

    # ─────────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────────

    def load(self, identifier: Optional[Identifier], use_cache: bool = True) -> Optional[User]:
        """Return the user with the given id or e-mail, or None.

        With ``use_cache=False`` the row is read from storage (and the cache
        refreshed); used for values that feed authorization decisions.
        """
        if identifier is None or identifier == "":
            return None
        if isinstance(identifier, int) and not 0 <= identifier <= MAX_ROW_ID:
            return None
        if isinstance(identifier, int):
            cache_key = f"user:{identifier}"
        else:
            cache_key = f"user-email:{identifier.lower()}"

        cached = self._cache_get(cache_key) if use_cache else None
        if cached is not None:
            return User.from_row(cached["row"], cached["meta"])

        if isinstance(identifier, int):
            row = self.db.execute(
                "SELECT id, email, nick, password, admin FROM users WHERE id = ?", (identifier,)
            ).fetchone()
        else:
            row = self.db.execute(
                "SELECT id, email, nick, password, admin FROM users WHERE email = ?", (identifier,)
            ).fetchone()
        if row is None:
            return None

        row = dict(row)
        meta = self._load_meta(row["id"])
        self._cache_set(cache_key, {"row": row, "meta": meta})
        return User.from_row(row, meta)

    def search(self, offset: int = 0, limit: int = 50) -> list[User]:
        """Return a page of users ordered by id."""
        rows = self.db.execute(
            "SELECT id, email, nick, password, admin FROM users ORDER BY id LIMIT ? OFFSET ?",
            (limit, offset),
        ).fetchall()
        return [User.from_row(dict(row), self._load_meta(row["id"])) for row in rows]

    def count(self) -> int:
        return int(self.db.execute("SELECT COUNT(*) FROM users").fetchone()[0])

    # ─────────────────────────────────────────────────────────────────────
    # Writes
    # ─────────────────────────────────────────────────────────────────────

    def create_user(self, email: str, nick: str, password: str) -> User:
        """Persist a new user.

        Raises:
            DuplicationError: If the e-mail is already taken
        """
        user = User(email=email.strip(), nick=nick.strip())
        user.set_password(password)
        try:
            cursor = self.db.execute(
                "INSERT INTO users (email, nick, password, admin) VALUES (?, ?, ?, ?)",
                (user.email, user.nick, user.password_hash, int(user.admin)),
            )
            self.db.commit()
        except sqlite3.IntegrityError as exc:
            self.db.rollback()
            raise DuplicationError(f"E-mail '{user.email}' already in use", field="email") from exc

        user.id = int(cursor.lastrowid)
        logger.info("Created user id=%s", user.id)
        return user

    def update(self, user: User) -> None:
        """Persist all fields and metadata of an existing user.

        Raises:
            DuplicationError: If the new e-mail collides with another user
            ObjectNotFoundError: If the user is no longer stored
        """
        previous = self.db.execute("SELECT email FROM users WHERE id = ?", (user.id,)).fetchone()
        if previous is None:
            raise ObjectNotFoundError(f"User with id '{user.id}' not found")
        try:
            self.db.execute(
                "UPDATE users SET email = ?, nick = ?, password = ?, admin = ? WHERE id = ?",
                (user.email, user.nick, user.password_hash, int(user.admin), user.id),
            )
            self.db.execute("DELETE FROM user_meta WHERE user_id = ?", (user.id,))
            self.db.executemany(
                "INSERT INTO user_meta (user_id, name, value) VALUES (?, ?, ?)",
                [(user.id, name, json.dumps(value)) for name, value in user.meta.items()],
            )
            self.db.commit()
        except sqlite3.IntegrityError as exc:
            self.db.rollback()
            raise DuplicationError(f"E-mail '{user.email}' already in use", field="email") from exc
        finally:
            self._invalidate(user, previous["email"])

    def delete(self, user: User) -> None:
        """Remove a user and its metadata."""
        self.db.execute("DELETE FROM user_meta WHERE user_id = ?", (user.id,))
        self.db.execute("DELETE FROM users WHERE id = ?", (user.id,))
        self.db.commit()
        self._invalidate(user)
        logger.info("Deleted user id=%s", user.id)

    def set_admin(self, user: User, flag: bool) -> None:
        """Grant or revoke admin privileges."""
        user.admin = bool(flag)
        self.db.execute("UPDATE users SET admin = ? WHERE id = ?", (int(user.admin), user.id))
        self.db.commit()
        self._invalidate(user)

    # ─────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────

    def _load_meta(self, user_id: int) -> dict:
        rows = self.db.execute(
            "SELECT name, value FROM user_meta WHERE user_id = ? ORDER BY name", (user_id,)
        ).fetchall()
        return {row["name"]: json.loads(row["value"]) for row in rows}

    def _invalidate(self, user: User, previous_email: Optional[str] = None) -> None:
        if self.cache is None:
            return
        self.cache.delete(f"user:{user.id}")
        for email in (user.email, previous_email):
            if email:
                self.cache.delete(f"user-email:{email.lower()}")

    def _cache_get(self, key: str) -> Optional[dict]:
        if self.cache is None:
            return None
        return self.cache.get(key)

    def _cache_set(self, key: str, value: dict) -> None:
        if self.cache is not None:
            self.cache.set(key, value)


def resolve_repository_factory(path: Optional[str]):
    """Import a repository class from a dotted path.

    Accepts ``package.module:Class`` or ``package.module.Class``. An empty
    path returns the default :class:`UserRepository`.

    Raises:
        ConfigurationError: If the path cannot be imported
    """
    if not path:
        return UserRepository
    module_name, sep, attr = path.partition(":")
    if not sep:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ConfigurationError(f"Invalid repository factory path: {path!r}")
    try:
        module = importlib.import_module(module_name)
        factory = getattr(module, attr)
    except (ImportError, AttributeError) as exc:
        raise ConfigurationError(f"Repository factory {path!r} could not be imported: {exc}") from exc
    if not callable(factory):
        raise ConfigurationError(f"Repository factory {path!r} is not callable")
    return factory
