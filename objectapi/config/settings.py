"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    # Priority 1: Read from /run/secrets
    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info("Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as exc:
            logger.warning("Failed to read /run/secrets/%s: %s", secret_name, exc)

    # Priority 2: Fallback to environment variable
    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


@dataclass(frozen=True)
class OperationConfig:
    """Per-operation configuration (which repository factory to build)."""
    factory: Optional[str] = None


@dataclass
class AppConfig:
    """Application configuration container."""
    # Mode
    demo_mode: bool = False

    # Storage
    database_path: str = ".runtime/objectapi.db"
    user_object_factory: str = ""

    # Cache
    cache_ttl: int = 300
    cache_maxsize: int = 1024

    # Collection reads
    list_max_limit: int = 200

    # Audit
    audit_log_dir: str = ".runtime/audit"
    audit_log_signing_key: str = ""

    def operation_config(self, name: str) -> OperationConfig:
        """Configuration lookup for an operation (e.g. ``"user"``).

        Only the user operation is configurable. An empty OperationConfig
        means the default repository is used.
        """
        if name == "user" and self.user_object_factory:
            return OperationConfig(factory=self.user_object_factory)
        return OperationConfig()


def _get_int(var_name: str, default: int) -> int:
    """Read an integer environment variable."""
    raw = os.environ.get(var_name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {var_name} must be an integer, got {raw!r}")


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"

    database_path = os.environ.get("DATABASE_PATH", "").strip()
    if not database_path:
        database_path = ".runtime/objectapi.db"

    user_object_factory = os.environ.get("USER_OBJECT_FACTORY", "").strip()

    cache_ttl = _get_int("CACHE_TTL", 300)
    cache_maxsize = _get_int("CACHE_MAXSIZE", 1024)
    if cache_maxsize < 1:
        raise RuntimeError("Environment variable CACHE_MAXSIZE must be at least 1")
    list_max_limit = _get_int("LIST_MAX_LIMIT", 200)
    if list_max_limit < 1:
        raise RuntimeError("Environment variable LIST_MAX_LIMIT must be at least 1")

    # Audit
    audit_log_dir = os.environ.get("AUDIT_LOG_DIR", ".runtime/audit")
    audit_log_signing_key = _load_secret_from_file("audit_log_signing_key", "AUDIT_LOG_SIGNING_KEY") or ""
    if not audit_log_signing_key and demo_mode:
        audit_log_signing_key = "demo-audit-signing-key-change-in-production"
        logger.warning("[demo-mode] Using demo audit signing key")

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    logger.info(
        "Mode=%s; database=%s; user factory=%s",
        mode_label, database_path, user_object_factory or "default",
    )

    return AppConfig(
        demo_mode=demo_mode,
        database_path=database_path,
        user_object_factory=user_object_factory,
        cache_ttl=cache_ttl,
        cache_maxsize=cache_maxsize,
        list_max_limit=list_max_limit,
        audit_log_dir=audit_log_dir,
        audit_log_signing_key=audit_log_signing_key,
    )
