"""Audit logging for user write operations.

Events are appended to ``<audit dir>/user-events.jsonl`` (one JSON object per
line) and signed with HMAC-SHA256 when a signing key is configured.
"""
from __future__ import annotations
import datetime
import hashlib
import hmac
import json
import logging
from pathlib import Path
from typing import Any, Literal

from .hooks import HookRegistry

logger = logging.getLogger(__name__)

AUDIT_LOG_FILENAME = "user-events.jsonl"

EventType = Literal[
    "post.user", "delete.user",
    "grant_admin", "revoke_admin",
]


def audit_log_file(audit_dir: str | Path) -> Path:
    return Path(audit_dir) / AUDIT_LOG_FILENAME


def _ensure_audit_dir(audit_dir: Path) -> None:
    """Create audit directory with restricted permissions."""
    audit_dir.mkdir(parents=True, exist_ok=True)
    audit_dir.chmod(0o700)


def _sign_event(event: dict[str, Any], signing_key: str) -> str:
    """Generate HMAC-SHA256 signature for audit event."""
    if not signing_key:
        return ""
    # Canonical JSON representation for signing
    canonical = json.dumps(event, sort_keys=True, separators=(",", ":"))
    return hmac.new(signing_key.encode("utf-8"), canonical.encode("utf-8"), hashlib.sha256).hexdigest()


def log_user_event(
    event_type: EventType,
    email: str,
    *,
    audit_dir: str | Path,
    signing_key: str = "",
    operator: str = "anonymous",
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    """Append a user event to the audit trail with timestamp and signature.

    Args:
        event_type: Lifecycle event name (``post.user``, ``delete.user``, ...)
        email: E-mail of the user affected (empty for creation requests)
        audit_dir: Directory holding the audit log
        signing_key: HMAC key; events are unsigned when empty
        operator: Who performed the operation
        details: Additional context (method, path, target id)
        success: Whether the operation was authorized to proceed
    """
    directory = Path(audit_dir)
    _ensure_audit_dir(directory)
    log_file = audit_log_file(directory)

    event = {
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "event_type": event_type,
        "email": email,
        "operator": operator,
        "success": success,
        "details": details or {},
    }

    signature = _sign_event(event, signing_key)
    if signature:
        event["signature"] = signature

    with log_file.open("a", encoding="utf-8") as f:
        f.write(json.dumps(event, ensure_ascii=False) + "\n")

    log_file.chmod(0o600)


def safe_log_user_event(event_type: EventType, email: str, **kwargs: Any) -> bool:
    """Log a user event without raising.

    Returns:
        True if the event was written, False otherwise
    """
    try:
        log_user_event(event_type, email, **kwargs)
        return True
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("Failed to log %s event for %s: %s", event_type, email or "<new user>", exc)
        return False


def verify_audit_log(audit_dir: str | Path, signing_key: str) -> tuple[int, int]:
    """Verify all signatures in the audit log.

    Returns:
        Tuple of (total_events, valid_signatures)
    """
    log_file = audit_log_file(audit_dir)
    if not log_file.exists():
        return 0, 0

    total = 0
    valid = 0

    with log_file.open("r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            total += 1
            try:
                event = json.loads(line)
                stored_sig = event.pop("signature", "")
                if not stored_sig:
                    continue
                computed_sig = _sign_event(event, signing_key)
                if hmac.compare_digest(stored_sig, computed_sig):
                    valid += 1
            except (json.JSONDecodeError, KeyError):
                continue

    return total, valid


def register_audit_subscriber(hooks: HookRegistry, audit_dir: str | Path, signing_key: str = "") -> None:
    """Record every authorized user write request (``post.user``, ``delete.user``)."""

    def _make_handler(event_type: EventType):
        def _handler(ctx) -> None:
            principal = ctx.principal
            target = ctx.target
            safe_log_user_event(
                event_type,
                target.email if target is not None else str(ctx.request.request.get("email") or ""),
                audit_dir=audit_dir,
                signing_key=signing_key,
                operator=principal.email if principal is not None else "anonymous",
                details={
                    "method": ctx.method,
                    "path": ctx.request.request.path,
                    "target_id": target.id if target is not None else None,
                },
            )
        return _handler

    hooks.on("post.user", _make_handler("post.user"))
    hooks.on("delete.user", _make_handler("delete.user"))
