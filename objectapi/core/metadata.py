"""Metadata validation and application for user objects."""
from __future__ import annotations
import logging
import re
from typing import Any, Callable, Mapping, Optional

from .models import User

logger = logging.getLogger(__name__)

# Validation constraints
META_NAME_MAX_LENGTH = 128
META_VALUE_MAX_LENGTH = 1024
META_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
RESERVED_META_NAMES = frozenset({"created"})

# Either None (accepted) or (status, body)
MetaResult = Optional[tuple[int, dict]]
MetaValidator = Callable[[Any, Any], MetaResult]


def _rejected(message: str) -> tuple[int, dict]:
    return 400, {"error": message}


def validate_meta_entry(name: Any, value: Any) -> MetaResult:
    """Check one proposed metadata entry.

    Returns:
        None when the entry is acceptable, otherwise ``(status, body)``
    """
    if not isinstance(name, str) or not name:
        return _rejected("Meta name must be a non-empty string")
    if len(name) > META_NAME_MAX_LENGTH:
        return _rejected(f"Meta name must not exceed {META_NAME_MAX_LENGTH} characters")
    if not META_NAME_PATTERN.match(name):
        return _rejected(f"Meta name '{name}' contains invalid characters")
    if name in RESERVED_META_NAMES:
        return _rejected(f"Meta name '{name}' is reserved")

    if value is not None and not isinstance(value, (str, int, float, bool)):
        return _rejected(f"Meta value for '{name}' must be a scalar")
    if isinstance(value, str) and len(value) > META_VALUE_MAX_LENGTH:
        return _rejected(f"Meta value for '{name}' must not exceed {META_VALUE_MAX_LENGTH} characters")
    return None


def apply_meta(obj: User, meta: Mapping[str, Any], validator: MetaValidator = validate_meta_entry) -> MetaResult:
    """Apply request metadata to an object.

    Entries are applied in order. ``None`` or the string ``"null"`` removes the
    key. Application stops at the first rejected entry, whose result is
    returned.
    """
    for name, value in meta.items():
        result = validator(name, value)
        if result is not None:
            logger.info("Rejected meta entry '%s' (status %s)", name, result[0])
            return result
        if value is None or value == "null":
            obj.meta.pop(name, None)
        else:
            obj.meta[name] = value
    return None
