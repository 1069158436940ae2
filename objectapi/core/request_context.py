"""Request value objects and field extraction.

A request reaches the core as a :class:`ParsedRequest` (method, path, params).
The object addressed by the path is resolved once into a
:class:`RequestContext`, which is then passed down to every step of the
operation.
"""
from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Union

# Recognized user fields in request params
USER_FIELDS = ("email", "nick", "password")
META_FIELD = "meta"

EMAIL_MAX_LENGTH = 254
INTEGER_PATTERN = re.compile(r"^[0-9]+$")
EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$"
)

RequestedObject = Union[int, str, None]


def is_valid_email(value: str) -> bool:
    """Syntactic e-mail check (no DNS lookup)."""
    if not value or len(value) > EMAIL_MAX_LENGTH:
        return False
    return bool(EMAIL_PATTERN.match(value))


def resolve_requested_object(path: str) -> RequestedObject:
    """Resolve the final path segment into an object identifier.

    Args:
        path: Request path, e.g. ``/api/user/12`` or ``/api/user/a@b.se``

    Returns:
        ``int`` for a numeric id, ``str`` for an e-mail address, or ``None``
        when the segment addresses no object.
    """
    segment = (path or "").split("/")[-1].strip()
    if INTEGER_PATTERN.match(segment):
        return int(segment)
    if is_valid_email(segment):
        return segment
    return None


@dataclass(frozen=True)
class ParsedRequest:
    """Method, path and merged query/body parameters of one request."""
    method: str
    path: str = ""
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "method", (self.method or "GET").upper())

    def get(self, name: str, default: Any = None) -> Any:
        return self.params.get(name, default)

    def has(self, name: str) -> bool:
        """True when the field is present and non-empty."""
        value = self.params.get(name)
        if value is None:
            return False
        if isinstance(value, (str, list, tuple, dict)) and len(value) == 0:
            return False
        return True


@dataclass(frozen=True)
class RequestContext:
    """Request-scoped values computed once and passed down.

    ``requested`` is the resolved identifier of the addressed object (or
    ``None``). It is computed by :meth:`build` and never recomputed.
    """
    request: ParsedRequest
    requested: RequestedObject = None

    @classmethod
    def build(
        cls,
        request: ParsedRequest,
        resolver: Callable[[str], RequestedObject] = resolve_requested_object,
    ) -> "RequestContext":
        return cls(request=request, requested=resolver(request.path))

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def addressed(self) -> bool:
        return self.requested is not None


def extract_user_fields(params: Mapping[str, Any]) -> dict[str, str]:
    """Pick the present, non-empty user fields out of request params.

    Missing or empty fields are left out (no-op), never cleared.
    """
    fields = {}
    for name in USER_FIELDS:
        value = params.get(name)
        if value is None or value == "":
            continue
        fields[name] = str(value)
    return fields


def extract_meta(params: Mapping[str, Any]) -> Optional[dict]:
    """Return the ``meta`` mapping from request params, or None."""
    meta = params.get(META_FIELD)
    if isinstance(meta, Mapping):
        return dict(meta)
    return None
