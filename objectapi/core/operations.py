"""Generic object operation: request gates, routing table and default handlers.

A resource plugs its behavior in through :class:`ResourceHandlers` (plain
function values) instead of subclassing. Routing is a fixed table keyed by
``(method, object addressed?)``:

    (POST,   no)   -> create
    (POST,   yes)  -> update
    (GET,    yes)  -> read        (HEAD likewise)
    (GET,    no)   -> collection  (HEAD likewise)
    (DELETE, yes)  -> delete
    (DELETE, no)   -> 400
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .exceptions import DuplicationError
from .hooks import HookRegistry
from .models import User
from .repository import MAX_ROW_ID
from .request_context import RequestContext

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50
LIST_MAX_LIMIT = 200


@dataclass
class OperationResponse:
    """Status code and body handed back to the transport layer."""
    status: int = 200
    body: Any = None

    @classmethod
    def error(cls, status: int, message: str) -> "OperationResponse":
        return cls(status=status, body={"error": message})

    def set_body(self, body: Any) -> None:
        self.body = body


@dataclass
class OperationContext:
    """Everything a handler needs for one request."""
    request: RequestContext
    repository: Any
    hooks: HookRegistry
    principal: Optional[User] = None
    cache: Any = None
    target: Optional[User] = None
    serialize: Callable[["OperationContext", Any], Any] = field(default=lambda ctx, obj: obj.to_dict())
    list_max_limit: int = LIST_MAX_LIMIT

    @property
    def method(self) -> str:
        return self.request.method


Handler = Callable[[OperationContext], OperationResponse]


# ─────────────────────────────────────────────────────────────────────────────
# Default handlers
# ─────────────────────────────────────────────────────────────────────────────

def read_object(ctx: OperationContext) -> OperationResponse:
    if ctx.method == "HEAD":
        return OperationResponse(200, None)
    return OperationResponse(200, ctx.serialize(ctx, ctx.target))


def update_object(ctx: OperationContext, obj: Optional[User] = None) -> OperationResponse:
    """Persist an already mutated object; a uniqueness violation becomes 409."""
    obj = obj if obj is not None else ctx.target
    try:
        ctx.repository.update(obj)
    except DuplicationError as exc:
        logger.info("Update of object id=%s rejected: %s", obj.id, exc)
        return OperationResponse.error(409, str(exc))
    return OperationResponse(200, ctx.serialize(ctx, obj))


def delete_object(ctx: OperationContext) -> OperationResponse:
    ctx.repository.delete(ctx.target)
    return OperationResponse(204, None)


def _int_param(ctx: OperationContext, name: str, default: int) -> int:
    raw = ctx.request.request.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def list_objects(ctx: OperationContext) -> OperationResponse:
    """Paginated collection read (``offset``/``limit`` params)."""
    offset = min(MAX_ROW_ID, max(0, _int_param(ctx, "offset", 0)))
    limit = min(ctx.list_max_limit, max(1, _int_param(ctx, "limit", DEFAULT_LIST_LIMIT)))
    if ctx.method == "HEAD":
        return OperationResponse(200, None)
    objects = ctx.repository.search(offset=offset, limit=limit)
    return OperationResponse(200, {
        "objects": [ctx.serialize(ctx, obj) for obj in objects],
        "total": ctx.repository.count(),
        "offset": offset,
        "limit": limit,
    })


def no_object_given(ctx: OperationContext) -> OperationResponse:
    return OperationResponse.error(400, "No object given")


@dataclass(frozen=True)
class ResourceHandlers:
    """Per-resource hooks for the generic dispatcher."""
    create: Handler
    update: Handler = update_object
    read: Handler = read_object
    delete: Handler = delete_object
    collection: Handler = list_objects
    serialize: Callable[[OperationContext, Any], Any] = field(default=lambda ctx, obj: obj.to_dict())


ROUTES = {
    ("POST", False): "create",
    ("POST", True): "update",
    ("GET", True): "read",
    ("HEAD", True): "read",
    ("GET", False): "collection",
    ("HEAD", False): "collection",
    ("DELETE", True): "delete",
}

# Routes that operate on the addressed object and need it to exist
ITEM_ROUTES = frozenset({"update", "read", "delete"})


def route(method: str, addressed: bool) -> Optional[str]:
    """Name of the handler for a (method, addressed) pair, None if unrouted."""
    return ROUTES.get((method.upper(), bool(addressed)))


class ObjectOperation:
    """Generic dispatcher for one resource type."""

    def __init__(self, handlers: ResourceHandlers, resource_name: str = "Object"):
        self.handlers = handlers
        self.resource_name = resource_name

    def dispatch(self, ctx: OperationContext) -> OperationResponse:
        name = route(ctx.method, ctx.request.addressed)
        if name is None:
            return no_object_given(ctx)
        if name in ITEM_ROUTES and ctx.target is None:
            return OperationResponse.error(404, f"{self.resource_name} not found")
        ctx.serialize = self.handlers.serialize
        handler: Handler = getattr(self.handlers, name)
        return handler(ctx)


# ─────────────────────────────────────────────────────────────────────────────
# Request gates
# ─────────────────────────────────────────────────────────────────────────────

def run_operation(operation, principal: Optional[User], db: Any, cache: Any = None) -> OperationResponse:
    """Run the method, authentication and required-argument gates, then ``exec``.

    ``operation`` provides ``context``, ``allowed_methods()``,
    ``requires_auth()``, ``required_args()`` and ``exec(principal, db, cache)``.
    """
    method = operation.context.method
    if method not in operation.allowed_methods():
        return OperationResponse.error(405, f"Method {method} not allowed")

    if operation.requires_auth() and principal is None:
        return OperationResponse.error(401, "Authentication required")

    request = operation.context.request
    missing = [arg for arg in operation.required_args() if not request.has(arg)]
    if missing:
        return OperationResponse.error(400, f"Missing required arguments: {', '.join(missing)}")

    return operation.exec(principal, db, cache)
