"""CRUD operation for user objects.

Specializes the generic object operation with:
    - ownership-based authorization (non-admins may only touch themselves)
    - refusal to delete accounts holding admin privileges
    - required fields and metadata on creation, with rollback on bad metadata
    - a single conflict message for duplicate e-mail addresses
"""
from __future__ import annotations
import logging
import time
from typing import Any, Optional

from ..config.settings import AppConfig
from . import operations
from .authorization import WRITE_METHODS, authorize, requires_auth
from .exceptions import DuplicationError
from .hooks import HookRegistry
from .metadata import MetaValidator, apply_meta, validate_meta_entry
from .models import User
from .operations import ObjectOperation, OperationContext, OperationResponse, ResourceHandlers
from .repository import resolve_repository_factory
from .request_context import USER_FIELDS, RequestContext, extract_meta, extract_user_fields, is_valid_email

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_ERROR = "E-mail taken by another user"
INVALID_EMAIL_ERROR = "Invalid e-mail address"


class UserOperation:
    """The ``user`` resource operation (``/api/user[/<id-or-email>]``)."""

    resource_name = "User"

    def __init__(
        self,
        context: RequestContext,
        settings: Optional[AppConfig] = None,
        hooks: Optional[HookRegistry] = None,
        meta_validator: MetaValidator = validate_meta_entry,
    ):
        self.context = context
        self.settings = settings or AppConfig()
        self.hooks = hooks or HookRegistry()
        self.meta_validator = meta_validator
        self.repository = None
        self.dispatcher = ObjectOperation(
            ResourceHandlers(
                create=self.create_new_object,
                update=self.update_object,
                serialize=self.object_to_dict,
            ),
            resource_name=self.resource_name,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Gates consulted by run_operation() before exec()
    # ─────────────────────────────────────────────────────────────────────

    def allowed_methods(self) -> tuple[str, ...]:
        return ("GET", "HEAD", "POST", "DELETE")

    def requires_auth(self) -> bool:
        return requires_auth(self.context.method, self.context.addressed)

    def required_args(self) -> tuple[str, ...]:
        """Fields required to create a new user; nothing otherwise."""
        if self.context.method == "POST" and not self.context.addressed:
            return USER_FIELDS
        return ()

    # ─────────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────────

    def create_repository(self, db: Any, cache: Any):
        """Build the repository from operation configuration (or the default)."""
        conf = self.settings.operation_config("user")
        factory = resolve_repository_factory(conf.factory)
        return factory(db, cache)

    def exec(self, principal: Optional[User], db: Any, cache: Any = None) -> OperationResponse:
        self.repository = self.create_repository(db, cache)
        method = self.context.method

        target = None
        if self.context.addressed:
            # Writes are authorized against the stored row, never a cached copy
            target = self.repository.load(self.context.requested, use_cache=method not in WRITE_METHODS)

        if method in WRITE_METHODS and target is not None:
            decision = authorize(principal, method, target)
            if not decision.allowed:
                logger.info(
                    "Denied %s on user id=%s for principal id=%s (%s)",
                    method, target.id, principal.id if principal else None, decision.status,
                )
                return OperationResponse(decision.status, decision.to_body())

        ctx = OperationContext(
            request=self.context,
            repository=self.repository,
            hooks=self.hooks,
            principal=principal,
            cache=cache,
            target=target,
            serialize=self.object_to_dict,
            list_max_limit=self.settings.list_max_limit,
        )

        self.hooks.trigger_event(f"{method.lower()}.user", ctx)

        return self.dispatcher.dispatch(ctx)

    # ─────────────────────────────────────────────────────────────────────
    # Lifecycle handlers
    # ─────────────────────────────────────────────────────────────────────

    def create_new_object(self, ctx: OperationContext) -> OperationResponse:
        params = ctx.request.request.params
        if not is_valid_email(str(params["email"]).strip()):
            return OperationResponse.error(400, INVALID_EMAIL_ERROR)

        try:
            user = ctx.repository.create_user(
                str(params["email"]),
                str(params["nick"]),
                str(params["password"]),
            )
        except DuplicationError:
            return OperationResponse.error(409, DUPLICATE_EMAIL_ERROR)

        user.meta["created"] = int(time.time())

        meta = extract_meta(params)
        if meta is not None:
            result = apply_meta(user, meta, self.meta_validator)
            if result is not None:
                # Bad metadata: undo the creation
                ctx.repository.delete(user)
                logger.warning("Removed new user id=%s after rejected metadata", user.id)
                return OperationResponse(result[0], result[1])

        ctx.repository.update(user)
        return OperationResponse(201, self.object_to_dict(ctx, user))

    def update_object(self, ctx: OperationContext) -> OperationResponse:
        user = ctx.target
        fields = extract_user_fields(ctx.request.request.params)

        if "email" in fields:
            if not is_valid_email(fields["email"].strip()):
                return OperationResponse.error(400, INVALID_EMAIL_ERROR)
            user.set_email(fields["email"])
        if "nick" in fields:
            user.set_nick(fields["nick"])
        if "password" in fields:
            user.set_password(fields["password"])

        response = operations.update_object(ctx, user)
        if response.status == 409:
            response.set_body({"error": DUPLICATE_EMAIL_ERROR})
        return response

    def object_to_dict(self, ctx: OperationContext, user: User) -> Any:
        return self.hooks.apply_filter("user.array", user.to_dict(), ctx)
