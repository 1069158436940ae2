"""User resource endpoint (``/api/user`` and ``/api/user/<id-or-email>``).

Thin transport adapter: converts the Flask request into a ParsedRequest,
resolves the principal, runs the UserOperation and converts its
OperationResponse back into a Flask response.
"""
from __future__ import annotations
import logging
import re
from typing import Any

from flask import Blueprint, Response, jsonify, request

from objectapi.core.operations import OperationResponse, run_operation
from objectapi.core.request_context import ParsedRequest, RequestContext
from objectapi.core.user_operation import UserOperation

from .auth import current_principal
from .helpers.runtime import get_cache, get_config, get_db, get_hooks

bp = Blueprint("users", __name__)

logger = logging.getLogger(__name__)

# PUT/PATCH are routed too so they get the operation's JSON 405
ROUTE_METHODS = ["GET", "HEAD", "POST", "DELETE", "PUT", "PATCH"]

# PHP-style form keys: meta[name]=value
META_FORM_KEY = re.compile(r"^meta\[([^\]]+)\]$")


def parse_request() -> ParsedRequest:
    """Merge query string, form fields and JSON body into one params map."""
    params: dict[str, Any] = {}
    meta: dict[str, Any] = {}

    for source in (request.args, request.form):
        for key, value in source.items():
            match = META_FORM_KEY.match(key)
            if match:
                meta[match.group(1)] = value
            else:
                params[key] = value

    if request.is_json:
        payload = request.get_json(silent=True)
        if isinstance(payload, dict):
            params.update(payload)

    if meta:
        existing = params.get("meta")
        merged = dict(existing) if isinstance(existing, dict) else {}
        merged.update(meta)
        params["meta"] = merged

    return ParsedRequest(method=request.method, path=request.path, params=params)


def to_flask_response(result: OperationResponse) -> Response:
    if result.body is None:
        return Response(status=result.status)
    response = jsonify(result.body)
    response.status_code = result.status
    return response


@bp.route("/api/user", defaults={"segment": ""}, methods=ROUTE_METHODS)
@bp.route("/api/user/<path:segment>", methods=ROUTE_METHODS)
def user_resource(segment: str):
    """Dispatch one request against the user resource."""
    context = RequestContext.build(parse_request())
    operation = UserOperation(context, settings=get_config(), hooks=get_hooks())

    result = run_operation(operation, current_principal(), get_db(), get_cache())

    logger.info(
        "%s %s -> %s",
        context.method, request.path, result.status,
    )
    return to_flask_response(result)
