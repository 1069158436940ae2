"""Principal resolution for API requests.

The acting user is identified with HTTP Basic credentials (e-mail and
password) checked against the user repository. Missing or wrong
credentials leave the request anonymous; the operation gates decide
whether that is acceptable.
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import request

from objectapi.core.models import User
from objectapi.core.repository import resolve_repository_factory
from objectapi.core.request_context import is_valid_email

from .helpers.runtime import get_cache, get_config, get_db

logger = logging.getLogger(__name__)


def current_principal() -> Optional[User]:
    """Return the authenticated user for the current request, or None."""
    credentials = request.authorization
    if credentials is None or (credentials.type or "").lower() != "basic":
        return None

    email = (credentials.username or "").strip()
    password = credentials.password or ""
    if not is_valid_email(email) or not password:
        return None

    factory = resolve_repository_factory(get_config().operation_config("user").factory)
    repository = factory(get_db(), get_cache())
    user = repository.load(email, use_cache=False)
    if user is None or not user.check_password(password):
        logger.info("Rejected credentials for path=%s", request.path)
        return None
    return user
