"""Health check endpoints."""
import sqlite3

from flask import Blueprint

from .helpers.runtime import get_db

bp = Blueprint("health", __name__)


@bp.route("/health")
def health_check():
    """Basic health check endpoint."""
    return ("ok", 200, {"Content-Type": "text/plain"})


@bp.route("/ready")
def readiness_check():
    """Readiness check endpoint: the user store must answer a trivial query."""
    try:
        get_db().execute("SELECT 1 FROM users LIMIT 1")
    except sqlite3.Error:
        return ("not ready", 503, {"Content-Type": "text/plain"})
    return ("ready", 200, {"Content-Type": "text/plain"})
