"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with all blueprints, hooks, and configuration.
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import Flask

from objectapi.config import AppConfig, load_settings
from objectapi.core.audit import register_audit_subscriber
from objectapi.core.db import get_connection, init_schema
from objectapi.core.hooks import HookRegistry

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: Optional[AppConfig] = None, hooks: Optional[HookRegistry] = None) -> Flask:
    """Create and configure Flask application."""
    # Load configuration
    cfg = cfg or load_settings()

    # Create Flask app
    app = Flask(__name__)

    # Store config for easy access in routes
    app.config["APP_CONFIG"] = cfg
    app.config["DEMO_MODE"] = cfg.demo_mode
    app.json.sort_keys = False

    # Schema is created once at startup
    conn = get_connection(cfg.database_path)
    try:
        init_schema(conn)
    finally:
        conn.close()

    # App-wide cache and hook registry
    from objectapi.api.helpers.runtime import init_runtime
    hooks = hooks or HookRegistry()
    init_runtime(app, cfg, hooks)

    # Audit trail subscriber for user writes
    register_audit_subscriber(hooks, cfg.audit_log_dir, cfg.audit_log_signing_key)

    # Register blueprints
    from objectapi.api import docs, errors, health, users

    app.register_blueprint(health.bp)
    app.register_blueprint(users.bp)
    app.register_blueprint(docs.bp)

    # Register error handlers
    errors.register_error_handlers(app)

    # Log startup info
    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    logger.info("Mode=%s; user resource registered at /api/user", mode_label)

    if cfg.demo_mode:
        logger.warning("Demo mode active - do not deploy with demo credentials")

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
