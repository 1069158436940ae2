"""Per-app and per-request runtime objects (db connection, cache, hooks)."""
from __future__ import annotations
import sqlite3

from flask import Flask, current_app, g

from objectapi.config import AppConfig
from objectapi.core.cache import MemoryCache
from objectapi.core.db import get_connection
from objectapi.core.hooks import HookRegistry

EXTENSION_KEY = "objectapi"


def init_runtime(app: Flask, cfg: AppConfig, hooks: HookRegistry | None = None) -> None:
    """Attach the app-wide cache and hook registry to the Flask app."""
    app.extensions[EXTENSION_KEY] = {
        "cache": MemoryCache(ttl=cfg.cache_ttl, maxsize=cfg.cache_maxsize),
        "hooks": hooks or HookRegistry(),
    }
    app.teardown_appcontext(close_db)


def get_config() -> AppConfig:
    return current_app.config["APP_CONFIG"]


def get_cache() -> MemoryCache:
    return current_app.extensions[EXTENSION_KEY]["cache"]


def get_hooks() -> HookRegistry:
    return current_app.extensions[EXTENSION_KEY]["hooks"]


def get_db() -> sqlite3.Connection:
    """Open (once per request) the database connection."""
    if "db" not in g:
        g.db = get_connection(get_config().database_path)
    return g.db


def close_db(exc: BaseException | None = None) -> None:
    db = g.pop("db", None)
    if db is not None:
        db.close()
