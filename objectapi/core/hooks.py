"""Event and filter hooks.

Two kinds of extension points:
    - events:  ``trigger_event(name, *args)`` notifies every handler registered
               with ``on(name, handler)``; return values are ignored.
    - filters: ``apply_filter(name, value, *args)`` passes ``value`` through every
               function registered with ``add_filter(name, fn)`` and returns the
               final result.

Handlers run synchronously in registration order. Exceptions raised by a
handler are not caught here; they propagate to the caller.
"""
from __future__ import annotations
import logging
from threading import Lock
from typing import Any, Callable

logger = logging.getLogger(__name__)


class HookRegistry:
    """In-memory registry of event handlers and filters."""

    def __init__(self):
        self._events: dict[str, list[Callable[..., Any]]] = {}
        self._filters: dict[str, list[Callable[..., Any]]] = {}
        self._lock = Lock()

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        """Register a handler for an event name (e.g. ``post.user``)."""
        if not callable(handler):
            raise TypeError(f"Handler must be callable, got {type(handler)}")
        with self._lock:
            self._events.setdefault(event, []).append(handler)

    def add_filter(self, name: str, fn: Callable[..., Any]) -> None:
        """Register a transform for a filter name (e.g. ``user.array``)."""
        if not callable(fn):
            raise TypeError(f"Filter must be callable, got {type(fn)}")
        with self._lock:
            self._filters.setdefault(name, []).append(fn)

    def trigger_event(self, name: str, *args: Any) -> None:
        handlers = list(self._events.get(name, ()))
        if not handlers:
            logger.debug("No handlers for event '%s'", name)
            return
        for handler in handlers:
            handler(*args)

    def apply_filter(self, name: str, value: Any, *args: Any) -> Any:
        for fn in list(self._filters.get(name, ())):
            value = fn(value, *args)
        return value

    def has_handlers(self, name: str) -> bool:
        return bool(self._events.get(name))
