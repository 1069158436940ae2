"""Object-layer exceptions for error handling."""
from __future__ import annotations


class ObjectError(Exception):
    """Base exception for all object operations."""
    pass


class DuplicationError(ObjectError):
    """Object persistence failed - a unique field (e-mail) is already taken.
    
    Attributes:
        field: Name of the unique field that collided, when known
    """
    
    def __init__(self, message: str = "Duplicate unique key", field: str | None = None):
        self.field = field
        super().__init__(message)


class ObjectNotFoundError(ObjectError):
    """Object lookup failed - identifier does not resolve."""
    pass


class ConfigurationError(ObjectError):
    """Operation configuration could not be resolved (bad factory path, etc.)."""
    pass

