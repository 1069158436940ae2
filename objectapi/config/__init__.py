"""Configuration module for the objectapi application."""
from .settings import AppConfig, OperationConfig, load_settings

__all__ = ["AppConfig", "OperationConfig", "load_settings"]
