"""Shared utilities and components for the performance monitor."""

from .config import BaseLoggingConfig, BaseServiceConfig
from .constants import EntryTypes, Environment

__all__ = [
    "Environment",
    "EntryTypes",
    "BaseServiceConfig",
    "BaseLoggingConfig",
]
