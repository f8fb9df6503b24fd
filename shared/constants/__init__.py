from .entry_types import EntryTypes
from .environments import Environment

__all__ = ["EntryTypes", "Environment"]
