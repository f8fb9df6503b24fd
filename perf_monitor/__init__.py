"""Dayboard page performance monitor."""

__version__ = "0.1.0"
