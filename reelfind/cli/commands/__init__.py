"""CLI commands module."""

from . import config, saved, search

__all__ = ["search", "saved", "config"]
