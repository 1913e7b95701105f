"""Utilities for devcontainer-cli."""

from .log_setup import JsonFormatter, configure_logging

__all__ = [
    'JsonFormatter',
    'configure_logging',
]
