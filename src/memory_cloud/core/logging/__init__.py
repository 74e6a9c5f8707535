"""Structured logging module.

This module provides utilities for structured logging using structlog and logfire.
"""

from .context import bind_log_context, clear_log_context, get_log_context, log_context
from .setup import get_logger, setup_logging

__all__ = [
    # Context management
    "bind_log_context",
    "clear_log_context",
    "get_log_context",
    "log_context",
    # Setup
    "get_logger",
    "setup_logging",
]
