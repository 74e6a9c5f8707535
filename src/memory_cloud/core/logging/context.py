"""Logging context utilities for structured logging.

Context is stored in structlog's contextvars, so every logger call made while
a context is bound (for example while the sweep handles one memory) carries
the bound keys. `merge_contextvars` in the processor chain picks them up.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog


def get_log_context() -> dict[str, Any]:
    """Get the currently bound logging context.

    Returns:
        Dict containing a copy of the bound context
    """
    return dict(structlog.contextvars.get_contextvars())


def bind_log_context(**values: Any) -> None:
    """Bind keys into the logging context for the current task."""
    structlog.contextvars.bind_contextvars(**values)


def clear_log_context() -> None:
    """Clear the current logging context."""
    structlog.contextvars.clear_contextvars()


@contextmanager
def log_context(**values: Any) -> Iterator[None]:
    """Bind keys for the duration of a block, then unbind them.

    Args:
        **values: Keys to bind
    """
    with structlog.contextvars.bound_contextvars(**values):
        yield
