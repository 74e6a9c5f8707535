"""Error context management"""

from datetime import UTC, datetime
from types import TracebackType
from typing import Any
from uuid import uuid4

from .base import ApplicationError
from .logging import get_logger

logger = get_logger(__name__)


class ErrorContext:
    """Captures and stores context around an error"""

    def __init__(self, error: Exception, trace_id: str | None = None, **context: Any):
        self.error = error
        self.trace_id = trace_id or str(uuid4())
        self.timestamp = datetime.now(UTC)
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary format with structured details from ApplicationError"""
        result = {
            "error_type": self.error.__class__.__name__,
            "error_message": str(self.error),
            "trace_id": self.trace_id,
            "timestamp": self.timestamp.isoformat(),
        }

        if isinstance(self.error, ApplicationError):
            result["error_code"] = self.error.code.value
            result["error_level"] = self.error.level.value

            # Prefix the details fields to avoid collisions
            for key, value in self.error.details.model_dump(mode="json").items():
                result[f"details.{key}"] = value

        for key, value in self.context.items():
            result[f"context.{key}"] = value

        return result


class ErrorContextManager:
    """Builds an ErrorContext for one error, sync or async"""

    def __init__(self, error: Exception | None = None, **context: Any) -> None:
        self._error = error
        self._context = context
        self.current: ErrorContext | None = None

    def _enter(self) -> ErrorContext:
        if self._error is None:
            raise ValueError("No error provided for context")
        self.current = ErrorContext(self._error, **self._context)
        return self.current

    def _exit(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
    ) -> None:
        # A new exception raised while handling the original one
        if exc_type is not None and exc_val is not None:
            logger.error(f"Exception during error context handling: {exc_type.__name__}: {exc_val}")

    async def __aenter__(self) -> ErrorContext:
        return self._enter()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._exit(exc_type, exc_val)

    def __enter__(self) -> ErrorContext:
        return self._enter()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._exit(exc_type, exc_val)

    @staticmethod
    def capture_context(error: Exception, **context: Any) -> ErrorContext:
        """Capture error context with additional data"""
        return ErrorContext(error, **context)
