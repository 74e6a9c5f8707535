"""Specific error types for the Memory Cloud application."""

from .base import (
    AIServiceErrorDetails,
    ApplicationError,
    ErrorCode,
    ErrorLevel,
    ResourceErrorDetails,
    ServiceErrorDetails,
)


class ServiceError(ApplicationError):
    """Error from external service calls."""

    def __init__(self, message: str, details: ServiceErrorDetails | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.SERVICE_UNAVAILABLE,
            level=ErrorLevel.ERROR,
            details=details or ServiceErrorDetails(
                source="service",
                operation="external_call",
                service_name="unknown"
            )
        )


class ProcessingError(ApplicationError):
    """General processing errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.PROCESSING_FAILED,
            level=ErrorLevel.ERROR,
            details=details
        )


class RateLimitError(ApplicationError):
    """Capability budget exhausted, locally or at the provider."""

    def __init__(self, message: str, details: ServiceErrorDetails | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.RATE_LIMITED,
            level=ErrorLevel.WARNING,
            details=details
        )


class MalformedResponseError(ApplicationError):
    """A capability answered, but not with anything we can parse."""

    def __init__(self, message: str, details: AIServiceErrorDetails | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.MALFORMED_RESPONSE,
            level=ErrorLevel.WARNING,
            details=details
        )


class NotFoundError(ApplicationError):
    """A requested memory or family has no data."""

    def __init__(self, message: str, details: ResourceErrorDetails | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.NOT_FOUND,
            level=ErrorLevel.INFO,
            details=details
        )
