from .base import ApplicationError, ErrorCode, ErrorLevel, ServiceErrorDetails
from .budget import CapabilityBudget
from .errors import (
    MalformedResponseError,
    NotFoundError,
    ProcessingError,
    RateLimitError,
    ServiceError,
)
