"""Error handlers turning application errors into API responses"""

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse

from memory_cloud.core.logging import get_logger

from .base import ApplicationError, ErrorCode, ErrorLevel
from .error_context import ErrorContext, ErrorContextManager

logger = get_logger(__name__)

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PROCESSING_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorCode.MALFORMED_RESPONSE: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.AUTHENTICATION_FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class ErrorHandler:
    """Formats errors into the JSON body returned to clients"""

    def _format_response(
        self,
        error_context: ErrorContext,
        level: ErrorLevel,
    ) -> dict[str, Any]:
        """Format error response"""
        response: dict[str, Any] = {
            "error": str(error_context.error),
            "error_code": ErrorCode.PROCESSING_FAILED.value,
            "level": level.value,
            "trace_id": error_context.trace_id,
            "timestamp": error_context.timestamp.isoformat(),
        }

        if isinstance(error_context.error, ApplicationError):
            response["error"] = error_context.error.message
            response["error_code"] = error_context.error.code.value
            response["details"] = error_context.error.details.model_dump(mode="json")

        return response

    def status_for(self, error: ApplicationError) -> int:
        return STATUS_BY_CODE.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    def handle(self, error: ApplicationError, **context: Any) -> tuple[int, dict[str, Any]]:
        """Return the status code and body for an application error"""
        error_context = ErrorContextManager.capture_context(error, **context)
        return self.status_for(error), self._format_response(error_context, error.level)


class GlobalErrorHandler(ErrorHandler):
    """Global error handler for the FastAPI application"""

    async def __call__(self, request: Request, error: Exception) -> JSONResponse:
        if not isinstance(error, ApplicationError):
            raise error
        status_code, body = self.handle(error, path=request.url.path, method=request.method)
        logger.log(
            error.level.to_logging_level(),
            f"Request failed: {error.message}",
            status_code=status_code,
            error_code=error.code.value,
            path=request.url.path,
        )
        return JSONResponse(status_code=status_code, content=body)
