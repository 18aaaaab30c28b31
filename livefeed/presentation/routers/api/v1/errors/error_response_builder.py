"""Error response builder for RFC 7807 Problem Details.

Converts DomainError values (including StreamError) coming back from the
streaming infrastructure into JSON problem responses.

Exports:
    ErrorResponseBuilder: Utility class for building RFC 7807 responses
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from livefeed.core.config import get_settings
from livefeed.core.enums import ErrorCode
from livefeed.core.errors import DomainError
from livefeed.presentation.routers.api.v1.errors.problem_details import (
    ErrorDetail,
    ProblemDetails,
)

_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.INVALID_EVENT_TYPE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_PAYLOAD: status.HTTP_400_BAD_REQUEST,
    ErrorCode.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.RESOURCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.RESOURCE_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.EVENT_LOG_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.EVENT_LOG_OPERATION_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_TITLE_BY_CODE: dict[ErrorCode, str] = {
    ErrorCode.INVALID_EVENT_TYPE: "Validation Failed",
    ErrorCode.INVALID_PAYLOAD: "Validation Failed",
    ErrorCode.VALIDATION_FAILED: "Validation Failed",
    ErrorCode.RESOURCE_NOT_FOUND: "Resource Not Found",
    ErrorCode.RESOURCE_CONFLICT: "Resource Conflict",
    ErrorCode.EVENT_LOG_UNAVAILABLE: "Event Log Unavailable",
    ErrorCode.EVENT_LOG_OPERATION_FAILED: "Event Log Operation Failed",
}


class ErrorResponseBuilder:
    """Build RFC 7807 Problem Details error responses.

    Example:
        >>> response = ErrorResponseBuilder.from_domain_error(
        ...     error=result.error,
        ...     request=request,
        ...     trace_id=get_trace_id(),
        ... )
    """

    @staticmethod
    def from_domain_error(
        error: DomainError,
        request: Request,
        trace_id: str | None,
    ) -> JSONResponse:
        """Convert a DomainError to an RFC 7807 JSON response.

        Args:
            error: Error value from a Failure.
            request: FastAPI Request object (for instance URL).
            trace_id: Request trace ID for debugging.

        Returns:
            JSONResponse with ProblemDetails content.
        """
        status_code = _STATUS_BY_CODE.get(
            error.code, status.HTTP_500_INTERNAL_SERVER_ERROR
        )

        problem = ProblemDetails(
            type=f"{get_settings().api_base_url}/errors/{error.code.value}",
            title=_TITLE_BY_CODE.get(error.code, "Internal Server Error"),
            status=status_code,
            detail=error.message,
            instance=str(request.url.path),
            trace_id=trace_id,
        )

        field = getattr(error, "field", None)
        if field:
            problem.errors = [
                ErrorDetail(field=field, code=error.code.value, message=error.message)
            ]

        return JSONResponse(
            status_code=status_code,
            content=problem.model_dump(exclude_none=True),
            media_type="application/problem+json",
        )
