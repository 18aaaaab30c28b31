"""RFC 7807 error responses.

Exports:
    ErrorDetail, ProblemDetails: Response schemas
    ErrorResponseBuilder: DomainError -> JSONResponse
"""

from livefeed.presentation.routers.api.v1.errors.error_response_builder import (
    ErrorResponseBuilder,
)
from livefeed.presentation.routers.api.v1.errors.problem_details import (
    ErrorDetail,
    ProblemDetails,
)

__all__ = ["ErrorDetail", "ErrorResponseBuilder", "ProblemDetails"]
