# Pydantic schemas package
from eisenhower.backend.schemas.base import (
    ApiResponse,
    ErrorDetail,
    ErrorResponse,
    MessageResponse,
    ResponseMetadata,
)

__all__ = [
    "ApiResponse",
    "ErrorDetail",
    "ErrorResponse",
    "MessageResponse",
    "ResponseMetadata",
]
