from chirper.schemas.datetime_types import UTCDateTime
from chirper.schemas.response import (
    ApiPagedResponse,
    ApiResponse,
    BaseSchema,
    ErrorResponse,
    Pagination,
)

__all__ = [
    "ApiPagedResponse",
    "ApiResponse",
    "BaseSchema",
    "ErrorResponse",
    "Pagination",
    "UTCDateTime",
]
