"""Pydantic schemas for API requests and responses."""

from fragments.schemas.fragments import (
    FragmentMetadata,
    FragmentResponse,
    UpdateFragmentResponse,
    ListFragmentsResponse,
    StatusResponse
)
from fragments.schemas.common import ErrorDetail, ErrorResponse, HealthResponse, create_error_response

__all__ = [
    "FragmentMetadata",
    "FragmentResponse",
    "UpdateFragmentResponse",
    "ListFragmentsResponse",
    "StatusResponse",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "create_error_response"
]
