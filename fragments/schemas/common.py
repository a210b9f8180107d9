"""Common schemas used across multiple endpoints."""

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Error code and message."""
    code: int
    message: str


class ErrorResponse(BaseModel):
    """Response model for errors."""
    status: str = "error"
    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response model for the health check."""
    status: str = "ok"
    version: str
    githubUrl: str


def create_error_response(code: int, message: str) -> dict:
    return ErrorResponse(error=ErrorDetail(code=code, message=message)).model_dump()
