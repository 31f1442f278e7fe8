"""
Error response models.

Standardized error responses for the API.
"""

from pydantic import BaseModel
from typing import Any, Optional


class ErrorResponse(BaseModel):
    """Standard error response format, the shape of OnlySwapError.to_dict()."""

    error: str
    message: str
    details: Optional[dict[str, Any]] = None


class ValidationErrorResponse(BaseModel):
    """Request body validation error format."""

    error: str = "VALIDATION_ERROR"
    message: str = "Request validation failed"
    details: dict[str, Any]
