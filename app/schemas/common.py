"""
Common schemas for API responses.
"""
from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error response schema."""

    detail: str


class SuccessResponse(BaseModel):
    """Success response."""

    success: bool = True
    message: Optional[str] = None
