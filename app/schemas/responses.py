"""Standardized API Response Schemas"""

from typing import Generic, TypeVar
from pydantic import BaseModel


T = TypeVar('T')


class SuccessResponse(BaseModel, Generic[T]):
    """
    Standard success response envelope.

    Example:
        {
            "success": true,
            "data": {...},
            "message": "Invoice created successfully"
        }
    """
    success: bool = True
    data: T
    message: str = "Operation successful"


class ErrorResponse(BaseModel):
    """
    Error body produced by the exception handlers.

    Example:
        {"detail": "Internal server error"}
    """
    detail: str
