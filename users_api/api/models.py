"""
Pydantic models for FastAPI request/response schemas.

Users are open records: apart from ``id`` the attributes are whatever the
client sent, so the user-bearing models accept arbitrary extra fields and
the list endpoint returns stored records untouched.
"""

from typing import Optional, Dict, Any
from pydantic import BaseModel, Field


# ============================================================================
# Response Models
# ============================================================================

class User(BaseModel):
    """A stored user: a numeric id plus client-supplied attributes."""

    id: int = Field(..., description="Server-assigned user id")

    class Config:
        extra = "allow"
        json_schema_extra = {
            "example": {"id": 2, "name": "B"}
        }


class RequestedUserResponse(BaseModel):
    """Envelope returned by the get-by-id endpoint."""

    requestedUser: Dict[str, Any] = Field(..., description="The matching user record")

    class Config:
        json_schema_extra = {
            "example": {
                "requestedUser": {"id": 2, "name": "B"}
            }
        }


class HealthStatus(BaseModel):
    """Health check status."""

    status: str = Field(..., description="Overall status (healthy/unhealthy)")
    users_file: str = Field(..., description="Path of the backing JSON file")
    user_count: Optional[int] = Field(
        default=None,
        description="Number of stored users, when the file is readable"
    )
    details: Dict[str, Any] = Field(
        default={},
        description="Additional health details"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "users_file": "data/users.json",
                "user_count": 2,
                "details": {"id_strategy": "length"}
            }
        }


class ApiInfo(BaseModel):
    """Root endpoint payload."""

    message: str
    version: str
    docs: str
    health: str
    endpoints: Dict[str, str]


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    message: str = Field(..., description="Human-readable error message")

    class Config:
        json_schema_extra = {
            "example": {
                "message": "An unknown error occurred."
            }
        }


# Reusable OpenAPI response declarations
ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    500: {"model": ErrorResponse, "description": "Storage failure"},
}

