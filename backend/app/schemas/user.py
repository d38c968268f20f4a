"""
Exam Builder Backend — Pydantic Request/Response Schemas
==========================================================

What:  The API contract for /users and /health.
Why:   Responses are built from these models only, so the password column
       can never leak: no response schema declares it.
How:   JSON keys are camelCase (createdAt, updatedAt) through an alias
       generator; FastAPI serializes response models by alias.

Request bodies declare every field optional. Presence rules belong to the
user service, which reports them as MissingFields (400) rather than letting
FastAPI answer 422.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from app.models.user import Role


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class UserWrite(CamelModel):
    """Fields a client may send when creating or updating a user."""

    name: Optional[str] = Field(default=None, description="Display name")
    email: Optional[str] = Field(default=None, description="Login email, unique")
    password: Optional[str] = Field(default=None, description="Write-only password")
    # Checked by the user service, after the id and existence checks
    role: Optional[str] = Field(default=None, description="ADMIN or PROFESSOR, any case")
    photo: Optional[str] = Field(default=None, description="Photo URL")


class UserCreate(UserWrite):
    """POST /users body. role defaults to PROFESSOR, photo to null."""


class UserUpdate(UserWrite):
    """
    PUT /users/{id} body.

    Only fields present in the JSON are merged; use
    model_dump(exclude_unset=True) to tell "photo": null apart from no photo key.
    """


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserResponse(CamelModel):
    """Projection of a user row. Never includes the password."""

    id: int
    name: str
    email: str
    role: Role
    photo: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v):
        # SQLite hands back naive datetimes; stored values are always UTC
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class DeletedUser(CamelModel):
    """Snapshot captured right before a user row is deleted."""

    id: int
    name: str
    email: str


class UserListResponse(CamelModel):
    success: bool = True
    data: List[UserResponse]
    total: int


class UserEnvelope(CamelModel):
    success: bool = True
    data: UserResponse


class UserMessageEnvelope(UserEnvelope):
    message: str


class DeletedUserEnvelope(CamelModel):
    success: bool = True
    message: str
    data: DeletedUser


class ErrorResponse(CamelModel):
    """
    Error envelope shared by every failing response.

    `error` is only set for 500s, carrying the underlying failure text.
    """

    success: bool = False
    message: str
    error: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Health
# ══════════════════════════════════════════════════════════════════════════


class DependencyStatus(CamelModel):
    status: str = Field(description="OK or ERROR")
    message: str


class ServicesStatus(CamelModel):
    api: str = "OK"
    database: DependencyStatus


class HealthResponse(CamelModel):
    """
    GET /health body. HTTP 200 with status OK, or 503 with status DEGRADED
    when the database ping fails.
    """

    status: str
    message: str
    timestamp: datetime
    version: str
    services: ServicesStatus
