"""Pydantic schemas for request/response validation.

Request and response bodies use camelCase keys (``assigneeId``,
``createdBy``); snake_case names are accepted on input as well.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from .models import IssueStatus, ActivityType


class CamelModel(BaseModel):
    """Base schema serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Issue request schemas

class IssueCreate(CamelModel):
    """Schema for creating a new issue. Unknown fields are rejected."""

    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    priority: Optional[str] = Field(None, max_length=50)
    assignee_id: Optional[UUID] = None

    model_config = ConfigDict(extra="forbid")


class IssueUpdate(CamelModel):
    """Schema for updating an existing issue.

    Any subset of fields may be sent. ``assigneeId: null`` clears the
    assignee; ``title`` and ``status`` cannot be null.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[IssueStatus] = None
    priority: Optional[str] = Field(None, max_length=50)
    assignee_id: Optional[UUID] = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode='after')
    def reject_null_required_fields(self) -> "IssueUpdate":
        for field in ("title", "status"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


# Response schemas

class UserSummary(CamelModel):
    """Embedded user summary (creator, assignee, performer)."""

    id: UUID
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class ActivityLogResponse(CamelModel):
    """Schema for activity log entries."""

    id: int
    issue_id: UUID
    action_type: ActivityType
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    performed_by: UUID
    performed_at: datetime
    performed_by_user: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class IssueResponse(CamelModel):
    """Schema for issue responses with creator/assignee summaries."""

    id: UUID
    title: str
    description: Optional[str] = None
    priority: Optional[str] = None
    status: IssueStatus
    organization_id: UUID
    created_by_id: UUID
    assignee_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime
    created_by: Optional[UserSummary] = None
    assignee: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class IssueDetailResponse(IssueResponse):
    """Schema for a single issue including its activity history (newest first)."""

    activities: list[ActivityLogResponse] = Field(default_factory=list)


class IssueDeleteResponse(BaseModel):
    """Confirmation returned after deleting an issue."""

    message: str
