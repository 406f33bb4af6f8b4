"""SQLAlchemy database models."""
from datetime import datetime, timezone
from uuid import uuid4
import enum

from sqlalchemy import (
    Column,
    String,
    Text,
    Integer,
    DateTime,
    ForeignKey,
    Enum,
    Uuid,
)
from sqlalchemy.orm import declarative_base, relationship

# Base class for all models
Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp used for all server-assigned times."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Role(str, enum.Enum):
    """Organization role carried by users and by the x-user-role header."""

    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class IssueStatus(str, enum.Enum):
    """Issue lifecycle status enum.

    Lifecycle: OPEN -> IN_PROGRESS -> RESOLVED -> CLOSED
    """

    OPEN = "OPEN"               # Initial state
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class ActivityType(str, enum.Enum):
    """Action type enum for the issue activity log."""

    CREATED = "CREATED"
    STATUS_CHANGED = "STATUS_CHANGED"
    ASSIGNEE_CHANGED = "ASSIGNEE_CHANGED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"


class Organization(Base):
    """
    Organization model, the tenancy boundary.

    Users and issues belong to exactly one organization and are never
    visible outside it.
    """

    __tablename__ = "organizations"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    users = relationship("User", back_populates="organization", cascade="all, delete-orphan")
    issues = relationship("Issue", back_populates="organization", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Organization {self.id}: {self.name}>"


class User(Base):
    """User model. Each user belongs to exactly one organization."""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    role = Column(
        Enum(Role, name="user_role", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=Role.MEMBER,
    )
    organization_id = Column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    organization = relationship("Organization", back_populates="users")

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role.value})>"


class Issue(Base):
    """Issue scoped to a single organization."""

    __tablename__ = "issues"

    id = Column(Uuid, primary_key=True, default=uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(String(50), nullable=True)
    status = Column(
        Enum(IssueStatus, name="issue_status", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=IssueStatus.OPEN,
        index=True,
    )

    organization_id = Column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_by_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    assignee_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Audit fields
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    organization = relationship("Organization", back_populates="issues")
    created_by = relationship("User", foreign_keys=[created_by_id])
    assignee = relationship("User", foreign_keys=[assignee_id])

    # Newest first; the integer id breaks ties between entries sharing a timestamp
    activities = relationship(
        "ActivityLogEntry",
        back_populates="issue",
        cascade="all, delete-orphan",
        order_by=lambda: (ActivityLogEntry.performed_at.desc(), ActivityLogEntry.id.desc()),
    )

    def __repr__(self) -> str:
        return f"<Issue {self.id}: {self.title[:30]}>"


class ActivityLogEntry(Base):
    """Append-only audit trail entry for an issue.

    Entries are never updated. They are removed only together with their
    issue.
    """

    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    issue_id = Column(
        Uuid,
        ForeignKey("issues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    action_type = Column(
        Enum(ActivityType, name="activity_type", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
    )
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)

    # Who and when
    performed_by = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    performed_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    # Relationships
    issue = relationship("Issue", back_populates="activities")
    performed_by_user = relationship("User")

    def __repr__(self) -> str:
        return f"<ActivityLogEntry {self.issue_id}: {self.action_type.value}>"
