"""Append-only activity log for issues."""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from . import models

logger = logging.getLogger("tracker-core.activity")


def append_activity(
    db: Session,
    issue_id: UUID,
    action_type: models.ActivityType,
    performed_by: UUID,
    old_value: Optional[str] = None,
    new_value: Optional[str] = None,
) -> models.ActivityLogEntry:
    """
    Append one immutable entry to an issue's activity log.

    The timestamp is assigned by the server when the row is inserted.

    Args:
        db: Database session
        issue_id: UUID of the issue
        action_type: Kind of change being recorded
        performed_by: UUID of the acting user
        old_value: Value before the change (optional)
        new_value: Value after the change (optional)

    Returns:
        Created ActivityLogEntry
    """
    entry = models.ActivityLogEntry(
        issue_id=issue_id,
        action_type=action_type,
        old_value=old_value,
        new_value=new_value,
        performed_by=performed_by,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    logger.debug(f"Logged {action_type.value} for issue {issue_id} by {performed_by}")
    return entry


def list_activities(db: Session, issue_id: UUID) -> list[models.ActivityLogEntry]:
    """
    Get the activity log for an issue, newest first.

    Args:
        db: Database session
        issue_id: UUID of the issue

    Returns:
        List of ActivityLogEntry with performer loaded
    """
    return (
        db.query(models.ActivityLogEntry)
        .options(joinedload(models.ActivityLogEntry.performed_by_user))
        .filter(models.ActivityLogEntry.issue_id == issue_id)
        .order_by(
            models.ActivityLogEntry.performed_at.desc(),
            models.ActivityLogEntry.id.desc(),
        )
        .all()
    )
