"""CRUD operations for issues.

Every query filters by organization_id. Issues outside the caller's
organization behave exactly like issues that do not exist.
"""
import logging
from typing import Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session, joinedload, selectinload

from . import models, schemas
from .activity import append_activity
from .errors import NotFoundError, PermissionDeniedError

logger = logging.getLogger("tracker-core.crud")

UNASSIGNED = "unassigned"


def _issue_query(db: Session):
    return db.query(models.Issue).options(
        joinedload(models.Issue.created_by),
        joinedload(models.Issue.assignee),
    )


# ============================================================================
# Users
# ============================================================================

def get_organization_user(
    db: Session,
    user_id: UUID,
    organization_id: UUID,
) -> Optional[models.User]:
    """
    Get a user by ID within an organization.

    Args:
        db: Database session
        user_id: User UUID
        organization_id: Organization UUID

    Returns:
        User or None if the user does not exist in that organization
    """
    return (
        db.query(models.User)
        .filter(
            models.User.id == user_id,
            models.User.organization_id == organization_id,
        )
        .first()
    )


def _validate_assignee(db: Session, assignee_id: UUID, organization_id: UUID) -> None:
    if not get_organization_user(db, assignee_id, organization_id):
        logger.warning(f"Rejected assignee {assignee_id} outside organization {organization_id}")
        raise PermissionDeniedError("Assignee must belong to your organization")


# ============================================================================
# Issues
# ============================================================================

def create_issue(
    db: Session,
    issue_data: schemas.IssueCreate,
    user_id: UUID,
    organization_id: UUID,
) -> models.Issue:
    """
    Create a new issue in the caller's organization.

    Args:
        db: Database session
        issue_data: Issue creation data
        user_id: UUID of the creating user
        organization_id: UUID of the caller's organization

    Returns:
        Created Issue with creator and assignee loaded

    Raises:
        PermissionDeniedError: If the assignee is not in the organization
    """
    if issue_data.assignee_id:
        _validate_assignee(db, issue_data.assignee_id, organization_id)

    issue = models.Issue(
        title=issue_data.title,
        description=issue_data.description,
        priority=issue_data.priority,
        status=models.IssueStatus.OPEN,
        organization_id=organization_id,
        created_by_id=user_id,
        assignee_id=issue_data.assignee_id,
    )
    db.add(issue)
    db.commit()
    db.refresh(issue)

    append_activity(
        db,
        issue_id=issue.id,
        action_type=models.ActivityType.CREATED,
        performed_by=user_id,
    )

    logger.info(f"Created issue {issue.id} in organization {organization_id}")
    return issue


def list_issues(db: Session, organization_id: UUID) -> list[models.Issue]:
    """
    Get all issues of an organization, newest first.

    Args:
        db: Database session
        organization_id: Organization UUID

    Returns:
        List of issues with creator and assignee loaded
    """
    return (
        _issue_query(db)
        .filter(models.Issue.organization_id == organization_id)
        .order_by(models.Issue.created_at.desc(), models.Issue.id.desc())
        .all()
    )


def _parse_issue_id(issue_id: Union[str, UUID]) -> UUID:
    # An id that cannot exist is reported like any other missing issue
    if isinstance(issue_id, UUID):
        return issue_id
    try:
        return UUID(issue_id)
    except (TypeError, ValueError):
        raise NotFoundError("Issue not found")


def get_issue(db: Session, issue_id: Union[str, UUID], organization_id: UUID) -> models.Issue:
    """
    Get an issue by ID within an organization.

    The activity history is available through ``issue.activities``,
    newest first, and is loaded together with each entry's performer.

    Args:
        db: Database session
        issue_id: Issue UUID, or its string form as taken from a URL
        organization_id: Organization UUID

    Returns:
        Issue with creator, assignee and activities loaded

    Raises:
        NotFoundError: If no issue with this ID exists in the organization,
            including IDs that are not valid UUIDs
    """
    issue = (
        _issue_query(db)
        .options(
            selectinload(models.Issue.activities)
            .joinedload(models.ActivityLogEntry.performed_by_user)
        )
        .filter(
            models.Issue.id == _parse_issue_id(issue_id),
            models.Issue.organization_id == organization_id,
        )
        .first()
    )
    if not issue:
        raise NotFoundError("Issue not found")
    return issue


def diff_tracked_fields(
    issue: models.Issue,
    changes: dict,
) -> list[tuple[models.ActivityType, str, str]]:
    """
    Compare requested changes against an issue's persisted status and assignee.

    Args:
        issue: Issue as currently persisted
        changes: Fields explicitly sent in the update request

    Returns:
        List of (action_type, old_value, new_value), one per changed field.
        A missing assignee is reported as ``"unassigned"``.
    """
    tracked = []

    new_status = changes.get("status")
    if new_status is not None and new_status != issue.status:
        tracked.append((
            models.ActivityType.STATUS_CHANGED,
            issue.status.value,
            models.IssueStatus(new_status).value,
        ))

    if "assignee_id" in changes and changes["assignee_id"] != issue.assignee_id:
        new_assignee = changes["assignee_id"]
        tracked.append((
            models.ActivityType.ASSIGNEE_CHANGED,
            str(issue.assignee_id) if issue.assignee_id else UNASSIGNED,
            str(new_assignee) if new_assignee else UNASSIGNED,
        ))

    return tracked


def update_issue(
    db: Session,
    issue_id: Union[str, UUID],
    issue_update: schemas.IssueUpdate,
    user_id: UUID,
    organization_id: UUID,
) -> models.Issue:
    """
    Update an issue and record what changed.

    Status and assignee changes each produce one activity entry. An update
    that changes neither records a single UPDATED entry.

    The issue change is committed before the entries are appended. If
    appending fails, the error propagates to the caller (HTTP 500) while
    the update itself stays persisted.

    Args:
        db: Database session
        issue_id: Issue UUID
        issue_update: Update data (only explicitly sent fields apply)
        user_id: UUID of the user making the update
        organization_id: UUID of the caller's organization

    Returns:
        Updated Issue

    Raises:
        NotFoundError: If the issue is not in the organization
        PermissionDeniedError: If the new assignee is not in the organization
    """
    issue = get_issue(db, issue_id, organization_id)

    changes = issue_update.model_dump(exclude_unset=True)

    if changes.get("assignee_id"):
        _validate_assignee(db, changes["assignee_id"], organization_id)

    tracked = diff_tracked_fields(issue, changes)

    for field, value in changes.items():
        setattr(issue, field, value)
    db.commit()

    for action_type, old_value, new_value in tracked:
        append_activity(
            db,
            issue_id=issue.id,
            action_type=action_type,
            performed_by=user_id,
            old_value=old_value,
            new_value=new_value,
        )

    if not tracked:
        append_activity(
            db,
            issue_id=issue.id,
            action_type=models.ActivityType.UPDATED,
            performed_by=user_id,
        )

    db.refresh(issue)
    logger.info(f"Updated issue {issue.id} ({len(tracked)} tracked changes)")
    return issue


def delete_issue(
    db: Session,
    issue_id: Union[str, UUID],
    user_id: UUID,
    organization_id: UUID,
) -> dict:
    """
    Delete an issue and its activity log.

    A DELETED entry is appended before the issue is removed.

    Args:
        db: Database session
        issue_id: Issue UUID
        user_id: UUID of the deleting user
        organization_id: UUID of the caller's organization

    Returns:
        Confirmation message

    Raises:
        NotFoundError: If the issue is not in the organization
    """
    issue = get_issue(db, issue_id, organization_id)

    append_activity(
        db,
        issue_id=issue.id,
        action_type=models.ActivityType.DELETED,
        performed_by=user_id,
    )

    # Activity entries are removed by the cascade
    db.delete(issue)
    db.commit()
    logger.info(f"Deleted issue {issue_id} from organization {organization_id}")
    return {"message": "Issue deleted successfully"}
