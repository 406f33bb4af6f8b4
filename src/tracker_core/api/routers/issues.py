"""Issues API endpoints.

All endpoints require the tenant headers (x-user-id, x-org-id, x-user-role).
Updates and deletes additionally require the ADMIN role.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from tracker_core import activity, crud, schemas
from tracker_core.auth import Identity
from tracker_core.errors import NotFoundError, PermissionDeniedError

from ..dependencies import require_operation
from ...database import get_db

logger = logging.getLogger("tracker-core.issues")

router = APIRouter(tags=["issues"])


def _raise_http(e: Exception, issue_id=None) -> None:
    """Map service errors to HTTP responses."""
    if isinstance(e, NotFoundError):
        logger.warning(f"Issue lookup miss: {issue_id}")
        raise HTTPException(status_code=404, detail=e.message)
    if isinstance(e, PermissionDeniedError):
        raise HTTPException(status_code=403, detail=e.message)
    raise e


@router.post("", response_model=schemas.IssueResponse, status_code=201)
def create_issue(
    issue_data: schemas.IssueCreate,
    identity: Identity = Depends(require_operation("create_issue")),
    db: Session = Depends(get_db),
):
    """
    Create a new issue in the caller's organization.

    - **title**: Issue title (required)
    - **description**: Description (optional)
    - **priority**: Priority label (optional)
    - **assigneeId**: UUID of a user in the same organization (optional)
    """
    try:
        issue = crud.create_issue(db, issue_data, identity.user_id, identity.organization_id)
    except PermissionDeniedError as e:
        _raise_http(e)
    except Exception as e:
        logger.error(f"Error creating issue: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create issue")
    return schemas.IssueResponse.model_validate(issue)


@router.get("", response_model=list[schemas.IssueResponse])
def list_issues(
    identity: Identity = Depends(require_operation("list_issues")),
    db: Session = Depends(get_db),
):
    """
    List all issues in the caller's organization, newest first.
    """
    issues = crud.list_issues(db, identity.organization_id)
    return [schemas.IssueResponse.model_validate(i) for i in issues]


@router.get("/{issue_id}", response_model=schemas.IssueDetailResponse)
def get_issue(
    issue_id: str,
    identity: Identity = Depends(require_operation("get_issue")),
    db: Session = Depends(get_db),
):
    """
    Get a single issue with its activity history (newest first).
    """
    try:
        issue = crud.get_issue(db, issue_id, identity.organization_id)
    except NotFoundError as e:
        _raise_http(e, issue_id)
    return schemas.IssueDetailResponse.model_validate(issue)


@router.get("/{issue_id}/activity", response_model=list[schemas.ActivityLogResponse])
def list_issue_activity(
    issue_id: str,
    identity: Identity = Depends(require_operation("list_issue_activity")),
    db: Session = Depends(get_db),
):
    """
    Get the activity log of an issue, newest first.
    """
    try:
        issue = crud.get_issue(db, issue_id, identity.organization_id)
    except NotFoundError as e:
        _raise_http(e, issue_id)
    entries = activity.list_activities(db, issue.id)
    return [schemas.ActivityLogResponse.model_validate(entry) for entry in entries]


@router.patch("/{issue_id}", response_model=schemas.IssueResponse)
def update_issue(
    issue_id: str,
    issue_update: schemas.IssueUpdate,
    identity: Identity = Depends(require_operation("update_issue")),
    db: Session = Depends(get_db),
):
    """
    Update an issue (ADMIN only).

    - **title**, **description**, **priority**: New values (optional)
    - **status**: OPEN, IN_PROGRESS, RESOLVED or CLOSED (optional)
    - **assigneeId**: New assignee UUID, or null to unassign (optional)
    """
    try:
        issue = crud.update_issue(
            db, issue_id, issue_update, identity.user_id, identity.organization_id
        )
    except (NotFoundError, PermissionDeniedError) as e:
        _raise_http(e, issue_id)
    return schemas.IssueResponse.model_validate(issue)


@router.delete("/{issue_id}", response_model=schemas.IssueDeleteResponse)
def delete_issue(
    issue_id: str,
    identity: Identity = Depends(require_operation("delete_issue")),
    db: Session = Depends(get_db),
):
    """
    Delete an issue and its activity log (ADMIN only).
    """
    try:
        result = crud.delete_issue(db, issue_id, identity.user_id, identity.organization_id)
    except NotFoundError as e:
        _raise_http(e, issue_id)
    return result
