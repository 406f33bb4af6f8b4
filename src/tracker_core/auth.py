"""Tenant and role resolution from request headers.

Callers identify themselves with three headers:

- ``x-user-id``: UUID of the acting user
- ``x-org-id``: UUID of the organization the request is scoped to
- ``x-user-role``: ``ADMIN`` or ``MEMBER``

Resolution runs before any business logic. Everything downstream receives the
resulting :class:`Identity` and filters by its ``organization_id``.
"""
import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from .errors import AuthenticationError
from .models import Role

logger = logging.getLogger("tracker-core.auth")

USER_ID_HEADER = "x-user-id"
ORG_ID_HEADER = "x-org-id"
ROLE_HEADER = "x-user-role"


@dataclass(frozen=True)
class Identity:
    """Caller context attached to a request after header resolution."""

    user_id: UUID
    organization_id: UUID
    role: Role


def _parse_id(value: str, header: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise AuthenticationError(f"Malformed {header} header: expected a UUID")


def resolve_identity(
    user_id: Optional[str],
    organization_id: Optional[str],
    role: Optional[str],
) -> Identity:
    """
    Build an Identity from raw header values.

    Args:
        user_id: Raw x-user-id header value
        organization_id: Raw x-org-id header value
        role: Raw x-user-role header value

    Returns:
        Resolved Identity

    Raises:
        AuthenticationError: If a header is missing or empty, an id is not a
            UUID, or the role is not exactly ADMIN or MEMBER
    """
    if not user_id or not organization_id or not role:
        raise AuthenticationError(
            f"Missing required headers: {USER_ID_HEADER}, {ORG_ID_HEADER}, {ROLE_HEADER}"
        )

    try:
        resolved_role = Role(role)
    except ValueError:
        raise AuthenticationError("Invalid role. Must be ADMIN or MEMBER")

    return Identity(
        user_id=_parse_id(user_id, USER_ID_HEADER),
        organization_id=_parse_id(organization_id, ORG_ID_HEADER),
        role=resolved_role,
    )
