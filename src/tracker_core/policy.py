"""Role-based authorization policy for issue operations."""
import logging
from typing import Iterable

from .auth import Identity
from .errors import PermissionDeniedError
from .models import Role

logger = logging.getLogger("tracker-core.policy")


# Roles required per operation. An empty set means any resolved identity.
# Updates stay ADMIN-only: members create and read, admins change and remove.
OPERATION_ROLES: dict[str, frozenset[Role]] = {
    "create_issue": frozenset(),
    "list_issues": frozenset(),
    "get_issue": frozenset(),
    "list_issue_activity": frozenset(),
    "update_issue": frozenset({Role.ADMIN}),
    "delete_issue": frozenset({Role.ADMIN}),
}


def is_authorized(identity: Identity, required_roles: Iterable[Role]) -> bool:
    """Return True if the identity satisfies the required roles."""
    required = set(required_roles)
    if not required:
        return True
    return identity.role in required


def authorize(identity: Identity, required_roles: Iterable[Role]) -> None:
    """
    Check an identity against an operation's required roles.

    Args:
        identity: Resolved caller identity
        required_roles: Roles allowed to perform the operation (empty = any)

    Raises:
        PermissionDeniedError: If the identity's role is not allowed
    """
    required_roles = list(required_roles)
    if not is_authorized(identity, required_roles):
        logger.warning(
            f"Denied {identity.role.value} user {identity.user_id}: "
            f"requires {', '.join(sorted(r.value for r in required_roles))}"
        )
        raise PermissionDeniedError("You do not have permission to perform this action")


def authorize_operation(identity: Identity, operation: str) -> None:
    """Check an identity against the roles declared for a named operation."""
    authorize(identity, OPERATION_ROLES[operation])
