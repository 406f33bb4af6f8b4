"""FastAPI dependencies for tenant resolution and role checks.

Routes compose these as: resolve identity -> check policy -> handler.
"""
import logging
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, status

from ..auth import Identity, resolve_identity
from ..errors import AuthenticationError, PermissionDeniedError
from ..policy import authorize_operation

logger = logging.getLogger("tracker-core.api.dependencies")


def get_identity(
    x_user_id: Optional[str] = Header(None, description="UUID of the acting user"),
    x_org_id: Optional[str] = Header(None, description="UUID of the caller's organization"),
    x_user_role: Optional[str] = Header(None, description="Caller role: ADMIN or MEMBER"),
) -> Identity:
    """Resolve the caller's identity from tenant headers, or fail with 401."""
    try:
        return resolve_identity(x_user_id, x_org_id, x_user_role)
    except AuthenticationError as e:
        logger.warning(f"Rejected request: {e.message}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)


def require_operation(operation: str) -> Callable[..., Identity]:
    """
    Build a dependency that resolves the identity and checks it against the
    roles declared for ``operation``.

    Args:
        operation: Operation name as declared in ``policy.OPERATION_ROLES``

    Returns:
        Dependency returning the authorized Identity
    """

    def dependency(identity: Identity = Depends(get_identity)) -> Identity:
        try:
            authorize_operation(identity, operation)
        except PermissionDeniedError as e:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
        return identity

    return dependency
