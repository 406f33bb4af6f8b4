"""Error taxonomy for tenant resolution, authorization and issue lookups."""


class TrackerError(Exception):
    """Base class for errors surfaced to API callers."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationError(TrackerError):
    """Raised when tenant headers are missing or invalid (401)."""
    pass


class PermissionDeniedError(TrackerError):
    """Raised when the caller's role is insufficient or an assignee is outside the organization (403)."""
    pass


class NotFoundError(TrackerError):
    """Raised when an issue does not exist in the caller's organization (404).

    Issues that exist in another organization raise the same error, so callers
    cannot probe for cross-tenant ids.
    """
    pass
