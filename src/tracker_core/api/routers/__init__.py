"""API routers for Tracker Core."""

from . import issues

__all__ = ["issues"]
