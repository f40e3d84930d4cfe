from __future__ import annotations
"""Domain exceptions.

Each class is a werkzeug HTTPException so the unified error handler in
`tracker.create_app` renders them with the standard `{"error": {...}}` shape
while the services stay free of Flask request context.
"""
from werkzeug.exceptions import BadRequest, Conflict, Forbidden, HTTPException, NotFound, Unauthorized


class ValidationError(BadRequest):
    """Bad input or an unmet transition precondition. Nothing was written."""


class ProfileError(Unauthorized):
    """Authenticated identity has no matching profile row."""

    def __init__(self, description: str = 'Failed to initialize your session. Please sign in again.'):
        super().__init__(description=description)


class AuthorizationError(Forbidden):
    """Role is not permitted to perform the action."""


class NotFoundError(NotFound):
    pass


class ConflictError(Conflict):
    """The order changed since the caller read it."""


class PersistenceError(HTTPException):
    """The data store rejected a read or write. `description` carries the raw reason."""
    code = 503
    name = 'Store Unavailable'


__all__ = [
    'ValidationError', 'ProfileError', 'AuthorizationError', 'NotFoundError',
    'ConflictError', 'PersistenceError',
]
