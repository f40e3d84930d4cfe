from __future__ import annotations
from functools import wraps

from flask import g
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from tracker.domain import Profile
from tracker.errors import AuthorizationError, ProfileError
from tracker.services.auth import AuthService, revoke_token
from tracker.services.policy import can_view
from tracker.store import get_store


def load_profile() -> Profile:
    """Resolve the profile behind the current access token.

    A token whose profile row is gone is revoked so the client has to sign in again.
    """
    verify_jwt_in_request()
    profile = AuthService(get_store()).get_profile(str(get_jwt_identity()))
    if profile is None:
        revoke_token(get_jwt()['jti'])
        raise ProfileError()
    g.profile = profile
    return profile


def current_profile() -> Profile:
    return g.profile


def require_login(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        load_profile()
        return fn(*args, **kwargs)
    return wrapper


def require_view(*views: str):
    """Allow the request when the caller's role grants any of `views`."""
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            profile = load_profile()
            if not can_view(profile.role, *views):
                raise AuthorizationError(description='Missing view permission')
            return fn(*args, **kwargs)
        return wrapper
    return outer
