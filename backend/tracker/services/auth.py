from __future__ import annotations
import logging
import threading
import uuid
from typing import Any, Optional, Set

from werkzeug.security import check_password_hash, generate_password_hash

from tracker.domain import Profile, Role
from tracker.errors import PersistenceError, ValidationError
from tracker.store.base import DataStore, StoreError
from tracker.utils.validation import validate_status

log = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

# jti values of signed-out tokens; process-local
_revoked: Set[str] = set()
_revoked_lock = threading.Lock()


def revoke_token(jti: str):
    with _revoked_lock:
        _revoked.add(jti)


def is_token_revoked(jti: str) -> bool:
    with _revoked_lock:
        return jti in _revoked


class AuthService:
    """Sign-up / sign-in against the `users` collection.

    Both calls return None for the ordinary failure (username taken, wrong
    credentials) and raise ValidationError only for malformed input.
    """

    def __init__(self, store: DataStore):
        self.store = store

    def _call(self, fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except StoreError as e:
            log.error('store failure: %s', e)
            raise PersistenceError(description=str(e)) from e

    @staticmethod
    def _email(value: Any) -> str:
        if not isinstance(value, str) or '@' not in value.strip():
            raise ValidationError(description='A valid email is required')
        return value.strip().lower()

    def sign_up(self, email: Any, password: Any, role: Any,
                customer_order_id: Optional[str] = None) -> Optional[Profile]:
        username = self._email(email)
        if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(description=f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
        role = validate_status(role, Role.ALL, 'role')
        if role == Role.CUSTOMER:
            customer_order_id = str(customer_order_id or '').strip().upper()
            if not self._call(self.store.get, 'orders', service_id=customer_order_id):
                raise ValidationError(description='customer_order_id must name an existing service order')
        if self._call(self.store.get, 'users', username=username):
            log.info('sign-up refused, username %s taken', username)
            return None
        profile = Profile(
            id=str(uuid.uuid4()),
            username=username,
            role=role,
            password_hash=generate_password_hash(password),
            customer_order_id=customer_order_id if role == Role.CUSTOMER else None,
        )
        self._call(self.store.insert, 'users', profile.to_record())
        log.info('profile %s created with role %s', username, role)
        return profile

    def sign_in(self, email: Any, password: Any) -> Optional[Profile]:
        if not email or not password:
            raise ValidationError(description='email & password required')
        row = self._call(self.store.get, 'users', username=str(email).strip().lower())
        if not row or not check_password_hash(row.get('password_hash') or '', str(password)):
            log.info('sign-in failed for %s', email)
            return None
        return Profile.from_record(row)

    def get_profile(self, user_id: str) -> Optional[Profile]:
        row = self._call(self.store.get, 'users', id=user_id)
        return Profile.from_record(row) if row else None


__all__ = ['AuthService', 'revoke_token', 'is_token_revoked', 'MIN_PASSWORD_LENGTH']
