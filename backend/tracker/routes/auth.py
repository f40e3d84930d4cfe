from __future__ import annotations
from flask import Blueprint, abort
from flask_jwt_extended import create_access_token, get_jwt

from tracker.decorators.auth import current_profile, require_login
from tracker.services.auth import AuthService, revoke_token
from tracker.services.policy import views_for
from tracker.store import get_store
from ._common import body, camel

auth_bp = Blueprint('auth', __name__)


def _session_payload(profile, token=None):
    payload = {
        'user': camel(profile.public()),
        'views': views_for(profile.role),
    }
    if token:
        payload['accessToken'] = token
    return payload


def _issue_token(profile) -> str:
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    return create_access_token(identity=str(profile.id), additional_claims={'role': profile.role})


@auth_bp.post('/signup')
def signup():
    data = body()
    profile = AuthService(get_store()).sign_up(
        data.get('email'), data.get('password'), data.get('role'), data.get('customer_order_id'),
    )
    if profile is None:
        abort(409, description='An account with this email already exists')
    return _session_payload(profile, _issue_token(profile)), 201


@auth_bp.post('/login')
def login():
    data = body()
    profile = AuthService(get_store()).sign_in(data.get('email'), data.get('password'))
    if profile is None:
        abort(401, description='invalid credentials')
    return _session_payload(profile, _issue_token(profile))


@auth_bp.post('/logout')
@require_login
def logout():
    revoke_token(get_jwt()['jti'])
    return {'status': 'signed_out'}


@auth_bp.get('/me')
@require_login
def me():
    return _session_payload(current_profile())
