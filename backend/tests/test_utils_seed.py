"""Test seeding utilities to reduce duplication.

These helpers create profiles, parts and orders straight in the store and
build auth headers, so individual tests stay focused on one behavior.
"""
from typing import Dict, Optional
from flask_jwt_extended import create_access_token
from werkzeug.security import generate_password_hash
from tracker.domain import Order, OrderStatus, Profile, Sparepart, SparepartStatus, new_service_id


def ensure_profile(store, role: str, username: Optional[str] = None, password: str = 'secret1',
                   customer_order_id: Optional[str] = None) -> Profile:
    username = username or f'{role.lower()}@example.com'
    row = store.get('users', username=username)
    if row:
        return Profile.from_record(row)
    profile = Profile(
        id=f'user-{role.lower()}-{username.split("@")[0]}',
        username=username,
        role=role,
        password_hash=generate_password_hash(password),
        customer_order_id=customer_order_id,
    )
    store.insert('users', profile.to_record())
    return profile


def ensure_part(store, part_id: str = 'SP-001', name: str = 'Injector Nozzle', stock: int = 5,
                status: str = SparepartStatus.AVAILABLE, location: str = 'Rack A1') -> Sparepart:
    row = store.get('spareparts', part_id=part_id)
    if row:
        return Sparepart.from_record(row)
    part = Sparepart(part_id=part_id, name=name, stock=stock, status=status, location=location)
    store.insert('spareparts', part.to_record())
    return part


def seed_order(store, status: str = OrderStatus.NEW, progress: int = 5, customer_name: str = 'PT Maju',
               request_date: str = '2026-01-05T08:00:00+00:00', **overrides) -> Order:
    order = Order(
        service_id=overrides.pop('service_id', None) or new_service_id(),
        customer_name=customer_name,
        equipment=overrides.pop('equipment', 'Injector Bosch 0445'),
        request_date=request_date,
        status=status,
        progress=progress,
        **overrides,
    )
    store.insert('orders', order.to_record())
    return order


def auth_headers(app, profile: Profile) -> Dict[str, str]:
    with app.app_context():
        token = create_access_token(identity=str(profile.id), additional_claims={'role': profile.role})
    return {'Authorization': f'Bearer {token}'}


def headers_for(app, store, role: str, **kwargs) -> Dict[str, str]:
    return auth_headers(app, ensure_profile(store, role, **kwargs))


def assert_transition(client, url: str, headers: Dict[str, str], expected_status: int, payload: dict = None,
                      expected_order_status: str = None):
    resp = client.post(url, json=payload or {}, headers=headers)
    assert resp.status_code == expected_status, resp.get_json()
    if expected_status < 400 and expected_order_status is not None:
        assert resp.get_json()['order']['status'] == expected_order_status
    return resp
