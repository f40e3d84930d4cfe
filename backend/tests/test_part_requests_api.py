from tests.test_utils_seed import assert_transition, ensure_part, ensure_profile, headers_for, seed_order
from tracker.domain import OrderStatus, PartRequestStatus, Role
from tracker.services.workflow import WorkflowEngine


def _pending_order(store, customer='PT Maju', date='2026-01-05T08:00:00+00:00'):
    ensure_part(store, 'SP-001', stock=5)
    order = seed_order(store, customer_name=customer)
    WorkflowEngine(store, clock=lambda: date).request_parts(
        ensure_profile(store, Role.ENGINEER), order.service_id, 'SP-001', 1,
    )
    return order


def test_grouped_listing(client, app_instance, store):
    first = _pending_order(store, 'Alpha', '2026-01-01T00:00:00+00:00')
    second = _pending_order(store, 'Bravo', '2026-01-02T00:00:00+00:00')
    WorkflowEngine(store).review_part_requests(ensure_profile(store, Role.MARKETING), first.service_id, False)
    headers = headers_for(app_instance, store, Role.PPIC)

    resp = client.get('/part-requests', headers=headers)
    assert resp.status_code == 200
    data = resp.get_json()['data']
    assert [g['serviceId'] for g in data] == [second.service_id, first.service_id]
    assert data[0]['status'] == PartRequestStatus.PENDING
    assert data[1]['status'] == PartRequestStatus.REJECTED
    assert data[0]['parts'][0]['partName'] == 'Injector Nozzle'
    assert data[0]['lastRequestDate'] == '2026-01-02T00:00:00+00:00'

    pending = client.get('/part-requests?status=Pending', headers=headers).get_json()['data']
    assert [g['serviceId'] for g in pending] == [second.service_id]
    assert client.get('/part-requests?status=Lost', headers=headers).status_code == 400


def test_ledger_view_gate(client, app_instance, store):
    assert client.get('/part-requests', headers=headers_for(app_instance, store, Role.ENGINEER)).status_code == 403
    assert client.get('/part-requests', headers=headers_for(app_instance, store, Role.MARKETING)).status_code == 200


def test_approve_from_ledger(client, app_instance, store):
    order = _pending_order(store)
    ppic = headers_for(app_instance, store, Role.PPIC)
    resp = assert_transition(client, f'/part-requests/{order.service_id}/approve', ppic, 200,
                             expected_order_status=OrderStatus.REPAIR)
    assert resp.get_json()['order']['progress'] == 60
    assert resp.get_json()['partRequests'][0]['status'] == PartRequestStatus.APPROVED
    # nothing left to review
    assert_transition(client, f'/part-requests/{order.service_id}/reject', ppic, 403)


def test_reject_from_ledger_and_forbidden_roles(client, app_instance, store):
    order = _pending_order(store)
    assert_transition(client, f'/part-requests/{order.service_id}/reject',
                      headers_for(app_instance, store, Role.ENGINEER), 403)
    assert_transition(client, f'/part-requests/{order.service_id}/approve',
                      headers_for(app_instance, store, Role.ADMIN), 403)
    resp = assert_transition(client, f'/part-requests/{order.service_id}/reject',
                             headers_for(app_instance, store, Role.MARKETING), 200,
                             expected_order_status=OrderStatus.NEW)
    assert resp.get_json()['order']['progress'] == 25
