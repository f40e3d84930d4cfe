from __future__ import annotations
from flask import Blueprint

from tracker.decorators.auth import current_profile, require_login, require_view
from tracker.domain import RepairType
from tracker.services.policy import View
from tracker.services.projections import kanban_board
from tracker.services.workflow import WorkflowEngine
from tracker.store import get_store
from tracker.utils.listing import cached_json, handle_conditional
from ._common import body, camel, expected_version, order_json, transition_response

orders_bp = Blueprint('orders', __name__)


def _engine() -> WorkflowEngine:
    return WorkflowEngine(get_store())


@orders_bp.get('')
@require_view(View.DASHBOARD)
def board():
    columns = kanban_board(_engine().list_orders())
    return cached_json({
        'columns': [
            {'status': c['status'], 'orders': [order_json(o) for o in c['orders']]}
            for c in columns
        ]
    })


@orders_bp.post('')
@require_login
def create_order():
    data = body()
    order = _engine().create_order(
        current_profile(),
        data.get('customer_name'),
        data.get('equipment'),
        data.get('repair_type', RepairType.MINOR),
    )
    return order_json(order), 201, {'ETag': f'"{order.version}"', 'Location': f'/orders/{order.service_id}'}


@orders_bp.get('/<service_id>')
@require_view(View.DASHBOARD)
def get_order(service_id: str):
    engine = _engine()
    order = engine.get_order(service_id)
    # allowedActions depends on the caller's role
    cond = handle_conditional(str(order.version))
    if cond:
        cond.headers['Vary'] = 'Authorization'
        return cond
    requests = engine.part_requests_for(service_id)
    payload = order_json(order)
    payload['partRequests'] = [camel(r.to_record()) for r in requests]
    payload['allowedActions'] = engine.allowed_actions(current_profile(), order, requests)
    return payload, 200, {'ETag': f'"{order.version}"', 'Vary': 'Authorization'}


@orders_bp.get('/<service_id>/actions')
@require_view(View.DASHBOARD)
def order_actions(service_id: str):
    engine = _engine()
    order = engine.get_order(service_id)
    return {
        'serviceId': order.service_id,
        'status': order.status,
        'version': order.version,
        'actions': engine.allowed_actions(current_profile(), order),
    }


@orders_bp.post('/<service_id>/diagnosis')
@require_login
def submit_diagnosis(service_id: str):
    data = body()
    result = _engine().submit_diagnosis(
        current_profile(), service_id, data.get('repair_type'), data.get('notes'),
        expected_version=expected_version(),
    )
    return transition_response(result)


@orders_bp.post('/<service_id>/part-requests')
@require_login
def request_parts(service_id: str):
    data = body()
    result = _engine().request_parts(
        current_profile(), service_id, data.get('part_id'), data.get('quantity'),
        repair_type=data.get('repair_type'), notes=data.get('notes'),
        expected_version=expected_version(),
    )
    return transition_response(result)


@orders_bp.post('/<service_id>/approve')
@require_login
def approve_parts(service_id: str):
    result = _engine().review_part_requests(
        current_profile(), service_id, True, expected_version=expected_version(),
    )
    return transition_response(result)


@orders_bp.post('/<service_id>/reject')
@require_login
def reject_parts(service_id: str):
    result = _engine().review_part_requests(
        current_profile(), service_id, False, expected_version=expected_version(),
    )
    return transition_response(result)


@orders_bp.post('/<service_id>/purchase-orders')
@require_login
def confirm_purchase_order(service_id: str):
    result = _engine().confirm_purchase_order(
        current_profile(), service_id, expected_version=expected_version(),
    )
    return transition_response(result)


@orders_bp.post('/<service_id>/logs')
@require_login
def add_log(service_id: str):
    data = body()
    result = _engine().add_log(
        current_profile(), service_id, data.get('notes'), expected_version=expected_version(),
    )
    return transition_response(result)


@orders_bp.post('/<service_id>/complete')
@require_login
def complete_repair(service_id: str):
    data = body()
    result = _engine().complete_repair(
        current_profile(), service_id, data.get('notes'), expected_version=expected_version(),
    )
    return transition_response(result)


@orders_bp.post('/<service_id>/inspection')
@require_login
def submit_inspection(service_id: str):
    data = body()
    result = _engine().submit_inspection(
        current_profile(), service_id, data.get('result'), data.get('notes'),
        expected_version=expected_version(),
    )
    return transition_response(result)


@orders_bp.post('/<service_id>/payment')
@require_login
def confirm_payment(service_id: str):
    result = _engine().confirm_payment(
        current_profile(), service_id, expected_version=expected_version(),
    )
    return transition_response(result)
