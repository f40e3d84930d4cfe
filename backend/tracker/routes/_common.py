from __future__ import annotations
"""Request/response helpers shared by the blueprints.

Request bodies arrive camelCase and are converted to snake_case before they
reach a service; responses go the other way.
"""
from typing import Any, Dict, Optional

from flask import request

from tracker.domain import Order
from tracker.errors import ValidationError
from tracker.services.workflow import TransitionResult
from tracker.store.casing import to_camel_case, to_snake_case


def body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(description='JSON object body required')
    return to_snake_case(data)


def expected_version() -> Optional[int]:
    """Version pinned by the client through `If-Match`, if any."""
    raw = request.headers.get('If-Match')
    if not raw or raw.strip() == '*':
        return None
    token = raw.strip().removeprefix('W/').strip('"')
    try:
        return int(token)
    except ValueError:
        raise ValidationError(description='If-Match must carry the order version')


def camel(record: Any) -> Any:
    return to_camel_case(record)


def order_json(order: Order) -> Dict[str, Any]:
    return camel(order.to_record())


def result_json(result: TransitionResult) -> Dict[str, Any]:
    return {
        'order': order_json(result.order),
        'log': camel(result.log.to_record()) if result.log else None,
        'partRequests': [camel(r.to_record()) for r in result.part_requests],
        'purchaseOrders': [camel(p.to_record()) for p in result.purchase_orders],
    }


def transition_response(result: TransitionResult):
    resp = result_json(result)
    return resp, 200, {'ETag': f'"{result.order.version}"'}
