from __future__ import annotations
from flask import Blueprint

from tracker.decorators.auth import current_profile, require_view
from tracker.domain import Role
from tracker.errors import AuthorizationError, ValidationError
from tracker.services.policy import View
from tracker.services.projections import customer_timeline
from tracker.services.workflow import WorkflowEngine
from tracker.store import get_store
from tracker.utils.listing import cached_json
from ._common import camel

portal_bp = Blueprint('portal', __name__)


@portal_bp.get('/orders/<service_id>')
@require_view(View.CUSTOMER_PORTAL, View.DASHBOARD)
def order_status(service_id: str):
    service_id = service_id.strip().upper()
    if not service_id.startswith('SRV-'):
        raise ValidationError(description='Invalid or missing Service ID.')
    profile = current_profile()
    if profile.role == Role.CUSTOMER and profile.customer_order_id != service_id:
        raise AuthorizationError(description='This service order is not linked to your account.')
    order = WorkflowEngine(get_store()).get_order(service_id)
    return cached_json(camel(customer_timeline(order)))
