from __future__ import annotations
from dataclasses import asdict

from flask import Blueprint, abort, request

from tracker.decorators.auth import current_profile, require_login, require_view
from tracker.domain import PartRequestStatus
from tracker.services.policy import View
from tracker.services.projections import group_part_requests
from tracker.services.workflow import WorkflowEngine
from tracker.store import get_store
from tracker.utils.listing import cached_list_response
from ._common import camel, expected_version, transition_response

preq_bp = Blueprint('part_requests', __name__)


@preq_bp.get('')
@require_view(View.PART_REQUESTS)
def list_groups():
    status = request.args.get('status') or None
    if status and status not in PartRequestStatus.ALL_STATUSES:
        abort(400, description='status invalid')
    groups = group_part_requests(WorkflowEngine(get_store()).list_part_requests(), status=status)
    return cached_list_response([camel(asdict(g)) for g in groups])


@preq_bp.post('/<service_id>/approve')
@require_login
def approve(service_id: str):
    result = WorkflowEngine(get_store()).review_part_requests(
        current_profile(), service_id, True, expected_version=expected_version(),
    )
    return transition_response(result)


@preq_bp.post('/<service_id>/reject')
@require_login
def reject(service_id: str):
    result = WorkflowEngine(get_store()).review_part_requests(
        current_profile(), service_id, False, expected_version=expected_version(),
    )
    return transition_response(result)
