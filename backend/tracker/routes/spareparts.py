from __future__ import annotations
from flask import Blueprint, request

from tracker.decorators.auth import current_profile, require_login, require_view
from tracker.domain import SparepartStatus
from tracker.services.inventory import InventoryService
from tracker.services.policy import View
from tracker.store import get_store
from tracker.utils.filters import apply_filters, contains, equals
from tracker.utils.listing import cached_list_response
from tracker.utils.sorting import apply_multi_sort
from ._common import body, camel

parts_bp = Blueprint('spareparts', __name__)

SORT_FIELDS = {'name': 'name', 'stock': 'stock', 'status': 'status', 'location': 'location', 'partId': 'part_id'}


@parts_bp.get('')
@require_view(View.SPAREPARTS)
def list_spareparts():
    rows = [p.to_record() for p in InventoryService(get_store()).list_spareparts()]
    filter_specs = {
        'status': {'match': equals('status'), 'validate': lambda v: v in SparepartStatus.ALL_STATUSES},
        'q': {'match': contains('part_id', 'name', 'location')},
    }
    rows = apply_filters(rows, filter_specs, request.args)
    rows = apply_multi_sort(rows, request.args.get('sort'), SORT_FIELDS, 'part_id')
    return cached_list_response([camel(r) for r in rows])


@parts_bp.post('/<part_id>/stock')
@require_login
def add_stock(part_id: str):
    data = body()
    part = InventoryService(get_store()).add_stock(current_profile(), part_id, data.get('quantity'))
    return camel(part.to_record())


@parts_bp.post('/<part_id>/purchase-request')
@require_login
def request_purchase(part_id: str):
    data = body()
    po = InventoryService(get_store()).request_purchase(
        current_profile(), part_id, data.get('quantity'), data.get('justification'),
    )
    return camel(po.to_record()), 201
