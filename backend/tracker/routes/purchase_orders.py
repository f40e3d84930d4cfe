from __future__ import annotations
from flask import Blueprint, request

from tracker.decorators.auth import require_view
from tracker.domain import PurchaseOrderStatus
from tracker.services.inventory import InventoryService
from tracker.services.policy import View
from tracker.store import get_store
from tracker.utils.filters import apply_filters, contains, equals
from tracker.utils.listing import cached_list_response
from tracker.utils.sorting import apply_multi_sort
from ._common import camel

po_bp = Blueprint('purchase_orders', __name__)

SORT_FIELDS = {
    'requestDate': 'request_date', 'partName': 'part_name', 'status': 'status', 'quantity': 'quantity',
}


@po_bp.get('')
@require_view(View.PART_REQUESTS, View.SPAREPARTS)
def list_purchase_orders():
    rows = [po.to_record() for po in InventoryService(get_store()).list_purchase_orders()]
    filter_specs = {
        'status': {'match': equals('status'), 'validate': lambda v: v in PurchaseOrderStatus.ALL_STATUSES},
        'partId': {'match': equals('part_id')},
        'q': {'match': contains('purchase_order_id', 'part_name', 'justification', 'requestor')},
    }
    rows = apply_filters(rows, filter_specs, request.args)
    sort_expr = request.args.get('sort') or '-requestDate'
    rows = apply_multi_sort(rows, sort_expr, SORT_FIELDS, 'purchase_order_id')
    return cached_list_response([camel(r) for r in rows])
