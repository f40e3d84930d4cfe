from __future__ import annotations
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from flask import Blueprint, abort, request

from tracker.decorators.auth import require_view
from tracker.domain import Invoice, InvoiceStatus
from tracker.errors import PersistenceError
from tracker.services.policy import View
from tracker.services.projections import invoice_summary
from tracker.store import StoreError, get_store
from tracker.utils.filters import apply_filters, equals
from tracker.utils.listing import cached_list_response
from ._common import camel

rpt_bp = Blueprint('reports', __name__)


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    for fmt in ('%Y-%m-%d', '%Y-%m-%dT%H:%M:%S', '%Y-%m-%dT%H:%M:%S%z'):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    abort(400, description=f'invalid date {value}')


def _in_range(rows: Iterable[Dict[str, Any]], field: str) -> List[Dict[str, Any]]:
    start = _parse_date(request.args.get('from'))
    end = _parse_date(request.args.get('to'))
    if not start and not end:
        return list(rows)
    kept = []
    for row in rows:
        day = _parse_date((row.get(field) or '')[:10]) if row.get(field) else None
        if day is None:
            continue
        if start and day < start:
            continue
        if end and day > end:
            continue
        kept.append(row)
    return kept


def _select(collection: str, order_by: str) -> List[Dict[str, Any]]:
    try:
        return get_store().select(collection, None, order_by, True)
    except StoreError as e:
        raise PersistenceError(description=str(e)) from e


@rpt_bp.get('/qc')
@require_view(View.QC)
def qc_reports():
    rows = _in_range(_select('qc_reports', 'inspection_date'), 'inspection_date')
    rows = apply_filters(rows, {
        'result': {'match': equals('test_result')},
        'serviceId': {'match': equals('service_id')},
    }, request.args)
    return cached_list_response([camel(r) for r in rows])


@rpt_bp.get('/invoices')
@require_view(View.FINANCE)
def invoices():
    rows = _in_range(_select('invoices', 'issue_date'), 'issue_date')
    rows = apply_filters(rows, {
        'status': {'match': equals('status'), 'validate': lambda v: v in InvoiceStatus.ALL_STATUSES},
    }, request.args)
    summary = invoice_summary(Invoice.from_record(r) for r in rows)
    return cached_list_response([camel(r) for r in rows], summary=camel(summary))
