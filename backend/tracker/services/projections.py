from __future__ import annotations
"""Read-only projections over store records.

Pure functions: same input, same output, no store access. Routes load the
records, call one of these and serialize the result.
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from tracker.domain import Invoice, InvoiceStatus, Order, OrderStatus, PartRequest, PartRequestStatus


def _newest_first(items: Iterable[Any], date_attr: str, id_attr: str) -> List[Any]:
    # Stable sorts: id ascending is the tie-breaker under date descending
    ordered = sorted(items, key=lambda x: getattr(x, id_attr))
    ordered.sort(key=lambda x: getattr(x, date_attr) or '', reverse=True)
    return ordered


def kanban_board(orders: Iterable[Order]) -> List[Dict[str, Any]]:
    """One column per status in workflow order. Orders with an unknown status are left out."""
    columns: Dict[str, List[Order]] = OrderedDict((s, []) for s in OrderStatus.SEQUENCE)
    for order in orders:
        if order.status in columns:
            columns[order.status].append(order)
    return [
        {'status': status, 'orders': _newest_first(items, 'request_date', 'service_id')}
        for status, items in columns.items()
    ]


@dataclass
class PartLine:
    request_id: str
    part_id: str
    part_name: str
    quantity_requested: int
    status: str


@dataclass
class PartRequestGroup:
    service_id: str
    customer_name: str
    requestor_name: str
    job_type: str
    last_request_date: str
    status: str
    parts: List[PartLine] = field(default_factory=list)


def overall_status(requests: Sequence[PartRequest]) -> str:
    present = {r.status for r in requests}
    for status in PartRequestStatus.PRECEDENCE:
        if status in present:
            return status
    return requests[0].status


def group_part_requests(requests: Iterable[PartRequest], status: Optional[str] = None) -> List[PartRequestGroup]:
    """Group the ledger by service order.

    The newest request (ties on date broken by the larger request id) supplies
    customer, requestor, job type and date; the group status follows
    Pending > Approved > Ordered > Rejected. Groups are listed newest first.
    Pass `status` to keep only groups whose overall status matches.
    """
    by_order: Dict[str, List[PartRequest]] = OrderedDict()
    for r in requests:
        by_order.setdefault(r.service_id, []).append(r)

    groups = []
    for service_id, items in by_order.items():
        latest = max(items, key=lambda r: (r.request_date or '', r.request_id))
        group = PartRequestGroup(
            service_id=service_id,
            customer_name=latest.customer_name,
            requestor_name=latest.requestor_name,
            job_type=latest.job_type,
            last_request_date=latest.request_date,
            status=overall_status(items),
            parts=[PartLine(r.request_id, r.part_id, r.part_name, r.quantity_requested, r.status) for r in items],
        )
        if status is None or group.status == status:
            groups.append(group)
    return _newest_first(groups, 'last_request_date', 'service_id')


def customer_timeline(order: Order) -> Dict[str, Any]:
    current = OrderStatus.rank(order.status)
    steps = []
    for idx, status in enumerate(OrderStatus.SEQUENCE):
        if idx < current or (idx == current and order.is_terminal):
            state = 'completed'
        elif idx == current:
            state = 'current'
        else:
            state = 'upcoming'
        steps.append({'status': status, 'state': state})
    return {
        'service_id': order.service_id,
        'customer_name': order.customer_name,
        'equipment': order.equipment,
        'status': order.status,
        'request_date': order.request_date,
        'repair_type': order.repair_type,
        'assigned_engineer': order.assigned_engineer,
        'progress': order.progress,
        'steps': steps,
        'logs': [l.to_record() for l in order.repair_logs],
    }


def invoice_summary(invoices: Iterable[Invoice]) -> Dict[str, float]:
    totals = {InvoiceStatus.PAID: 0.0, InvoiceStatus.PENDING: 0.0, InvoiceStatus.OVERDUE: 0.0}
    for inv in invoices:
        if inv.status in totals:
            totals[inv.status] += float(inv.amount or 0)
    return {
        'total_revenue': round(totals[InvoiceStatus.PAID], 2),
        'pending_amount': round(totals[InvoiceStatus.PENDING], 2),
        'overdue_amount': round(totals[InvoiceStatus.OVERDUE], 2),
    }


__all__ = [
    'kanban_board', 'PartLine', 'PartRequestGroup', 'overall_status', 'group_part_requests',
    'customer_timeline', 'invoice_summary',
]
