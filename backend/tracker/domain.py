from __future__ import annotations
"""In-memory domain types for service orders, inventory and procurement.

Attribute names are snake_case and match the store columns one-to-one, so
`from_record` / `to_record` are plain field copies. The camelCase wire format
is handled in `tracker.store.casing`, never here.
"""
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
import uuid


class OrderStatus:
    NEW = 'New Request'
    REPAIR = 'Repair in Progress'
    QC = 'Quality Control'
    DELIVERY = 'Ready for Delivery'
    PAID = 'Paid & Closed'
    # Workflow order; index comparisons rely on it
    SEQUENCE = (NEW, REPAIR, QC, DELIVERY, PAID)
    ALL_STATUSES = SEQUENCE

    @classmethod
    def rank(cls, status: str) -> int:
        return cls.SEQUENCE.index(status)


class RepairType:
    MINOR = 'Minor'
    FULL = 'Full Service'
    ALL = (MINOR, FULL)


class QCResult:
    PASS = 'Pass'
    FAIL = 'Fail'
    ALL = (PASS, FAIL)


class JobType:
    INJECTOR = 'Injector'
    FUEL_PUMP = 'Fuel Pump'

    @classmethod
    def for_repair_type(cls, repair_type: str) -> str:
        return cls.INJECTOR if repair_type == RepairType.MINOR else cls.FUEL_PUMP


class SparepartStatus:
    AVAILABLE = 'Available'
    BACK_ORDER = 'Back Order'
    ORDERED = 'Ordered'
    ALL_STATUSES = (AVAILABLE, BACK_ORDER, ORDERED)


class PartRequestStatus:
    PENDING = 'Pending'
    APPROVED = 'Approved'
    REJECTED = 'Rejected'
    ORDERED = 'Ordered'
    ALL_STATUSES = (PENDING, APPROVED, REJECTED, ORDERED)
    # Group display precedence, highest first
    PRECEDENCE = (PENDING, APPROVED, ORDERED, REJECTED)


class PurchaseOrderStatus:
    PENDING = 'Pending Approval'
    APPROVED = 'Approved'
    ORDERED = 'Ordered'
    RECEIVED = 'Received'
    CANCELLED = 'Cancelled'
    ALL_STATUSES = (PENDING, APPROVED, ORDERED, RECEIVED, CANCELLED)


class InvoiceStatus:
    PENDING = 'Pending'
    PAID = 'Paid'
    OVERDUE = 'Overdue'
    ALL_STATUSES = (PENDING, PAID, OVERDUE)


class Role:
    ADMIN = 'ADMIN'
    CUSTOMER = 'CUSTOMER'
    MARKETING = 'MARKETING'
    ENGINEER = 'ENGINEER'
    PPIC = 'PPIC'
    QC = 'QC'
    FINANCE = 'FINANCE'
    ALL = (ADMIN, CUSTOMER, MARKETING, ENGINEER, PPIC, QC, FINANCE)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12].upper()}"


def new_service_id(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"SRV-{now:%Y%m%d}-{uuid.uuid4().hex[:6].upper()}"


class _Record:
    """Mixin giving dataclasses a lossless mapping to store records."""

    @classmethod
    def from_record(cls, record: Dict[str, Any]):
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in record.items() if k in names})

    def to_record(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RepairLog(_Record):
    log_id: str
    service_id: str
    action: str
    date: str
    author: str
    notes: str


@dataclass
class Order(_Record):
    service_id: str
    customer_name: str
    equipment: str
    request_date: str
    repair_type: str = RepairType.MINOR
    status: str = OrderStatus.NEW
    assigned_engineer: str = 'N/A'
    progress: int = 5
    qc_result: Optional[str] = None
    repair_logs: Tuple[RepairLog, ...] = ()
    user_id: Optional[str] = None
    version: int = 1

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Order':
        order = super().from_record(record)
        logs = record.get('repair_logs') or []
        order.repair_logs = tuple(l if isinstance(l, RepairLog) else RepairLog.from_record(l) for l in logs)
        return order

    def to_record(self) -> Dict[str, Any]:
        data = asdict(self)
        data['repair_logs'] = [log.to_record() for log in self.repair_logs]
        return data

    @property
    def is_terminal(self) -> bool:
        return self.status == OrderStatus.PAID


@dataclass
class Sparepart(_Record):
    part_id: str
    name: str
    stock: int = 0
    status: str = SparepartStatus.AVAILABLE
    location: str = ''


@dataclass
class PartRequest(_Record):
    request_id: str
    service_id: str
    part_id: str
    part_name: str
    quantity_requested: int
    requestor_name: str
    request_date: str
    customer_name: str
    job_type: str
    status: str = PartRequestStatus.PENDING
    requestor_id: Optional[str] = None


@dataclass
class PurchaseOrder(_Record):
    purchase_order_id: str
    part_id: str
    part_name: str
    quantity: int
    justification: str
    requestor: str
    request_date: str
    status: str = PurchaseOrderStatus.PENDING
    requestor_id: Optional[str] = None


@dataclass
class QCReport(_Record):
    qc_id: str
    service_id: str
    test_result: str
    inspection_date: str
    inspector: str
    notes: str = ''
    certificate_file_url: Optional[str] = None


@dataclass
class Invoice(_Record):
    invoice_id: str
    service_id: str
    customer_name: str
    amount: float
    status: str
    due_date: str
    issue_date: str


@dataclass
class Profile(_Record):
    id: str
    username: str
    role: str
    password_hash: str = ''
    customer_order_id: Optional[str] = None

    def public(self) -> Dict[str, Any]:
        data = self.to_record()
        data.pop('password_hash', None)
        return data


__all__ = [
    'OrderStatus', 'RepairType', 'QCResult', 'JobType', 'SparepartStatus', 'PartRequestStatus',
    'PurchaseOrderStatus', 'InvoiceStatus', 'Role', 'RepairLog', 'Order', 'Sparepart', 'PartRequest',
    'PurchaseOrder', 'QCReport', 'Invoice', 'Profile', 'utcnow_iso', 'new_id', 'new_service_id',
]
