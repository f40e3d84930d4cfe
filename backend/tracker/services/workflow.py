from __future__ import annotations
"""Order workflow engine.

Every state change of a service order goes through one method here. A method
loads the order, checks the policy table and the state preconditions, builds
the new order plus exactly one repair log entry, and writes everything
(order, part requests, purchase orders) inside one `store.atomic()` block.
Nothing is written when a check fails.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from tracker.domain import (
    JobType, Order, OrderStatus, PartRequest, PartRequestStatus, Profile, PurchaseOrder,
    PurchaseOrderStatus, QCResult, RepairLog, RepairType, Role, Sparepart, SparepartStatus,
    new_id, new_service_id, utcnow_iso,
)
from tracker.errors import (
    AuthorizationError, ConflictError, NotFoundError, PersistenceError, ValidationError,
)
from tracker.services.audit import append_log, make_log
from tracker.services.policy import Action, is_allowed
from tracker.store.base import DataStore, StoreError
from tracker.utils.fsm import TransitionValidator
from tracker.utils.validation import positive_int, require_text, validate_status

log = logging.getLogger(__name__)

ORDER_FSM = TransitionValidator({
    OrderStatus.NEW: {OrderStatus.REPAIR},
    OrderStatus.REPAIR: {OrderStatus.QC},
    # Failed inspection keeps the order in QC for rework
    OrderStatus.QC: {OrderStatus.QC, OrderStatus.DELIVERY},
    OrderStatus.DELIVERY: {OrderStatus.PAID},
    OrderStatus.PAID: set(),
}, field_name='order status')

PART_REQUEST_FSM = TransitionValidator({
    PartRequestStatus.PENDING: {PartRequestStatus.APPROVED, PartRequestStatus.REJECTED},
    PartRequestStatus.APPROVED: {PartRequestStatus.ORDERED},
    PartRequestStatus.REJECTED: set(),
    PartRequestStatus.ORDERED: set(),
}, field_name='part request status')

# Progress checkpoints per transition
PROGRESS = {
    Action.CREATE_ORDER: 5,
    Action.REQUEST_PARTS: 25,
    Action.REJECT_PARTS: 25,
    Action.SUBMIT_DIAGNOSIS: 40,
    Action.APPROVE_PARTS: 60,
    Action.CONFIRM_PURCHASE_ORDER: 70,
    Action.COMPLETE_REPAIR: 90,
    Action.SUBMIT_INSPECTION: 95,
    Action.CONFIRM_PAYMENT: 100,
}

# How each reviewing role is named in part-request log notes
REVIEWER_NAMES = {Role.MARKETING: 'marketing', Role.PPIC: 'PPIC'}


def _reviewer(actor: Profile) -> str:
    return REVIEWER_NAMES.get(actor.role, actor.role)


@dataclass
class TransitionResult:
    order: Order
    log: Optional[RepairLog] = None
    part_requests: List[PartRequest] = field(default_factory=list)
    purchase_orders: List[PurchaseOrder] = field(default_factory=list)


# (collection, fields, where, expected row count or None)
_Update = Tuple[str, Dict[str, Any], Dict[str, Any], Optional[int]]


class WorkflowEngine:
    def __init__(self, store: DataStore, clock: Callable[[], str] = utcnow_iso):
        self.store = store
        self.clock = clock

    # -- reads -------------------------------------------------------------
    def list_orders(self) -> List[Order]:
        rows = self._call(self.store.select, 'orders', None, 'request_date', True)
        return [Order.from_record(r) for r in rows]

    def get_order(self, service_id: str) -> Order:
        row = self._call(self.store.get, 'orders', service_id=service_id)
        if not row:
            raise NotFoundError(description=f'Order {service_id} not found')
        return Order.from_record(row)

    def part_requests_for(self, service_id: str) -> List[PartRequest]:
        rows = self._call(self.store.select, 'part_requests', {'service_id': service_id}, 'request_date')
        return [PartRequest.from_record(r) for r in rows]

    def list_part_requests(self) -> List[PartRequest]:
        rows = self._call(self.store.select, 'part_requests', None, 'request_date')
        return [PartRequest.from_record(r) for r in rows]

    def allowed_actions(self, actor: Profile, order: Order,
                        requests: Optional[Sequence[PartRequest]] = None) -> List[str]:
        """Actions `actor` could perform on `order` right now.

        Combines the policy table with the state gates the engine enforces, so
        the dashboard only renders buttons that would be accepted.
        """
        if requests is None:
            requests = self.part_requests_for(order.service_id)
        statuses = {r.status for r in requests}
        has_pending = PartRequestStatus.PENDING in statuses
        gates = {
            Action.SUBMIT_DIAGNOSIS: not has_pending,
            Action.REQUEST_PARTS: not has_pending,
            Action.APPROVE_PARTS: has_pending,
            Action.REJECT_PARTS: has_pending,
            Action.CONFIRM_PURCHASE_ORDER: PartRequestStatus.APPROVED in statuses,
        }
        return [
            a for a in Action.ORDER_ACTIONS
            if is_allowed(actor.role, a, order.status) and gates.get(a, True)
        ]

    # -- transitions -------------------------------------------------------
    def create_order(self, actor: Profile, customer_name: Any, equipment: Any,
                     repair_type: Any = RepairType.MINOR) -> Order:
        if not is_allowed(actor.role, Action.CREATE_ORDER):
            self._refuse(actor, Action.CREATE_ORDER, None, 'role not permitted')
            raise AuthorizationError(description=f'Role {actor.role} may not create orders')
        order = Order(
            service_id=new_service_id(),
            customer_name=require_text(customer_name, 'customerName'),
            equipment=require_text(equipment, 'equipment'),
            request_date=self.clock(),
            repair_type=validate_status(repair_type, RepairType.ALL, 'repairType'),
            status=OrderStatus.NEW,
            assigned_engineer='N/A',
            progress=PROGRESS[Action.CREATE_ORDER],
            user_id=actor.id,
        )
        self._call(self.store.insert, 'orders', order.to_record())
        log.info('order %s created by %s (%s)', order.service_id, actor.username, actor.role)
        return order

    def submit_diagnosis(self, actor: Profile, service_id: str, repair_type: Any, notes: Optional[str] = None,
                         expected_version: Optional[int] = None) -> TransitionResult:
        action = Action.SUBMIT_DIAGNOSIS
        order, requests = self._load(actor, service_id, action, expected_version)
        self._require_no_pending(actor, order, action, requests)
        repair_type = validate_status(repair_type, RepairType.ALL, 'repairType')
        entry = make_log(service_id, 'Initial Diagnosis', actor.username, notes, self.clock())
        new = replace(
            order,
            status=OrderStatus.REPAIR,
            repair_type=repair_type,
            assigned_engineer=actor.username,
            progress=self._advance(order, action),
        )
        return self._commit(actor, action, order, new, entry)

    def request_parts(self, actor: Profile, service_id: str, part_id: Any, quantity: Any,
                      repair_type: Any = None, notes: Optional[str] = None,
                      expected_version: Optional[int] = None) -> TransitionResult:
        action = Action.REQUEST_PARTS
        order, requests = self._load(actor, service_id, action, expected_version)
        self._require_no_pending(actor, order, action, requests)
        repair_type = validate_status(repair_type or order.repair_type, RepairType.ALL, 'repairType')
        qty = positive_int(quantity, 'quantity')
        part = self._available_part(part_id, qty)
        now = self.clock()
        request = PartRequest(
            request_id=new_id('REQ'),
            service_id=service_id,
            part_id=part.part_id,
            part_name=part.name,
            quantity_requested=qty,
            requestor_name=actor.username,
            requestor_id=actor.id,
            request_date=now,
            customer_name=order.customer_name,
            job_type=JobType.for_repair_type(repair_type),
            status=PartRequestStatus.PENDING,
        )
        text = (notes or '').strip()
        if text:
            note = f'Diagnosis: {text}. Requested {qty} x {part.name}.'
        else:
            note = f'Diagnosed and requested {qty} x {part.name}. Awaiting marketing approval.'
        entry = make_log(service_id, 'Diagnosis & Part Request', actor.username, note, now)
        new = replace(
            order,
            repair_type=repair_type,
            assigned_engineer=actor.username,
            progress=self._advance(order, action),
        )
        return self._commit(
            actor, action, order, new, entry,
            inserts=[('part_requests', [request.to_record()])],
            part_requests=[request],
        )

    def review_part_requests(self, actor: Profile, service_id: str, approved: bool,
                             expected_version: Optional[int] = None) -> TransitionResult:
        """Approve or reject every Pending part request of the order in one step."""
        action = Action.APPROVE_PARTS if approved else Action.REJECT_PARTS
        order, requests = self._load(actor, service_id, action, expected_version)
        pending = [r for r in requests if r.status == PartRequestStatus.PENDING]
        if not pending:
            self._refuse(actor, action, order, 'no pending part requests')
            raise ValidationError(description='No pending part requests for this order.')
        target = PartRequestStatus.APPROVED if approved else PartRequestStatus.REJECTED
        for r in pending:
            PART_REQUEST_FSM.assert_can_transition(r.status, target)
        if approved:
            entry = make_log(service_id, 'Request Approved', actor.username,
                             f'Part request approved by {_reviewer(actor)}.', self.clock())
            new = replace(order, status=OrderStatus.REPAIR, progress=self._advance(order, action))
        else:
            entry = make_log(service_id, 'Request Rejected', actor.username,
                             f'Part request rejected by {_reviewer(actor)}.', self.clock())
            new = replace(order, progress=self._advance(order, action))
        ids = [r.request_id for r in pending]
        return self._commit(
            actor, action, order, new, entry,
            updates=[(
                'part_requests', {'status': target},
                {'request_id': ids, 'status': PartRequestStatus.PENDING}, len(ids),
            )],
            part_requests=[replace(r, status=target) for r in pending],
        )

    def confirm_purchase_order(self, actor: Profile, service_id: str,
                               expected_version: Optional[int] = None) -> TransitionResult:
        action = Action.CONFIRM_PURCHASE_ORDER
        order, requests = self._load(actor, service_id, action, expected_version)
        approved = [r for r in requests if r.status == PartRequestStatus.APPROVED]
        if not approved:
            self._refuse(actor, action, order, 'no approved part requests')
            raise ValidationError(description='No approved parts available to create a purchase order.')
        now = self.clock()
        purchase_orders = [
            PurchaseOrder(
                purchase_order_id=new_id('PO'),
                part_id=r.part_id,
                part_name=r.part_name,
                quantity=r.quantity_requested,
                justification=f'For service order {service_id}',
                requestor=actor.username,
                requestor_id=actor.id,
                request_date=now,
                status=PurchaseOrderStatus.PENDING,
            )
            for r in approved
        ]
        for r in approved:
            PART_REQUEST_FSM.assert_can_transition(r.status, PartRequestStatus.ORDERED)
        entry = make_log(service_id, 'Purchase Order Confirmed', actor.username,
                         f'PO created for {len(approved)} approved part(s). Sent to PPIC.', now)
        new = replace(order, progress=self._advance(order, action))
        ids = [r.request_id for r in approved]
        return self._commit(
            actor, action, order, new, entry,
            inserts=[('purchase_orders', [po.to_record() for po in purchase_orders])],
            updates=[(
                'part_requests', {'status': PartRequestStatus.ORDERED},
                {'request_id': ids, 'status': PartRequestStatus.APPROVED}, len(ids),
            )],
            part_requests=[replace(r, status=PartRequestStatus.ORDERED) for r in approved],
            purchase_orders=purchase_orders,
        )

    def add_log(self, actor: Profile, service_id: str, notes: Any,
                expected_version: Optional[int] = None) -> TransitionResult:
        action = Action.ADD_LOG
        order, _requests = self._load(actor, service_id, action, expected_version)
        if not isinstance(notes, str) or not notes.strip():
            self._refuse(actor, action, order, 'empty notes')
            raise ValidationError(description='Notes cannot be empty for a log entry.')
        label = 'PPIC Log' if actor.role == Role.PPIC else 'Repair Log Added'
        entry = make_log(service_id, label, actor.username, notes, self.clock())
        return self._commit(actor, action, order, replace(order), entry)

    def complete_repair(self, actor: Profile, service_id: str, notes: Optional[str] = None,
                        expected_version: Optional[int] = None) -> TransitionResult:
        action = Action.COMPLETE_REPAIR
        order, _requests = self._load(actor, service_id, action, expected_version)
        text = (notes or '').strip()
        note = f'Final repair note: {text}' if text else 'Repair work completed.'
        entry = make_log(service_id, 'Repair Completed', actor.username, note, self.clock())
        new = replace(order, status=OrderStatus.QC, progress=self._advance(order, action))
        return self._commit(actor, action, order, new, entry)

    def submit_inspection(self, actor: Profile, service_id: str, result: Any, notes: Optional[str] = None,
                          expected_version: Optional[int] = None) -> TransitionResult:
        action = Action.SUBMIT_INSPECTION
        order, _requests = self._load(actor, service_id, action, expected_version)
        result = validate_status(result, QCResult.ALL, 'qcResult')
        entry = make_log(service_id, f'QC Inspection: {result}', actor.username, notes, self.clock())
        if result == QCResult.PASS:
            new = replace(order, status=OrderStatus.DELIVERY, qc_result=result,
                          progress=self._advance(order, action))
        else:
            new = replace(order, qc_result=result)
        return self._commit(actor, action, order, new, entry)

    def confirm_payment(self, actor: Profile, service_id: str,
                        expected_version: Optional[int] = None) -> TransitionResult:
        action = Action.CONFIRM_PAYMENT
        order, _requests = self._load(actor, service_id, action, expected_version)
        entry = make_log(service_id, 'Payment Confirmed', actor.username,
                         'Payment received and order is now closed.', self.clock())
        new = replace(order, status=OrderStatus.PAID, progress=self._advance(order, action))
        return self._commit(actor, action, order, new, entry)

    # -- internals ---------------------------------------------------------
    def _call(self, fn: Callable, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except StoreError as e:
            log.error('store failure: %s', e)
            raise PersistenceError(description=str(e)) from e

    def _load(self, actor: Profile, service_id: str, action: str,
              expected_version: Optional[int]) -> Tuple[Order, List[PartRequest]]:
        order = self.get_order(service_id)
        if not is_allowed(actor.role, action, order.status):
            if order.is_terminal:
                self._refuse(actor, action, order, 'order closed')
                raise ValidationError(description=f'Order {service_id} is closed; no further actions are accepted.')
            self._refuse(actor, action, order, 'role not permitted in this status')
            raise AuthorizationError(
                description=f'Role {actor.role} may not perform {action} while the order is {order.status}'
            )
        if expected_version is not None and expected_version != order.version:
            self._refuse(actor, action, order, f'stale version {expected_version}')
            raise ConflictError(description='Order was modified by someone else. Reload and try again.')
        return order, self.part_requests_for(service_id)

    def _require_no_pending(self, actor: Profile, order: Order, action: str, requests: Sequence[PartRequest]):
        if any(r.status == PartRequestStatus.PENDING for r in requests):
            self._refuse(actor, action, order, 'part request awaiting review')
            raise ValidationError(description='A part request for this order is awaiting marketing approval.')

    def _available_part(self, part_id: Any, quantity: int) -> Sparepart:
        if not isinstance(part_id, str) or not part_id.strip():
            raise ValidationError(description='Please select a part.')
        row = self._call(self.store.get, 'spareparts', part_id=part_id)
        if not row:
            raise ValidationError(description=f'Part {part_id} does not exist.')
        part = Sparepart.from_record(row)
        if part.status != SparepartStatus.AVAILABLE or part.stock <= 0 or part.stock < quantity:
            raise ValidationError(description='Invalid quantity or part not available in sufficient stock.')
        return part

    @staticmethod
    def _advance(order: Order, action: str) -> int:
        return max(order.progress, PROGRESS[action])

    @staticmethod
    def _refuse(actor: Profile, action: str, order: Optional[Order], reason: str):
        log.warning(
            'refused %s on %s by %s (%s): %s',
            action, order.service_id if order else '-', actor.username, actor.role, reason,
        )

    def _commit(self, actor: Profile, action: str, old: Order, new: Order, entry: RepairLog,
                inserts: Sequence[Tuple[str, List[Dict[str, Any]]]] = (),
                updates: Sequence[_Update] = (),
                part_requests: Sequence[PartRequest] = (),
                purchase_orders: Sequence[PurchaseOrder] = ()) -> TransitionResult:
        if new.status != old.status or action == Action.SUBMIT_INSPECTION:
            ORDER_FSM.assert_can_transition(old.status, new.status)
        new = replace(new, repair_logs=append_log(old.repair_logs, entry), version=old.version + 1)
        fields = new.to_record()
        fields.pop('service_id')

        def _write():
            with self.store.atomic():
                for collection, records in inserts:
                    self.store.insert(collection, records)
                for collection, values, where, expected in updates:
                    rows = self.store.update(collection, values, where)
                    if expected is not None and len(rows) != expected:
                        raise ConflictError(description='Part requests changed while processing. Reload and try again.')
                rows = self.store.update('orders', fields, {'service_id': old.service_id, 'version': old.version})
                if not rows:
                    raise ConflictError(description='Order was modified by someone else. Reload and try again.')

        try:
            self._call(_write)
        except ConflictError:
            self._refuse(actor, action, old, 'concurrent modification')
            raise
        log.info(
            '%s applied to %s by %s (%s): %s -> %s',
            action, old.service_id, actor.username, actor.role, old.status, new.status,
        )
        return TransitionResult(
            order=new, log=entry, part_requests=list(part_requests), purchase_orders=list(purchase_orders),
        )


__all__ = ['WorkflowEngine', 'TransitionResult', 'ORDER_FSM', 'PART_REQUEST_FSM', 'PROGRESS']
