from __future__ import annotations
"""Central authorization policy.

One table answers both "what may this role see / do" for the dashboard and
"is this request acceptable" for the workflow engine. Order actions are keyed
by `(role, order status, action)`; actions that do not concern an order are
keyed by `(role, action)`.
"""
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from tracker.domain import OrderStatus, Role
from tracker.errors import AuthorizationError


class Action:
    CREATE_ORDER = 'order.create'
    SUBMIT_DIAGNOSIS = 'order.diagnose'
    REQUEST_PARTS = 'order.request_parts'
    APPROVE_PARTS = 'order.approve_parts'
    REJECT_PARTS = 'order.reject_parts'
    CONFIRM_PURCHASE_ORDER = 'order.confirm_purchase_order'
    ADD_LOG = 'order.add_log'
    COMPLETE_REPAIR = 'order.complete_repair'
    SUBMIT_INSPECTION = 'order.submit_inspection'
    CONFIRM_PAYMENT = 'order.confirm_payment'
    ADD_STOCK = 'stock.add'
    REQUEST_PURCHASE = 'purchase.request'

    # Display order for the action panel
    ORDER_ACTIONS = (
        SUBMIT_DIAGNOSIS, REQUEST_PARTS, APPROVE_PARTS, REJECT_PARTS, CONFIRM_PURCHASE_ORDER,
        ADD_LOG, COMPLETE_REPAIR, SUBMIT_INSPECTION, CONFIRM_PAYMENT,
    )


class View:
    DASHBOARD = 'dashboard'
    SPAREPARTS = 'spareparts'
    PART_REQUESTS = 'part_requests'
    QC = 'qc'
    FINANCE = 'finance'
    CUSTOMER_PORTAL = 'customer_portal'


_ORDER_RULES: Iterable[Tuple[str, str, str]] = (
    (Role.ENGINEER, OrderStatus.NEW, Action.SUBMIT_DIAGNOSIS),
    (Role.ENGINEER, OrderStatus.NEW, Action.REQUEST_PARTS),
    (Role.MARKETING, OrderStatus.NEW, Action.APPROVE_PARTS),
    (Role.MARKETING, OrderStatus.NEW, Action.REJECT_PARTS),
    # PPIC reviews the same requests from the part-request ledger
    (Role.PPIC, OrderStatus.NEW, Action.APPROVE_PARTS),
    (Role.PPIC, OrderStatus.NEW, Action.REJECT_PARTS),
    (Role.ENGINEER, OrderStatus.REPAIR, Action.CONFIRM_PURCHASE_ORDER),
    (Role.ENGINEER, OrderStatus.REPAIR, Action.ADD_LOG),
    (Role.PPIC, OrderStatus.REPAIR, Action.ADD_LOG),
    (Role.ENGINEER, OrderStatus.REPAIR, Action.COMPLETE_REPAIR),
    (Role.QC, OrderStatus.QC, Action.SUBMIT_INSPECTION),
    (Role.FINANCE, OrderStatus.DELIVERY, Action.CONFIRM_PAYMENT),
)

ORDER_POLICY: FrozenSet[Tuple[str, str, str]] = frozenset(_ORDER_RULES)

GLOBAL_POLICY: Dict[str, Set[str]] = {
    Role.MARKETING: {Action.CREATE_ORDER},
    Role.PPIC: {Action.ADD_STOCK},
    Role.ENGINEER: {Action.REQUEST_PURCHASE},
}

ROLE_VIEWS: Dict[str, List[str]] = {
    Role.ADMIN: [View.DASHBOARD, View.SPAREPARTS, View.PART_REQUESTS, View.QC, View.FINANCE],
    Role.CUSTOMER: [View.CUSTOMER_PORTAL],
    Role.MARKETING: [View.DASHBOARD, View.FINANCE, View.PART_REQUESTS],
    Role.ENGINEER: [View.DASHBOARD, View.SPAREPARTS],
    Role.PPIC: [View.DASHBOARD, View.SPAREPARTS, View.PART_REQUESTS],
    Role.QC: [View.DASHBOARD, View.QC],
    Role.FINANCE: [View.DASHBOARD, View.FINANCE],
}


def is_allowed(role: str, action: str, status: Optional[str] = None) -> bool:
    if status is None:
        return action in GLOBAL_POLICY.get(role, set())
    return (role, status, action) in ORDER_POLICY


def assert_allowed(role: str, action: str, status: Optional[str] = None):
    if not is_allowed(role, action, status):
        where = f' on an order in status {status!r}' if status else ''
        raise AuthorizationError(description=f'Role {role} may not perform {action}{where}')
    return True


def actions_for(role: str, status: str) -> List[str]:
    """Order actions the policy grants `role` for an order in `status` (no state preconditions)."""
    return [a for a in Action.ORDER_ACTIONS if (role, status, a) in ORDER_POLICY]


def roles_for(action: str) -> List[str]:
    """Every role that may perform `action` in at least one status."""
    roles = {r for r, _s, a in ORDER_POLICY if a == action}
    roles |= {r for r, acts in GLOBAL_POLICY.items() if action in acts}
    return sorted(roles)


def views_for(role: str) -> List[str]:
    return list(ROLE_VIEWS.get(role, []))


def can_view(role: str, *views: str) -> bool:
    """True when the role has at least one of `views`."""
    granted = ROLE_VIEWS.get(role, [])
    return any(v in granted for v in views)


__all__ = [
    'Action', 'View', 'ORDER_POLICY', 'GLOBAL_POLICY', 'ROLE_VIEWS', 'is_allowed', 'assert_allowed',
    'actions_for', 'roles_for', 'views_for', 'can_view',
]
