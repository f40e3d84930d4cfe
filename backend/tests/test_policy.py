import pytest

from tracker.domain import OrderStatus, Role
from tracker.errors import AuthorizationError
from tracker.services.policy import (
    Action, ORDER_POLICY, View, actions_for, assert_allowed, can_view, is_allowed, roles_for, views_for,
)


def test_only_marketing_creates_orders():
    assert roles_for(Action.CREATE_ORDER) == [Role.MARKETING]


def test_single_owner_actions():
    assert roles_for(Action.ADD_STOCK) == [Role.PPIC]
    assert roles_for(Action.REQUEST_PURCHASE) == [Role.ENGINEER]
    assert roles_for(Action.CONFIRM_PAYMENT) == [Role.FINANCE]
    assert roles_for(Action.SUBMIT_INSPECTION) == [Role.QC]
    assert roles_for(Action.REQUEST_PARTS) == [Role.ENGINEER]


def test_review_roles():
    assert roles_for(Action.APPROVE_PARTS) == [Role.MARKETING, Role.PPIC]
    assert roles_for(Action.REJECT_PARTS) == [Role.MARKETING, Role.PPIC]


def test_action_is_bound_to_status():
    assert is_allowed(Role.FINANCE, Action.CONFIRM_PAYMENT, OrderStatus.DELIVERY)
    assert not is_allowed(Role.FINANCE, Action.CONFIRM_PAYMENT, OrderStatus.QC)
    assert not is_allowed(Role.ENGINEER, Action.COMPLETE_REPAIR, OrderStatus.NEW)


def test_paid_accepts_nothing():
    assert not [rule for rule in ORDER_POLICY if rule[1] == OrderStatus.PAID]


@pytest.mark.parametrize('role', [Role.ADMIN, Role.CUSTOMER])
def test_read_only_roles_have_no_actions(role):
    for status in OrderStatus.SEQUENCE:
        assert actions_for(role, status) == []
    for action in (Action.CREATE_ORDER, Action.ADD_STOCK, Action.REQUEST_PURCHASE):
        assert not is_allowed(role, action)


def test_assert_allowed_raises_forbidden():
    with pytest.raises(AuthorizationError) as exc:
        assert_allowed(Role.QC, Action.CONFIRM_PAYMENT, OrderStatus.DELIVERY)
    assert exc.value.code == 403
    assert assert_allowed(Role.MARKETING, Action.CREATE_ORDER) is True


def test_role_views():
    assert views_for(Role.CUSTOMER) == [View.CUSTOMER_PORTAL]
    assert views_for(Role.PPIC) == [View.DASHBOARD, View.SPAREPARTS, View.PART_REQUESTS]
    assert can_view(Role.MARKETING, View.SPAREPARTS, View.FINANCE)
    assert not can_view(Role.ENGINEER, View.FINANCE)
    assert views_for('UNKNOWN') == []


def test_actions_for_repair_status():
    assert actions_for(Role.ENGINEER, OrderStatus.REPAIR) == [
        Action.CONFIRM_PURCHASE_ORDER, Action.ADD_LOG, Action.COMPLETE_REPAIR,
    ]
    assert actions_for(Role.PPIC, OrderStatus.REPAIR) == [Action.ADD_LOG]
