"""Whole-lifecycle invariants: forward-only status, monotonic progress, append-only logs."""
import itertools
import random

import pytest

from tests.test_utils_seed import ensure_part, ensure_profile, seed_order
from tracker.domain import OrderStatus, QCResult, RepairType, Role
from tracker.errors import AuthorizationError, ValidationError
from tracker.services.workflow import ORDER_FSM, WorkflowEngine


def _full_lifecycle(engine, store, actors, qc_failures=1):
    order = engine.create_order(actors[Role.MARKETING], 'PT Sinar', 'Fuel pump VE', RepairType.FULL)
    sid = order.service_id
    steps = [order]
    steps.append(engine.request_parts(actors[Role.ENGINEER], sid, 'SP-001', 2).order)
    steps.append(engine.review_part_requests(actors[Role.MARKETING], sid, approved=True).order)
    steps.append(engine.confirm_purchase_order(actors[Role.ENGINEER], sid).order)
    steps.append(engine.add_log(actors[Role.PPIC], sid, 'Parts received').order)
    steps.append(engine.complete_repair(actors[Role.ENGINEER], sid, 'Calibrated').order)
    for _ in range(qc_failures):
        steps.append(engine.submit_inspection(actors[Role.QC], sid, QCResult.FAIL, 'Leak').order)
    steps.append(engine.submit_inspection(actors[Role.QC], sid, QCResult.PASS).order)
    steps.append(engine.confirm_payment(actors[Role.FINANCE], sid).order)
    return steps


@pytest.fixture()
def world(store):
    ensure_part(store, 'SP-001', stock=5)
    actors = {role: ensure_profile(store, role) for role in Role.ALL}
    return WorkflowEngine(store), actors


@pytest.mark.parametrize('qc_failures', [0, 1, 3])
def test_status_moves_forward_only(world, store, qc_failures):
    engine, actors = world
    steps = _full_lifecycle(engine, store, actors, qc_failures)
    for before, after in zip(steps, steps[1:]):
        if before.status == after.status:
            continue
        assert ORDER_FSM.can_transition(before.status, after.status)
        assert OrderStatus.rank(after.status) == OrderStatus.rank(before.status) + 1
    assert steps[-1].status == OrderStatus.PAID


@pytest.mark.parametrize('qc_failures', [0, 2])
def test_progress_never_decreases(world, store, qc_failures):
    engine, actors = world
    steps = _full_lifecycle(engine, store, actors, qc_failures)
    progress = [o.progress for o in steps]
    assert progress == sorted(progress)
    assert progress[0] == 5 and progress[-1] == 100


def test_logs_are_append_only(world, store):
    engine, actors = world
    steps = _full_lifecycle(engine, store, actors, 1)
    for before, after in zip(steps, steps[1:]):
        assert after.repair_logs[:len(before.repair_logs)] == before.repair_logs
        assert len(after.repair_logs) == len(before.repair_logs) + 1
    actions = [l.action for l in steps[-1].repair_logs]
    assert actions == [
        'Diagnosis & Part Request', 'Request Approved', 'Purchase Order Confirmed', 'PPIC Log',
        'Repair Completed', 'QC Inspection: Fail', 'QC Inspection: Pass', 'Payment Confirmed',
    ]
    stored = store.get('orders', service_id=steps[-1].service_id)
    assert [l['log_id'] for l in stored['repair_logs']] == [l.log_id for l in steps[-1].repair_logs]
    assert stored['version'] == len(actions) + 1


def test_random_action_sequences_keep_invariants(world, store):
    """Fire random (role, action) pairs; refused ones must leave the order untouched."""
    engine, actors = world
    rng = random.Random(1234)
    calls = {
        'diagnose': lambda a, sid: engine.submit_diagnosis(a, sid, RepairType.MINOR, 'ok'),
        'request': lambda a, sid: engine.request_parts(a, sid, 'SP-001', rng.choice([1, 2, 9])),
        'approve': lambda a, sid: engine.review_part_requests(a, sid, True),
        'reject': lambda a, sid: engine.review_part_requests(a, sid, False),
        'po': lambda a, sid: engine.confirm_purchase_order(a, sid),
        'log': lambda a, sid: engine.add_log(a, sid, rng.choice(['note', ''])),
        'complete': lambda a, sid: engine.complete_repair(a, sid),
        'inspect': lambda a, sid: engine.submit_inspection(a, sid, rng.choice(QCResult.ALL)),
        'pay': lambda a, sid: engine.confirm_payment(a, sid),
    }
    pairs = list(itertools.product(Role.ALL, calls))
    for _ in range(5):
        order = seed_order(store)
        sid = order.service_id
        for _ in range(60):
            role, name = rng.choice(pairs)
            before = engine.get_order(sid)
            try:
                after = calls[name](actors[role], sid).order
            except (ValidationError, AuthorizationError):
                assert engine.get_order(sid) == before
                continue
            assert after.progress >= before.progress
            assert OrderStatus.rank(after.status) >= OrderStatus.rank(before.status)
            if after.status != before.status or before.status == OrderStatus.QC:
                assert ORDER_FSM.can_transition(before.status, after.status) or after.status == before.status
            assert len(after.repair_logs) == len(before.repair_logs) + 1
