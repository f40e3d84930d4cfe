from __future__ import annotations
"""Simple finite state machine utility for enforcing allowed status transitions.

Used for the order workflow and the part-request ledger.
Usage:
    from tracker.utils.fsm import TransitionValidator
    PART_REQUEST_FSM = TransitionValidator({
        'Pending': {'Approved', 'Rejected'},
        'Approved': {'Ordered'},
    }, field_name='part request status')
    PART_REQUEST_FSM.assert_can_transition(current_status, target_status)

Raises ValidationError (400) if invalid.
"""
from typing import Dict, Iterable, Set
from tracker.errors import ValidationError


class TransitionValidator:
    def __init__(self, graph: Dict[str, Set[str]], field_name: str = 'status'):
        self.graph = graph
        self.field_name = field_name

    def can_transition(self, current: str, target: str) -> bool:
        return target in self.graph.get(current, set())

    def assert_can_transition(self, current: str, target: str):
        if not self.can_transition(current, target):
            raise ValidationError(description=f"Invalid {self.field_name} transition {current} -> {target}")
        return True

    def terminal_states(self) -> Iterable[str]:
        return [s for s, targets in self.graph.items() if not targets]

__all__ = ['TransitionValidator']
