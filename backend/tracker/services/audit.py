from __future__ import annotations
from typing import Iterable, Optional, Tuple

from tracker.domain import RepairLog, new_id, utcnow_iso

DEFAULT_NOTES = 'No additional notes.'


def make_log(service_id: str, action: str, author: str, notes: Optional[str] = None,
             date: Optional[str] = None) -> RepairLog:
    """Build a repair log entry for an order.

    Parameters:
      action: short action tag shown on the timeline e.g. 'Initial Diagnosis'
      author: username of the acting profile
      notes: free text; blank notes are stored as DEFAULT_NOTES
    """
    text = (notes or '').strip()
    return RepairLog(
        log_id=new_id('LOG'),
        service_id=service_id,
        action=action,
        date=date or utcnow_iso(),
        author=author,
        notes=text or DEFAULT_NOTES,
    )


def append_log(logs: Iterable[RepairLog], entry: RepairLog) -> Tuple[RepairLog, ...]:
    """Return a new log sequence with `entry` at the end. Existing entries are never touched."""
    current = tuple(logs)
    if current and entry.service_id != current[0].service_id:
        raise ValueError(f'log for {entry.service_id} cannot be appended to {current[0].service_id}')
    if any(l.log_id == entry.log_id for l in current):
        raise ValueError(f'duplicate log id {entry.log_id}')
    return current + (entry,)


__all__ = ['DEFAULT_NOTES', 'make_log', 'append_log']
