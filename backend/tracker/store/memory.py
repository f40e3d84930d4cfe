from __future__ import annotations
import copy
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

from .base import COLLECTIONS, DataStore, Filters, Record, check_collection, matches


class MemoryStore(DataStore):
    """Process-local store used by tests and the `memory` backend.

    Records are deep-copied on the way in and out so callers never share
    mutable state with the store. `atomic()` snapshots every collection and
    restores the snapshot if the block raises.
    """

    def __init__(self, seed: Optional[Mapping[str, Iterable[Record]]] = None):
        self._data: Dict[str, List[Record]] = {name: [] for name in COLLECTIONS}
        self._lock = threading.RLock()
        self._depth = 0
        for name, rows in (seed or {}).items():
            self._data[check_collection(name)] = [dict(r) for r in rows]

    def select(self, collection: str, filters: Filters = None, order_by: Optional[str] = None,
               descending: bool = False) -> List[Record]:
        with self._lock:
            rows = [copy.deepcopy(r) for r in self._data[check_collection(collection)] if matches(r, filters)]
        if order_by:
            # None sorts first ascending, matching SQL NULLS FIRST on sqlite
            rows.sort(key=lambda r: (r.get(order_by) is not None, r.get(order_by)), reverse=descending)
        return rows

    def insert(self, collection: str, records: Union[Record, Iterable[Record]]) -> List[Record]:
        batch = [records] if isinstance(records, Mapping) else list(records)
        with self._lock:
            rows = self._data[check_collection(collection)]
            stored = [copy.deepcopy(dict(r)) for r in batch]
            rows.extend(stored)
            return [copy.deepcopy(r) for r in stored]

    def update(self, collection: str, fields: Mapping[str, Any], where: Mapping[str, Any]) -> List[Record]:
        with self._lock:
            updated = []
            for row in self._data[check_collection(collection)]:
                if matches(row, where):
                    row.update(copy.deepcopy(dict(fields)))
                    updated.append(copy.deepcopy(row))
            return updated

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            snapshot = copy.deepcopy(self._data) if self._depth == 0 else None
            self._depth += 1
            try:
                yield
            except BaseException:
                if snapshot is not None:
                    self._data = snapshot
                raise
            finally:
                self._depth -= 1


__all__ = ['MemoryStore']
