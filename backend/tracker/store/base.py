from __future__ import annotations
"""Data store contract.

Every collection is a list of snake_case records addressed by equality
filters. A filter value that is a list, tuple or set matches any member.
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

COLLECTIONS = (
    'orders',
    'spareparts',
    'part_requests',
    'purchase_orders',
    'qc_reports',
    'invoices',
    'users',
)

Record = Dict[str, Any]
Filters = Optional[Mapping[str, Any]]


class StoreError(Exception):
    """Raised when the backing store rejects an operation. str(exc) is the raw reason."""


class DataStore(ABC):

    @abstractmethod
    def select(self, collection: str, filters: Filters = None, order_by: Optional[str] = None,
               descending: bool = False) -> List[Record]:
        ...

    @abstractmethod
    def insert(self, collection: str, records: Union[Record, Iterable[Record]]) -> List[Record]:
        """Insert one or many records and return them as stored."""

    @abstractmethod
    def update(self, collection: str, fields: Mapping[str, Any], where: Mapping[str, Any]) -> List[Record]:
        """Apply `fields` to every record matching `where`; return the updated records."""

    @abstractmethod
    @contextmanager
    def atomic(self) -> Iterator[None]:
        """All writes inside the block apply together or not at all."""

    def get(self, collection: str, **filters: Any) -> Optional[Record]:
        rows = self.select(collection, filters)
        return rows[0] if rows else None


def check_collection(name: str) -> str:
    if name not in COLLECTIONS:
        raise StoreError(f'unknown collection {name!r}')
    return name


def matches(record: Mapping[str, Any], filters: Filters) -> bool:
    for key, expected in (filters or {}).items():
        value = record.get(key)
        if isinstance(expected, (list, tuple, set, frozenset)):
            if value not in expected:
                return False
        elif value != expected:
            return False
    return True


__all__ = ['COLLECTIONS', 'Record', 'StoreError', 'DataStore', 'check_collection', 'matches']
