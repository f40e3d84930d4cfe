from __future__ import annotations
import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Union

from sqlalchemy import Table, select, update as sa_update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from tracker.models import Base
from .base import DataStore, Filters, Record, StoreError, check_collection

log = logging.getLogger(__name__)


class SqlStore(DataStore):
    """DataStore over the SQLAlchemy tables registered on `Base.metadata`.

    Outside `atomic()` every call runs in its own transaction. Inside it the
    calls made by the current thread share one connection and commit together.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._local = threading.local()

    # -- helpers -----------------------------------------------------------
    def _table(self, collection: str) -> Table:
        return Base.metadata.tables[check_collection(collection)]

    @staticmethod
    def _where(table: Table, filters: Filters):
        clauses = []
        for key, value in (filters or {}).items():
            col = table.c.get(key)
            if col is None:
                raise StoreError(f'column {key!r} does not exist on {table.name}')
            if isinstance(value, (list, tuple, set, frozenset)):
                clauses.append(col.in_(list(value)))
            elif value is None:
                clauses.append(col.is_(None))
            else:
                clauses.append(col == value)
        return clauses

    def _run(self, fn):
        conn: Optional[Connection] = getattr(self._local, 'conn', None)
        try:
            if conn is not None:
                return fn(conn)
            with self.engine.begin() as own:
                return fn(own)
        except SQLAlchemyError as e:
            reason = str(getattr(e, 'orig', None) or e)
            log.error('store operation failed: %s', reason)
            raise StoreError(reason) from e

    # -- DataStore ---------------------------------------------------------
    def select(self, collection: str, filters: Filters = None, order_by: Optional[str] = None,
               descending: bool = False) -> List[Record]:
        table = self._table(collection)
        stmt = select(table).where(*self._where(table, filters))
        if order_by:
            col = table.c.get(order_by)
            if col is None:
                raise StoreError(f'column {order_by!r} does not exist on {table.name}')
            stmt = stmt.order_by(col.desc() if descending else col.asc())
        return self._run(lambda conn: [dict(r._mapping) for r in conn.execute(stmt)])

    def insert(self, collection: str, records: Union[Record, Iterable[Record]]) -> List[Record]:
        table = self._table(collection)
        batch = [dict(records)] if isinstance(records, Mapping) else [dict(r) for r in records]
        if not batch:
            return []

        def _do(conn: Connection):
            conn.execute(table.insert(), batch)
            return batch
        return self._run(_do)

    def update(self, collection: str, fields: Mapping[str, Any], where: Mapping[str, Any]) -> List[Record]:
        table = self._table(collection)
        pk = list(table.primary_key.columns)[0]

        clauses = self._where(table, where)
        stmt = sa_update(table).where(*clauses).values(**dict(fields))

        def _do(conn: Connection):
            # The filter stays in the UPDATE: rows changed since they were read do not match
            if conn.dialect.update_returning:
                return [dict(r._mapping) for r in conn.execute(stmt.returning(*table.c))]
            # Resolve keys first: `where` may reference columns that `fields` changes
            keys = [row[0] for row in conn.execute(select(pk).where(*clauses))]
            if not keys:
                return []
            matched = conn.execute(stmt.where(pk.in_(keys))).rowcount
            if not matched:
                return []
            rows = [dict(r._mapping) for r in conn.execute(select(table).where(pk.in_(keys)))]
            # without RETURNING only the count of changed rows is exact
            return rows[:matched]
        return self._run(_do)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        if getattr(self._local, 'conn', None) is not None:
            yield
            return
        try:
            with self.engine.begin() as conn:
                self._local.conn = conn
                try:
                    yield
                finally:
                    self._local.conn = None
        except SQLAlchemyError as e:
            reason = str(getattr(e, 'orig', None) or e)
            log.error('store transaction failed: %s', reason)
            raise StoreError(reason) from e


__all__ = ['SqlStore']
