"""Data store adapter.

The application never imports a store singleton: `create_app` builds one with
`build_store` and keeps it in `app.extensions`, services receive it as a
constructor argument and request handlers resolve it through `get_store()`.
"""
from __future__ import annotations
from typing import Any, Mapping

from flask import current_app
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from .base import COLLECTIONS, DataStore, StoreError
from .memory import MemoryStore
from .sql import SqlStore
from .casing import to_camel_case, to_snake_case

EXTENSION_KEY = 'tracker.store'


def build_store(config: Mapping[str, Any]) -> DataStore:
    backend = config.get('TRACKER_STORE', 'sql')
    if backend == 'memory':
        return MemoryStore()
    if backend != 'sql':
        raise ValueError(f'unknown TRACKER_STORE {backend!r}')
    db_url = config['DATABASE_URL']
    if db_url.endswith(':memory:'):
        # Ensure a single shared in-memory SQLite database across all connections
        engine = create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(db_url, echo=False, future=True)
    if config.get('AUTO_CREATE_TABLES', True):
        from tracker.models import Base
        Base.metadata.create_all(engine)
    return SqlStore(engine)


def get_store() -> DataStore:
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    'COLLECTIONS', 'DataStore', 'StoreError', 'MemoryStore', 'SqlStore', 'build_store', 'get_store',
    'to_camel_case', 'to_snake_case', 'EXTENSION_KEY',
]
