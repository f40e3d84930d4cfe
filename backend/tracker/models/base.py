from __future__ import annotations
from sqlalchemy.orm import declarative_base

# Shared metadata for every store collection; alembic targets it too.
Base = declarative_base()
