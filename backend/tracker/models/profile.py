from __future__ import annotations
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String

from .base import Base


class ProfileRecord(Base):
    """Profile row correlated 1:1 with an authenticated identity."""
    __tablename__ = 'users'
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_order_id: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
