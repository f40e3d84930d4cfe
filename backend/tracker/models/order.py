from __future__ import annotations
from typing import Optional, List, Dict, Any
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, JSON

from .base import Base


class OrderRecord(Base):
    __tablename__ = 'orders'
    service_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    customer_name: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    equipment: Mapped[str] = mapped_column(String(128), nullable=False)
    request_date: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    repair_type: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    assigned_engineer: Mapped[str] = mapped_column(String(128), nullable=False, default='N/A')
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    qc_result: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    # Append-only; element order is chronological order
    repair_logs: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
