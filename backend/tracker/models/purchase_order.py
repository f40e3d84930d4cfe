from __future__ import annotations
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Text

from .base import Base


class PurchaseOrderRecord(Base):
    __tablename__ = 'purchase_orders'
    purchase_order_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    part_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    part_name: Mapped[str] = mapped_column(String(128), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    justification: Mapped[str] = mapped_column(Text, nullable=False)
    requestor: Mapped[str] = mapped_column(String(128), nullable=False)
    requestor_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    request_date: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
