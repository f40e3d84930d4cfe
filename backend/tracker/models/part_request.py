from __future__ import annotations
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String

from .base import Base


class PartRequestRecord(Base):
    __tablename__ = 'part_requests'
    request_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    service_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    part_id: Mapped[str] = mapped_column(String(32), nullable=False)
    part_name: Mapped[str] = mapped_column(String(128), nullable=False)
    quantity_requested: Mapped[int] = mapped_column(Integer, nullable=False)
    requestor_name: Mapped[str] = mapped_column(String(128), nullable=False)
    requestor_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    request_date: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    customer_name: Mapped[str] = mapped_column(String(128), nullable=False)
    job_type: Mapped[str] = mapped_column(String(32), nullable=False)

# Status flow: Pending -> Approved | Rejected, Approved -> Ordered
