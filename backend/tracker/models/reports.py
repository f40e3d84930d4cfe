from __future__ import annotations
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Float, String, Text

from .base import Base


# Read-only from the application's side; rows are loaded by back-office tooling.
class QCReportRecord(Base):
    __tablename__ = 'qc_reports'
    qc_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    service_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    test_result: Mapped[str] = mapped_column(String(8), nullable=False)
    certificate_file_url: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    inspection_date: Mapped[str] = mapped_column(String(40), nullable=False)
    inspector: Mapped[str] = mapped_column(String(128), nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default='')


class InvoiceRecord(Base):
    __tablename__ = 'invoices'
    invoice_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    service_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    customer_name: Mapped[str] = mapped_column(String(128), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    due_date: Mapped[str] = mapped_column(String(40), nullable=False)
    issue_date: Mapped[str] = mapped_column(String(40), nullable=False)
