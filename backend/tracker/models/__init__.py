"""Store tables. Importing this package registers every collection on `Base.metadata`."""
from .base import Base
from .order import OrderRecord
from .sparepart import SparepartRecord
from .part_request import PartRequestRecord
from .purchase_order import PurchaseOrderRecord
from .reports import QCReportRecord, InvoiceRecord
from .profile import ProfileRecord

__all__ = [
    'Base', 'OrderRecord', 'SparepartRecord', 'PartRequestRecord', 'PurchaseOrderRecord',
    'QCReportRecord', 'InvoiceRecord', 'ProfileRecord',
]
