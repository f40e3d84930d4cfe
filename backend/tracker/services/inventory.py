from __future__ import annotations
import logging
from dataclasses import replace
from typing import Any, Callable, List, Optional

from tracker.domain import (
    Profile, PurchaseOrder, PurchaseOrderStatus, Sparepart, SparepartStatus, new_id, utcnow_iso,
)
from tracker.errors import AuthorizationError, ConflictError, NotFoundError, PersistenceError
from tracker.services.policy import Action, is_allowed
from tracker.store.base import DataStore, StoreError
from tracker.utils.validation import positive_int, require_text

log = logging.getLogger(__name__)


class InventoryService:
    """Spare-parts stock and ad-hoc purchase requests.

    Stock only ever grows here; fulfilling a part request does not consume it.
    """

    def __init__(self, store: DataStore, clock: Callable[[], str] = utcnow_iso):
        self.store = store
        self.clock = clock

    def _call(self, fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except StoreError as e:
            log.error('store failure: %s', e)
            raise PersistenceError(description=str(e)) from e

    def _authorize(self, actor: Profile, action: str):
        if not is_allowed(actor.role, action):
            log.warning('refused %s by %s (%s)', action, actor.username, actor.role)
            raise AuthorizationError(description=f'Role {actor.role} may not perform {action}')

    def list_spareparts(self) -> List[Sparepart]:
        rows = self._call(self.store.select, 'spareparts', None, 'name')
        return [Sparepart.from_record(r) for r in rows]

    def get_sparepart(self, part_id: str) -> Sparepart:
        row = self._call(self.store.get, 'spareparts', part_id=part_id)
        if not row:
            raise NotFoundError(description=f'Part {part_id} not found')
        return Sparepart.from_record(row)

    def list_purchase_orders(self) -> List[PurchaseOrder]:
        rows = self._call(self.store.select, 'purchase_orders', None, 'request_date', True)
        return [PurchaseOrder.from_record(r) for r in rows]

    def add_stock(self, actor: Profile, part_id: str, quantity: Any) -> Sparepart:
        """Add `quantity` units; a part that ends up with stock becomes Available."""
        self._authorize(actor, Action.ADD_STOCK)
        qty = positive_int(quantity, 'quantity')
        part = self.get_sparepart(part_id)
        new_stock = part.stock + qty
        status = SparepartStatus.AVAILABLE if new_stock > 0 else part.status
        rows = self._call(
            self.store.update, 'spareparts',
            {'stock': new_stock, 'status': status},
            {'part_id': part_id, 'stock': part.stock},
        )
        if not rows:
            raise ConflictError(description='Stock changed while updating. Reload and try again.')
        log.info('stock of %s raised %d -> %d by %s', part_id, part.stock, new_stock, actor.username)
        return replace(part, stock=new_stock, status=status)

    def request_purchase(self, actor: Profile, part_id: str, quantity: Any,
                         justification: Optional[str]) -> PurchaseOrder:
        self._authorize(actor, Action.REQUEST_PURCHASE)
        qty = positive_int(quantity, 'quantity')
        reason = require_text(justification, 'justification')
        part = self.get_sparepart(part_id)
        po = PurchaseOrder(
            purchase_order_id=new_id('PO'),
            part_id=part.part_id,
            part_name=part.name,
            quantity=qty,
            justification=reason,
            requestor=actor.username,
            requestor_id=actor.id,
            request_date=self.clock(),
            status=PurchaseOrderStatus.PENDING,
        )
        self._call(self.store.insert, 'purchase_orders', po.to_record())
        log.info('purchase order %s for %d x %s requested by %s', po.purchase_order_id, qty, part_id, actor.username)
        return po


__all__ = ['InventoryService']
