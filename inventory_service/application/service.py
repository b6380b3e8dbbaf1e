from datetime import datetime, timezone
from typing import Callable, Optional, TypeVar

from inventory_service.application.invalidation import InvalidationCoordinator, MutationKind
from inventory_service.application.pagination import Page, compute_page_metadata
from inventory_service.application.schemas import InventoryRecord
from inventory_service.core.logging_config import get_logger
from inventory_service.domain.exceptions import (
    InvalidInventoryError,
    InventoryNotFoundError,
    StoreFailureError,
)
from inventory_service.infrastructure.cache import InventoryCaches
from inventory_service.infrastructure.repository import InventoryStore

logger = get_logger(__name__)

R = TypeVar("R")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_quantity(quantity: Optional[int]) -> int:
    if quantity is None:
        raise InvalidInventoryError("Quantity is required")
    if quantity < 0:
        raise InvalidInventoryError("Quantity cannot be negative")
    return quantity


class InventoryService:
    """Reads go through the caches, writes go to the store and then invalidate.

    The caches are shared process-wide; the store is usually bound to one
    request's session.
    """

    def __init__(
        self,
        store: InventoryStore,
        caches: InventoryCaches,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.caches = caches
        self.invalidation = InvalidationCoordinator(caches)
        self.clock = clock

    # Reads

    def _load_by_id(self, record_id: int) -> InventoryRecord:
        record = self.store.load_by_id(record_id)
        if record is None:
            raise InventoryNotFoundError(record_id)
        return record

    def _load_by_product_id(self, product_id: int) -> InventoryRecord:
        record = self.store.load_by_product_id(product_id)
        if record is None:
            raise InventoryNotFoundError(product_id, field="product id")
        return record

    def get_by_id(self, record_id: int) -> InventoryRecord:
        try:
            return self.caches.by_id.get_or_load(record_id, self._load_by_id)
        except InventoryNotFoundError:
            logger.warning(f"Inventory item not found with id: {record_id}")
            raise

    def get_by_product_id(self, product_id: int) -> InventoryRecord:
        try:
            return self.caches.by_product_id.get_or_load(product_id, self._load_by_product_id)
        except InventoryNotFoundError:
            logger.warning(f"Inventory not found for product id: {product_id}")
            raise

    def list(self, page: int, size: int) -> Page[InventoryRecord]:
        if page < 0:
            raise InvalidInventoryError("Page must not be negative")
        if size < 1:
            raise InvalidInventoryError("Size must be at least 1")
        total = self.store.count()
        meta = compute_page_metadata(total, page, size)
        items = self.store.list_range(meta.offset, meta.size)
        logger.debug(f"Listed {len(items)} of {total} inventory items (page {page}, size {meta.size})")
        return Page(items=items, meta=meta)

    def list_all(self):
        return self.store.list_all()

    def count(self) -> int:
        return self.store.count()

    # Writes

    def _write(self, kind: MutationKind, record_id: Optional[int], mutation: Callable[[], R]) -> R:
        """Run a store mutation, then invalidate for kind.

        A StoreFailureError may come after the commit landed, so the caches
        are invalidated before it propagates. A missing record changes
        nothing and leaves the caches alone.
        """
        try:
            result = mutation()
        except InventoryNotFoundError:
            logger.warning(f"Inventory item not found with id: {record_id}")
            raise
        except StoreFailureError:
            self.invalidation.after_commit(kind, record_id)
            raise
        if record_id is None:
            record_id = result.id
        self.invalidation.after_commit(kind, record_id)
        return result

    def create(self, product_id: Optional[int], quantity: Optional[int]) -> InventoryRecord:
        if product_id is None:
            raise InvalidInventoryError("Product ID is required")
        quantity = _require_quantity(quantity)
        now = self.clock()
        record = self._write(
            MutationKind.CREATE,
            None,
            lambda: self.store.create(product_id, quantity, created_at=now, updated_at=now),
        )
        logger.info(f"Created inventory item {record.id} for product {product_id} with quantity {quantity}")
        return record

    def update(self, record_id: int, quantity: Optional[int]) -> InventoryRecord:
        """Full update. Only the quantity of an existing record can change."""
        quantity = _require_quantity(quantity)
        record = self._write(
            MutationKind.UPDATE,
            record_id,
            lambda: self.store.update(record_id, quantity, updated_at=self.clock()),
        )
        logger.info(f"Updated inventory item {record_id} to quantity {quantity}")
        return record

    def patch_quantity(self, record_id: int, quantity: Optional[int]) -> InventoryRecord:
        quantity = _require_quantity(quantity)
        record = self._write(
            MutationKind.UPDATE,
            record_id,
            lambda: self.store.update(record_id, quantity, updated_at=self.clock()),
        )
        logger.info(f"Patched quantity of inventory item {record_id} to {quantity}")
        return record

    def delete(self, record_id: int) -> None:
        self._write(MutationKind.DELETE, record_id, lambda: self.store.delete(record_id))
        logger.info(f"Deleted inventory item {record_id}")

    def clear_caches(self) -> None:
        self.invalidation.after_commit(MutationKind.CLEAR)
        logger.info("Cleared all inventory caches")
