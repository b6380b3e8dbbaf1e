"""SQLAlchemy-backed record store for inventory rows.

Each mutating call commits its own transaction, so a create, update or
delete is either fully applied or not at all. Every value handed back is a
detached InventoryRecord snapshot; ORM instances never leave this module.
"""
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from inventory_service.application.schemas import InventoryRecord
from inventory_service.core.logging_config import get_logger
from inventory_service.domain.exceptions import (
    DuplicateProductError,
    InventoryNotFoundError,
    StoreFailureError,
)
from inventory_service.domain.models import Inventory

logger = get_logger(__name__)


class InventoryStore:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Inventory store failure during {action}: {e}")
            raise StoreFailureError(f"Inventory store failure during {action}.", original_exception=e) from e

    @staticmethod
    def _snapshot(row: Inventory) -> InventoryRecord:
        return InventoryRecord.model_validate(row)

    def load_by_id(self, record_id: int) -> Optional[InventoryRecord]:
        with self._guard("load by id"):
            row = self.db.get(Inventory, record_id)
            return self._snapshot(row) if row else None

    def load_by_product_id(self, product_id: int) -> Optional[InventoryRecord]:
        with self._guard("load by product id"):
            row = self.db.query(Inventory).filter(Inventory.product_id == product_id).first()
            return self._snapshot(row) if row else None

    def count(self) -> int:
        with self._guard("count"):
            return self.db.query(Inventory).count()

    def list_range(self, offset: int, limit: int) -> list[InventoryRecord]:
        # Ordered by primary key so consecutive pages neither skip nor repeat rows
        with self._guard("list range"):
            rows = (
                self.db.query(Inventory)
                .order_by(Inventory.id)
                .offset(offset)
                .limit(limit)
                .all()
            )
            return [self._snapshot(r) for r in rows]

    def list_all(self) -> list[InventoryRecord]:
        with self._guard("list all"):
            return [self._snapshot(r) for r in self.db.query(Inventory).order_by(Inventory.id).all()]

    def create(self, product_id: int, quantity: int, created_at: datetime, updated_at: datetime) -> InventoryRecord:
        obj = Inventory(
            product_id=product_id,
            quantity=quantity,
            created_at=created_at,
            updated_at=updated_at,
        )
        try:
            self.db.add(obj)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if self.load_by_product_id(product_id) is not None:
                raise DuplicateProductError(product_id) from e
            logger.error(f"Inventory store rejected insert for product {product_id}: {e}")
            raise StoreFailureError("Inventory store rejected the insert.", original_exception=e) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Inventory store failure during create: {e}")
            raise StoreFailureError("Inventory store failure during create.", original_exception=e) from e
        # expire_on_commit=False keeps the committed attributes loaded
        return self._snapshot(obj)

    def update(self, record_id: int, quantity: int, updated_at: datetime) -> InventoryRecord:
        with self._guard("update"):
            obj = self.db.get(Inventory, record_id)
            if obj is None:
                raise InventoryNotFoundError(record_id)
            obj.quantity = quantity
            obj.updated_at = updated_at
            self.db.commit()
        return self._snapshot(obj)

    def delete(self, record_id: int) -> None:
        with self._guard("delete"):
            obj = self.db.get(Inventory, record_id)
            if obj is None:
                raise InventoryNotFoundError(record_id)
            self.db.delete(obj)
            self.db.commit()
