"""Inventory error taxonomy.

The service raises these; only the API layer turns them into HTTP
responses.
"""
from typing import Optional


class InventoryError(Exception):
    """Base class for inventory errors."""


class InventoryNotFoundError(InventoryError):
    """No inventory record for the requested id or product id."""

    def __init__(self, key: int, field: str = "id"):
        super().__init__(f"Inventory item not found with {field}: {key}")
        self.key = key
        self.field = field


class InvalidInventoryError(InventoryError):
    """Input rejected before touching the store or the caches."""


class DuplicateProductError(InventoryError):
    """An inventory record already exists for the product."""

    def __init__(self, product_id: int):
        super().__init__(f"Inventory already exists for product id: {product_id}")
        self.product_id = product_id


class StoreFailureError(InventoryError):
    """The record store failed; the operation did not complete."""

    def __init__(self, message: str = "Inventory store failure.", original_exception: Optional[Exception] = None):
        super().__init__(message)
        self.original_exception = original_exception


class CacheDegradedError(InventoryError):
    """Cache invalidation failed after a committed write. Logged, never raised to callers."""
