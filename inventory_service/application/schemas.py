from pydantic import BaseModel, field_validator
from datetime import datetime, timezone
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

class QuantityUpdate(BaseModel):
    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_not_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("Quantity cannot be negative")
        return value

class InventoryCreate(QuantityUpdate):
    # Accepted so clients can post a full record; always discarded
    id: Optional[int] = None
    product_id: int

class InventoryUpdate(QuantityUpdate):
    # Immutable after creation; accepted for full-record PUT bodies and ignored
    product_id: Optional[int] = None

class InventoryRecord(BaseModel):
    """Detached snapshot of an inventory row, shared through the caches."""
    id: int
    product_id: int
    quantity: int
    created_at: datetime
    updated_at: datetime
    class Config:
        from_attributes = True
        frozen = True

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive datetimes; stored values are always UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

class PaginatedResponse(BaseModel, Generic[T]):
    data: list[T]
    total: int
    page: int
    size: int
    total_pages: int
    has_next: bool
    has_previous: bool

class ErrorResponse(BaseModel):
    status: int
    error: str
    message: str
    path: str
    timestamp: datetime
