from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import Integer, DateTime, CheckConstraint
from datetime import datetime

class Base(DeclarativeBase):
    pass

class Inventory(Base):
    __tablename__ = "inventory"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
    )
    id: Mapped[int] = mapped_column(primary_key=True)
    # Business key; one inventory row per product
    product_id: Mapped[int] = mapped_column(Integer, unique=True, index=True, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    # Set by InventoryService, not by column defaults
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return (
            f"Inventory(id={self.id!r}, product_id={self.product_id!r}, "
            f"quantity={self.quantity!r})"
        )
