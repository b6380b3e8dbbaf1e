"""Load inventory rows from a CSV file.

Rows go through InventoryService and get the same validation as API
writes. Expected columns: product_id, quantity. Products that already have
an inventory record are skipped.

    python -m inventory_service.seed eci_inventory.csv
"""
import csv
import sys
from pathlib import Path
from typing import Optional

from inventory_service.application.service import InventoryService
from inventory_service.core.logging_config import get_logger, setup_logging
from inventory_service.domain.exceptions import DuplicateProductError, InvalidInventoryError
from inventory_service.infrastructure.cache import InventoryCaches
from inventory_service.infrastructure.db import SessionLocal, init_models
from inventory_service.infrastructure.repository import InventoryStore

logger = get_logger(__name__)

# CSV header -> field name
COLUMN_RENAMES = {"productId": "product_id", "stock": "quantity"}


def _row_value(row: dict, field: str) -> Optional[int]:
    for column, value in row.items():
        if COLUMN_RENAMES.get(column, column) == field and value not in (None, ""):
            return int(value)
    return None


def load_csv(path: Path, service: InventoryService) -> dict:
    counts = {"created": 0, "skipped": 0, "rejected": 0}
    with open(path, newline="", encoding="utf-8") as f:
        for line_no, row in enumerate(csv.DictReader(f), start=2):
            try:
                service.create(_row_value(row, "product_id"), _row_value(row, "quantity"))
                counts["created"] += 1
            except DuplicateProductError:
                counts["skipped"] += 1
            except (InvalidInventoryError, ValueError) as e:
                logger.warning(f"{path}:{line_no}: rejected row: {e}")
                counts["rejected"] += 1
    logger.info(f"Seeded inventory from {path}", extra={"extra_fields": counts})
    return counts


def main(argv: Optional[list] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("usage: python -m inventory_service.seed <inventory.csv>", file=sys.stderr)
        return 2
    setup_logging(service_name="inventory-seed")
    init_models()
    db = SessionLocal()
    try:
        counts = load_csv(Path(args[0]), InventoryService(InventoryStore(db), InventoryCaches()))
    finally:
        db.close()
    print(f"created={counts['created']} skipped={counts['skipped']} rejected={counts['rejected']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
