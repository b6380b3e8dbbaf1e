from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session
from typing import Optional
from inventory_service.core_settings import get_settings
from inventory_service.infrastructure.db import get_db
from inventory_service.infrastructure.cache import InventoryCaches
from inventory_service.infrastructure.repository import InventoryStore
from inventory_service.application.service import InventoryService
from inventory_service.application.schemas import (
    InventoryCreate,
    InventoryRecord,
    InventoryUpdate,
    PaginatedResponse,
    QuantityUpdate,
)

router = APIRouter(tags=["inventory"])

def get_caches(request: Request) -> InventoryCaches:
    return request.app.state.inventory_caches

def get_service(
    db: Session = Depends(get_db),
    caches: InventoryCaches = Depends(get_caches),
) -> InventoryService:
    return InventoryService(InventoryStore(db), caches)

@router.get("/", response_model=PaginatedResponse[InventoryRecord])
def list_inventory(
    page: int = Query(0, ge=0, description="Page number (0-based)"),
    size: Optional[int] = Query(None, ge=1, description="Page size (max 100)"),
    service: InventoryService = Depends(get_service),
):
    if size is None:
        size = get_settings().DEFAULT_PAGE_SIZE
    result = service.list(page, size)
    meta = result.meta
    return PaginatedResponse[InventoryRecord](
        data=result.items,
        total=meta.total,
        page=meta.page,
        size=meta.size,
        total_pages=meta.total_pages,
        has_next=meta.has_next,
        has_previous=meta.has_previous,
    )

@router.get("/all", response_model=list[InventoryRecord])
def list_all_inventory(service: InventoryService = Depends(get_service)):
    return service.list_all()

@router.get("/count", response_class=PlainTextResponse)
def count_inventory(service: InventoryService = Depends(get_service)):
    return str(service.count())

@router.get("/product/{product_id}", response_model=InventoryRecord)
def get_inventory_by_product(product_id: int, service: InventoryService = Depends(get_service)):
    return service.get_by_product_id(product_id)

@router.delete("/cache", status_code=204)
def clear_caches(service: InventoryService = Depends(get_service)):
    service.clear_caches()
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get("/{item_id}", response_model=InventoryRecord)
def get_inventory(item_id: int, service: InventoryService = Depends(get_service)):
    return service.get_by_id(item_id)

@router.post("/", response_model=InventoryRecord, status_code=201)
def create_inventory(
    payload: InventoryCreate,
    request: Request,
    response: Response,
    service: InventoryService = Depends(get_service),
):
    # payload.id is ignored; the store assigns identifiers
    record = service.create(payload.product_id, payload.quantity)
    response.headers["Location"] = f"{request.url.path.rstrip('/')}/{record.id}"
    return record

@router.put("/{item_id}", response_model=InventoryRecord)
def update_inventory(item_id: int, payload: InventoryUpdate, service: InventoryService = Depends(get_service)):
    return service.update(item_id, payload.quantity)

@router.patch("/{item_id}/quantity", response_model=InventoryRecord)
def update_inventory_quantity(item_id: int, payload: QuantityUpdate, service: InventoryService = Depends(get_service)):
    return service.patch_quantity(item_id, payload.quantity)

@router.delete("/{item_id}", status_code=204)
def delete_inventory(item_id: int, service: InventoryService = Depends(get_service)):
    service.delete(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
