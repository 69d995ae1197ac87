# backend/routes/stock.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from routes.deps import get_inventory
import schemas.stock as stock_schemas
from services.inventory import InventoryService
from utils.tokenJWT import admin_required, get_current_user

router = APIRouter(tags=["Stock"])


@router.get("/", response_model=stock_schemas.MovementPage, dependencies=[Depends(get_current_user)])
async def list_movements(
    q: Optional[str] = Query(None, description="Product name"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    inventory: InventoryService = Depends(get_inventory),
):
    return await inventory.movement_history(q, page, page_size)


@router.post(
    "/movements", response_model=List[stock_schemas.Movement], status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(admin_required)],
)
async def record_movements(
    payload: stock_schemas.StockMovementBatch,
    inventory: InventoryService = Depends(get_inventory),
):
    return await inventory.record_movements(payload.lines)


@router.get(
    "/reconcile/{product_id}", response_model=stock_schemas.ReconciliationReport,
    dependencies=[Depends(admin_required)],
)
async def reconcile_product(product_id: str, inventory: InventoryService = Depends(get_inventory)):
    """Compare the product's stored quantity with the replay of its ledger."""
    return await inventory.audit(product_id)
