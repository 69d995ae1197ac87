# backend/routes/products.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from routes.deps import get_inventory
import schemas.product as product_schemas
from services.inventory import InventoryService
from utils.tokenJWT import admin_required, get_current_user

router = APIRouter(prefix="/products", tags=["Products"])


# =========================
# LIST
# =========================
@router.get("", response_model=product_schemas.ProductPage, dependencies=[Depends(get_current_user)])
async def list_products(
    search: Optional[str] = Query(None, max_length=255),
    category: Optional[str] = Query(None, description="Category id"),
    low_stock: product_schemas.LowStockFilter = Query("all"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    inventory: InventoryService = Depends(get_inventory),
):
    return await inventory.list_products(search, category, low_stock, page, page_size)


# =========================
# CREATE (product + initial stock movement)
# =========================
@router.post(
    "", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(admin_required)],
)
async def add_product(payload: dict, inventory: InventoryService = Depends(get_inventory)):
    # Raw body on purpose: coercion and per-field messages belong to the catalog
    return await inventory.create_product_with_initial_stock(payload)


# =========================
# SINGLE PRODUCT
# =========================
@router.get("/{product_id}", response_model=product_schemas.ProductOut, dependencies=[Depends(get_current_user)])
async def get_product(product_id: str, inventory: InventoryService = Depends(get_inventory)):
    return await inventory.get_product(product_id)


@router.patch(
    "/{product_id}/low-stock-level", response_model=product_schemas.ProductOut,
    dependencies=[Depends(admin_required)],
)
async def set_low_stock_level(
    product_id: str,
    payload: product_schemas.LowStockLevelUpdate,
    inventory: InventoryService = Depends(get_inventory),
):
    await inventory.set_low_stock_level(product_id, payload.level)
    return await inventory.get_product(product_id)
