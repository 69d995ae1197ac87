# backend/services/catalog.py
import logging
from typing import Any, Dict, Optional, Union

import pydantic

from schemas.product import ProductCreate, ProductOut, ProductPage, LowStockFilter, coerce_number
from services.errors import NotFoundError, TransportError, ValidationError
from utils.row_store import RowStore, StoreError, PRODUCTS

logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = [
    "product_id", "name", "description", "category", "packaging",
    "quantity", "price", "low_stock_level", "created_at",
]

_FIELD_NAMES = {"initialQuantity": "initial_quantity", "sellingPrice": "selling_price"}


def first_error(exc: pydantic.ValidationError) -> ValidationError:
    """Turn the first pydantic error into a field-tagged ValidationError."""
    err = exc.errors()[0]
    loc = err.get("loc") or ()
    field = str(loc[0]) if loc else None
    field = _FIELD_NAMES.get(field, field)
    error = (err.get("ctx") or {}).get("error")
    message = str(error) if error else err.get("msg", "Invalid value.")
    return ValidationError(message, field=field)


class ProductCatalog:
    def __init__(self, store: RowStore):
        self.store = store

    def validate(self, data: Union[ProductCreate, Dict[str, Any]]) -> ProductCreate:
        if isinstance(data, ProductCreate):
            return data
        try:
            return ProductCreate.model_validate(data)
        except pydantic.ValidationError as e:
            raise first_error(e) from e

    async def create(self, data: Union[ProductCreate, Dict[str, Any]]) -> ProductOut:
        validated = self.validate(data)
        try:
            row = await self.store.insert(PRODUCTS, {
                "name": validated.name,
                "description": validated.description,
                "category": validated.category,
                "packaging": validated.packaging,
                "quantity": validated.initial_quantity,
                "price": validated.selling_price,
            })
        except StoreError as e:
            raise TransportError(e.message) from e
        product = ProductOut.model_validate(row)
        logger.info("Product '%s' (ID: %s) created with quantity %s", product.name, product.product_id, product.quantity)
        return product

    async def find(self, product_id: str) -> Optional[ProductOut]:
        try:
            rows = await self.store.select(
                PRODUCTS, columns=PRODUCT_COLUMNS, filters={"product_id": product_id}, limit=1
            )
        except StoreError as e:
            raise TransportError(e.message) from e
        return ProductOut.model_validate(rows[0]) if rows else None

    async def get(self, product_id: str) -> ProductOut:
        product = await self.find(product_id)
        if product is None:
            raise NotFoundError("Product not found.")
        return product

    async def list(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        low_stock: LowStockFilter = "all",
        page: int = 1,
        page_size: int = 10,
    ) -> ProductPage:
        filters = {"category": category} if category else None
        term = (search or "").strip()
        text_search = (("name", "description"), term) if term else None
        offset = (page - 1) * page_size

        try:
            if low_stock != "all":
                # Threshold comparison happens after the fetch, paging on the filtered result
                rows = await self.store.select(
                    PRODUCTS, columns=PRODUCT_COLUMNS, filters=filters, search=text_search,
                    order="created_at", descending=True,
                )
                products = [ProductOut.model_validate(r) for r in rows]
                wanted = low_stock == "low"
                products = [p for p in products if p.is_low_stock == wanted]
                return ProductPage(
                    items=products[offset:offset + page_size], total=len(products),
                    page=page, page_size=page_size,
                )

            total = await self.store.count(PRODUCTS, filters=filters, search=text_search)
            rows = await self.store.select(
                PRODUCTS, columns=PRODUCT_COLUMNS, filters=filters, search=text_search,
                order="created_at", descending=True, offset=offset, limit=page_size,
            )
        except StoreError as e:
            raise TransportError(e.message) from e

        items = [ProductOut.model_validate(r) for r in rows]
        return ProductPage(items=items, total=total, page=page, page_size=page_size)

    async def set_low_stock_level(self, product_id: str, level: Any) -> int:
        message = "Low stock level must be a non-negative number."
        try:
            number = coerce_number(level, message)
        except ValueError:
            raise ValidationError(message, field="low_stock_level")
        if number < 0:
            raise ValidationError(message, field="low_stock_level")
        if number != int(number):
            raise ValidationError("Low stock level must be a whole number.", field="low_stock_level")

        await self.get(product_id)
        try:
            await self.store.update(PRODUCTS, {"low_stock_level": int(number)}, {"product_id": product_id})
        except StoreError as e:
            raise TransportError(e.message) from e
        logger.info("Low stock level of %s set to %s", product_id, int(number))
        return int(number)

    async def set_quantity(self, product_id: str, quantity: int) -> None:
        # Only called by InventoryService after the matching ledger rows exist
        try:
            await self.store.update(PRODUCTS, {"quantity": quantity}, {"product_id": product_id})
        except StoreError as e:
            raise TransportError(e.message) from e
