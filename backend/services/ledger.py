# backend/services/ledger.py
"""Append-only movement ledger.

Rows are never updated or deleted; a correction is a new offsetting row.
A product's quantity is the replay of its rows: ADD adds, REMOVE subtracts.
"""
import logging
from typing import Any, Dict, Optional, Union

import pydantic

from schemas.stock import Movement, MovementCreate, MovementPage, MovementReason, MovementType
from services.catalog import first_error
from services.errors import TransportError, ValidationError
from utils.row_store import RowStore, StoreError, MOVEMENTS

logger = logging.getLogger(__name__)

SIGN = {MovementType.ADD.value: 1, MovementType.REMOVE.value: -1}


class MovementLedger:
    def __init__(self, store: RowStore):
        self.store = store

    def validate(self, movement: Union[MovementCreate, Dict[str, Any]]) -> MovementCreate:
        if not isinstance(movement, MovementCreate):
            try:
                movement = MovementCreate.model_validate(movement)
            except pydantic.ValidationError as e:
                raise first_error(e) from e
        if movement.quantity <= 0:
            raise ValidationError("Quantity must be greater than 0.", field="quantity")
        if movement.reason is MovementReason.UNKNOWN:
            raise ValidationError("Unknown movement reason.", field="reason")
        return movement

    async def append(self, movement: Union[MovementCreate, Dict[str, Any]]) -> Movement:
        """Validate and write one row. A rejected write is a TransportError."""
        movement = self.validate(movement)
        try:
            row = await self.store.insert(MOVEMENTS, movement.model_dump(mode="json"))
        except StoreError as e:
            raise TransportError(e.message) from e
        appended = Movement.model_validate(row)
        logger.info(
            "Ledger %s %s x%s for product %s (row %s)",
            appended.type.value, appended.reason.value if appended.reason else "-",
            appended.quantity, appended.product_id, appended.id,
        )
        return appended

    async def reconcile(self, product_id: str) -> int:
        try:
            rows = await self.store.select(
                MOVEMENTS, columns=["id", "type", "quantity"],
                filters={"product_id": product_id}, order="id",
            )
        except StoreError as e:
            raise TransportError(e.message) from e

        running = 0
        for row in rows:
            sign = SIGN.get(row["type"])
            if sign is None:
                raise TransportError(f"Ledger row {row['id']} has unknown movement type '{row['type']}'.")
            running += sign * int(row["quantity"])
        return running

    async def history(self, search: Optional[str] = None, page: int = 1, page_size: int = 10) -> MovementPage:
        term = (search or "").strip()
        text_search = (("product_name",), term) if term else None
        filters = {"is_display": True}
        try:
            total = await self.store.count(MOVEMENTS, filters=filters, search=text_search)
            rows = await self.store.select(
                MOVEMENTS, filters=filters, search=text_search,
                order="id", descending=True,
                offset=(page - 1) * page_size, limit=page_size,
            )
        except StoreError as e:
            raise TransportError(e.message) from e

        items = []
        for row in rows:
            try:
                items.append(Movement.model_validate(row))
            except pydantic.ValidationError as e:
                raise TransportError(f"Ledger row {row.get('id')} could not be read.") from e
        return MovementPage(items=items, total=total, page=page, page_size=page_size)
