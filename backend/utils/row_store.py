# backend/utils/row_store.py
"""Row-store collaborator used by the inventory services.

A store exposes per named collection: select / count / insert / update /
delete. Rows travel as plain dicts keyed by column name. Every call is a
coroutine and every failure surfaces as ``StoreError`` with a message fit
for display.
"""
from typing import Any, Dict, List, Optional, Sequence, Tuple

PRODUCTS = "Products"
CATEGORIES = "Categories"
UNIT_OF_MEASURE = "UnitOfMeasure"
MOVEMENTS = "InventoryMovementLine"

COLLECTIONS = (PRODUCTS, CATEGORIES, UNIT_OF_MEASURE, MOVEMENTS)

Row = Dict[str, Any]
# Equality filters; a list/tuple value means "column IN (...)"
Filters = Dict[str, Any]
# Case-insensitive substring search: (columns, term), columns are OR-ed
Search = Tuple[Sequence[str], str]


class StoreError(Exception):
    def __init__(self, message: str, *, collection: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.collection = collection


class RowStore:
    async def select(
        self,
        collection: str,
        columns: Optional[Sequence[str]] = None,
        filters: Optional[Filters] = None,
        order: Optional[str] = None,
        descending: bool = False,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
        search: Optional[Search] = None,
    ) -> List[Row]:
        raise NotImplementedError

    async def count(
        self,
        collection: str,
        filters: Optional[Filters] = None,
        search: Optional[Search] = None,
    ) -> int:
        raise NotImplementedError

    async def insert(self, collection: str, row: Row) -> Row:
        raise NotImplementedError

    async def update(self, collection: str, patch: Row, filters: Filters) -> None:
        raise NotImplementedError

    async def delete(self, collection: str, filters: Filters) -> None:
        raise NotImplementedError


def check_collection(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise StoreError(f"Unknown collection: {collection}", collection=collection)
