# backend/utils/sql_store.py
import logging
from typing import List, Optional, Sequence

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.product import Product
from models.dictionary import Category, UnitOfMeasure
from models.stock import InventoryMovementLine
from utils.row_store import (
    RowStore, StoreError, Row, Filters, Search, check_collection,
    PRODUCTS, CATEGORIES, UNIT_OF_MEASURE, MOVEMENTS,
)

logger = logging.getLogger(__name__)

MODELS = {
    PRODUCTS: Product,
    CATEGORIES: Category,
    UNIT_OF_MEASURE: UnitOfMeasure,
    MOVEMENTS: InventoryMovementLine,
}


def _column(model, name: str):
    col = model.__table__.columns.get(name)
    if col is None:
        raise StoreError(f"Unknown column '{name}' in {model.__tablename__}", collection=model.__tablename__)
    return getattr(model, col.key)


def _to_row(obj, columns: Optional[Sequence[str]] = None) -> Row:
    names = columns or [c.key for c in obj.__table__.columns]
    return {name: getattr(obj, name) for name in names}


class SqlRowStore(RowStore):
    """Row store over the service's own SQLAlchemy database.

    Session work is blocking, so each call is pushed to the threadpool and
    the event loop only waits on the result.
    """

    def __init__(self, db: Session):
        self.db = db

    # ---- helpers ----
    def _model(self, collection: str):
        check_collection(collection)
        return MODELS[collection]

    def _query(self, model, filters: Optional[Filters], search: Optional[Search]):
        query = self.db.query(model)
        for name, value in (filters or {}).items():
            col = _column(model, name)
            if isinstance(value, (list, tuple, set)):
                query = query.filter(col.in_(list(value)))
            elif value is None:
                query = query.filter(col.is_(None))
            else:
                query = query.filter(col == value)
        if search:
            columns, term = search
            like = f"%{term}%"
            query = query.filter(or_(*[_column(model, c).ilike(like) for c in columns]))
        return query

    def _fail(self, collection: str, action: str, exc: SQLAlchemyError) -> StoreError:
        self.db.rollback()
        detail = getattr(exc, "orig", None) or exc
        logger.error("SQL store %s on %s failed: %s", action, collection, detail)
        return StoreError(f"Could not {action} {collection}: {detail}", collection=collection)

    # ---- sync bodies ----
    def _select(self, collection, columns, filters, order, descending, offset, limit, search) -> List[Row]:
        model = self._model(collection)
        for name in columns or []:
            _column(model, name)
        try:
            query = self._query(model, filters, search)
            if order:
                col = _column(model, order)
                query = query.order_by(col.desc() if descending else col.asc())
            if offset:
                query = query.offset(offset)
            if limit is not None:
                query = query.limit(limit)
            return [_to_row(obj, columns) for obj in query.all()]
        except SQLAlchemyError as e:
            raise self._fail(collection, "read", e) from e

    def _count(self, collection, filters, search) -> int:
        model = self._model(collection)
        try:
            return self._query(model, filters, search).count()
        except SQLAlchemyError as e:
            raise self._fail(collection, "count", e) from e

    def _insert(self, collection, row) -> Row:
        model = self._model(collection)
        for name in row:
            _column(model, name)
        obj = model(**row)
        try:
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as e:
            raise self._fail(collection, "insert into", e) from e
        return _to_row(obj)

    def _update(self, collection, patch, filters) -> None:
        model = self._model(collection)
        values = {_column(model, name): value for name, value in patch.items()}
        try:
            self._query(model, filters, None).update(values, synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail(collection, "update", e) from e

    def _delete(self, collection, filters) -> None:
        model = self._model(collection)
        try:
            self._query(model, filters, None).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail(collection, "delete from", e) from e

    # ---- RowStore ----
    async def select(self, collection, columns=None, filters=None, order=None,
                     descending=False, offset=None, limit=None, search=None):
        return await run_in_threadpool(
            self._select, collection, columns, filters, order, descending, offset, limit, search
        )

    async def count(self, collection, filters=None, search=None):
        return await run_in_threadpool(self._count, collection, filters, search)

    async def insert(self, collection, row):
        return await run_in_threadpool(self._insert, collection, row)

    async def update(self, collection, patch, filters):
        await run_in_threadpool(self._update, collection, patch, filters)

    async def delete(self, collection, filters):
        await run_in_threadpool(self._delete, collection, filters)
