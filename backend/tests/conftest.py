"""
Pytest configuration and fixtures for the inventory service tests.
Every test gets its own in-memory SQLite database.
"""
import os

# Set test environment before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORE_BACKEND"] = "sql"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-only"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["REST_URL"] = ""

import pytest
import pytest_asyncio
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base
import models.product  # noqa: F401
import models.dictionary  # noqa: F401
import models.stock  # noqa: F401
from schemas.dictionary import DictionaryKind
from services.inventory import InventoryService
from utils.row_store import RowStore, StoreError
from utils.sql_store import SqlRowStore


class FlakyStore(RowStore):
    """Delegates to a real store, records writes and fails the chosen ones."""

    def __init__(self, inner: RowStore, fail_insert=(), fail_update=()):
        self.inner = inner
        self.fail_insert = set(fail_insert)
        self.fail_update = set(fail_update)
        self.writes = []

    async def select(self, collection, *args, **kwargs):
        return await self.inner.select(collection, *args, **kwargs)

    async def count(self, collection, *args, **kwargs):
        return await self.inner.count(collection, *args, **kwargs)

    async def insert(self, collection, row):
        if collection in self.fail_insert:
            raise StoreError(f"insert into {collection} rejected", collection=collection)
        self.writes.append(("insert", collection))
        return await self.inner.insert(collection, row)

    async def update(self, collection, patch, filters):
        if collection in self.fail_update:
            raise StoreError(f"update of {collection} rejected", collection=collection)
        self.writes.append(("update", collection))
        await self.inner.update(collection, patch, filters)

    async def delete(self, collection, filters):
        self.writes.append(("delete", collection))
        await self.inner.delete(collection, filters)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def store(db_session) -> SqlRowStore:
    return SqlRowStore(db_session)


@pytest.fixture
def flaky(store):
    """Factory: flaky(fail_insert=[...], fail_update=[...]) -> FlakyStore over the test store."""
    def _make(**kwargs) -> FlakyStore:
        return FlakyStore(store, **kwargs)
    return _make


@pytest.fixture
def inventory(store) -> InventoryService:
    return InventoryService(store)


@pytest_asyncio.fixture
async def refs(inventory):
    """Ids of a 'Hair Care' category and a '500ml' unit of measure."""
    category = await inventory.add_dictionary_entry(DictionaryKind.CATEGORY, "Hair Care")
    uom = await inventory.add_dictionary_entry(DictionaryKind.UOM, "500ml")
    return {"category": category.id, "packaging": uom.id}


@pytest.fixture
def shampoo(refs):
    return {
        "name": "Shampoo",
        "description": "Sulfate-free daily shampoo",
        "category": refs["category"],
        "packaging": refs["packaging"],
        "initial_quantity": 20,
        "selling_price": 250,
    }
