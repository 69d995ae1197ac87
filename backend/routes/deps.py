# backend/routes/deps.py
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from services.inventory import InventoryService
from utils.row_store import RowStore
from utils.rest_store import RestRowStore
from utils.sql_store import SqlRowStore
from utils.tokenJWT import CurrentUser, get_current_user


def get_sql_store(db: Session = Depends(get_db)) -> RowStore:
    return SqlRowStore(db)


def get_rest_store(current_user: CurrentUser = Depends(get_current_user)) -> RowStore:
    # Forward the caller's token so the hosted backend applies its row-level security
    return RestRowStore(access_token=current_user.token)


def store_dependency(backend: str):
    """Row store dependency for the configured backend; only the SQL one opens a session."""
    return get_rest_store if backend == "rest" else get_sql_store


get_store = store_dependency(settings.STORE_BACKEND)


def get_inventory(request: Request, store: RowStore = Depends(get_store)) -> InventoryService:
    return InventoryService(store, operations=request.app.state.operations)
