# backend/main.py
import logging
import sys

from fastapi import FastAPI, Depends, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

from config import settings
from database import init_db
from services.errors import (
    InventoryError, ValidationError, DuplicateError, NotFoundError,
    PartialFailureError, TransportError,
)
from utils.operations import OperationTracker
from utils.tokenJWT import get_current_user

load_dotenv()

# Logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

# Routers
from routes.dictionaries import router as dictionaries_router
from routes.products import router as products_router
from routes.stock import router as stock_router

# Tables for the local SQL store
if settings.STORE_BACKEND == "sql":
    init_db()

app = FastAPI(title="Salon Inventory API", version="1.0.0")
app.state.operations = OperationTracker()

# CORS Configuration
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173"
]
if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

STATUS_BY_ERROR = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    DuplicateError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    PartialFailureError: status.HTTP_502_BAD_GATEWAY,
    TransportError: status.HTTP_502_BAD_GATEWAY,
}


@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError):
    body = {"detail": exc.message, "error": type(exc).__name__}
    if isinstance(exc, ValidationError) and exc.field:
        body["field"] = exc.field
    if isinstance(exc, PartialFailureError):
        body["product_id"] = exc.product_id
    code = STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=code, content=body)


# Router registration
app.include_router(dictionaries_router)
app.include_router(products_router)
app.include_router(stock_router, prefix="/stock")


@app.get("/")
def read_root():
    return {"message": "Salon Inventory API is running"}


@app.get("/inventory/operations", dependencies=[Depends(get_current_user)])
def list_operations(request: Request):
    """Pending flag and last error per mutating operation."""
    return {name: state.model_dump() for name, state in request.app.state.operations.snapshot().items()}
