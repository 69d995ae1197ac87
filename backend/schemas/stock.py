# backend/schemas/stock.py
import enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class MovementType(str, enum.Enum):
    ADD = "ADD"
    REMOVE = "REMOVE"


class MovementReason(str, enum.Enum):
    RESTOCK = "RESTOCK"
    SALES = "SALES"
    USAGE = "USAGE"
    ADJUSTMENT = "ADJUSTMENT"
    OUT = "OUT"
    # Read-side fallback for tags written by other clients of the store
    UNKNOWN = "UNKNOWN"

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN


# Ledger row as appended. Quantity is a magnitude, checked by the ledger itself.
class MovementCreate(BaseModel):
    product_id: str
    product_name: Optional[str] = None
    product_category: Optional[str] = None
    product_packaging: Optional[str] = None
    product_unit_price: Optional[float] = None
    type: MovementType
    reason: MovementReason = MovementReason.RESTOCK
    quantity: int
    is_display: bool = True


class Movement(MovementCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    reason: Optional[MovementReason] = None
    created_at: Optional[datetime] = None

    @field_validator("reason", mode="before")
    @classmethod
    def _known_reason(cls, v):
        return None if v is None else MovementReason(v)


# Paginated movement history
class MovementPage(BaseModel):
    items: List[Movement]
    total: int
    page: int
    page_size: int


# A single row of the "Inventory movement" form
class StockMovementLine(BaseModel):
    product_id: str
    type: MovementType
    reason: MovementReason = MovementReason.ADJUSTMENT
    quantity: int


class StockMovementBatch(BaseModel):
    lines: List[StockMovementLine] = Field(default_factory=list)


class ReconciliationReport(BaseModel):
    product_id: str
    recorded_quantity: int
    ledger_quantity: int

    @computed_field
    @property
    def drift(self) -> int:
        return self.recorded_quantity - self.ledger_quantity

    @computed_field
    @property
    def consistent(self) -> bool:
        return self.drift == 0
