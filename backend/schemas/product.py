# backend/schemas/product.py
import math
from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field, field_validator


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


def required_text(value: Any, message: str) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValueError(message)
    return text


def coerce_number(value: Any, message: str) -> float:
    if isinstance(value, bool):
        raise ValueError(message)
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = "" if value is None else str(value).strip()
        try:
            number = float(text)
        except ValueError:
            raise ValueError(message)
    if not math.isfinite(number):
        raise ValueError(message)
    return number


# Input of the "Add product" form. Strings and numbers arrive as typed by the
# user and are coerced here; field order is the order rules are reported in.
class ProductCreate(BaseModel):
    model_config = ConfigDict(validate_default=True, populate_by_name=True)

    name: str = ""
    description: str = ""
    category: str = ""
    packaging: str = ""
    initial_quantity: int = Field(
        default=None, validation_alias=AliasChoices("initial_quantity", "initialQuantity")
    )
    selling_price: float = Field(
        default=None, validation_alias=AliasChoices("selling_price", "sellingPrice")
    )

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        return required_text(v, "Product name is required.")

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, v):
        return required_text(v, "Description is required.")

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, v):
        return required_text(v, "Category is required.")

    @field_validator("packaging", mode="before")
    @classmethod
    def _packaging(cls, v):
        return required_text(v, "Packaging is required.")

    @field_validator("initial_quantity", mode="before")
    @classmethod
    def _initial_quantity(cls, v):
        number = coerce_number(v, "Initial quantity must be a number.")
        if number < 0:
            raise ValueError("Quantity cannot be negative.")
        if number != int(number):
            raise ValueError("Initial quantity must be a whole number.")
        return int(number)

    @field_validator("selling_price", mode="before")
    @classmethod
    def _selling_price(cls, v):
        number = coerce_number(v, "Selling price must be a number.")
        if number < 0:
            raise ValueError("Price cannot be negative.")
        return number


class ProductOut(ORMBase):
    product_id: str
    name: str
    description: str
    category: str
    packaging: str
    quantity: int
    price: float
    low_stock_level: Optional[int] = None
    created_at: Optional[datetime] = None

    @computed_field
    @property
    def is_low_stock(self) -> bool:
        return self.low_stock_level is not None and self.quantity <= self.low_stock_level


class LowStockLevelUpdate(BaseModel):
    level: Any = None


LowStockFilter = Literal["all", "low", "notlow"]


# Paginated response for product listings
class ProductPage(ORMBase):
    items: List[ProductOut]
    total: int
    page: int
    page_size: int
