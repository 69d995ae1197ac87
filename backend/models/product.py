# backend/models/product.py
import uuid

from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, CheckConstraint, func
from database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


# Model Product
# A salon retail product. 'category' and 'packaging' hold dictionary ids,
# 'quantity' mirrors the running total of the product's movement ledger.
class Product(Base):
    __tablename__ = "Products"

    product_id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False)

    category = Column(String(36), nullable=False, index=True)
    packaging = Column(String(36), nullable=False)

    # Stock data, written at creation and afterwards only after a ledger append.
    quantity = Column(Integer, CheckConstraint("quantity >= 0"), nullable=False, default=0)
    price = Column(Numeric(10, 2, asdecimal=False), CheckConstraint("price >= 0"), nullable=False)
    low_stock_level = Column(Integer, CheckConstraint("low_stock_level >= 0"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Product(id={self.product_id}, name='{self.name}', quantity={self.quantity})>"
