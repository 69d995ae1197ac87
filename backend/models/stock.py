# backend/models/stock.py
from sqlalchemy import Column, Integer, String, Boolean, Numeric, DateTime, CheckConstraint, func
from database import Base

class InventoryMovementLine(Base):
    __tablename__ = "InventoryMovementLine"

    # Integer key doubles as the insertion sequence used for ledger replay
    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(String(36), nullable=False, index=True)

    # Snapshot of the product at the time of the movement (display names)
    product_name = Column(String, nullable=True)
    product_category = Column(String, nullable=True)
    product_packaging = Column(String, nullable=True)
    product_unit_price = Column(Numeric(10, 2, asdecimal=False), nullable=True)

    # Movement classification (ADD / REMOVE) and why it happened
    type = Column(String(16), nullable=False)
    reason = Column(String(32), nullable=True)

    # Magnitude only, the sign comes from 'type'
    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False)

    is_display = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
