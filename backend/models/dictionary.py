# backend/models/dictionary.py
import uuid

from sqlalchemy import Column, String
from database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


# Reference sets used to classify products. Name uniqueness is checked by the
# service against its fetched list, not by a database constraint.
class Category(Base):
    __tablename__ = "Categories"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False, index=True)


class UnitOfMeasure(Base):
    __tablename__ = "UnitOfMeasure"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False, index=True)
