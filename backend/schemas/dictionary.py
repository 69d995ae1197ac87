# backend/schemas/dictionary.py
import enum

from pydantic import BaseModel, ConfigDict


class DictionaryKind(str, enum.Enum):
    CATEGORY = "category"
    UOM = "uom"

    @property
    def label(self) -> str:
        return "Category" if self is DictionaryKind.CATEGORY else "Packaging / UOM"


class DictionaryEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class DictionaryEntryCreate(BaseModel):
    name: str
