# backend/routes/dictionaries.py
from typing import List

from fastapi import APIRouter, Depends, Response, status

from routes.deps import get_inventory
from schemas.dictionary import DictionaryEntry, DictionaryEntryCreate, DictionaryKind
from services.inventory import InventoryService
from utils.tokenJWT import admin_required, get_current_user

router = APIRouter(prefix="/dictionaries", tags=["Dictionaries"])


@router.get("/{kind}", response_model=List[DictionaryEntry], dependencies=[Depends(get_current_user)])
async def list_entries(kind: DictionaryKind, inventory: InventoryService = Depends(get_inventory)):
    """Categories or units of measure, sorted by name."""
    return await inventory.list_dictionary(kind)


@router.post(
    "/{kind}", response_model=DictionaryEntry, status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(admin_required)],
)
async def add_entry(
    kind: DictionaryKind,
    payload: DictionaryEntryCreate,
    inventory: InventoryService = Depends(get_inventory),
):
    return await inventory.add_dictionary_entry(kind, payload.name)


@router.delete(
    "/{kind}/{entry_id}", status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(admin_required)],
)
async def remove_entry(kind: DictionaryKind, entry_id: str, inventory: InventoryService = Depends(get_inventory)):
    await inventory.remove_dictionary_entry(kind, entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
