# backend/services/dictionary.py
import logging
from typing import Dict, List, Optional

from schemas.dictionary import DictionaryEntry, DictionaryKind
from services.errors import DuplicateError, NotFoundError, TransportError, ValidationError
from utils.row_store import RowStore, StoreError, CATEGORIES, UNIT_OF_MEASURE

logger = logging.getLogger(__name__)

COLLECTION_BY_KIND = {
    DictionaryKind.CATEGORY: CATEGORIES,
    DictionaryKind.UOM: UNIT_OF_MEASURE,
}


def _sort_key(entry: DictionaryEntry) -> str:
    return entry.name.casefold()


class DictionaryStore:
    """Categories and units of measure.

    Each instance keeps its own fetched list per kind. Mutations go to the
    store first and are then mirrored into the local list; the store stays
    authoritative and nothing is shared between instances.
    """

    def __init__(self, store: RowStore):
        self.store = store
        self._cache: Dict[DictionaryKind, List[DictionaryEntry]] = {}

    def cached(self, kind: DictionaryKind) -> Optional[List[DictionaryEntry]]:
        entries = self._cache.get(DictionaryKind(kind))
        return list(entries) if entries is not None else None

    async def list(self, kind: DictionaryKind) -> List[DictionaryEntry]:
        kind = DictionaryKind(kind)
        try:
            rows = await self.store.select(
                COLLECTION_BY_KIND[kind], columns=["id", "name"], order="name"
            )
        except StoreError as e:
            raise TransportError(e.message) from e
        entries = sorted(
            (DictionaryEntry.model_validate(r) for r in rows if r.get("name")),
            key=_sort_key,
        )
        self._cache[kind] = entries
        return list(entries)

    async def add(self, kind: DictionaryKind, name: str) -> DictionaryEntry:
        kind = DictionaryKind(kind)
        trimmed = (name or "").strip()
        if not trimmed:
            raise ValidationError(f"{kind.label} name is required.", field="name")

        if kind not in self._cache:
            await self.list(kind)
        if any(e.name.casefold() == trimmed.casefold() for e in self._cache[kind]):
            raise DuplicateError(f"{kind.label} '{trimmed}' already exists.")

        try:
            row = await self.store.insert(COLLECTION_BY_KIND[kind], {"name": trimmed})
        except StoreError as e:
            raise TransportError(e.message) from e

        added = DictionaryEntry.model_validate(row)
        self._cache[kind] = sorted(self._cache[kind] + [added], key=_sort_key)
        logger.info("Added %s '%s' (id=%s)", kind.value, added.name, added.id)
        return added

    async def resolve(self, kind: DictionaryKind, entry_id: str) -> DictionaryEntry:
        kind = DictionaryKind(kind)
        for entry in self._cache.get(kind, []):
            if entry.id == entry_id:
                return entry
        try:
            rows = await self.store.select(
                COLLECTION_BY_KIND[kind], columns=["id", "name"], filters={"id": entry_id}, limit=1
            )
        except StoreError as e:
            raise TransportError(e.message) from e
        if not rows:
            raise NotFoundError(f"{kind.label} not found.")
        return DictionaryEntry.model_validate(rows[0])

    async def remove(self, kind: DictionaryKind, entry_id: str) -> None:
        kind = DictionaryKind(kind)
        collection = COLLECTION_BY_KIND[kind]
        try:
            rows = await self.store.select(collection, columns=["id"], filters={"id": entry_id}, limit=1)
            if not rows:
                raise NotFoundError(f"{kind.label} not found.")
            await self.store.delete(collection, {"id": entry_id})
        except StoreError as e:
            raise TransportError(e.message) from e

        # Products still pointing at this id are left as they are
        if kind in self._cache:
            self._cache[kind] = [e for e in self._cache[kind] if e.id != entry_id]
        logger.info("Removed %s id=%s", kind.value, entry_id)
