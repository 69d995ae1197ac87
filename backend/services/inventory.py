# backend/services/inventory.py
import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Sequence, Union

import pydantic

from schemas.dictionary import DictionaryEntry, DictionaryKind
from schemas.product import ProductCreate, ProductOut, ProductPage, LowStockFilter
from schemas.stock import (
    Movement, MovementCreate, MovementPage, MovementReason, MovementType,
    ReconciliationReport, StockMovementLine,
)
from services.catalog import ProductCatalog, first_error
from services.dictionary import DictionaryStore
from services.errors import NotFoundError, PartialFailureError, TransportError, ValidationError
from services.ledger import MovementLedger
from utils.operations import OperationTracker
from utils.row_store import RowStore

logger = logging.getLogger(__name__)


class InventoryService:
    """Entry point for the HTTP layer.

    Product creation is a two-step sequence (product row, then its founding
    ledger row) with no transaction spanning both. A failure of the second
    step is reported as PartialFailureError, never swallowed or retried.
    """

    def __init__(self, store: RowStore, operations: Optional[OperationTracker] = None):
        self.store = store
        self.dictionaries = DictionaryStore(store)
        self.catalog = ProductCatalog(store)
        self.ledger = MovementLedger(store)
        self.operations = operations or OperationTracker()

    # ---- dictionaries ----
    async def list_dictionary(self, kind: DictionaryKind) -> List[DictionaryEntry]:
        async with self.operations.track(f"fetch_{DictionaryKind(kind).value}"):
            return await self.dictionaries.list(kind)

    async def add_dictionary_entry(self, kind: DictionaryKind, name: str) -> DictionaryEntry:
        async with self.operations.track(f"add_{DictionaryKind(kind).value}"):
            return await self.dictionaries.add(kind, name)

    async def remove_dictionary_entry(self, kind: DictionaryKind, entry_id: str) -> None:
        async with self.operations.track(f"remove_{DictionaryKind(kind).value}"):
            await self.dictionaries.remove(kind, entry_id)

    # ---- products ----
    async def list_products(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        low_stock: LowStockFilter = "all",
        page: int = 1,
        page_size: int = 10,
    ) -> ProductPage:
        async with self.operations.track("fetch_products"):
            return await self.catalog.list(search, category, low_stock, page, page_size)

    async def get_product(self, product_id: str) -> ProductOut:
        return await self.catalog.get(product_id)

    async def create_product_with_initial_stock(self, data: Union[ProductCreate, Dict[str, Any]]) -> ProductOut:
        async with self.operations.track("save_product"):
            # 1. input rules, nothing touched yet
            validated = self.catalog.validate(data)

            # 2. dictionary ids must exist, their names go into the ledger snapshot
            category = await self._require_entry(DictionaryKind.CATEGORY, validated.category, "category")
            packaging = await self._require_entry(DictionaryKind.UOM, validated.packaging, "packaging")

            # 3. product row
            product = await self.catalog.create(validated)

            # 4. founding ledger row
            if product.quantity > 0:
                movement = self._snapshot(
                    product, category.name, packaging.name,
                    MovementType.ADD, MovementReason.RESTOCK, product.quantity,
                )
                try:
                    await self.ledger.append(movement)
                except TransportError as e:
                    logger.exception("Product %s created but its initial stock movement failed", product.product_id)
                    raise PartialFailureError(
                        f"Product created, but stock record failed: {e.message}",
                        product_id=product.product_id,
                    ) from e

            return product

    async def set_low_stock_level(self, product_id: str, level: Any) -> int:
        async with self.operations.track("set_low_stock_level"):
            return await self.catalog.set_low_stock_level(product_id, level)

    # ---- stock movements ----
    async def record_movements(self, lines: Sequence[Union[StockMovementLine, Dict[str, Any]]]) -> List[Movement]:
        """Append a batch of movements, then bring each product's quantity in
        line with its ledger. REMOVE totals may not exceed current stock."""
        async with self.operations.track("record_movements"):
            parsed = [self._parse_line(line) for line in lines]
            if not parsed:
                raise ValidationError("Add at least one movement line.", field="lines")

            products: Dict[str, ProductOut] = OrderedDict()
            for line in parsed:
                if line.product_id not in products:
                    products[line.product_id] = await self.catalog.get(line.product_id)

            names = {pid: await self._snapshot_names(p) for pid, p in products.items()}

            deductions: Dict[str, int] = {}
            for line in parsed:
                if line.type is MovementType.REMOVE:
                    deductions[line.product_id] = deductions.get(line.product_id, 0) + line.quantity
            for pid, wanted in deductions.items():
                product = products[pid]
                # A drifted product row may claim more than its ledger holds
                available = min(product.quantity, await self.ledger.reconcile(pid))
                if wanted > available:
                    packaging = names[pid][1]
                    label = f"{product.name} - {packaging}" if packaging else product.name
                    raise ValidationError(
                        f'Cannot deduct {wanted} from "{label}". Available: {available}.',
                        field="quantity",
                    )

            appended: List[Movement] = []
            try:
                for line in parsed:
                    product = products[line.product_id]
                    category_name, packaging_name = names[line.product_id]
                    appended.append(await self.ledger.append(self._snapshot(
                        product, category_name, packaging_name, line.type, line.reason, line.quantity,
                    )))
            except TransportError as e:
                if not appended:
                    raise
                logger.exception("Stock movement batch stopped after %s of %s rows", len(appended), len(parsed))
                raise PartialFailureError(
                    f"Some stock movements were recorded, but the rest failed: {e.message}",
                    product_id=appended[0].product_id,
                ) from e

            for pid in products:
                try:
                    quantity = await self.ledger.reconcile(pid)
                    await self.catalog.set_quantity(pid, quantity)
                except TransportError as e:
                    logger.exception("Ledger updated but quantity of %s was not", pid)
                    raise PartialFailureError(
                        f"Stock movements recorded, but product quantity update failed: {e.message}",
                        product_id=pid,
                    ) from e

            logger.info("Recorded %s stock movements for %s products", len(appended), len(products))
            return appended

    async def movement_history(self, search: Optional[str] = None, page: int = 1, page_size: int = 10) -> MovementPage:
        async with self.operations.track("fetch_movements"):
            return await self.ledger.history(search, page, page_size)

    async def reconcile(self, product_id: str) -> int:
        return await self.ledger.reconcile(product_id)

    async def audit(self, product_id: str) -> ReconciliationReport:
        product = await self.catalog.get(product_id)
        report = ReconciliationReport(
            product_id=product_id,
            recorded_quantity=product.quantity,
            ledger_quantity=await self.ledger.reconcile(product_id),
        )
        if not report.consistent:
            logger.warning(
                "Product %s quantity %s does not match ledger total %s",
                product_id, report.recorded_quantity, report.ledger_quantity,
            )
        return report

    # ---- helpers ----
    async def _require_entry(self, kind: DictionaryKind, entry_id: str, field: str) -> DictionaryEntry:
        try:
            return await self.dictionaries.resolve(kind, entry_id)
        except NotFoundError:
            raise ValidationError(f"Unknown {field}.", field=field)

    async def _snapshot_names(self, product: ProductOut):
        # Dangling dictionary references leave the snapshot name empty
        names = []
        for kind, entry_id in ((DictionaryKind.CATEGORY, product.category), (DictionaryKind.UOM, product.packaging)):
            try:
                names.append((await self.dictionaries.resolve(kind, entry_id)).name)
            except NotFoundError:
                names.append(None)
        return tuple(names)

    @staticmethod
    def _snapshot(product: ProductOut, category_name, packaging_name,
                  movement_type: MovementType, reason: MovementReason, quantity: int) -> MovementCreate:
        return MovementCreate(
            product_id=product.product_id,
            product_name=product.name,
            product_category=category_name,
            product_packaging=packaging_name,
            product_unit_price=product.price,
            type=movement_type,
            reason=reason,
            quantity=quantity,
            is_display=True,
        )

    @staticmethod
    def _parse_line(line) -> StockMovementLine:
        if not isinstance(line, StockMovementLine):
            try:
                line = StockMovementLine.model_validate(line)
            except pydantic.ValidationError as e:
                raise first_error(e) from e
        if line.quantity <= 0:
            raise ValidationError("Quantity must be greater than 0.", field="quantity")
        if line.reason is MovementReason.UNKNOWN:
            raise ValidationError("Please choose a reason.", field="reason")
        return line
