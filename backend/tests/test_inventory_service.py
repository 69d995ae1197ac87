"""Tests for the orchestrator: product creation saga, stock movements, audit."""
import pytest

from schemas.dictionary import DictionaryKind
from schemas.stock import MovementReason, MovementType
from services.errors import NotFoundError, PartialFailureError, TransportError, ValidationError
from services.inventory import InventoryService
from utils.row_store import MOVEMENTS, PRODUCTS


class TestCreateProductWithInitialStock:

    @pytest.mark.asyncio
    async def test_end_to_end(self, inventory, store, shampoo):
        product = await inventory.create_product_with_initial_stock(shampoo)
        assert product.quantity == 20
        assert product.price == 250
        assert product.category == shampoo["category"]

        rows = await store.select(MOVEMENTS)
        assert len(rows) == 1
        row = rows[0]
        assert row["type"] == "ADD"
        assert row["reason"] == "RESTOCK"
        assert row["quantity"] == 20
        assert row["product_id"] == product.product_id
        # snapshot carries display names, the product row carries ids
        assert row["product_name"] == "Shampoo"
        assert row["product_category"] == "Hair Care"
        assert row["product_packaging"] == "500ml"
        assert row["product_unit_price"] == 250

        await inventory.set_low_stock_level(product.product_id, 5)
        assert await inventory.reconcile(product.product_id) == 20
        updated = await inventory.get_product(product.product_id)
        assert updated.low_stock_level == 5
        assert updated.quantity == 20

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [1, 7, 120])
    async def test_quantity_matches_ledger(self, inventory, shampoo, quantity):
        product = await inventory.create_product_with_initial_stock({**shampoo, "initial_quantity": quantity})
        assert await inventory.reconcile(product.product_id) == quantity
        assert await inventory.reconcile(product.product_id) == quantity

    @pytest.mark.asyncio
    async def test_zero_stock_writes_no_movement(self, inventory, store, shampoo):
        product = await inventory.create_product_with_initial_stock({**shampoo, "initial_quantity": 0})
        assert product.quantity == 0
        assert await store.select(MOVEMENTS) == []
        assert (await inventory.audit(product.product_id)).consistent

    @pytest.mark.asyncio
    async def test_blank_name_performs_zero_writes(self, refs, shampoo, flaky, store):
        flaky_store = flaky()
        service = InventoryService(flaky_store)
        with pytest.raises(ValidationError) as exc_info:
            await service.create_product_with_initial_stock({**shampoo, "name": ""})
        assert exc_info.value.field == "name"
        assert flaky_store.writes == []
        assert await store.select(PRODUCTS) == []
        assert await store.select(MOVEMENTS) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["category", "packaging"])
    async def test_unknown_dictionary_reference(self, inventory, store, shampoo, field):
        with pytest.raises(ValidationError) as exc_info:
            await inventory.create_product_with_initial_stock({**shampoo, field: "no-such-id"})
        assert exc_info.value.field == field
        assert await store.select(PRODUCTS) == []

    @pytest.mark.asyncio
    async def test_ledger_failure_is_partial(self, shampoo, flaky, store):
        service = InventoryService(flaky(fail_insert=[MOVEMENTS]))
        with pytest.raises(PartialFailureError) as exc_info:
            await service.create_product_with_initial_stock({**shampoo, "initial_quantity": 10})

        product_id = exc_info.value.product_id
        products = await store.select(PRODUCTS)
        assert [p["product_id"] for p in products] == [product_id]
        assert products[0]["quantity"] == 10
        assert await service.reconcile(product_id) == 0

        report = await service.audit(product_id)
        assert report.recorded_quantity == 10
        assert report.ledger_quantity == 0
        assert report.drift == 10
        assert not report.consistent

    @pytest.mark.asyncio
    async def test_product_failure_never_reaches_ledger(self, shampoo, flaky, store):
        flaky_store = flaky(fail_insert=[PRODUCTS])
        service = InventoryService(flaky_store)
        with pytest.raises(TransportError):
            await service.create_product_with_initial_stock(shampoo)
        assert flaky_store.writes == []
        assert await store.select(MOVEMENTS) == []

    @pytest.mark.asyncio
    async def test_operation_state(self, shampoo, flaky):
        service = InventoryService(flaky(fail_insert=[MOVEMENTS]))
        with pytest.raises(PartialFailureError):
            await service.create_product_with_initial_stock(shampoo)

        state = service.operations.state("save_product")
        assert state.pending is False
        assert state.last_error.startswith("Product created, but stock record failed")

        with pytest.raises(ValidationError):
            await service.create_product_with_initial_stock({**shampoo, "selling_price": -1})
        assert service.operations.state("save_product").last_error == "Price cannot be negative."


class TestRecordMovements:

    @pytest.mark.asyncio
    async def test_add_and_remove(self, inventory, shampoo):
        product = await inventory.create_product_with_initial_stock(shampoo)
        pid = product.product_id

        rows = await inventory.record_movements([
            {"product_id": pid, "type": "REMOVE", "reason": "SALES", "quantity": 5},
            {"product_id": pid, "type": "ADD", "reason": "RESTOCK", "quantity": 2},
        ])

        assert [(m.type, m.reason, m.quantity) for m in rows] == [
            (MovementType.REMOVE, MovementReason.SALES, 5),
            (MovementType.ADD, MovementReason.RESTOCK, 2),
        ]
        assert rows[0].product_packaging == "500ml"
        assert (await inventory.get_product(pid)).quantity == 17
        assert (await inventory.audit(pid)).consistent

    @pytest.mark.asyncio
    async def test_cannot_deduct_more_than_available(self, inventory, store, shampoo):
        product = await inventory.create_product_with_initial_stock({**shampoo, "initial_quantity": 3})
        with pytest.raises(ValidationError) as exc_info:
            await inventory.record_movements([
                {"product_id": product.product_id, "type": "REMOVE", "reason": "USAGE", "quantity": 2},
                {"product_id": product.product_id, "type": "REMOVE", "reason": "USAGE", "quantity": 2},
            ])
        assert exc_info.value.message == 'Cannot deduct 4 from "Shampoo - 500ml". Available: 3.'
        assert len(await store.select(MOVEMENTS)) == 1

    @pytest.mark.asyncio
    async def test_deduction_checked_against_ledger_after_drift(self, inventory, shampoo, flaky, store):
        with pytest.raises(PartialFailureError) as exc_info:
            await InventoryService(flaky(fail_insert=[MOVEMENTS])).create_product_with_initial_stock(
                {**shampoo, "initial_quantity": 10}
            )
        pid = exc_info.value.product_id
        assert (await inventory.get_product(pid)).quantity == 10

        with pytest.raises(ValidationError) as exc_info:
            await inventory.record_movements([
                {"product_id": pid, "type": "REMOVE", "reason": "SALES", "quantity": 8},
            ])
        assert exc_info.value.message == 'Cannot deduct 8 from "Shampoo - 500ml". Available: 0.'
        assert await store.select(MOVEMENTS) == []
        assert await inventory.reconcile(pid) == 0

        # restocking repairs the drift
        await inventory.record_movements([
            {"product_id": pid, "type": "ADD", "reason": "RESTOCK", "quantity": 10},
        ])
        assert (await inventory.audit(pid)).consistent

    @pytest.mark.asyncio
    async def test_first_row_failure_is_transport_error(self, inventory, shampoo, flaky, store):
        product = await inventory.create_product_with_initial_stock(shampoo)
        service = InventoryService(flaky(fail_insert=[MOVEMENTS]))
        with pytest.raises(TransportError):
            await service.record_movements([
                {"product_id": product.product_id, "type": "ADD", "reason": "RESTOCK", "quantity": 1},
            ])
        assert len(await store.select(MOVEMENTS)) == 1

    @pytest.mark.asyncio
    async def test_rejects_bad_lines(self, inventory, shampoo):
        product = await inventory.create_product_with_initial_stock(shampoo)
        with pytest.raises(ValidationError):
            await inventory.record_movements([])
        with pytest.raises(ValidationError):
            await inventory.record_movements([
                {"product_id": product.product_id, "type": "ADD", "reason": "RESTOCK", "quantity": 0},
            ])
        with pytest.raises(NotFoundError):
            await inventory.record_movements([
                {"product_id": "missing", "type": "ADD", "reason": "RESTOCK", "quantity": 1},
            ])

    @pytest.mark.asyncio
    async def test_dangling_dictionary_reference(self, inventory, shampoo, refs):
        product = await inventory.create_product_with_initial_stock(shampoo)
        await inventory.remove_dictionary_entry(DictionaryKind.UOM, refs["packaging"])

        rows = await inventory.record_movements([
            {"product_id": product.product_id, "type": "ADD", "reason": "RESTOCK", "quantity": 1},
        ])
        assert rows[0].product_packaging is None
        assert rows[0].product_category == "Hair Care"
        assert (await inventory.get_product(product.product_id)).packaging == refs["packaging"]

    @pytest.mark.asyncio
    async def test_quantity_update_failure_is_partial(self, inventory, shampoo, flaky):
        product = await inventory.create_product_with_initial_stock(shampoo)
        service = InventoryService(flaky(fail_update=[PRODUCTS]))

        with pytest.raises(PartialFailureError) as exc_info:
            await service.record_movements([
                {"product_id": product.product_id, "type": "ADD", "reason": "RESTOCK", "quantity": 4},
            ])
        assert exc_info.value.product_id == product.product_id

        report = await inventory.audit(product.product_id)
        assert report.recorded_quantity == 20
        assert report.ledger_quantity == 24
