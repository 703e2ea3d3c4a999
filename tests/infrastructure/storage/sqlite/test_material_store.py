"""Tests for SQLiteMaterialStore against a migrated database."""

import pytest

from stockroom.core.entities.inventory import MovementType, StockMovement
from stockroom.core.entities.machine import BOMItem, Machine
from stockroom.core.entities.material import Material, StockStatus
from stockroom.infrastructure.storage.sqlite import (
    SQLiteLedgerStore,
    SQLiteMachineStore,
    SQLiteMaterialStore,
)


@pytest.fixture
def store(initialized_db) -> SQLiteMaterialStore:
    return SQLiteMaterialStore()


async def _stock(material: Material, quantity: float) -> None:
    await SQLiteLedgerStore().record_movement(
        StockMovement(
            material_id=material.id,
            material_code=material.code,
            material_name=material.name,
            movement_type=MovementType.IN,
            quantity=quantity,
            unit=material.unit,
        )
    )


class TestCreateAndGet:
    async def test_create_forces_zero_stock(self, store):
        created = await store.create_material(
            Material(code="brg-1", name="Bearing", current_stock=40)
        )

        assert created.id
        fetched = await store.get_material(created.id)
        assert fetched.current_stock == 0.0
        assert fetched.code == "BRG-1"

    async def test_get_by_code_case_insensitive(self, store):
        await store.create_material(Material(code="NUT-M8", name="Nut"))
        found = await store.get_by_code(" nut-m8 ")
        assert found is not None
        assert found.name == "Nut"

    async def test_missing(self, store):
        assert await store.get_material("missing") is None
        assert await store.get_by_code("NOPE") is None


class TestListing:
    async def test_search_category_and_count(self, store):
        await store.create_material(Material(code="A-1", name="Alpha bolt", category="bolts"))
        await store.create_material(Material(code="B-1", name="Beta bolt", category="bolts"))
        await store.create_material(Material(code="C-1", name="Gamma nut", category="nuts"))

        bolts = await store.list_materials(category="bolts")
        assert [m.name for m in bolts] == ["Alpha bolt", "Beta bolt"]
        assert await store.count_materials(search="bolt") == 2
        assert await store.list_categories() == ["bolts", "nuts"]

        page = await store.list_materials(limit=1, offset=1)
        assert [m.code for m in page] == ["B-1"]

    async def test_stock_status_filter(self, store):
        critical = await store.create_material(
            Material(code="C", name="Critical", min_stock_level=5, max_stock_level=100)
        )
        low = await store.create_material(
            Material(code="L", name="Low", min_stock_level=5, max_stock_level=100)
        )
        normal = await store.create_material(
            Material(code="N", name="Normal", min_stock_level=5, max_stock_level=100)
        )
        await _stock(critical, 5)
        await _stock(low, 20)
        await _stock(normal, 60)

        for status, expected in (
            (StockStatus.CRITICAL, "C"),
            (StockStatus.LOW, "L"),
            (StockStatus.NORMAL, "N"),
        ):
            items = await store.list_materials(stock_status=status)
            assert [m.code for m in items] == [expected]
            assert items[0].stock_status == status
            assert await store.count_materials(stock_status=status) == 1


class TestUpdateAndDelete:
    async def test_update_keeps_stored_stock(self, store):
        created = await store.create_material(Material(code="X", name="X"))
        await _stock(created, 7)

        stale = created.model_copy(update={"name": "Renamed", "current_stock": 999})
        updated = await store.update_material(stale)

        assert updated.name == "Renamed"
        assert updated.current_stock == 7

    async def test_count_references(self, store):
        material = await store.create_material(Material(code="R", name="Ref"))
        machines = SQLiteMachineStore()
        machine = await machines.create_machine(Machine(code="M", name="Mach"))
        await machines.add_bom_item(
            BOMItem(machine_id=machine.id, material_id=material.id, quantity=1)
        )
        await _stock(material, 2)

        assert await store.count_references(material.id) == (1, 1)

    async def test_delete(self, store):
        created = await store.create_material(Material(code="D", name="Del"))
        assert await store.delete_material(created.id) is True
        assert await store.get_material(created.id) is None
        assert await store.delete_material(created.id) is False
