"""Tests for BOMRegistry."""

from unittest.mock import AsyncMock

import pytest

from stockroom.core.entities.machine import BOMItem, Machine
from stockroom.core.exceptions import (
    BOMItemNotFoundError,
    DuplicateBOMEntryError,
    DuplicateMachineCodeError,
    MachineNotFoundError,
    MaterialNotFoundError,
    ValidationError,
)
from stockroom.core.services.bom_registry import BOMRegistry


@pytest.fixture
def machine_store(sample_machine, sample_bom_item):
    store = AsyncMock()
    store.get_machine.return_value = sample_machine
    store.get_by_code.return_value = None
    store.find_bom_item.return_value = None
    store.get_bom_item.return_value = sample_bom_item
    store.add_bom_item.side_effect = lambda item: item.model_copy(update={"id": "bom-new"})
    store.update_bom_item.side_effect = lambda item: item
    return store


@pytest.fixture
def material_store(sample_material):
    store = AsyncMock()
    store.get_material.return_value = sample_material
    return store


@pytest.fixture
def registry(machine_store, material_store):
    return BOMRegistry(machine_store, material_store)


class TestMachines:
    async def test_duplicate_code(self, registry, machine_store, sample_machine):
        machine_store.get_by_code.return_value = sample_machine
        with pytest.raises(DuplicateMachineCodeError):
            await registry.create_machine(Machine(code="pmp-100", name="Pump"))

    async def test_delete_missing_machine(self, registry, machine_store):
        machine_store.delete_machine.return_value = -1
        with pytest.raises(MachineNotFoundError):
            await registry.delete_machine("missing")

    async def test_delete_returns_removed_bom_count(self, registry, machine_store):
        machine_store.delete_machine.return_value = 3
        assert await registry.delete_machine("mch-1") == 3

    async def test_get_bom_of_unknown_machine(self, registry, machine_store):
        machine_store.get_machine.return_value = None
        with pytest.raises(MachineNotFoundError):
            await registry.get_bom("missing")


class TestAddItem:
    async def test_price_defaults_to_material_price(self, registry):
        item = await registry.add_item("mch-1", "mat-1", 2)
        assert item.id == "bom-new"
        assert item.unit_price == 2.5
        assert item.material_code == "BRG-6204"

    async def test_explicit_price_kept(self, registry):
        item = await registry.add_item("mch-1", "mat-1", 2, unit_price=1.0)
        assert item.unit_price == 1.0

    async def test_duplicate_material(self, registry, machine_store, sample_bom_item):
        machine_store.find_bom_item.return_value = sample_bom_item
        with pytest.raises(DuplicateBOMEntryError):
            await registry.add_item("mch-1", "mat-1", 1)
        machine_store.add_bom_item.assert_not_awaited()

    async def test_unknown_material(self, registry, material_store):
        material_store.get_material.return_value = None
        with pytest.raises(MaterialNotFoundError):
            await registry.add_item("mch-1", "missing", 1)

    @pytest.mark.parametrize("quantity", [0, -2])
    async def test_non_positive_quantity(self, registry, quantity):
        with pytest.raises(ValidationError):
            await registry.add_item("mch-1", "mat-1", quantity)

    async def test_negative_price(self, registry):
        with pytest.raises(ValidationError):
            await registry.add_item("mch-1", "mat-1", 1, unit_price=-1)


class TestItems:
    async def test_update_item(self, registry):
        item = await registry.update_item("mch-1", "bom-1", quantity=5, notes="spare")
        assert item.quantity == 5
        assert item.notes == "spare"

    async def test_item_on_other_machine(self, registry):
        with pytest.raises(BOMItemNotFoundError):
            await registry.update_item("mch-2", "bom-1", quantity=5)

    async def test_remove_missing_item(self, registry, machine_store):
        machine_store.get_bom_item.return_value = None
        with pytest.raises(BOMItemNotFoundError):
            await registry.remove_item("mch-1", "bom-x")

    async def test_bom_cost(self, registry, machine_store):
        machine_store.get_bom.return_value = [
            BOMItem(machine_id="mch-1", material_id="a", quantity=2, unit_price=2.5),
            BOMItem(machine_id="mch-1", material_id="b", quantity=3, unit_price=0.1),
        ]
        assert await registry.bom_cost("mch-1") == 5.3
