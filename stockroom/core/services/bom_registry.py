"""
BOM registry service.

Owns machines and their bills of materials. A machine's BOM is an ordered
list of (material, quantity per unit produced) lines; a material appears
at most once per machine.

Pure service -- no infrastructure imports.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from stockroom.config import get_logger
from stockroom.core.entities.machine import BOMItem, Machine, MachineStatus
from stockroom.core.exceptions import (
    BOMItemNotFoundError,
    DuplicateBOMEntryError,
    DuplicateMachineCodeError,
    MachineNotFoundError,
    MaterialNotFoundError,
    ValidationError,
)
from stockroom.core.interfaces.machine_store import IMachineStore
from stockroom.core.interfaces.material_store import IMaterialStore

logger = get_logger(__name__)

_READ_ONLY_FIELDS = frozenset({"id", "created_at", "updated_at"})


class BOMRegistry:
    """Machine registry and per-machine bill of materials."""

    def __init__(
        self,
        machine_store: IMachineStore,
        material_store: IMaterialStore,
    ) -> None:
        self._machine_store = machine_store
        self._material_store = material_store

    # Machines

    async def create_machine(self, machine: Machine) -> Machine:
        """
        Create a machine.

        Raises:
            DuplicateMachineCodeError: code already in use
        """
        existing = await self._machine_store.get_by_code(machine.code)
        if existing is not None:
            raise DuplicateMachineCodeError(machine.code, existing.id or "")
        created = await self._machine_store.create_machine(machine)
        logger.info("machine_created", machine_id=created.id, code=created.code)
        return created

    async def get_machine(self, machine_id: str) -> Machine:
        machine = await self._machine_store.get_machine(machine_id)
        if machine is None:
            raise MachineNotFoundError(machine_id)
        return machine

    async def list_machines(
        self,
        limit: int = 100,
        offset: int = 0,
        search: str | None = None,
        status: MachineStatus | None = None,
        category: str | None = None,
    ) -> list[Machine]:
        return await self._machine_store.list_machines(
            limit=limit, offset=offset, search=search, status=status, category=category
        )

    async def list_categories(self) -> list[str]:
        return await self._machine_store.list_categories()

    async def update_machine(self, machine_id: str, changes: dict[str, Any]) -> Machine:
        machine = await self.get_machine(machine_id)
        updates = {k: v for k, v in changes.items() if k not in _READ_ONLY_FIELDS}

        new_code = updates.get("code")
        if new_code:
            new_code = str(new_code).strip().upper()
            existing = await self._machine_store.get_by_code(new_code)
            if existing is not None and existing.id != machine_id:
                raise DuplicateMachineCodeError(new_code, existing.id or "")

        try:
            merged = Machine.model_validate({**machine.model_dump(), **updates})
        except PydanticValidationError as e:
            error = e.errors()[0]
            raise ValidationError(str(error["loc"][0]), error["msg"]) from e
        return await self._machine_store.update_machine(merged)

    async def delete_machine(self, machine_id: str) -> int:
        """
        Delete a machine together with its BOM.

        Returns:
            Number of BOM items removed with it.
        """
        removed = await self._machine_store.delete_machine(machine_id)
        if removed < 0:
            raise MachineNotFoundError(machine_id)
        logger.info("machine_deleted", machine_id=machine_id, bom_items_removed=removed)
        return removed

    # BOM

    async def get_bom(self, machine_id: str) -> list[BOMItem]:
        """Ordered BOM lines of a machine."""
        await self.get_machine(machine_id)
        return await self._machine_store.get_bom(machine_id)

    async def add_item(
        self,
        machine_id: str,
        material_id: str,
        quantity: float,
        unit_price: float | None = None,
        notes: str | None = None,
    ) -> BOMItem:
        """
        Append a material to a machine's BOM.

        unit_price defaults to the material's current price.

        Raises:
            MachineNotFoundError / MaterialNotFoundError: unknown references
            DuplicateBOMEntryError: material already in this BOM
            ValidationError: quantity or price out of range
        """
        await self.get_machine(machine_id)
        material = await self._material_store.get_material(material_id)
        if material is None:
            raise MaterialNotFoundError(material_id)

        if await self._machine_store.find_bom_item(machine_id, material_id) is not None:
            raise DuplicateBOMEntryError(machine_id, material_id)

        self._check_quantity(quantity)
        self._check_price(unit_price)

        item = BOMItem(
            machine_id=machine_id,
            material_id=material_id,
            material_code=material.code,
            material_name=material.name,
            quantity=quantity,
            unit=material.unit,
            unit_price=material.unit_price if unit_price is None else unit_price,
            notes=notes,
        )
        created = await self._machine_store.add_bom_item(item)
        logger.info(
            "bom_item_added",
            machine_id=machine_id,
            material_id=material_id,
            quantity=quantity,
            position=created.position,
        )
        return created

    async def update_item(
        self,
        machine_id: str,
        item_id: str,
        quantity: float | None = None,
        unit_price: float | None = None,
        notes: str | None = None,
    ) -> BOMItem:
        """Change quantity, price snapshot or notes of a BOM line."""
        item = await self._get_item(machine_id, item_id)
        if quantity is not None:
            self._check_quantity(quantity)
            item.quantity = quantity
        if unit_price is not None:
            self._check_price(unit_price)
            item.unit_price = unit_price
        if notes is not None:
            item.notes = notes
        updated = await self._machine_store.update_bom_item(item)
        logger.info("bom_item_updated", machine_id=machine_id, item_id=item_id)
        return updated

    async def remove_item(self, machine_id: str, item_id: str) -> None:
        await self._get_item(machine_id, item_id)
        await self._machine_store.delete_bom_item(item_id)
        logger.info("bom_item_removed", machine_id=machine_id, item_id=item_id)

    async def bom_cost(self, machine_id: str) -> float:
        """Cost of one unit from the BOM price snapshots."""
        bom = await self.get_bom(machine_id)
        return round(sum(item.line_cost for item in bom), 4)

    async def _get_item(self, machine_id: str, item_id: str) -> BOMItem:
        item = await self._machine_store.get_bom_item(item_id)
        if item is None or item.machine_id != machine_id:
            raise BOMItemNotFoundError(machine_id, item_id)
        return item

    @staticmethod
    def _check_quantity(quantity: float) -> None:
        if quantity <= 0:
            raise ValidationError("quantity", "must be greater than zero", quantity)

    @staticmethod
    def _check_price(unit_price: float | None) -> None:
        if unit_price is not None and unit_price < 0:
            raise ValidationError("unit_price", "must not be negative", unit_price)
