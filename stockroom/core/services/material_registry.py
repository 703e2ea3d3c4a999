"""
Material registry service.

Registers, edits and removes materials. Stock is never written here:
an opening balance is booked through the ledger as an IN movement.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from stockroom.config import get_logger
from stockroom.core.entities.inventory import MovementType
from stockroom.core.entities.material import Material, StockStatus
from stockroom.core.exceptions import (
    DuplicateMaterialCodeError,
    MaterialInUseError,
    MaterialNotFoundError,
    ValidationError,
)
from stockroom.core.interfaces.material_store import IMaterialStore
from stockroom.core.services.stock_ledger import StockLedger

logger = get_logger(__name__)

OPENING_BALANCE_REASON = "Opening balance"

# Fields owned by the ledger or the store
_READ_ONLY_FIELDS = frozenset({"id", "current_stock", "created_at", "updated_at"})


class MaterialRegistry:
    """Material CRUD with referential-integrity checks."""

    def __init__(self, material_store: IMaterialStore, ledger: StockLedger) -> None:
        self._material_store = material_store
        self._ledger = ledger

    async def register(
        self,
        material: Material,
        opening_stock: float = 0.0,
        performed_by: str | None = None,
    ) -> Material:
        """
        Register a new material.

        Args:
            material: Material to create. Its current_stock is ignored.
            opening_stock: Initial quantity, booked as an IN movement.
            performed_by: User recorded on the opening movement.

        Raises:
            DuplicateMaterialCodeError: code already registered
            ValidationError: negative opening stock
        """
        if opening_stock < 0:
            raise ValidationError("opening_stock", "must not be negative", opening_stock)

        existing = await self._material_store.get_by_code(material.code)
        if existing is not None:
            raise DuplicateMaterialCodeError(material.code, existing.id or "")

        material.current_stock = 0.0
        created = await self._material_store.create_material(material)
        logger.info("material_registered", material_id=created.id, code=created.code)

        if opening_stock > 0:
            await self._ledger.apply_movement(
                created.id or "",
                MovementType.IN,
                opening_stock,
                reason=OPENING_BALANCE_REASON,
                performed_by=performed_by,
            )
            return await self.get(created.id or "")
        return created

    async def get(self, material_id: str) -> Material:
        material = await self._material_store.get_material(material_id)
        if material is None:
            raise MaterialNotFoundError(material_id)
        return material

    async def list_materials(
        self,
        limit: int = 100,
        offset: int = 0,
        search: str | None = None,
        category: str | None = None,
        stock_status: StockStatus | None = None,
    ) -> tuple[list[Material], int]:
        """Filtered page of materials and the total match count."""
        items = await self._material_store.list_materials(
            limit=limit,
            offset=offset,
            search=search,
            category=category,
            stock_status=stock_status,
        )
        total = await self._material_store.count_materials(
            search=search, category=category, stock_status=stock_status
        )
        return items, total

    async def list_categories(self) -> list[str]:
        return await self._material_store.list_categories()

    async def update(self, material_id: str, changes: dict[str, Any]) -> Material:
        """
        Update material metadata.

        current_stock cannot be changed here; use a ledger movement.
        """
        if "current_stock" in changes:
            raise ValidationError(
                "current_stock", "stock can only change through movements"
            )

        material = await self.get(material_id)
        updates = {k: v for k, v in changes.items() if k not in _READ_ONLY_FIELDS}

        new_code = updates.get("code")
        if new_code:
            new_code = str(new_code).strip().upper()
            existing = await self._material_store.get_by_code(new_code)
            if existing is not None and existing.id != material_id:
                raise DuplicateMaterialCodeError(new_code, existing.id or "")

        # Re-validate through the model so constraints (ge=0, code case) apply
        try:
            merged = Material.model_validate({**material.model_dump(), **updates})
        except PydanticValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in error["loc"]) or "material"
            raise ValidationError(field, error["msg"]) from e
        updated = await self._material_store.update_material(merged)
        logger.info("material_updated", material_id=material_id, fields=sorted(updates))
        return updated

    async def delete(self, material_id: str) -> None:
        """
        Delete a material that nothing references.

        Raises:
            MaterialInUseError: BOM items or movements still point at it
        """
        await self.get(material_id)
        bom_items, movements = await self._material_store.count_references(material_id)
        if bom_items or movements:
            raise MaterialInUseError(material_id, bom_items, movements)
        await self._material_store.delete_material(material_id)
        logger.info("material_deleted", material_id=material_id)
