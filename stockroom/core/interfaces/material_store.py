"""
Abstract interface for material storage.

Material rows are written here for everything except current_stock,
which belongs to the ledger store.
"""

from abc import ABC, abstractmethod

from stockroom.core.entities.material import Material, StockStatus


class IMaterialStore(ABC):
    """Abstract interface for material registry storage."""

    @abstractmethod
    async def create_material(self, material: Material) -> Material:
        """Create a new material record with zero stock."""

    @abstractmethod
    async def get_material(self, material_id: str) -> Material | None:
        """Get material by ID."""

    @abstractmethod
    async def get_by_code(self, code: str) -> Material | None:
        """Get material by its unique code."""

    @abstractmethod
    async def list_materials(
        self,
        limit: int = 100,
        offset: int = 0,
        search: str | None = None,
        category: str | None = None,
        stock_status: StockStatus | None = None,
    ) -> list[Material]:
        """List materials ordered by name with optional filters."""

    @abstractmethod
    async def count_materials(
        self,
        search: str | None = None,
        category: str | None = None,
        stock_status: StockStatus | None = None,
    ) -> int:
        """Count materials matching the same filters as list_materials."""

    @abstractmethod
    async def list_categories(self) -> list[str]:
        """Distinct material categories."""

    @abstractmethod
    async def update_material(self, material: Material) -> Material:
        """Update material metadata. current_stock is left untouched."""

    @abstractmethod
    async def count_references(self, material_id: str) -> tuple[int, int]:
        """Return (bom_item_count, movement_count) referencing the material."""

    @abstractmethod
    async def delete_material(self, material_id: str) -> bool:
        """Delete a material. Returns False if it did not exist."""
