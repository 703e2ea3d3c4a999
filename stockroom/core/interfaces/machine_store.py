"""Abstract interface for machine and BOM storage."""

from abc import ABC, abstractmethod

from stockroom.core.entities.machine import BOMItem, Machine, MachineStatus


class IMachineStore(ABC):
    """Interface for machines and their bill of materials."""

    @abstractmethod
    async def create_machine(self, machine: Machine) -> Machine:
        """Create a new machine."""

    @abstractmethod
    async def get_machine(self, machine_id: str) -> Machine | None:
        """Get machine by ID."""

    @abstractmethod
    async def get_by_code(self, code: str) -> Machine | None:
        """Get machine by its unique code."""

    @abstractmethod
    async def list_machines(
        self,
        limit: int = 100,
        offset: int = 0,
        search: str | None = None,
        status: MachineStatus | None = None,
        category: str | None = None,
    ) -> list[Machine]:
        """List machines ordered by code."""

    @abstractmethod
    async def list_categories(self) -> list[str]:
        """Distinct machine categories."""

    @abstractmethod
    async def update_machine(self, machine: Machine) -> Machine:
        """Update machine metadata."""

    @abstractmethod
    async def delete_machine(self, machine_id: str) -> int:
        """
        Delete a machine and its BOM items in one transaction.

        Returns:
            Number of BOM items removed, or -1 if the machine did not exist.
        """

    # BOM

    @abstractmethod
    async def get_bom(self, machine_id: str) -> list[BOMItem]:
        """BOM items of a machine ordered by position."""

    @abstractmethod
    async def get_bom_item(self, item_id: str) -> BOMItem | None:
        """Get a BOM item by ID."""

    @abstractmethod
    async def find_bom_item(self, machine_id: str, material_id: str) -> BOMItem | None:
        """Find the BOM line for a (machine, material) pair."""

    @abstractmethod
    async def add_bom_item(self, item: BOMItem) -> BOMItem:
        """
        Append a BOM item at the end of the machine's BOM.

        Raises:
            DuplicateBOMEntryError: the pair already exists
        """

    @abstractmethod
    async def update_bom_item(self, item: BOMItem) -> BOMItem:
        """Update quantity, unit price and notes of a BOM item."""

    @abstractmethod
    async def delete_bom_item(self, item_id: str) -> bool:
        """Delete a BOM item. Returns False if it did not exist."""
