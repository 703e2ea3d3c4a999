"""Abstract interface for the stock ledger storage."""

from abc import ABC, abstractmethod
from datetime import datetime

from stockroom.core.entities.inventory import (
    LedgerBalance,
    MovementFilter,
    MovementStats,
    StockMovement,
)
from stockroom.core.entities.material import Material


class ILedgerStore(ABC):
    """
    Interface for stock movement persistence.

    Implementations must write the movement row and the material's
    current_stock adjustment in one transaction, and must refuse an
    adjustment that would leave current_stock below zero.
    """

    @abstractmethod
    async def record_movement(self, movement: StockMovement) -> Material:
        """
        Append a movement and apply it to the material's stock atomically.

        Raises:
            MaterialNotFoundError: material does not exist
            InsufficientStockError: OUT would drive stock negative

        Returns:
            The material after the adjustment.
        """

    @abstractmethod
    async def record_movements(self, movements: list[StockMovement]) -> list[Material]:
        """Apply several movements in one all-or-nothing transaction."""

    @abstractmethod
    async def get_movement(self, movement_id: str) -> StockMovement | None:
        """Get a movement by ID."""

    @abstractmethod
    async def get_movements_for_material(
        self, material_id: str, limit: int = 100
    ) -> list[StockMovement]:
        """Movements for a material, most recent first."""

    @abstractmethod
    async def get_recent_movements(self, limit: int = 10) -> list[StockMovement]:
        """Most recent movements across all materials."""

    @abstractmethod
    async def list_movements(
        self, movement_filter: MovementFilter
    ) -> tuple[list[StockMovement], int]:
        """Filtered, paginated movements (most recent first) and the total match count."""

    @abstractmethod
    async def get_balance(self, material_id: str) -> LedgerBalance | None:
        """Sum of IN and OUT movements next to the stored current_stock."""

    @abstractmethod
    async def get_stats(self, day_start: datetime, month_start: datetime) -> MovementStats:
        """IN/OUT totals since day_start and since month_start, plus the overall count."""
