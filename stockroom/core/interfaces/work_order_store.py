"""Abstract interface for work order storage."""

from abc import ABC, abstractmethod
from datetime import datetime

from stockroom.core.entities.work_order import (
    WorkOrder,
    WorkOrderFilter,
    WorkOrderStats,
    WorkOrderStatus,
)


class IWorkOrderStore(ABC):
    """Interface for work order persistence."""

    @abstractmethod
    async def create_work_order(self, work_order: WorkOrder) -> WorkOrder:
        """Create a new work order."""

    @abstractmethod
    async def get_work_order(self, work_order_id: str) -> WorkOrder | None:
        """Get work order by ID."""

    @abstractmethod
    async def list_work_orders(
        self, work_order_filter: WorkOrderFilter
    ) -> tuple[list[WorkOrder], int]:
        """Filtered work orders, newest first, and the total match count."""

    @abstractmethod
    async def next_order_number(self, prefix: str) -> str:
        """Next free human order number for the prefix (e.g. WO000042)."""

    @abstractmethod
    async def update_work_order(self, work_order: WorkOrder) -> WorkOrder:
        """Update editable metadata. Status and actual dates are not written."""

    @abstractmethod
    async def save_status(
        self, work_order: WorkOrder, expected_status: WorkOrderStatus
    ) -> bool:
        """
        Persist status, actual dates and duration if the stored status
        still equals expected_status.

        Returns:
            False when the stored status changed in the meantime.
        """

    @abstractmethod
    async def delete_work_order(self, work_order_id: str) -> bool:
        """Delete a work order. Returns False if it did not exist."""

    @abstractmethod
    async def get_stats(self, now: datetime) -> WorkOrderStats:
        """Counts per status, high priority and overdue open orders."""
