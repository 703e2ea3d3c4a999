"""
Work order entity and its status lifecycle.

PLANNED -> IN_PROGRESS -> COMPLETED, with CANCELLED reachable from
PLANNED or IN_PROGRESS. COMPLETED and CANCELLED are terminal.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class WorkOrderStatus(str, Enum):
    """Work order lifecycle states."""

    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class WorkOrderPriority(str, Enum):
    """Work order priority."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


ALLOWED_TRANSITIONS: dict[WorkOrderStatus, frozenset[WorkOrderStatus]] = {
    WorkOrderStatus.PLANNED: frozenset(
        {WorkOrderStatus.IN_PROGRESS, WorkOrderStatus.CANCELLED}
    ),
    WorkOrderStatus.IN_PROGRESS: frozenset(
        {WorkOrderStatus.COMPLETED, WorkOrderStatus.CANCELLED}
    ),
    WorkOrderStatus.COMPLETED: frozenset(),
    WorkOrderStatus.CANCELLED: frozenset(),
}


class WorkOrder(BaseModel):
    """A unit of production work against a machine."""

    id: str | None = None
    order_number: str = ""
    title: str = Field(..., min_length=1)
    description: str | None = None
    machine_id: str
    machine_name: str | None = None
    quantity: float = Field(default=1.0, gt=0)
    status: WorkOrderStatus = WorkOrderStatus.PLANNED
    priority: WorkOrderPriority = WorkOrderPriority.MEDIUM
    planned_start_date: datetime | None = None
    planned_end_date: datetime | None = None
    actual_start_date: datetime | None = None
    actual_end_date: datetime | None = None
    estimated_duration: float | None = None  # hours
    actual_duration: int | None = None  # hours
    created_by: str | None = None
    assigned_to: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self.status]

    def can_transition_to(self, status: WorkOrderStatus) -> bool:
        """Check whether moving to status is a legal transition."""
        return status in ALLOWED_TRANSITIONS[self.status]

    def is_overdue(self, now: datetime | None = None) -> bool:
        """Open work order whose planned end date has passed."""
        if self.is_terminal or self.planned_end_date is None:
            return False
        now = now or datetime.now(UTC)
        end = self.planned_end_date
        if end.tzinfo is None:
            end = end.replace(tzinfo=UTC)
        return end < now


class WorkOrderFilter(BaseModel):
    """Filter for listing work orders."""

    search: str | None = None
    status: WorkOrderStatus | None = None
    priority: WorkOrderPriority | None = None
    machine_id: str | None = None
    limit: int = Field(default=10, ge=1, le=500)
    offset: int = Field(default=0, ge=0)


class WorkOrderStats(BaseModel):
    """Work order counts per status."""

    total: int = 0
    planned: int = 0
    in_progress: int = 0
    completed: int = 0
    cancelled: int = 0
    high_priority: int = 0
    overdue: int = 0
