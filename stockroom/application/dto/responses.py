"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from stockroom.core.entities.consumption import ConsumptionReport
from stockroom.core.entities.inventory import (
    LedgerBalance,
    MovementStats,
    MovementTotals,
    StockMovement,
)
from stockroom.core.entities.machine import BOMItem, Machine
from stockroom.core.entities.material import Material
from stockroom.core.entities.work_order import WorkOrder, WorkOrderStats


class ProviderHealthResponse(BaseModel):
    """Health status of a backing component."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ProviderHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. MATERIAL_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)


class PaginatedResponse(BaseModel):
    """Base for paginated responses."""

    total: int
    limit: int
    offset: int
    has_more: bool


# --- Materials ---


class MaterialResponse(BaseModel):
    """Material with its derived stock status."""

    id: str
    code: str
    name: str
    description: str | None = None
    category: str
    unit: str
    unit_price: float
    current_stock: float
    min_stock_level: float
    max_stock_level: float
    location: str
    supplier: str | None = None
    stock_status: str
    stock_value: float
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, material: Material) -> "MaterialResponse":
        return cls(
            **material.model_dump(),
            stock_status=material.stock_status.value,
            stock_value=round(material.stock_value, 4),
        )


class MaterialListResponse(PaginatedResponse):
    """Paginated list of materials."""

    materials: list[MaterialResponse]


class LedgerBalanceResponse(BaseModel):
    """Stock compared with the sum of the material's ledger."""

    material_id: str
    current_stock: float
    total_in: float
    total_out: float
    ledger_stock: float
    movement_count: int
    is_consistent: bool

    @classmethod
    def from_balance(cls, balance: LedgerBalance) -> "LedgerBalanceResponse":
        return cls(
            material_id=balance.material_id,
            current_stock=balance.current_stock,
            total_in=balance.total_in,
            total_out=balance.total_out,
            ledger_stock=balance.ledger_stock,
            movement_count=balance.movement_count,
            is_consistent=balance.is_consistent,
        )


# --- Movements ---


class StockMovementResponse(BaseModel):
    """Stock movement response DTO."""

    id: str
    material_id: str
    material_code: str | None = None
    material_name: str | None = None
    type: str
    quantity: float
    unit: str | None = None
    unit_price: float
    total_price: float
    reason: str
    reference: str | None = None
    location: str | None = None
    performed_by: str | None = None
    work_order_id: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, movement: StockMovement) -> "StockMovementResponse":
        data = movement.model_dump(exclude={"movement_type"})
        return cls(**data, type=movement.movement_type.value)


class RecordMovementResponse(BaseModel):
    """A recorded movement and the material's stock around it."""

    movement: StockMovementResponse
    stock_before: float
    stock_after: float


class MovementListResponse(PaginatedResponse):
    """Paginated list of movements."""

    movements: list[StockMovementResponse]


class MovementTotalsResponse(BaseModel):
    inbound: float
    outbound: float
    count: int

    @classmethod
    def from_totals(cls, totals: MovementTotals) -> "MovementTotalsResponse":
        return cls(**totals.model_dump())


class MovementStatsResponse(BaseModel):
    """Movement totals for today and this month (UTC)."""

    today: MovementTotalsResponse
    month: MovementTotalsResponse
    total_count: int

    @classmethod
    def from_stats(cls, stats: MovementStats) -> "MovementStatsResponse":
        return cls(
            today=MovementTotalsResponse.from_totals(stats.today),
            month=MovementTotalsResponse.from_totals(stats.month),
            total_count=stats.total_count,
        )


# --- Machines / BOM ---


class MachineResponse(BaseModel):
    """Machine response DTO."""

    id: str
    code: str
    name: str
    description: str | None = None
    category: str
    location: str | None = None
    status: str
    manufacturer: str | None = None
    model: str | None = None
    serial_number: str | None = None
    installation_date: date | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, machine: Machine) -> "MachineResponse":
        return cls(**machine.model_dump(mode="json"))


class MachineListResponse(BaseModel):
    """List of machines."""

    machines: list[MachineResponse]
    total: int


class BOMItemResponse(BaseModel):
    """One BOM line."""

    id: str
    machine_id: str
    material_id: str
    material_code: str | None = None
    material_name: str | None = None
    quantity: float
    unit: str | None = None
    unit_price: float
    line_cost: float
    notes: str | None = None
    position: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, item: BOMItem) -> "BOMItemResponse":
        return cls(**item.model_dump(), line_cost=round(item.line_cost, 4))


class BOMResponse(BaseModel):
    """Ordered BOM of a machine."""

    machine_id: str
    items: list[BOMItemResponse]
    total_cost: float


class BOMCostResponse(BaseModel):
    """Unit cost of a machine from its BOM price snapshots."""

    machine_id: str
    line_count: int
    total_cost: float


class MachineDeletedResponse(BaseModel):
    """Result of deleting a machine."""

    machine_id: str
    bom_items_removed: int


# --- Work orders ---


class WorkOrderResponse(BaseModel):
    """Work order response DTO."""

    id: str
    order_number: str
    title: str
    description: str | None = None
    machine_id: str
    machine_name: str | None = None
    quantity: float
    status: str
    priority: str
    planned_start_date: datetime | None = None
    planned_end_date: datetime | None = None
    actual_start_date: datetime | None = None
    actual_end_date: datetime | None = None
    estimated_duration: float | None = None
    actual_duration: int | None = None
    created_by: str | None = None
    assigned_to: str | None = None
    is_overdue: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, work_order: WorkOrder) -> "WorkOrderResponse":
        return cls(
            **work_order.model_dump(mode="json"),
            is_overdue=work_order.is_overdue(),
        )


class WorkOrderListResponse(PaginatedResponse):
    """Paginated list of work orders."""

    work_orders: list[WorkOrderResponse]


class ConsumptionLineResponse(BaseModel):
    """Outcome of one BOM line."""

    bom_item_id: str | None = None
    material_id: str
    material_code: str | None = None
    required_quantity: float
    stock_before: float | None = None
    stock_after: float | None = None
    outcome: str
    movement_id: str | None = None


class ConsumptionReportResponse(BaseModel):
    """Consumption run triggered by a completion."""

    machine_id: str
    work_order_id: str | None = None
    quantity_produced: float
    policy: str
    lines: list[ConsumptionLineResponse]
    movements_created: int
    skipped: int
    is_complete: bool

    @classmethod
    def from_report(cls, report: ConsumptionReport) -> "ConsumptionReportResponse":
        return cls(
            machine_id=report.machine_id,
            work_order_id=report.work_order_id,
            quantity_produced=report.quantity_produced,
            policy=report.policy.value,
            lines=[
                ConsumptionLineResponse(**line.model_dump(mode="json"))
                for line in report.lines
            ],
            movements_created=report.movements_created,
            skipped=len(report.skipped),
            is_complete=report.is_complete,
        )


class WorkOrderStatusResponse(BaseModel):
    """Work order after a status change, with consumption on completion."""

    work_order: WorkOrderResponse
    consumption: ConsumptionReportResponse | None = None


class WorkOrderStatsResponse(BaseModel):
    """Work order counts."""

    total: int
    planned: int
    in_progress: int
    completed: int
    cancelled: int
    high_priority: int
    overdue: int

    @classmethod
    def from_stats(cls, stats: WorkOrderStats) -> "WorkOrderStatsResponse":
        return cls(**stats.model_dump())
