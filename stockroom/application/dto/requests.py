"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from stockroom.core.entities.inventory import MovementType
from stockroom.core.entities.machine import MachineStatus
from stockroom.core.entities.work_order import WorkOrderPriority, WorkOrderStatus

# --- Materials ---


class CreateMaterialRequest(BaseModel):
    """Request to register a material."""

    code: str = Field(..., min_length=1, description="Unique material code")
    name: str = Field(..., min_length=1, description="Material name")
    description: str | None = Field(default=None, description="Free text description")
    category: str = Field(default="other", description="Material category")
    unit: str = Field(default="piece", description="Unit of measure")
    unit_price: float = Field(default=0.0, ge=0, description="Price per unit")
    min_stock_level: float = Field(default=0.0, ge=0, description="Critical threshold")
    max_stock_level: float = Field(default=0.0, ge=0, description="Target maximum")
    location: str = Field(default="Depo", description="Storage location")
    supplier: str | None = Field(default=None, description="Supplier name")
    opening_stock: float = Field(
        default=0.0,
        ge=0,
        description="Initial quantity, booked as an IN movement",
    )


class UpdateMaterialRequest(BaseModel):
    """Request to update material metadata.

    current_stock is accepted only so it can be rejected with a clear
    error: stock changes must go through movements.
    """

    code: str | None = Field(default=None, min_length=1, description="Material code")
    name: str | None = Field(default=None, min_length=1, description="Material name")
    description: str | None = Field(default=None, description="Description")
    category: str | None = Field(default=None, description="Category")
    unit: str | None = Field(default=None, description="Unit of measure")
    unit_price: float | None = Field(default=None, ge=0, description="Price per unit")
    min_stock_level: float | None = Field(default=None, ge=0, description="Critical threshold")
    max_stock_level: float | None = Field(default=None, ge=0, description="Target maximum")
    location: str | None = Field(default=None, description="Storage location")
    supplier: str | None = Field(default=None, description="Supplier name")
    current_stock: float | None = Field(
        default=None,
        description="Not editable; use POST /api/movements",
    )


# --- Movements ---


class RecordMovementRequest(BaseModel):
    """Request to record a manual stock movement."""

    model_config = ConfigDict(populate_by_name=True)

    material_id: str = Field(..., description="Material ID")
    movement_type: MovementType = Field(..., alias="type", description="IN or OUT")
    quantity: float = Field(..., gt=0, description="Quantity, always positive")
    reason: str = Field(default="", description="Why the stock changed")
    reference: str | None = Field(default=None, description="Delivery note, order number...")
    work_order_id: str | None = Field(default=None, description="Related work order")
    location: str | None = Field(
        default=None,
        description="Location override (defaults to the material's location)",
    )


# --- Machines / BOM ---


class CreateMachineRequest(BaseModel):
    """Request to create a machine."""

    code: str = Field(..., min_length=1, description="Unique machine code")
    name: str = Field(..., min_length=1, description="Machine name")
    description: str | None = Field(default=None, description="Description")
    category: str = Field(default="general", description="Machine category")
    location: str | None = Field(default=None, description="Installation location")
    status: MachineStatus = Field(default=MachineStatus.ACTIVE, description="Machine status")
    manufacturer: str | None = Field(default=None, description="Manufacturer")
    model: str | None = Field(default=None, description="Model")
    serial_number: str | None = Field(default=None, description="Serial number")
    installation_date: date | None = Field(default=None, description="Installation date")


class UpdateMachineRequest(BaseModel):
    """Request to update a machine."""

    code: str | None = Field(default=None, min_length=1)
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    category: str | None = None
    location: str | None = None
    status: MachineStatus | None = None
    manufacturer: str | None = None
    model: str | None = None
    serial_number: str | None = None
    installation_date: date | None = None


class AddBOMItemRequest(BaseModel):
    """Request to add a material to a machine's BOM."""

    material_id: str = Field(..., description="Material ID")
    quantity: float = Field(..., gt=0, description="Quantity per unit produced")
    unit_price: float | None = Field(
        default=None,
        ge=0,
        description="Price snapshot (defaults to the material's current price)",
    )
    notes: str | None = Field(default=None, description="Notes")


class UpdateBOMItemRequest(BaseModel):
    """Request to update a BOM line."""

    quantity: float | None = Field(default=None, gt=0, description="Quantity per unit")
    unit_price: float | None = Field(default=None, ge=0, description="Price snapshot")
    notes: str | None = Field(default=None, description="Notes")


# --- Work orders ---


class CreateWorkOrderRequest(BaseModel):
    """Request to create a work order."""

    machine_id: str = Field(..., description="Machine to produce")
    title: str = Field(..., min_length=1, description="Work order title")
    description: str | None = Field(default=None, description="Description")
    quantity: float | None = Field(
        default=None,
        gt=0,
        description="Units to produce (defaults to WORK_ORDER_DEFAULT_QUANTITY)",
    )
    priority: WorkOrderPriority = Field(default=WorkOrderPriority.MEDIUM)
    planned_start_date: datetime | None = Field(default=None)
    planned_end_date: datetime | None = Field(default=None)
    estimated_duration: float | None = Field(default=None, ge=0, description="Hours")
    assigned_to: str | None = Field(default=None, description="Assignee")


class UpdateWorkOrderRequest(BaseModel):
    """Request to update work order metadata (never its status)."""

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    machine_id: str | None = None
    quantity: float | None = Field(default=None, gt=0)
    priority: WorkOrderPriority | None = None
    planned_start_date: datetime | None = None
    planned_end_date: datetime | None = None
    estimated_duration: float | None = Field(default=None, ge=0)
    assigned_to: str | None = None


class ChangeWorkOrderStatusRequest(BaseModel):
    """Request to move a work order to another status."""

    status: WorkOrderStatus = Field(..., description="Target status")
