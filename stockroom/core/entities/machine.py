"""Machine and Bill of Materials entities."""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator


class MachineStatus(str, Enum):
    """Operational status of a machine."""

    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    INACTIVE = "inactive"


class Machine(BaseModel):
    """A machine that is produced from a bill of materials."""

    id: str | None = None
    code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str | None = None
    category: str = "general"
    location: str | None = None
    status: MachineStatus = MachineStatus.ACTIVE
    manufacturer: str | None = None
    model: str | None = None
    serial_number: str | None = None
    installation_date: date | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def normalize_code(self) -> "Machine":
        self.code = self.code.strip().upper()
        return self


class BOMItem(BaseModel):
    """
    One line of a machine's bill of materials.

    quantity is the amount of the material needed to produce one unit
    of the machine. unit_price is a display snapshot taken when the
    line was added and does not follow later material price changes.
    """

    id: str | None = None
    machine_id: str
    material_id: str
    material_code: str | None = None
    material_name: str | None = None
    quantity: float = Field(..., gt=0)
    unit: str | None = None
    unit_price: float = Field(default=0.0, ge=0)
    notes: str | None = None
    position: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def line_cost(self) -> float:
        return self.quantity * self.unit_price
