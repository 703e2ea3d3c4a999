"""Stock ledger entities."""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Quantities and stock levels are kept at this many decimals
QUANTITY_PRECISION = 6


def quantize(value: float) -> float:
    """Round a quantity or stock level to QUANTITY_PRECISION decimals."""
    return round(value, QUANTITY_PRECISION)


class MovementType(str, Enum):
    """Types of stock movements."""

    IN = "IN"
    OUT = "OUT"


class StockMovement(BaseModel):
    """Immutable record of a single stock change."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    material_id: str
    material_code: str | None = None
    material_name: str | None = None
    movement_type: MovementType
    quantity: float = Field(..., gt=0)  # always positive, sign comes from the type
    unit: str | None = None
    unit_price: float = Field(default=0.0, ge=0)
    total_price: float = 0.0
    reason: str = ""
    reference: str | None = None  # e.g. work order number, delivery note
    location: str | None = None
    performed_by: str | None = None
    work_order_id: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="before")
    @classmethod
    def compute_total_price(cls, data: Any) -> Any:
        """total_price = quantity x unit_price unless given explicitly (rows from storage)."""
        if isinstance(data, dict) and data.get("total_price") is None:
            quantity = float(data.get("quantity") or 0)
            unit_price = float(data.get("unit_price") or 0)
            data = {**data, "total_price": round(quantity * unit_price, 4)}
        return data

    @property
    def signed_quantity(self) -> float:
        """+quantity for IN, -quantity for OUT."""
        if self.movement_type == MovementType.IN:
            return self.quantity
        return -self.quantity


class MovementFilter(BaseModel):
    """Filter for listing ledger movements."""

    search: str | None = None
    movement_type: MovementType | None = None
    material_id: str | None = None
    work_order_id: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    limit: int = Field(default=10, ge=1, le=500)
    offset: int = Field(default=0, ge=0)


@dataclass
class LedgerBalance:
    """Comparison between a material's stock and the sum of its movements."""

    material_id: str
    current_stock: float
    total_in: float
    total_out: float
    movement_count: int

    @property
    def ledger_stock(self) -> float:
        return self.total_in - self.total_out

    @property
    def is_consistent(self) -> bool:
        return abs(self.ledger_stock - self.current_stock) < 1e-6


class MovementTotals(BaseModel):
    """IN and OUT quantity summed over a period."""

    inbound: float = 0
    outbound: float = 0
    count: int = 0


class MovementStats(BaseModel):
    """Movement totals for the current UTC day and month."""

    today: MovementTotals = Field(default_factory=MovementTotals)
    month: MovementTotals = Field(default_factory=MovementTotals)
    total_count: int = 0
