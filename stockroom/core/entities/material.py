"""
Material domain entity.

A material is a stocked item consumed by machines. Its current stock is
owned by the stock ledger and only changes through movements.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

# Stock above the minimum but under this share of the maximum is "low"
LOW_STOCK_RATIO = 0.3


class StockStatus(str, Enum):
    """Stock level classification against the material thresholds."""

    CRITICAL = "critical"
    LOW = "low"
    NORMAL = "normal"


class Material(BaseModel):
    """
    A stocked material.

    Carries identity, pricing, thresholds and the current stock count.
    """

    id: str | None = None
    code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str | None = None
    category: str = "other"
    unit: str = "piece"
    unit_price: float = Field(default=0.0, ge=0)
    current_stock: float = Field(default=0.0, ge=0)
    min_stock_level: float = Field(default=0.0, ge=0)
    max_stock_level: float = Field(default=0.0, ge=0)
    location: str = "Depo"
    supplier: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def normalize_code(self) -> "Material":
        """Codes are compared case-insensitively, store them upper-cased."""
        self.code = self.code.strip().upper()
        return self

    @property
    def stock_status(self) -> StockStatus:
        """Classify current stock against the min/max thresholds."""
        if self.current_stock <= self.min_stock_level:
            return StockStatus.CRITICAL
        if self.max_stock_level > 0 and (
            self.current_stock / self.max_stock_level < LOW_STOCK_RATIO
        ):
            return StockStatus.LOW
        return StockStatus.NORMAL

    @property
    def stock_value(self) -> float:
        """Value of the stock on hand at the current unit price."""
        return self.current_stock * self.unit_price
