"""Entities describing the outcome of a BOM consumption run."""

from enum import Enum

from pydantic import BaseModel, Field


class ConsumptionPolicy(str, Enum):
    """How a consumption run treats BOM lines that cannot be covered."""

    SKIP = "skip"  # apply what is available, report the rest
    STRICT = "strict"  # all lines or nothing


class ConsumptionOutcome(str, Enum):
    """Per-line result of a consumption run."""

    APPLIED = "applied"
    SKIPPED_INSUFFICIENT_STOCK = "skipped_insufficient_stock"
    SKIPPED_MISSING_MATERIAL = "skipped_missing_material"


class ConsumptionLineResult(BaseModel):
    """What happened to one BOM line, with the stock before and after."""

    bom_item_id: str | None = None
    material_id: str
    material_code: str | None = None
    required_quantity: float
    stock_before: float | None = None
    stock_after: float | None = None
    outcome: ConsumptionOutcome
    movement_id: str | None = None


class ConsumptionReport(BaseModel):
    """Result of exploding a machine's BOM into OUT movements."""

    machine_id: str
    work_order_id: str | None = None
    quantity_produced: float
    policy: ConsumptionPolicy
    lines: list[ConsumptionLineResult] = Field(default_factory=list)

    @property
    def applied(self) -> list[ConsumptionLineResult]:
        return [line for line in self.lines if line.outcome == ConsumptionOutcome.APPLIED]

    @property
    def skipped(self) -> list[ConsumptionLineResult]:
        return [line for line in self.lines if line.outcome != ConsumptionOutcome.APPLIED]

    @property
    def movements_created(self) -> int:
        return len(self.applied)

    @property
    def is_complete(self) -> bool:
        """True when every BOM line was consumed."""
        return not self.skipped
