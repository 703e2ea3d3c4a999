"""Core domain entities."""

from stockroom.core.entities.consumption import (
    ConsumptionLineResult,
    ConsumptionOutcome,
    ConsumptionPolicy,
    ConsumptionReport,
)
from stockroom.core.entities.inventory import (
    LedgerBalance,
    MovementFilter,
    MovementStats,
    MovementTotals,
    MovementType,
    StockMovement,
)
from stockroom.core.entities.machine import BOMItem, Machine, MachineStatus
from stockroom.core.entities.material import Material, StockStatus
from stockroom.core.entities.work_order import (
    ALLOWED_TRANSITIONS,
    WorkOrder,
    WorkOrderFilter,
    WorkOrderPriority,
    WorkOrderStats,
    WorkOrderStatus,
)

__all__ = [
    # Material
    "Material",
    "StockStatus",
    # Ledger
    "MovementType",
    "StockMovement",
    "MovementFilter",
    "LedgerBalance",
    "MovementStats",
    "MovementTotals",
    # Machine / BOM
    "Machine",
    "MachineStatus",
    "BOMItem",
    # Work order
    "WorkOrder",
    "WorkOrderStatus",
    "WorkOrderPriority",
    "WorkOrderFilter",
    "WorkOrderStats",
    "ALLOWED_TRANSITIONS",
    # Consumption
    "ConsumptionPolicy",
    "ConsumptionOutcome",
    "ConsumptionLineResult",
    "ConsumptionReport",
]
