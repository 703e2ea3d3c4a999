"""
Core business logic services.

Layer-pure services that depend only on:
- stockroom/core/entities/*
- stockroom/core/interfaces/*
- stockroom/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from stockroom.core.services.bom_registry import BOMRegistry
from stockroom.core.services.consumption_engine import ConsumptionEngine
from stockroom.core.services.keyed_lock import KeyedLock
from stockroom.core.services.material_registry import MaterialRegistry
from stockroom.core.services.stock_ledger import (
    AppliedMovement,
    MovementRequest,
    StockLedger,
)
from stockroom.core.services.work_orders import (
    StatusChangeResult,
    WorkOrderService,
    compute_duration_hours,
)

__all__ = [
    # Locking
    "KeyedLock",
    # Ledger
    "StockLedger",
    "MovementRequest",
    "AppliedMovement",
    # Registries
    "MaterialRegistry",
    "BOMRegistry",
    # Consumption
    "ConsumptionEngine",
    # Work orders
    "WorkOrderService",
    "StatusChangeResult",
    "compute_duration_hours",
]
