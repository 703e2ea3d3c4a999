"""
Service factory functions for dependency injection.

This module wires the SQLite stores to the core services. Use cases and
API dependencies import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from stockroom.config import get_settings
from stockroom.core.services import (
    BOMRegistry,
    ConsumptionEngine,
    MaterialRegistry,
    StockLedger,
    WorkOrderService,
)

if TYPE_CHECKING:
    from stockroom.core.interfaces import (
        ILedgerStore,
        IMachineStore,
        IMaterialStore,
        IWorkOrderStore,
    )


# Singleton service instances
_stock_ledger: StockLedger | None = None
_material_registry: MaterialRegistry | None = None
_bom_registry: BOMRegistry | None = None
_consumption_engine: ConsumptionEngine | None = None
_work_order_service: WorkOrderService | None = None


async def get_stock_ledger(
    material_store: "IMaterialStore | None" = None,
    ledger_store: "ILedgerStore | None" = None,
) -> StockLedger:
    """
    Get or create the StockLedger.

    The singleton owns the per-material lock registry, so every caller in
    the process must share it.
    """
    global _stock_ledger

    if _stock_ledger is not None and material_store is None and ledger_store is None:
        return _stock_ledger

    # Lazy import infrastructure to avoid circular imports
    from stockroom.infrastructure.storage.sqlite import get_ledger_store, get_material_store

    ledger = StockLedger(
        material_store=material_store or await get_material_store(),
        ledger_store=ledger_store or await get_ledger_store(),
    )

    if material_store is None and ledger_store is None:
        _stock_ledger = ledger

    return ledger


async def get_material_registry(
    material_store: "IMaterialStore | None" = None,
    ledger: StockLedger | None = None,
) -> MaterialRegistry:
    """Get or create the MaterialRegistry."""
    global _material_registry

    if _material_registry is not None and material_store is None and ledger is None:
        return _material_registry

    from stockroom.infrastructure.storage.sqlite import get_material_store

    registry = MaterialRegistry(
        material_store=material_store or await get_material_store(),
        ledger=ledger or await get_stock_ledger(),
    )

    if material_store is None and ledger is None:
        _material_registry = registry

    return registry


async def get_bom_registry(
    machine_store: "IMachineStore | None" = None,
    material_store: "IMaterialStore | None" = None,
) -> BOMRegistry:
    """Get or create the BOMRegistry."""
    global _bom_registry

    if _bom_registry is not None and machine_store is None and material_store is None:
        return _bom_registry

    from stockroom.infrastructure.storage.sqlite import get_machine_store, get_material_store

    registry = BOMRegistry(
        machine_store=machine_store or await get_machine_store(),
        material_store=material_store or await get_material_store(),
    )

    if machine_store is None and material_store is None:
        _bom_registry = registry

    return registry


async def get_consumption_engine(
    bom_registry: BOMRegistry | None = None,
    ledger: StockLedger | None = None,
) -> ConsumptionEngine:
    """
    Get or create the ConsumptionEngine.

    Policy, scaling and movement reason come from CONSUMPTION_* settings.
    """
    global _consumption_engine

    if _consumption_engine is not None and bom_registry is None and ledger is None:
        return _consumption_engine

    settings = get_settings().consumption
    engine = ConsumptionEngine(
        bom_registry=bom_registry or await get_bom_registry(),
        ledger=ledger or await get_stock_ledger(),
        policy=settings.policy,
        scale_by_quantity=settings.scale_by_quantity,
        reason=settings.reason,
    )

    if bom_registry is None and ledger is None:
        _consumption_engine = engine

    return engine


async def get_work_order_service(
    work_order_store: "IWorkOrderStore | None" = None,
    consumption_engine: ConsumptionEngine | None = None,
) -> WorkOrderService:
    """Get or create the WorkOrderService."""
    global _work_order_service

    if (
        _work_order_service is not None
        and work_order_store is None
        and consumption_engine is None
    ):
        return _work_order_service

    from stockroom.infrastructure.storage.sqlite import get_work_order_store

    settings = get_settings().work_order
    service = WorkOrderService(
        work_order_store=work_order_store or await get_work_order_store(),
        bom_registry=await get_bom_registry(),
        consumption_engine=consumption_engine or await get_consumption_engine(),
        order_number_prefix=settings.order_number_prefix,
        default_quantity=settings.default_quantity,
        duration_rounding=settings.duration_rounding,
    )

    if work_order_store is None and consumption_engine is None:
        _work_order_service = service

    return service


def reset_services() -> None:
    """
    Reset all singleton service instances.

    Useful for testing or when configuration changes.
    """
    global _stock_ledger
    global _material_registry
    global _bom_registry
    global _consumption_engine
    global _work_order_service

    _stock_ledger = None
    _material_registry = None
    _bom_registry = None
    _consumption_engine = None
    _work_order_service = None


__all__ = [
    # Factory functions
    "get_stock_ledger",
    "get_material_registry",
    "get_bom_registry",
    "get_consumption_engine",
    "get_work_order_service",
    # Reset
    "reset_services",
]
