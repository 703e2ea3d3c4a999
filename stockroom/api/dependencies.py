"""
Dependency injection container for FastAPI.

Provides service instances to route handlers. Tests replace these with
app.dependency_overrides.
"""

from fastapi import Request

from stockroom.application.services import (
    get_bom_registry,
    get_material_registry,
    get_stock_ledger,
    get_work_order_service,
)
from stockroom.application.use_cases import (
    ChangeWorkOrderStatusUseCase,
    RecordMovementUseCase,
    RegisterMaterialUseCase,
)
from stockroom.config import get_settings
from stockroom.core.services import (
    BOMRegistry,
    MaterialRegistry,
    StockLedger,
    WorkOrderService,
)


def get_performer(request: Request) -> str:
    """
    Identity recorded on movements and status changes.

    Taken from the user header set by the upstream auth proxy.
    """
    settings = get_settings()
    return request.headers.get(settings.api.user_header) or settings.api.default_performer


# Service dependencies
async def get_ledger() -> StockLedger:
    """Get stock ledger."""
    return await get_stock_ledger()


async def get_materials() -> MaterialRegistry:
    """Get material registry."""
    return await get_material_registry()


async def get_boms() -> BOMRegistry:
    """Get BOM registry."""
    return await get_bom_registry()


async def get_work_orders() -> WorkOrderService:
    """Get work order service."""
    return await get_work_order_service()


# Use case dependencies
def get_record_movement_use_case() -> RecordMovementUseCase:
    """Get record movement use case."""
    return RecordMovementUseCase()


def get_register_material_use_case() -> RegisterMaterialUseCase:
    """Get register material use case."""
    return RegisterMaterialUseCase()


def get_change_status_use_case() -> ChangeWorkOrderStatusUseCase:
    """Get change work order status use case."""
    return ChangeWorkOrderStatusUseCase()
