"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection
"""

from stockroom.application.services import (
    get_bom_registry,
    get_consumption_engine,
    get_material_registry,
    get_stock_ledger,
    get_work_order_service,
    reset_services,
)
from stockroom.application.use_cases import (
    ChangeWorkOrderStatusUseCase,
    RecordMovementUseCase,
    RegisterMaterialUseCase,
)

__all__ = [
    # Use Cases
    "RecordMovementUseCase",
    "RegisterMaterialUseCase",
    "ChangeWorkOrderStatusUseCase",
    # Service factories
    "get_stock_ledger",
    "get_material_registry",
    "get_bom_registry",
    "get_consumption_engine",
    "get_work_order_service",
    "reset_services",
]
