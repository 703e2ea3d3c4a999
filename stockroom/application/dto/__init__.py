"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from stockroom.application.dto.requests import (
    AddBOMItemRequest,
    ChangeWorkOrderStatusRequest,
    CreateMachineRequest,
    CreateMaterialRequest,
    CreateWorkOrderRequest,
    RecordMovementRequest,
    UpdateBOMItemRequest,
    UpdateMachineRequest,
    UpdateMaterialRequest,
    UpdateWorkOrderRequest,
)
from stockroom.application.dto.responses import (
    BOMCostResponse,
    BOMItemResponse,
    BOMResponse,
    ConsumptionLineResponse,
    ConsumptionReportResponse,
    ErrorResponse,
    HealthResponse,
    LedgerBalanceResponse,
    MachineDeletedResponse,
    MachineListResponse,
    MachineResponse,
    MaterialListResponse,
    MaterialResponse,
    MovementListResponse,
    MovementStatsResponse,
    MovementTotalsResponse,
    PaginatedResponse,
    ProviderHealthResponse,
    RecordMovementResponse,
    StockMovementResponse,
    WorkOrderListResponse,
    WorkOrderResponse,
    WorkOrderStatsResponse,
    WorkOrderStatusResponse,
)

__all__ = [
    # Requests
    "CreateMaterialRequest",
    "UpdateMaterialRequest",
    "RecordMovementRequest",
    "CreateMachineRequest",
    "UpdateMachineRequest",
    "AddBOMItemRequest",
    "UpdateBOMItemRequest",
    "CreateWorkOrderRequest",
    "UpdateWorkOrderRequest",
    "ChangeWorkOrderStatusRequest",
    # Responses
    "MaterialResponse",
    "MaterialListResponse",
    "LedgerBalanceResponse",
    "StockMovementResponse",
    "RecordMovementResponse",
    "MovementListResponse",
    "MovementStatsResponse",
    "MovementTotalsResponse",
    "MachineResponse",
    "MachineListResponse",
    "MachineDeletedResponse",
    "BOMItemResponse",
    "BOMResponse",
    "BOMCostResponse",
    "WorkOrderResponse",
    "WorkOrderListResponse",
    "WorkOrderStatusResponse",
    "WorkOrderStatsResponse",
    "ConsumptionLineResponse",
    "ConsumptionReportResponse",
    "HealthResponse",
    "ProviderHealthResponse",
    "ErrorResponse",
    "PaginatedResponse",
]
