"""Material registry endpoints."""

from fastapi import APIRouter, Depends, Query, Response, status

from stockroom.api.dependencies import (
    get_ledger,
    get_materials,
    get_performer,
    get_register_material_use_case,
)
from stockroom.application.dto.requests import CreateMaterialRequest, UpdateMaterialRequest
from stockroom.application.dto.responses import (
    ErrorResponse,
    LedgerBalanceResponse,
    MaterialListResponse,
    MaterialResponse,
    StockMovementResponse,
)
from stockroom.application.use_cases import RegisterMaterialUseCase
from stockroom.core.entities.material import StockStatus
from stockroom.core.services import MaterialRegistry, StockLedger

router = APIRouter(prefix="/api/materials", tags=["materials"])


@router.post(
    "",
    response_model=MaterialResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_material(
    request: CreateMaterialRequest,
    performed_by: str = Depends(get_performer),
    use_case: RegisterMaterialUseCase = Depends(get_register_material_use_case),
) -> MaterialResponse:
    """Register a material. opening_stock is booked as an IN movement."""
    result = await use_case.execute(request, performed_by=performed_by)
    return use_case.to_response(result)


@router.get("", response_model=MaterialListResponse)
async def list_materials(
    search: str | None = None,
    category: str | None = None,
    stock_status: StockStatus | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    registry: MaterialRegistry = Depends(get_materials),
) -> MaterialListResponse:
    """List materials with search, category and stock status filters."""
    items, total = await registry.list_materials(
        limit=limit,
        offset=offset,
        search=search,
        category=category,
        stock_status=stock_status,
    )
    return MaterialListResponse(
        materials=[MaterialResponse.from_entity(m) for m in items],
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(items) < total,
    )


@router.get("/categories/list", response_model=list[str])
async def list_categories(
    registry: MaterialRegistry = Depends(get_materials),
) -> list[str]:
    return await registry.list_categories()


@router.get(
    "/{material_id}",
    response_model=MaterialResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_material(
    material_id: str,
    registry: MaterialRegistry = Depends(get_materials),
) -> MaterialResponse:
    return MaterialResponse.from_entity(await registry.get(material_id))


@router.put(
    "/{material_id}",
    response_model=MaterialResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_material(
    material_id: str,
    request: UpdateMaterialRequest,
    registry: MaterialRegistry = Depends(get_materials),
) -> MaterialResponse:
    """Update material metadata. Stock cannot be edited here."""
    updated = await registry.update(material_id, request.model_dump(exclude_unset=True))
    return MaterialResponse.from_entity(updated)


@router.delete(
    "/{material_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_material(
    material_id: str,
    registry: MaterialRegistry = Depends(get_materials),
) -> Response:
    """Delete a material that no BOM item or movement references."""
    await registry.delete(material_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{material_id}/movements",
    response_model=list[StockMovementResponse],
    responses={404: {"model": ErrorResponse}},
)
async def get_material_movements(
    material_id: str,
    limit: int = Query(default=100, ge=1, le=500),
    ledger: StockLedger = Depends(get_ledger),
) -> list[StockMovementResponse]:
    """Movements of one material, most recent first."""
    movements = await ledger.get_movements_for_material(material_id, limit=limit)
    return [StockMovementResponse.from_entity(m) for m in movements]


@router.get(
    "/{material_id}/balance",
    response_model=LedgerBalanceResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_material_balance(
    material_id: str,
    ledger: StockLedger = Depends(get_ledger),
) -> LedgerBalanceResponse:
    """Stock compared with the sum of the material's ledger."""
    balance = await ledger.verify_consistency(material_id)
    return LedgerBalanceResponse.from_balance(balance)
