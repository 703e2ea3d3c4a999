"""Stock movement endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from stockroom.api.dependencies import (
    get_ledger,
    get_performer,
    get_record_movement_use_case,
)
from stockroom.application.dto.requests import RecordMovementRequest
from stockroom.application.dto.responses import (
    ErrorResponse,
    MovementListResponse,
    MovementStatsResponse,
    RecordMovementResponse,
    StockMovementResponse,
)
from stockroom.application.use_cases import RecordMovementUseCase
from stockroom.core.entities.inventory import MovementFilter, MovementType
from stockroom.core.services import StockLedger

router = APIRouter(prefix="/api/movements", tags=["movements"])


@router.post(
    "",
    response_model=RecordMovementResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def record_movement(
    request: RecordMovementRequest,
    performed_by: str = Depends(get_performer),
    use_case: RecordMovementUseCase = Depends(get_record_movement_use_case),
) -> RecordMovementResponse:
    """Record a manual IN or OUT movement."""
    result = await use_case.execute(request, performed_by=performed_by)
    return use_case.to_response(result)


@router.get("", response_model=MovementListResponse)
async def list_movements(
    search: str | None = None,
    type: MovementType | None = None,
    material_id: str | None = None,
    work_order_id: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    limit: int = Query(default=10, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    ledger: StockLedger = Depends(get_ledger),
) -> MovementListResponse:
    """Filtered movement history, most recent first."""
    movement_filter = MovementFilter(
        search=search,
        movement_type=type,
        material_id=material_id,
        work_order_id=work_order_id,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
        offset=offset,
    )
    movements, total = await ledger.list_movements(movement_filter)
    return MovementListResponse(
        movements=[StockMovementResponse.from_entity(m) for m in movements],
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(movements) < total,
    )


@router.get("/recent", response_model=list[StockMovementResponse])
async def recent_movements(
    limit: int = Query(default=10, ge=1, le=100),
    ledger: StockLedger = Depends(get_ledger),
) -> list[StockMovementResponse]:
    movements = await ledger.get_recent_movements(limit=limit)
    return [StockMovementResponse.from_entity(m) for m in movements]


@router.get("/stats/summary", response_model=MovementStatsResponse)
async def movement_stats(
    ledger: StockLedger = Depends(get_ledger),
) -> MovementStatsResponse:
    """IN/OUT totals for today and the current month."""
    return MovementStatsResponse.from_stats(await ledger.stats())


@router.get(
    "/{movement_id}",
    response_model=StockMovementResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_movement(
    movement_id: str,
    ledger: StockLedger = Depends(get_ledger),
) -> StockMovementResponse:
    return StockMovementResponse.from_entity(await ledger.get_movement(movement_id))
