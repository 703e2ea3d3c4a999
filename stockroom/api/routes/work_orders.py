"""Work order endpoints."""

from fastapi import APIRouter, Depends, Query, Response, status

from stockroom.api.dependencies import (
    get_change_status_use_case,
    get_performer,
    get_work_orders,
)
from stockroom.application.dto.requests import (
    ChangeWorkOrderStatusRequest,
    CreateWorkOrderRequest,
    UpdateWorkOrderRequest,
)
from stockroom.application.dto.responses import (
    ErrorResponse,
    WorkOrderListResponse,
    WorkOrderResponse,
    WorkOrderStatsResponse,
    WorkOrderStatusResponse,
)
from stockroom.application.use_cases import ChangeWorkOrderStatusUseCase
from stockroom.core.entities.work_order import (
    WorkOrderFilter,
    WorkOrderPriority,
    WorkOrderStatus,
)
from stockroom.core.services import WorkOrderService

router = APIRouter(prefix="/api/work-orders", tags=["work-orders"])


@router.post(
    "",
    response_model=WorkOrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_work_order(
    request: CreateWorkOrderRequest,
    performed_by: str = Depends(get_performer),
    service: WorkOrderService = Depends(get_work_orders),
) -> WorkOrderResponse:
    """Create a PLANNED work order for a machine."""
    work_order = await service.create(
        **request.model_dump(),
        created_by=performed_by,
    )
    return WorkOrderResponse.from_entity(work_order)


@router.get("", response_model=WorkOrderListResponse)
async def list_work_orders(
    search: str | None = None,
    status: WorkOrderStatus | None = None,
    priority: WorkOrderPriority | None = None,
    machine_id: str | None = None,
    limit: int = Query(default=10, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    service: WorkOrderService = Depends(get_work_orders),
) -> WorkOrderListResponse:
    """Work orders, newest first."""
    work_order_filter = WorkOrderFilter(
        search=search,
        status=status,
        priority=priority,
        machine_id=machine_id,
        limit=limit,
        offset=offset,
    )
    work_orders, total = await service.list_work_orders(work_order_filter)
    return WorkOrderListResponse(
        work_orders=[WorkOrderResponse.from_entity(w) for w in work_orders],
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(work_orders) < total,
    )


@router.get("/stats/summary", response_model=WorkOrderStatsResponse)
async def work_order_stats(
    service: WorkOrderService = Depends(get_work_orders),
) -> WorkOrderStatsResponse:
    return WorkOrderStatsResponse.from_stats(await service.stats())


@router.get(
    "/{work_order_id}",
    response_model=WorkOrderResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_work_order(
    work_order_id: str,
    service: WorkOrderService = Depends(get_work_orders),
) -> WorkOrderResponse:
    return WorkOrderResponse.from_entity(await service.get(work_order_id))


@router.put(
    "/{work_order_id}",
    response_model=WorkOrderResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_work_order(
    work_order_id: str,
    request: UpdateWorkOrderRequest,
    service: WorkOrderService = Depends(get_work_orders),
) -> WorkOrderResponse:
    """Update metadata. Status changes go through PATCH /status."""
    updated = await service.update(work_order_id, request.model_dump(exclude_unset=True))
    return WorkOrderResponse.from_entity(updated)


@router.patch(
    "/{work_order_id}/status",
    response_model=WorkOrderStatusResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def change_work_order_status(
    work_order_id: str,
    request: ChangeWorkOrderStatusRequest,
    performed_by: str = Depends(get_performer),
    use_case: ChangeWorkOrderStatusUseCase = Depends(get_change_status_use_case),
) -> WorkOrderStatusResponse:
    """
    Move a work order through its lifecycle.

    Completing an order consumes the machine's BOM and returns the
    consumption report alongside the order.
    """
    result = await use_case.execute(work_order_id, request, performed_by=performed_by)
    return use_case.to_response(result)


@router.delete(
    "/{work_order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_work_order(
    work_order_id: str,
    service: WorkOrderService = Depends(get_work_orders),
) -> Response:
    await service.delete(work_order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
