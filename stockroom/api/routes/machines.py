"""Machine and bill of materials endpoints."""

from fastapi import APIRouter, Depends, Query, Response, status

from stockroom.api.dependencies import get_boms
from stockroom.application.dto.requests import (
    AddBOMItemRequest,
    CreateMachineRequest,
    UpdateBOMItemRequest,
    UpdateMachineRequest,
)
from stockroom.application.dto.responses import (
    BOMCostResponse,
    BOMItemResponse,
    BOMResponse,
    ErrorResponse,
    MachineDeletedResponse,
    MachineListResponse,
    MachineResponse,
)
from stockroom.core.entities.machine import Machine, MachineStatus
from stockroom.core.services import BOMRegistry

router = APIRouter(prefix="/api/machines", tags=["machines"])


@router.post(
    "",
    response_model=MachineResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_machine(
    request: CreateMachineRequest,
    registry: BOMRegistry = Depends(get_boms),
) -> MachineResponse:
    machine = await registry.create_machine(Machine(**request.model_dump()))
    return MachineResponse.from_entity(machine)


@router.get("", response_model=MachineListResponse)
async def list_machines(
    search: str | None = None,
    status: MachineStatus | None = None,
    category: str | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    registry: BOMRegistry = Depends(get_boms),
) -> MachineListResponse:
    machines = await registry.list_machines(
        limit=limit, offset=offset, search=search, status=status, category=category
    )
    return MachineListResponse(
        machines=[MachineResponse.from_entity(m) for m in machines],
        total=len(machines),
    )


@router.get("/categories/list", response_model=list[str])
async def list_categories(registry: BOMRegistry = Depends(get_boms)) -> list[str]:
    return await registry.list_categories()


@router.get(
    "/{machine_id}",
    response_model=MachineResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_machine(
    machine_id: str,
    registry: BOMRegistry = Depends(get_boms),
) -> MachineResponse:
    return MachineResponse.from_entity(await registry.get_machine(machine_id))


@router.put(
    "/{machine_id}",
    response_model=MachineResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_machine(
    machine_id: str,
    request: UpdateMachineRequest,
    registry: BOMRegistry = Depends(get_boms),
) -> MachineResponse:
    updated = await registry.update_machine(
        machine_id, request.model_dump(exclude_unset=True)
    )
    return MachineResponse.from_entity(updated)


@router.delete(
    "/{machine_id}",
    response_model=MachineDeletedResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_machine(
    machine_id: str,
    registry: BOMRegistry = Depends(get_boms),
) -> MachineDeletedResponse:
    """Delete a machine together with its BOM."""
    removed = await registry.delete_machine(machine_id)
    return MachineDeletedResponse(machine_id=machine_id, bom_items_removed=removed)


# --- BOM ---


@router.get(
    "/{machine_id}/bom",
    response_model=BOMResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_bom(
    machine_id: str,
    registry: BOMRegistry = Depends(get_boms),
) -> BOMResponse:
    """Ordered BOM lines of a machine."""
    items = await registry.get_bom(machine_id)
    return BOMResponse(
        machine_id=machine_id,
        items=[BOMItemResponse.from_entity(item) for item in items],
        total_cost=round(sum(item.line_cost for item in items), 4),
    )


@router.post(
    "/{machine_id}/bom",
    response_model=BOMItemResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def add_bom_item(
    machine_id: str,
    request: AddBOMItemRequest,
    registry: BOMRegistry = Depends(get_boms),
) -> BOMItemResponse:
    """Append a material to the machine's BOM."""
    item = await registry.add_item(
        machine_id,
        request.material_id,
        request.quantity,
        unit_price=request.unit_price,
        notes=request.notes,
    )
    return BOMItemResponse.from_entity(item)


@router.get(
    "/{machine_id}/bom/cost",
    response_model=BOMCostResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_bom_cost(
    machine_id: str,
    registry: BOMRegistry = Depends(get_boms),
) -> BOMCostResponse:
    items = await registry.get_bom(machine_id)
    return BOMCostResponse(
        machine_id=machine_id,
        line_count=len(items),
        total_cost=await registry.bom_cost(machine_id),
    )


@router.put(
    "/{machine_id}/bom/{item_id}",
    response_model=BOMItemResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_bom_item(
    machine_id: str,
    item_id: str,
    request: UpdateBOMItemRequest,
    registry: BOMRegistry = Depends(get_boms),
) -> BOMItemResponse:
    item = await registry.update_item(
        machine_id,
        item_id,
        quantity=request.quantity,
        unit_price=request.unit_price,
        notes=request.notes,
    )
    return BOMItemResponse.from_entity(item)


@router.delete(
    "/{machine_id}/bom/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def remove_bom_item(
    machine_id: str,
    item_id: str,
    registry: BOMRegistry = Depends(get_boms),
) -> Response:
    await registry.remove_item(machine_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
