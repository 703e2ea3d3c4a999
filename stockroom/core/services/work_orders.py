"""
Work order service.

Creation, editing and the status lifecycle of work orders. Completing a
work order triggers BOM consumption for its quantity.

Status changes of one work order are serialized by a keyed lock and
persisted compare-and-set on the prior status, so a second completion of
the same order fails as an invalid transition instead of consuming twice.
"""

import asyncio
import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import ValidationError as PydanticValidationError

from stockroom.config import get_logger
from stockroom.core.entities.consumption import ConsumptionReport
from stockroom.core.entities.work_order import (
    WorkOrder,
    WorkOrderFilter,
    WorkOrderPriority,
    WorkOrderStats,
    WorkOrderStatus,
)
from stockroom.core.exceptions import (
    CannotDeleteActiveWorkOrderError,
    InvalidTransitionError,
    ValidationError,
    WorkOrderNotFoundError,
)
from stockroom.core.interfaces.work_order_store import IWorkOrderStore
from stockroom.core.services.bom_registry import BOMRegistry
from stockroom.core.services.consumption_engine import ConsumptionEngine
from stockroom.core.services.keyed_lock import KeyedLock

logger = get_logger(__name__)

DurationRounding = Literal["round", "truncate"]

# Managed by change_status only
_STATUS_FIELDS = frozenset(
    {
        "status",
        "actual_start_date",
        "actual_end_date",
        "actual_duration",
    }
)
_READ_ONLY_FIELDS = frozenset({"id", "order_number", "created_at", "updated_at"})


def _utcnow() -> datetime:
    return datetime.now(UTC)


def compute_duration_hours(
    start: datetime, end: datetime, rounding: DurationRounding = "round"
) -> int:
    """
    Whole hours between start and end.

    "round" rounds half up (5h30m -> 6), "truncate" drops the fraction.
    Negative spans count as zero.
    """
    if start.tzinfo is None:
        start = start.replace(tzinfo=UTC)
    if end.tzinfo is None:
        end = end.replace(tzinfo=UTC)
    hours = max((end - start).total_seconds() / 3600, 0.0)
    if rounding == "truncate":
        return math.floor(hours)
    return math.floor(hours + 0.5)


@dataclass
class StatusChangeResult:
    """Outcome of a status change; consumption is set on completion only."""

    work_order: WorkOrder
    consumption: ConsumptionReport | None = None


class WorkOrderService:
    """Work order CRUD and status state machine."""

    def __init__(
        self,
        work_order_store: IWorkOrderStore,
        bom_registry: BOMRegistry,
        consumption_engine: ConsumptionEngine,
        locks: KeyedLock | None = None,
        order_number_prefix: str = "WO",
        default_quantity: float = 1.0,
        duration_rounding: DurationRounding = "round",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = work_order_store
        self._bom_registry = bom_registry
        self._consumption = consumption_engine
        self._locks = locks or KeyedLock()
        self._prefix = order_number_prefix
        self._default_quantity = default_quantity
        self._rounding = duration_rounding
        self._clock = clock
        self._numbering_lock = asyncio.Lock()

    async def create(
        self,
        machine_id: str,
        title: str,
        quantity: float | None = None,
        description: str | None = None,
        priority: WorkOrderPriority = WorkOrderPriority.MEDIUM,
        planned_start_date: datetime | None = None,
        planned_end_date: datetime | None = None,
        estimated_duration: float | None = None,
        assigned_to: str | None = None,
        created_by: str | None = None,
    ) -> WorkOrder:
        """
        Create a PLANNED work order for a machine.

        Raises:
            MachineNotFoundError: unknown machine
            ValidationError: empty title or non-positive quantity
        """
        machine = await self._bom_registry.get_machine(machine_id)

        try:
            draft = WorkOrder(
                title=title,
                description=description,
                machine_id=machine_id,
                machine_name=machine.name,
                quantity=self._default_quantity if quantity is None else quantity,
                priority=priority,
                planned_start_date=planned_start_date,
                planned_end_date=planned_end_date,
                estimated_duration=estimated_duration,
                assigned_to=assigned_to,
                created_by=created_by,
            )
        except PydanticValidationError as e:
            error = e.errors()[0]
            raise ValidationError(str(error["loc"][0]), error["msg"]) from e

        async with self._numbering_lock:
            draft.order_number = await self._store.next_order_number(self._prefix)
            created = await self._store.create_work_order(draft)

        logger.info(
            "work_order_created",
            work_order_id=created.id,
            order_number=created.order_number,
            machine_id=machine_id,
            quantity=created.quantity,
        )
        return created

    async def get(self, work_order_id: str) -> WorkOrder:
        work_order = await self._store.get_work_order(work_order_id)
        if work_order is None:
            raise WorkOrderNotFoundError(work_order_id)
        return work_order

    async def list_work_orders(
        self, work_order_filter: WorkOrderFilter
    ) -> tuple[list[WorkOrder], int]:
        return await self._store.list_work_orders(work_order_filter)

    async def update(self, work_order_id: str, changes: dict[str, Any]) -> WorkOrder:
        """
        Update work order metadata.

        Status and actual dates are owned by change_status.
        """
        blocked = _STATUS_FIELDS.intersection(changes)
        if blocked:
            field = sorted(blocked)[0]
            raise ValidationError(field, "use the status endpoint to change it")

        async with self._locks.acquire(work_order_id):
            work_order = await self.get(work_order_id)
            updates = {k: v for k, v in changes.items() if k not in _READ_ONLY_FIELDS}

            if updates.get("machine_id") and updates["machine_id"] != work_order.machine_id:
                machine = await self._bom_registry.get_machine(updates["machine_id"])
                updates["machine_name"] = machine.name

            try:
                merged = WorkOrder.model_validate({**work_order.model_dump(), **updates})
            except PydanticValidationError as e:
                error = e.errors()[0]
                raise ValidationError(str(error["loc"][0]), error["msg"]) from e
            merged.updated_at = self._clock()
            updated = await self._store.update_work_order(merged)

        logger.info(
            "work_order_updated", work_order_id=work_order_id, fields=sorted(updates)
        )
        return updated

    async def delete(self, work_order_id: str) -> None:
        """
        Delete a work order.

        Raises:
            CannotDeleteActiveWorkOrderError: order is IN_PROGRESS
        """
        async with self._locks.acquire(work_order_id):
            work_order = await self.get(work_order_id)
            if work_order.status == WorkOrderStatus.IN_PROGRESS:
                raise CannotDeleteActiveWorkOrderError(work_order_id)
            await self._store.delete_work_order(work_order_id)
        logger.info("work_order_deleted", work_order_id=work_order_id)

    async def stats(self) -> WorkOrderStats:
        return await self._store.get_stats(self._clock())

    async def change_status(
        self,
        work_order_id: str,
        new_status: WorkOrderStatus | str,
        performed_by: str | None = None,
    ) -> StatusChangeResult:
        """
        Move a work order to new_status.

        PLANNED -> IN_PROGRESS stamps the actual start. IN_PROGRESS ->
        COMPLETED stamps the actual end, computes the duration and consumes
        the machine's BOM for the order's quantity. If consumption raises or is
        cancelled, the previous status is restored and the error propagates;
        movements already applied stay in the ledger.

        Raises:
            WorkOrderNotFoundError: unknown work order
            InvalidTransitionError: transition not allowed from the current status
        """
        try:
            target = WorkOrderStatus(new_status)
        except ValueError:
            raise ValidationError("status", "unknown work order status", new_status) from None

        async with self._locks.acquire(work_order_id):
            current = await self.get(work_order_id)
            if not current.can_transition_to(target):
                raise InvalidTransitionError(
                    work_order_id, current.status.value, target.value
                )

            updated = self._apply_transition(current, target)
            if not await self._store.save_status(updated, expected_status=current.status):
                # Another process moved it first; report against the stored state
                latest = await self.get(work_order_id)
                raise InvalidTransitionError(
                    work_order_id, latest.status.value, target.value
                )

            logger.info(
                "work_order_status_changed",
                work_order_id=work_order_id,
                from_status=current.status.value,
                to_status=target.value,
                performed_by=performed_by,
            )

            consumption = None
            if target == WorkOrderStatus.COMPLETED:
                try:
                    consumption = await self._consumption.consume(
                        updated.machine_id,
                        updated.quantity,
                        performed_by=performed_by,
                        work_order_id=work_order_id,
                        reference=updated.order_number,
                    )
                except BaseException as e:
                    # Cancellation too: COMPLETED never outlives a failed consumption
                    await self._store.save_status(current, expected_status=target)
                    logger.error(
                        "work_order_completion_rolled_back",
                        work_order_id=work_order_id,
                        error_type=type(e).__name__,
                        error=str(e),
                    )
                    raise

        return StatusChangeResult(work_order=updated, consumption=consumption)

    def _apply_transition(
        self, work_order: WorkOrder, target: WorkOrderStatus
    ) -> WorkOrder:
        now = self._clock()
        changes: dict[str, Any] = {"status": target, "updated_at": now}

        if target == WorkOrderStatus.IN_PROGRESS and work_order.actual_start_date is None:
            changes["actual_start_date"] = now
        elif target == WorkOrderStatus.COMPLETED:
            start = work_order.actual_start_date or now
            changes["actual_end_date"] = now
            changes["actual_duration"] = compute_duration_hours(start, now, self._rounding)

        return work_order.model_copy(update=changes)
