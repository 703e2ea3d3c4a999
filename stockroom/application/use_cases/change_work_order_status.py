"""
Change Work Order Status Use Case.

Lifecycle transitions, with BOM consumption on completion.
"""

from stockroom.application.dto.requests import ChangeWorkOrderStatusRequest
from stockroom.application.dto.responses import (
    ConsumptionReportResponse,
    WorkOrderResponse,
    WorkOrderStatusResponse,
)
from stockroom.config import get_logger
from stockroom.core.services.work_orders import StatusChangeResult, WorkOrderService

logger = get_logger(__name__)


class ChangeWorkOrderStatusUseCase:
    """
    Move a work order to a new status.

    Completing an order consumes its machine's BOM; the consumption report
    is returned next to the updated order.
    """

    def __init__(self, service: WorkOrderService | None = None):
        self._service = service

    async def _get_service(self) -> WorkOrderService:
        if self._service is None:
            from stockroom.application.services import get_work_order_service

            self._service = await get_work_order_service()
        return self._service

    async def execute(
        self,
        work_order_id: str,
        request: ChangeWorkOrderStatusRequest,
        performed_by: str | None = None,
    ) -> StatusChangeResult:
        service = await self._get_service()
        result = await service.change_status(
            work_order_id, request.status, performed_by=performed_by
        )

        if result.consumption is not None and not result.consumption.is_complete:
            logger.warning(
                "work_order_completed_with_shortages",
                work_order_id=work_order_id,
                skipped=[line.material_id for line in result.consumption.skipped],
            )
        return result

    def to_response(self, result: StatusChangeResult) -> WorkOrderStatusResponse:
        return WorkOrderStatusResponse(
            work_order=WorkOrderResponse.from_entity(result.work_order),
            consumption=(
                ConsumptionReportResponse.from_report(result.consumption)
                if result.consumption is not None
                else None
            ),
        )
