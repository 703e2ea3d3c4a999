"""Tests for ChangeWorkOrderStatusUseCase."""

from unittest.mock import AsyncMock

from stockroom.application.dto.requests import ChangeWorkOrderStatusRequest
from stockroom.application.use_cases.change_work_order_status import (
    ChangeWorkOrderStatusUseCase,
)
from stockroom.core.entities.consumption import (
    ConsumptionLineResult,
    ConsumptionOutcome,
    ConsumptionPolicy,
    ConsumptionReport,
)
from stockroom.core.entities.work_order import WorkOrder, WorkOrderStatus
from stockroom.core.services.work_orders import StatusChangeResult


def _completed() -> WorkOrder:
    return WorkOrder(
        id="wo-1", order_number="WO000001", title="Build", machine_id="mch-1",
        status=WorkOrderStatus.COMPLETED, actual_duration=6,
    )


def _report() -> ConsumptionReport:
    return ConsumptionReport(
        machine_id="mch-1",
        work_order_id="wo-1",
        quantity_produced=1,
        policy=ConsumptionPolicy.SKIP,
        lines=[
            ConsumptionLineResult(
                material_id="a", required_quantity=2, stock_before=10, stock_after=8,
                outcome=ConsumptionOutcome.APPLIED, movement_id="mv-1",
            ),
            ConsumptionLineResult(
                material_id="b", required_quantity=3, stock_before=1, stock_after=1,
                outcome=ConsumptionOutcome.SKIPPED_INSUFFICIENT_STOCK,
            ),
        ],
    )


class TestChangeWorkOrderStatusUseCase:
    async def test_delegates_to_service(self):
        service = AsyncMock()
        service.change_status.return_value = StatusChangeResult(_completed(), _report())
        use_case = ChangeWorkOrderStatusUseCase(service=service)

        result = await use_case.execute(
            "wo-1", ChangeWorkOrderStatusRequest(status="COMPLETED"), performed_by="ali"
        )

        service.change_status.assert_awaited_once_with(
            "wo-1", WorkOrderStatus.COMPLETED, performed_by="ali"
        )
        assert result.consumption is not None

    def test_response_with_consumption(self):
        use_case = ChangeWorkOrderStatusUseCase(service=AsyncMock())
        response = use_case.to_response(StatusChangeResult(_completed(), _report()))

        assert response.work_order.status == "COMPLETED"
        assert response.consumption.movements_created == 1
        assert response.consumption.skipped == 1
        assert response.consumption.is_complete is False
        assert response.consumption.lines[1].outcome == "skipped_insufficient_stock"

    def test_response_without_consumption(self):
        use_case = ChangeWorkOrderStatusUseCase(service=AsyncMock())
        response = use_case.to_response(StatusChangeResult(_completed()))
        assert response.consumption is None
