"""
Record Movement Use Case.

Manual IN/OUT bookings through the stock ledger.
"""

from stockroom.application.dto.requests import RecordMovementRequest
from stockroom.application.dto.responses import (
    RecordMovementResponse,
    StockMovementResponse,
)
from stockroom.config import get_logger
from stockroom.core.services.stock_ledger import (
    AppliedMovement,
    MovementRequest,
    StockLedger,
)

logger = get_logger(__name__)


class RecordMovementUseCase:
    """Record a manual stock movement for a material."""

    def __init__(self, ledger: StockLedger | None = None):
        self._ledger = ledger

    async def _get_ledger(self) -> StockLedger:
        if self._ledger is None:
            from stockroom.application.services import get_stock_ledger

            self._ledger = await get_stock_ledger()
        return self._ledger

    async def execute(
        self,
        request: RecordMovementRequest,
        performed_by: str | None = None,
    ) -> AppliedMovement:
        """
        Apply the movement.

        Raises:
            MaterialNotFoundError: unknown material
            InsufficientStockError: OUT larger than the current stock
        """
        logger.info(
            "record_movement_started",
            material_id=request.material_id,
            type=request.movement_type.value,
            quantity=request.quantity,
            performed_by=performed_by,
        )

        ledger = await self._get_ledger()
        return await ledger.apply(
            MovementRequest(
                material_id=request.material_id,
                movement_type=request.movement_type,
                quantity=request.quantity,
                reason=request.reason,
                reference=request.reference,
                performed_by=performed_by,
                work_order_id=request.work_order_id,
                location=request.location,
            )
        )

    def to_response(self, result: AppliedMovement) -> RecordMovementResponse:
        return RecordMovementResponse(
            movement=StockMovementResponse.from_entity(result.movement),
            stock_before=result.stock_before,
            stock_after=result.stock_after,
        )
