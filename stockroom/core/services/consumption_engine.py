"""
Consumption engine.

Explodes a machine's BOM into OUT movements for a produced quantity.

With the "skip" policy every BOM line is its own ledger movement; a line
the stock cannot cover is skipped and reported, and the remaining lines
are still applied. With the "strict" policy the whole BOM is applied in
one ledger batch or not at all.
"""

from stockroom.config import get_logger
from stockroom.core.entities.consumption import (
    ConsumptionLineResult,
    ConsumptionOutcome,
    ConsumptionPolicy,
    ConsumptionReport,
)
from stockroom.core.entities.inventory import MovementType, quantize
from stockroom.core.entities.machine import BOMItem
from stockroom.core.exceptions import (
    InsufficientStockError,
    MaterialNotFoundError,
    ValidationError,
)
from stockroom.core.services.bom_registry import BOMRegistry
from stockroom.core.services.stock_ledger import MovementRequest, StockLedger

logger = get_logger(__name__)

DEFAULT_REASON = "work-order consumption"


class ConsumptionEngine:
    """Applies BOM-derived consumption to the stock ledger."""

    def __init__(
        self,
        bom_registry: BOMRegistry,
        ledger: StockLedger,
        policy: ConsumptionPolicy = ConsumptionPolicy.SKIP,
        scale_by_quantity: bool = True,
        reason: str = DEFAULT_REASON,
    ) -> None:
        self._bom_registry = bom_registry
        self._ledger = ledger
        self._policy = ConsumptionPolicy(policy)
        self._scale_by_quantity = scale_by_quantity
        self._reason = reason

    @property
    def policy(self) -> ConsumptionPolicy:
        return self._policy

    def required_quantity(self, item: BOMItem, quantity_produced: float) -> float:
        """Quantity of the line's material needed for quantity_produced units."""
        multiplier = quantity_produced if self._scale_by_quantity else 1.0
        return quantize(item.quantity * multiplier)

    async def consume(
        self,
        machine_id: str,
        quantity_produced: float,
        performed_by: str | None = None,
        work_order_id: str | None = None,
        reference: str | None = None,
    ) -> ConsumptionReport:
        """
        Consume the BOM of machine_id for quantity_produced units.

        Raises:
            MachineNotFoundError: unknown machine
            ValidationError: quantity_produced is not positive
            InsufficientStockError: strict policy only, some line is short
        """
        if quantity_produced <= 0:
            raise ValidationError(
                "quantity_produced", "must be greater than zero", quantity_produced
            )

        bom = await self._bom_registry.get_bom(machine_id)
        report = ConsumptionReport(
            machine_id=machine_id,
            work_order_id=work_order_id,
            quantity_produced=quantity_produced,
            policy=self._policy,
        )

        logger.info(
            "consumption_started",
            machine_id=machine_id,
            work_order_id=work_order_id,
            lines=len(bom),
            quantity_produced=quantity_produced,
            policy=self._policy.value,
        )

        requests = [
            MovementRequest(
                material_id=item.material_id,
                movement_type=MovementType.OUT,
                quantity=self.required_quantity(item, quantity_produced),
                reason=self._reason,
                reference=reference,
                performed_by=performed_by,
                work_order_id=work_order_id,
            )
            for item in bom
        ]

        if self._policy == ConsumptionPolicy.STRICT:
            await self._consume_all(bom, requests, report)
        else:
            await self._consume_each(bom, requests, report)

        logger.info(
            "consumption_complete",
            machine_id=machine_id,
            work_order_id=work_order_id,
            applied=len(report.applied),
            skipped=len(report.skipped),
        )
        return report

    async def _consume_each(
        self,
        bom: list[BOMItem],
        requests: list[MovementRequest],
        report: ConsumptionReport,
    ) -> None:
        for item, request in zip(bom, requests, strict=True):
            try:
                applied = await self._ledger.apply(request)
            except InsufficientStockError as e:
                logger.warning(
                    "consumption_line_skipped",
                    machine_id=item.machine_id,
                    material_id=item.material_id,
                    required=request.quantity,
                    available=e.available,
                )
                report.lines.append(
                    self._line(
                        item,
                        request,
                        ConsumptionOutcome.SKIPPED_INSUFFICIENT_STOCK,
                        stock_before=e.available,
                        stock_after=e.available,
                    )
                )
                continue
            except MaterialNotFoundError:
                logger.warning(
                    "consumption_material_missing",
                    machine_id=item.machine_id,
                    material_id=item.material_id,
                )
                report.lines.append(
                    self._line(item, request, ConsumptionOutcome.SKIPPED_MISSING_MATERIAL)
                )
                continue

            report.lines.append(
                self._line(
                    item,
                    request,
                    ConsumptionOutcome.APPLIED,
                    stock_before=applied.stock_before,
                    stock_after=applied.stock_after,
                    movement_id=applied.movement.id,
                )
            )

    async def _consume_all(
        self,
        bom: list[BOMItem],
        requests: list[MovementRequest],
        report: ConsumptionReport,
    ) -> None:
        results = await self._ledger.apply_movements(requests)
        for item, request, applied in zip(bom, requests, results, strict=True):
            report.lines.append(
                self._line(
                    item,
                    request,
                    ConsumptionOutcome.APPLIED,
                    stock_before=applied.stock_before,
                    stock_after=applied.stock_after,
                    movement_id=applied.movement.id,
                )
            )

    @staticmethod
    def _line(
        item: BOMItem,
        request: MovementRequest,
        outcome: ConsumptionOutcome,
        stock_before: float | None = None,
        stock_after: float | None = None,
        movement_id: str | None = None,
    ) -> ConsumptionLineResult:
        return ConsumptionLineResult(
            bom_item_id=item.id,
            material_id=item.material_id,
            material_code=item.material_code,
            required_quantity=request.quantity,
            stock_before=stock_before,
            stock_after=stock_after,
            outcome=outcome,
            movement_id=movement_id,
        )
