"""
Stock ledger service.

The only writer of material stock. Every change is an immutable movement
record; the record and the stock adjustment are persisted together, and
the sufficiency check for OUT movements runs under a per-material lock so
that check and decrement cannot interleave with another caller.

Pure service -- no infrastructure imports. Stores are injected via
constructor.
"""

from dataclasses import dataclass, replace
from datetime import UTC, datetime

from stockroom.config import get_logger
from stockroom.core.entities.inventory import (
    LedgerBalance,
    MovementFilter,
    MovementStats,
    MovementType,
    StockMovement,
    quantize,
)
from stockroom.core.entities.material import Material
from stockroom.core.exceptions import (
    InsufficientStockError,
    MaterialNotFoundError,
    MovementNotFoundError,
    ValidationError,
)
from stockroom.core.interfaces.inventory_store import ILedgerStore
from stockroom.core.interfaces.material_store import IMaterialStore
from stockroom.core.services.keyed_lock import KeyedLock

logger = get_logger(__name__)


@dataclass
class MovementRequest:
    """A stock change to apply."""

    material_id: str
    movement_type: MovementType
    quantity: float
    reason: str = ""
    reference: str | None = None
    performed_by: str | None = None
    work_order_id: str | None = None
    location: str | None = None


@dataclass
class AppliedMovement:
    """A recorded movement with the stock level around it."""

    movement: StockMovement
    stock_before: float
    stock_after: float


class StockLedger:
    """Applies and queries stock movements."""

    def __init__(
        self,
        material_store: IMaterialStore,
        ledger_store: ILedgerStore,
        locks: KeyedLock | None = None,
    ) -> None:
        self._material_store = material_store
        self._ledger_store = ledger_store
        self._locks = locks or KeyedLock()

    @property
    def locks(self) -> KeyedLock:
        return self._locks

    async def apply_movement(
        self,
        material_id: str,
        movement_type: MovementType | str,
        quantity: float,
        *,
        reason: str = "",
        reference: str | None = None,
        performed_by: str | None = None,
        work_order_id: str | None = None,
        location: str | None = None,
    ) -> StockMovement:
        """
        Record an IN or OUT movement and adjust the material's stock.

        Raises:
            ValidationError: quantity is not positive
            MaterialNotFoundError: unknown material
            InsufficientStockError: OUT exceeds current stock (nothing is written)
        """
        try:
            movement_type = MovementType(movement_type)
        except ValueError:
            raise ValidationError("movement_type", "must be IN or OUT", movement_type) from None

        applied = await self.apply(
            MovementRequest(
                material_id=material_id,
                movement_type=movement_type,
                quantity=quantity,
                reason=reason,
                reference=reference,
                performed_by=performed_by,
                work_order_id=work_order_id,
                location=location,
            )
        )
        return applied.movement

    async def apply(self, request: MovementRequest) -> AppliedMovement:
        """Apply a single movement request, returning the stock around it."""
        request = self._normalize(request)

        async with self._locks.acquire(request.material_id):
            material = await self._get_material(request.material_id)
            stock_before = quantize(material.current_stock)
            self._check_sufficient(material, request.movement_type, request.quantity)

            movement = self._build_movement(material, request)
            updated = await self._ledger_store.record_movement(movement)

        logger.info(
            "movement_applied",
            movement_id=movement.id,
            material_id=material.id,
            type=movement.movement_type.value,
            qty=movement.quantity,
            stock_before=stock_before,
            stock_after=updated.current_stock,
        )
        return AppliedMovement(
            movement=movement,
            stock_before=stock_before,
            stock_after=updated.current_stock,
        )

    async def apply_movements(
        self, requests: list[MovementRequest]
    ) -> list[AppliedMovement]:
        """
        Apply several movements all-or-nothing.

        Every involved material is locked first, sufficiency is checked for
        all requests, then the whole batch is written in one transaction.

        Raises:
            InsufficientStockError: at least one request cannot be covered;
                details["shortages"] lists every short request.
        """
        if not requests:
            return []
        requests = [self._normalize(r) for r in requests]

        material_ids = [r.material_id for r in requests]
        async with self._locks.acquire_many(material_ids):
            materials: dict[str, Material] = {}
            for material_id in material_ids:
                if material_id not in materials:
                    materials[material_id] = await self._get_material(material_id)

            running = {mid: quantize(m.current_stock) for mid, m in materials.items()}
            shortages = []
            results: list[AppliedMovement] = []
            movements: list[StockMovement] = []
            for request in requests:
                before = running[request.material_id]
                if request.movement_type == MovementType.IN:
                    after = quantize(before + request.quantity)
                else:
                    after = quantize(before - request.quantity)
                if after < 0:
                    shortages.append(
                        {
                            "material_id": request.material_id,
                            "requested": request.quantity,
                            "available": before,
                        }
                    )
                    continue
                running[request.material_id] = after
                movement = self._build_movement(materials[request.material_id], request)
                movements.append(movement)
                results.append(AppliedMovement(movement, before, after))

            if shortages:
                first = shortages[0]
                logger.warning("movement_batch_rejected", shortages=shortages)
                raise InsufficientStockError(
                    material_id=first["material_id"],
                    requested=first["requested"],
                    available=first["available"],
                    shortages=shortages,
                )

            await self._ledger_store.record_movements(movements)

        logger.info("movement_batch_applied", count=len(movements))
        return results

    async def get_movement(self, movement_id: str) -> StockMovement:
        movement = await self._ledger_store.get_movement(movement_id)
        if movement is None:
            raise MovementNotFoundError(movement_id)
        return movement

    async def get_movements_for_material(
        self, material_id: str, limit: int = 100
    ) -> list[StockMovement]:
        """Movements of one material, most recent first."""
        await self._get_material(material_id)
        return await self._ledger_store.get_movements_for_material(material_id, limit=limit)

    async def get_recent_movements(self, limit: int = 10) -> list[StockMovement]:
        """Most recent movements across all materials."""
        return await self._ledger_store.get_recent_movements(limit=limit)

    async def list_movements(
        self, movement_filter: MovementFilter
    ) -> tuple[list[StockMovement], int]:
        return await self._ledger_store.list_movements(movement_filter)

    async def stats(self, now: datetime | None = None) -> MovementStats:
        """IN/OUT totals for the UTC day and month containing now."""
        now = (now or datetime.now(UTC)).astimezone(UTC)
        day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return await self._ledger_store.get_stats(day_start, day_start.replace(day=1))

    async def verify_consistency(self, material_id: str) -> LedgerBalance:
        """Compare a material's stock with the sum of its ledger."""
        balance = await self._ledger_store.get_balance(material_id)
        if balance is None:
            raise MaterialNotFoundError(material_id)
        if not balance.is_consistent:
            logger.warning(
                "ledger_inconsistent",
                material_id=material_id,
                current_stock=balance.current_stock,
                ledger_stock=balance.ledger_stock,
            )
        return balance

    async def _get_material(self, material_id: str) -> Material:
        material = await self._material_store.get_material(material_id)
        if material is None:
            raise MaterialNotFoundError(material_id)
        return material

    @staticmethod
    def _normalize(request: MovementRequest) -> MovementRequest:
        """Quantity rounded to QUANTITY_PRECISION decimals, must stay positive."""
        quantity = quantize(request.quantity)
        if quantity <= 0:
            raise ValidationError("quantity", "must be greater than zero", request.quantity)
        return replace(request, quantity=quantity)

    @staticmethod
    def _check_sufficient(
        material: Material, movement_type: MovementType, quantity: float
    ) -> None:
        available = quantize(material.current_stock)
        if movement_type == MovementType.OUT and quantity > available:
            raise InsufficientStockError(
                material_id=material.id or "",
                requested=quantity,
                available=available,
            )

    @staticmethod
    def _build_movement(material: Material, request: MovementRequest) -> StockMovement:
        return StockMovement(
            material_id=request.material_id,
            material_code=material.code,
            material_name=material.name,
            movement_type=request.movement_type,
            quantity=request.quantity,
            unit=material.unit,
            unit_price=material.unit_price,
            reason=request.reason,
            reference=request.reference,
            location=request.location or material.location,
            performed_by=request.performed_by,
            work_order_id=request.work_order_id,
        )
