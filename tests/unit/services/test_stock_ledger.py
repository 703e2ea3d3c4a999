"""Tests for StockLedger with mocked stores."""

from datetime import UTC, datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from stockroom.core.entities.inventory import LedgerBalance, MovementStats, MovementType
from stockroom.core.entities.material import Material
from stockroom.core.exceptions import (
    InsufficientStockError,
    MaterialNotFoundError,
    MovementNotFoundError,
    ValidationError,
)
from stockroom.core.services.stock_ledger import MovementRequest, StockLedger


def _material(material_id: str = "mat-1", stock: float = 10.0) -> Material:
    return Material(
        id=material_id, code=f"C-{material_id}", name="Bearing", unit_price=2.5,
        current_stock=stock,
    )


@pytest.fixture
def material_store():
    store = AsyncMock()
    store.get_material.return_value = _material()
    return store


@pytest.fixture
def ledger_store():
    store = AsyncMock()

    async def record(movement):
        return _material(stock=10.0 + movement.signed_quantity)

    store.record_movement.side_effect = record
    return store


@pytest.fixture
def ledger(material_store, ledger_store):
    return StockLedger(material_store, ledger_store)


class TestApplyMovement:
    async def test_out_within_stock(self, ledger, ledger_store):
        movement = await ledger.apply_movement("mat-1", "OUT", 4, reason="repair")

        assert movement.movement_type == MovementType.OUT
        assert movement.quantity == 4
        assert movement.total_price == 10.0
        assert movement.material_code == "C-MAT-1"
        assert movement.location == "Depo"
        ledger_store.record_movement.assert_awaited_once()

    async def test_out_exceeding_stock_writes_nothing(self, ledger, ledger_store):
        with pytest.raises(InsufficientStockError) as exc:
            await ledger.apply_movement("mat-1", MovementType.OUT, 15)

        assert exc.value.requested == 15
        assert exc.value.available == 10.0
        ledger_store.record_movement.assert_not_awaited()

    async def test_out_of_entire_stock_allowed(self, ledger):
        movement = await ledger.apply_movement("mat-1", MovementType.OUT, 10)
        assert movement.quantity == 10

    async def test_in_is_never_limited(self, ledger):
        movement = await ledger.apply_movement("mat-1", MovementType.IN, 1000)
        assert movement.signed_quantity == 1000

    @pytest.mark.parametrize("quantity", [0, -1])
    async def test_non_positive_quantity_rejected(self, ledger, ledger_store, quantity):
        with pytest.raises(ValidationError):
            await ledger.apply_movement("mat-1", MovementType.IN, quantity)
        ledger_store.record_movement.assert_not_awaited()

    async def test_unknown_type_rejected(self, ledger):
        with pytest.raises(ValidationError):
            await ledger.apply_movement("mat-1", "SIDEWAYS", 1)

    async def test_unknown_material(self, ledger, material_store):
        material_store.get_material.return_value = None
        with pytest.raises(MaterialNotFoundError):
            await ledger.apply_movement("missing", MovementType.IN, 1)

    async def test_apply_reports_stock_around_movement(self, ledger):
        applied = await ledger.apply(
            MovementRequest("mat-1", MovementType.OUT, 4, work_order_id="wo-1")
        )
        assert applied.stock_before == 10.0
        assert applied.stock_after == 6.0
        assert applied.movement.work_order_id == "wo-1"

    async def test_float_noise_does_not_block_full_issue(self, ledger, material_store):
        # 0.3 - 0.1 as raw floats
        material_store.get_material.return_value = _material(stock=0.19999999999999998)

        applied = await ledger.apply(MovementRequest("mat-1", MovementType.OUT, 0.2))

        assert applied.stock_before == 0.2
        assert applied.movement.quantity == 0.2

    async def test_quantity_rounded_to_six_decimals(self, ledger):
        movement = await ledger.apply_movement("mat-1", MovementType.IN, 0.1 + 0.2)
        assert movement.quantity == 0.3

    async def test_quantity_rounding_to_zero_rejected(self, ledger, ledger_store):
        with pytest.raises(ValidationError):
            await ledger.apply_movement("mat-1", MovementType.IN, 1e-9)
        ledger_store.record_movement.assert_not_awaited()


class TestApplyMovements:
    async def test_batch_written_once(self, ledger, ledger_store):
        results = await ledger.apply_movements(
            [
                MovementRequest("mat-1", MovementType.OUT, 3),
                MovementRequest("mat-1", MovementType.OUT, 4),
            ]
        )

        assert [(r.stock_before, r.stock_after) for r in results] == [(10, 7), (7, 3)]
        ledger_store.record_movements.assert_awaited_once()
        assert len(ledger_store.record_movements.await_args.args[0]) == 2

    async def test_any_shortage_rejects_whole_batch(self, ledger, material_store, ledger_store):
        stocks = {"a": _material("a", 10), "b": _material("b", 1)}
        material_store.get_material.side_effect = lambda mid: stocks[mid]

        with pytest.raises(InsufficientStockError) as exc:
            await ledger.apply_movements(
                [
                    MovementRequest("a", MovementType.OUT, 2),
                    MovementRequest("b", MovementType.OUT, 5),
                ]
            )

        assert exc.value.details["shortages"] == [
            {"material_id": "b", "requested": 5, "available": 1}
        ]
        ledger_store.record_movements.assert_not_awaited()

    async def test_empty_batch(self, ledger, ledger_store):
        assert await ledger.apply_movements([]) == []
        ledger_store.record_movements.assert_not_awaited()


class TestQueries:
    async def test_get_movement_not_found(self, ledger, ledger_store):
        ledger_store.get_movement.return_value = None
        with pytest.raises(MovementNotFoundError):
            await ledger.get_movement("mv-x")

    async def test_movements_for_unknown_material(self, ledger, material_store):
        material_store.get_material.return_value = None
        with pytest.raises(MaterialNotFoundError):
            await ledger.get_movements_for_material("missing")

    async def test_verify_consistency(self, ledger, ledger_store):
        ledger_store.get_balance.return_value = LedgerBalance("mat-1", 6, 10, 4, 2)
        balance = await ledger.verify_consistency("mat-1")
        assert balance.is_consistent

    async def test_verify_consistency_unknown_material(self, ledger, ledger_store):
        ledger_store.get_balance.return_value = None
        with pytest.raises(MaterialNotFoundError):
            await ledger.verify_consistency("missing")

    async def test_stats_uses_utc_day_and_month(self, ledger, ledger_store):
        ledger_store.get_stats.return_value = MovementStats(total_count=3)
        now = datetime(2026, 3, 3, 1, 30, tzinfo=timezone(timedelta(hours=3)))

        stats = await ledger.stats(now)

        assert stats.total_count == 3
        ledger_store.get_stats.assert_awaited_once_with(
            datetime(2026, 3, 2, tzinfo=UTC), datetime(2026, 3, 1, tzinfo=UTC)
        )
