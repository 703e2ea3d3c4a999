"""Tests for SQLiteLedgerStore against a migrated database."""

from datetime import UTC, datetime, timedelta

import pytest

from stockroom.core.entities.inventory import MovementFilter, MovementType, StockMovement
from stockroom.core.entities.material import Material
from stockroom.core.exceptions import InsufficientStockError, MaterialNotFoundError
from stockroom.infrastructure.storage.sqlite import SQLiteLedgerStore, SQLiteMaterialStore


@pytest.fixture
async def material(initialized_db) -> Material:
    return await SQLiteMaterialStore().create_material(
        Material(code="BRG-6204", name="Ball bearing", unit_price=2.5)
    )


@pytest.fixture
def store(initialized_db) -> SQLiteLedgerStore:
    return SQLiteLedgerStore()


def _movement(material: Material, movement_type: MovementType, quantity: float, **kwargs):
    return StockMovement(
        material_id=material.id,
        material_code=material.code,
        material_name=material.name,
        movement_type=movement_type,
        quantity=quantity,
        unit=material.unit,
        unit_price=material.unit_price,
        **kwargs,
    )


class TestRecordMovement:
    async def test_in_then_out(self, store, material):
        after_in = await store.record_movement(_movement(material, MovementType.IN, 10))
        after_out = await store.record_movement(_movement(material, MovementType.OUT, 4))

        assert after_in.current_stock == 10
        assert after_out.current_stock == 6

    async def test_out_below_zero_leaves_no_trace(self, store, material):
        await store.record_movement(_movement(material, MovementType.IN, 10))

        with pytest.raises(InsufficientStockError) as exc:
            await store.record_movement(_movement(material, MovementType.OUT, 15))

        assert exc.value.available == 10
        balance = await store.get_balance(material.id)
        assert balance.current_stock == 10
        assert balance.movement_count == 1

    async def test_unknown_material(self, store):
        ghost = Material(id="ghost", code="G", name="Ghost")
        with pytest.raises(MaterialNotFoundError):
            await store.record_movement(_movement(ghost, MovementType.IN, 1))

    async def test_round_trip_fields(self, store, material):
        movement = _movement(
            material, MovementType.IN, 4, reason="delivery", reference="DN-7",
            performed_by="ali", work_order_id="wo-1", location="Shelf A",
        )
        await store.record_movement(movement)

        stored = await store.get_movement(movement.id)
        assert stored == movement

    async def test_batch_rolls_back_as_a_whole(self, store, material):
        await store.record_movement(_movement(material, MovementType.IN, 5))

        with pytest.raises(InsufficientStockError):
            await store.record_movements(
                [
                    _movement(material, MovementType.OUT, 3),
                    _movement(material, MovementType.OUT, 3),
                ]
            )

        balance = await store.get_balance(material.id)
        assert balance.current_stock == 5
        assert balance.movement_count == 1

    async def test_decimal_stock_is_rounded(self, store, material):
        await store.record_movement(_movement(material, MovementType.IN, 0.3))
        after_first = await store.record_movement(_movement(material, MovementType.OUT, 0.1))
        after_second = await store.record_movement(_movement(material, MovementType.OUT, 0.2))

        assert after_first.current_stock == 0.2
        assert after_second.current_stock == 0


class TestQueries:
    async def test_recent_is_newest_first(self, store, material):
        first = _movement(material, MovementType.IN, 1)
        second = _movement(material, MovementType.IN, 2)
        await store.record_movement(first)
        await store.record_movement(second)

        recent = await store.get_recent_movements(limit=10)
        assert [m.id for m in recent] == [second.id, first.id]
        for_material = await store.get_movements_for_material(material.id, limit=1)
        assert [m.id for m in for_material] == [second.id]

    async def test_list_filters(self, store, material):
        await store.record_movement(_movement(material, MovementType.IN, 10, reason="delivery"))
        await store.record_movement(
            _movement(material, MovementType.OUT, 2, reason="repair", work_order_id="wo-9")
        )

        outs, total = await store.list_movements(MovementFilter(movement_type=MovementType.OUT))
        assert total == 1
        assert outs[0].reason == "repair"

        by_order, _ = await store.list_movements(MovementFilter(work_order_id="wo-9"))
        assert len(by_order) == 1

        searched, total = await store.list_movements(MovementFilter(search="deliv"))
        assert total == 1

        future = datetime.now(UTC) + timedelta(days=1)
        none, total = await store.list_movements(MovementFilter(date_from=future))
        assert (none, total) == ([], 0)

    async def test_balance(self, store, material):
        await store.record_movement(_movement(material, MovementType.IN, 10))
        await store.record_movement(_movement(material, MovementType.OUT, 4))

        balance = await store.get_balance(material.id)
        assert (balance.total_in, balance.total_out) == (10, 4)
        assert balance.movement_count == 2
        assert balance.is_consistent

    async def test_balance_without_movements(self, store, material):
        balance = await store.get_balance(material.id)
        assert balance.movement_count == 0
        assert balance.is_consistent

    async def test_balance_unknown_material(self, store):
        assert await store.get_balance("missing") is None

    async def test_stats_split_by_day_and_month(self, store, material):
        day_start = datetime(2026, 3, 2, tzinfo=UTC)
        month_start = datetime(2026, 3, 1, tzinfo=UTC)
        for movement_type, quantity, at in [
            (MovementType.IN, 10, datetime(2026, 3, 2, 8, tzinfo=UTC)),
            (MovementType.OUT, 3, datetime(2026, 3, 2, 9, tzinfo=UTC)),
            (MovementType.IN, 5, datetime(2026, 3, 1, 12, tzinfo=UTC)),
            (MovementType.IN, 2, datetime(2026, 2, 27, 16, tzinfo=UTC)),
        ]:
            await store.record_movement(
                _movement(material, movement_type, quantity, created_at=at)
            )

        stats = await store.get_stats(day_start, month_start)

        assert (stats.today.inbound, stats.today.outbound, stats.today.count) == (10, 3, 2)
        assert (stats.month.inbound, stats.month.outbound, stats.month.count) == (15, 3, 3)
        assert stats.total_count == 4

    async def test_stats_empty_ledger(self, store):
        stats = await store.get_stats(
            datetime(2026, 3, 2, tzinfo=UTC), datetime(2026, 3, 1, tzinfo=UTC)
        )
        assert stats.today.count == 0
        assert stats.month.inbound == 0
        assert stats.total_count == 0
