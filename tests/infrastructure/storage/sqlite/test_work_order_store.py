"""Tests for SQLiteWorkOrderStore against a migrated database."""

from datetime import UTC, datetime, timedelta

import pytest

from stockroom.core.entities.work_order import (
    WorkOrder,
    WorkOrderFilter,
    WorkOrderPriority,
    WorkOrderStatus,
)
from stockroom.infrastructure.storage.sqlite import SQLiteWorkOrderStore

NOW = datetime(2026, 5, 1, 12, tzinfo=UTC)


@pytest.fixture
def store(initialized_db) -> SQLiteWorkOrderStore:
    return SQLiteWorkOrderStore()


async def _create(store: SQLiteWorkOrderStore, **kwargs) -> WorkOrder:
    number = await store.next_order_number("WO")
    return await store.create_work_order(
        WorkOrder(order_number=number, title=kwargs.pop("title", "Build"),
                  machine_id=kwargs.pop("machine_id", "mch-1"), **kwargs)
    )


class TestNumbering:
    async def test_sequence(self, store):
        assert await store.next_order_number("WO") == "WO000001"
        await _create(store)
        await _create(store)
        assert await store.next_order_number("WO") == "WO000003"

    async def test_prefixes_are_independent(self, store):
        await _create(store)
        assert await store.next_order_number("MO") == "MO000001"


class TestCrud:
    async def test_round_trip(self, store):
        created = await _create(
            store, priority=WorkOrderPriority.HIGH, planned_end_date=NOW, estimated_duration=2.5
        )
        fetched = await store.get_work_order(created.id)

        assert fetched.order_number == "WO000001"
        assert fetched.priority == WorkOrderPriority.HIGH
        assert fetched.planned_end_date == NOW
        assert fetched.status == WorkOrderStatus.PLANNED

    async def test_update_does_not_touch_status(self, store):
        created = await _create(store)
        edited = created.model_copy(
            update={"title": "Rebuild", "status": WorkOrderStatus.COMPLETED}
        )
        await store.update_work_order(edited)

        fetched = await store.get_work_order(created.id)
        assert fetched.title == "Rebuild"
        assert fetched.status == WorkOrderStatus.PLANNED

    async def test_delete(self, store):
        created = await _create(store)
        assert await store.delete_work_order(created.id) is True
        assert await store.get_work_order(created.id) is None


class TestSaveStatus:
    async def test_compare_and_set(self, store):
        created = await _create(store)
        started = created.model_copy(
            update={"status": WorkOrderStatus.IN_PROGRESS, "actual_start_date": NOW}
        )

        assert await store.save_status(started, expected_status=WorkOrderStatus.PLANNED)
        # Stale writer still believes the order is PLANNED
        assert not await store.save_status(started, expected_status=WorkOrderStatus.PLANNED)

        fetched = await store.get_work_order(created.id)
        assert fetched.status == WorkOrderStatus.IN_PROGRESS
        assert fetched.actual_start_date == NOW


class TestListingAndStats:
    async def test_filters_and_total(self, store):
        await _create(store, title="Pump build", priority=WorkOrderPriority.LOW)
        await _create(store, title="Press build", machine_id="mch-2")
        await _create(store, title="Pump repair", priority=WorkOrderPriority.CRITICAL)

        items, total = await store.list_work_orders(WorkOrderFilter(search="pump"))
        assert total == 2
        assert [wo.title for wo in items] == ["Pump repair", "Pump build"]

        items, total = await store.list_work_orders(WorkOrderFilter(machine_id="mch-2"))
        assert [wo.title for wo in items] == ["Press build"]

        items, total = await store.list_work_orders(WorkOrderFilter(limit=1))
        assert len(items) == 1
        assert total == 3

    async def test_stats(self, store):
        await _create(store, planned_end_date=NOW - timedelta(days=1))
        await _create(store, priority=WorkOrderPriority.HIGH, planned_end_date=NOW + timedelta(days=1))
        done = await _create(
            store, priority=WorkOrderPriority.CRITICAL, planned_end_date=NOW - timedelta(days=3)
        )
        await store.save_status(
            done.model_copy(update={"status": WorkOrderStatus.IN_PROGRESS}),
            expected_status=WorkOrderStatus.PLANNED,
        )
        await store.save_status(
            done.model_copy(update={"status": WorkOrderStatus.COMPLETED}),
            expected_status=WorkOrderStatus.IN_PROGRESS,
        )

        stats = await store.get_stats(NOW)

        assert stats.total == 3
        assert stats.planned == 2
        assert stats.completed == 1
        assert stats.in_progress == 0
        assert stats.high_priority == 2
        assert stats.overdue == 1
