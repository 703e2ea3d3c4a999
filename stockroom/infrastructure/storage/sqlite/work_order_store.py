"""
SQLite implementation of work order storage.

Status changes use compare-and-set: the UPDATE only matches while the
stored status still equals the status the caller read.
"""

import uuid
from datetime import UTC, datetime
from typing import Any

import aiosqlite

from stockroom.config import get_logger
from stockroom.core.entities.work_order import (
    WorkOrder,
    WorkOrderFilter,
    WorkOrderPriority,
    WorkOrderStats,
    WorkOrderStatus,
)
from stockroom.core.interfaces.work_order_store import IWorkOrderStore
from stockroom.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)

ORDER_NUMBER_DIGITS = 6


def _generate_id() -> str:
    """Generate a new UUID text ID."""
    return str(uuid.uuid4())


def _iso(value: datetime | None) -> str | None:
    """UTC ISO-8601 text so stored dates compare correctly as strings."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def _parse(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class SQLiteWorkOrderStore(IWorkOrderStore):
    """SQLite implementation of work order storage."""

    async def create_work_order(self, work_order: WorkOrder) -> WorkOrder:
        if not work_order.id:
            work_order.id = _generate_id()
        work_order.updated_at = datetime.now(UTC)
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO work_orders (
                    id, order_number, title, description, machine_id,
                    machine_name, quantity, status, priority,
                    planned_start_date, planned_end_date,
                    actual_start_date, actual_end_date,
                    estimated_duration, actual_duration,
                    created_by, assigned_to, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    work_order.id,
                    work_order.order_number,
                    work_order.title,
                    work_order.description,
                    work_order.machine_id,
                    work_order.machine_name,
                    work_order.quantity,
                    work_order.status.value,
                    work_order.priority.value,
                    _iso(work_order.planned_start_date),
                    _iso(work_order.planned_end_date),
                    _iso(work_order.actual_start_date),
                    _iso(work_order.actual_end_date),
                    work_order.estimated_duration,
                    work_order.actual_duration,
                    work_order.created_by,
                    work_order.assigned_to,
                    _iso(work_order.created_at),
                    _iso(work_order.updated_at),
                ),
            )
        return work_order

    async def get_work_order(self, work_order_id: str) -> WorkOrder | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM work_orders WHERE id = ?", (work_order_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_work_order(row) if row else None

    async def list_work_orders(
        self, work_order_filter: WorkOrderFilter
    ) -> tuple[list[WorkOrder], int]:
        clauses: list[str] = []
        params: list[Any] = []

        if work_order_filter.search:
            pattern = f"%{work_order_filter.search.strip()}%"
            clauses.append(
                "(order_number LIKE ? OR title LIKE ? OR description LIKE ? "
                "OR machine_name LIKE ?)"
            )
            params.extend([pattern] * 4)
        if work_order_filter.status:
            clauses.append("status = ?")
            params.append(work_order_filter.status.value)
        if work_order_filter.priority:
            clauses.append("priority = ?")
            params.append(work_order_filter.priority.value)
        if work_order_filter.machine_id:
            clauses.append("machine_id = ?")
            params.append(work_order_filter.machine_id)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        async with get_connection() as conn:
            cursor = await conn.execute(f"SELECT COUNT(*) FROM work_orders {where}", params)
            total = (await cursor.fetchone())[0]

            cursor = await conn.execute(
                f"""
                SELECT * FROM work_orders {where}
                ORDER BY created_at DESC, rowid DESC
                LIMIT ? OFFSET ?
                """,
                (*params, work_order_filter.limit, work_order_filter.offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_work_order(row) for row in rows], total

    async def next_order_number(self, prefix: str) -> str:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT MAX(CAST(SUBSTR(order_number, ?) AS INTEGER))
                FROM work_orders
                WHERE order_number LIKE ?
                """,
                (len(prefix) + 1, f"{prefix}%"),
            )
            row = await cursor.fetchone()
        last = row[0] if row and row[0] is not None else 0
        return f"{prefix}{last + 1:0{ORDER_NUMBER_DIGITS}d}"

    async def update_work_order(self, work_order: WorkOrder) -> WorkOrder:
        """Write editable fields only; status and actual dates are untouched."""
        async with get_transaction() as conn:
            await conn.execute(
                """
                UPDATE work_orders SET
                    title = ?, description = ?, machine_id = ?, machine_name = ?,
                    quantity = ?, priority = ?, planned_start_date = ?,
                    planned_end_date = ?, estimated_duration = ?,
                    assigned_to = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    work_order.title,
                    work_order.description,
                    work_order.machine_id,
                    work_order.machine_name,
                    work_order.quantity,
                    work_order.priority.value,
                    _iso(work_order.planned_start_date),
                    _iso(work_order.planned_end_date),
                    work_order.estimated_duration,
                    work_order.assigned_to,
                    _iso(work_order.updated_at),
                    work_order.id,
                ),
            )
        return work_order

    async def save_status(
        self, work_order: WorkOrder, expected_status: WorkOrderStatus
    ) -> bool:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE work_orders SET
                    status = ?, actual_start_date = ?, actual_end_date = ?,
                    actual_duration = ?, updated_at = ?
                WHERE id = ? AND status = ?
                """,
                (
                    work_order.status.value,
                    _iso(work_order.actual_start_date),
                    _iso(work_order.actual_end_date),
                    work_order.actual_duration,
                    _iso(work_order.updated_at),
                    work_order.id,
                    WorkOrderStatus(expected_status).value,
                ),
            )
            saved = cursor.rowcount == 1
        if not saved:
            logger.warning(
                "work_order_status_conflict",
                work_order_id=work_order.id,
                expected_status=WorkOrderStatus(expected_status).value,
            )
        return saved

    async def delete_work_order(self, work_order_id: str) -> bool:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM work_orders WHERE id = ?", (work_order_id,)
            )
            return cursor.rowcount > 0

    async def get_stats(self, now: datetime) -> WorkOrderStats:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT
                    COUNT(*) AS total,
                    SUM(CASE WHEN status = 'PLANNED' THEN 1 ELSE 0 END) AS planned,
                    SUM(CASE WHEN status = 'IN_PROGRESS' THEN 1 ELSE 0 END) AS in_progress,
                    SUM(CASE WHEN status = 'COMPLETED' THEN 1 ELSE 0 END) AS completed,
                    SUM(CASE WHEN status = 'CANCELLED' THEN 1 ELSE 0 END) AS cancelled,
                    SUM(CASE WHEN priority IN (?, ?) THEN 1 ELSE 0 END) AS high_priority,
                    SUM(CASE WHEN status IN ('PLANNED', 'IN_PROGRESS')
                              AND planned_end_date IS NOT NULL
                              AND planned_end_date < ? THEN 1 ELSE 0 END) AS overdue
                FROM work_orders
                """,
                (
                    WorkOrderPriority.HIGH.value,
                    WorkOrderPriority.CRITICAL.value,
                    _iso(now),
                ),
            )
            row = await cursor.fetchone()
            return WorkOrderStats(
                total=row["total"] or 0,
                planned=row["planned"] or 0,
                in_progress=row["in_progress"] or 0,
                completed=row["completed"] or 0,
                cancelled=row["cancelled"] or 0,
                high_priority=row["high_priority"] or 0,
                overdue=row["overdue"] or 0,
            )

    @staticmethod
    def _row_to_work_order(row: aiosqlite.Row) -> WorkOrder:
        return WorkOrder(
            id=row["id"],
            order_number=row["order_number"],
            title=row["title"],
            description=row["description"],
            machine_id=row["machine_id"],
            machine_name=row["machine_name"],
            quantity=row["quantity"],
            status=WorkOrderStatus(row["status"]),
            priority=WorkOrderPriority(row["priority"]),
            planned_start_date=_parse(row["planned_start_date"]),
            planned_end_date=_parse(row["planned_end_date"]),
            actual_start_date=_parse(row["actual_start_date"]),
            actual_end_date=_parse(row["actual_end_date"]),
            estimated_duration=row["estimated_duration"],
            actual_duration=row["actual_duration"],
            created_by=row["created_by"],
            assigned_to=row["assigned_to"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
