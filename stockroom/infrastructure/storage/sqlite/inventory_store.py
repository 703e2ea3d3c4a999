"""
SQLite implementation of the stock ledger.

A movement row and the matching current_stock adjustment are written in
the same transaction. The stock UPDATE only matches while the result stays
non-negative after rounding to QUANTITY_PRECISION decimals, so a concurrent
writer in another process cannot push stock below zero between the
service's check and this write. The rounding also keeps float noise from
leaving a hair less stock than the movements add up to.
"""

from datetime import UTC, datetime
from typing import Any

import aiosqlite

from stockroom.config import get_logger
from stockroom.core.entities.inventory import (
    QUANTITY_PRECISION,
    LedgerBalance,
    MovementFilter,
    MovementStats,
    MovementTotals,
    MovementType,
    StockMovement,
    quantize,
)
from stockroom.core.entities.material import Material
from stockroom.core.exceptions import InsufficientStockError, MaterialNotFoundError
from stockroom.core.interfaces.inventory_store import ILedgerStore
from stockroom.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from stockroom.infrastructure.storage.sqlite.material_store import SQLiteMaterialStore

logger = get_logger(__name__)


class SQLiteLedgerStore(ILedgerStore):
    """SQLite implementation of stock movement storage."""

    async def record_movement(self, movement: StockMovement) -> Material:
        async with get_transaction() as conn:
            material = await self._apply(conn, movement)
        logger.debug(
            "movement_recorded",
            movement_id=movement.id,
            material_id=movement.material_id,
            type=movement.movement_type.value,
            qty=movement.quantity,
        )
        return material

    async def record_movements(self, movements: list[StockMovement]) -> list[Material]:
        """Apply a batch; any failure rolls back every row of it."""
        results: list[Material] = []
        async with get_transaction() as conn:
            for movement in movements:
                results.append(await self._apply(conn, movement))
        logger.debug("movement_batch_recorded", count=len(movements))
        return results

    async def _apply(self, conn: aiosqlite.Connection, movement: StockMovement) -> Material:
        delta = movement.signed_quantity
        cursor = await conn.execute(
            """
            UPDATE materials
            SET current_stock = ROUND(current_stock + ?, ?), updated_at = ?
            WHERE id = ? AND ROUND(current_stock + ?, ?) >= 0
            """,
            (
                delta,
                QUANTITY_PRECISION,
                datetime.now(UTC).isoformat(),
                movement.material_id,
                delta,
                QUANTITY_PRECISION,
            ),
        )
        if cursor.rowcount == 0:
            cursor = await conn.execute(
                "SELECT current_stock FROM materials WHERE id = ?",
                (movement.material_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                raise MaterialNotFoundError(movement.material_id)
            raise InsufficientStockError(
                material_id=movement.material_id,
                requested=movement.quantity,
                available=row[0],
            )

        await conn.execute(
            """
            INSERT INTO stock_movements (
                id, material_id, material_code, material_name, movement_type,
                quantity, unit, unit_price, total_price, reason, reference,
                location, performed_by, work_order_id, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                movement.id,
                movement.material_id,
                movement.material_code or "",
                movement.material_name or "",
                movement.movement_type.value,
                movement.quantity,
                movement.unit or "",
                movement.unit_price,
                movement.total_price,
                movement.reason,
                movement.reference,
                movement.location,
                movement.performed_by,
                movement.work_order_id,
                _as_utc(movement.created_at).isoformat(),
            ),
        )

        cursor = await conn.execute(
            "SELECT * FROM materials WHERE id = ?", (movement.material_id,)
        )
        return SQLiteMaterialStore._row_to_material(await cursor.fetchone())

    async def get_movement(self, movement_id: str) -> StockMovement | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM stock_movements WHERE id = ?", (movement_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_movement(row) if row else None

    async def get_movements_for_material(
        self, material_id: str, limit: int = 100
    ) -> list[StockMovement]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM stock_movements
                WHERE material_id = ?
                ORDER BY created_at DESC, rowid DESC
                LIMIT ?
                """,
                (material_id, limit),
            )
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    async def get_recent_movements(self, limit: int = 10) -> list[StockMovement]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM stock_movements
                ORDER BY created_at DESC, rowid DESC
                LIMIT ?
                """,
                (limit,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    async def list_movements(
        self, movement_filter: MovementFilter
    ) -> tuple[list[StockMovement], int]:
        clauses: list[str] = []
        params: list[Any] = []

        if movement_filter.search:
            pattern = f"%{movement_filter.search.strip()}%"
            clauses.append(
                "(material_name LIKE ? OR material_code LIKE ? "
                "OR reason LIKE ? OR reference LIKE ?)"
            )
            params.extend([pattern] * 4)
        if movement_filter.movement_type:
            clauses.append("movement_type = ?")
            params.append(movement_filter.movement_type.value)
        if movement_filter.material_id:
            clauses.append("material_id = ?")
            params.append(movement_filter.material_id)
        if movement_filter.work_order_id:
            clauses.append("work_order_id = ?")
            params.append(movement_filter.work_order_id)
        if movement_filter.date_from:
            clauses.append("created_at >= ?")
            params.append(_as_utc(movement_filter.date_from).isoformat())
        if movement_filter.date_to:
            clauses.append("created_at <= ?")
            params.append(_as_utc(movement_filter.date_to).isoformat())

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT COUNT(*) FROM stock_movements {where}", params
            )
            total = (await cursor.fetchone())[0]

            cursor = await conn.execute(
                f"""
                SELECT * FROM stock_movements {where}
                ORDER BY created_at DESC, rowid DESC
                LIMIT ? OFFSET ?
                """,
                (*params, movement_filter.limit, movement_filter.offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows], total

    async def get_balance(self, material_id: str) -> LedgerBalance | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT m.current_stock,
                       COALESCE(SUM(CASE WHEN s.movement_type = 'IN'
                                         THEN s.quantity END), 0) AS total_in,
                       COALESCE(SUM(CASE WHEN s.movement_type = 'OUT'
                                         THEN s.quantity END), 0) AS total_out,
                       COUNT(s.id) AS movement_count
                FROM materials m
                LEFT JOIN stock_movements s ON s.material_id = m.id
                WHERE m.id = ?
                GROUP BY m.id
                """,
                (material_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return LedgerBalance(
                material_id=material_id,
                current_stock=row["current_stock"],
                total_in=row["total_in"],
                total_out=row["total_out"],
                movement_count=row["movement_count"],
            )

    async def get_stats(self, day_start: datetime, month_start: datetime) -> MovementStats:
        day, month = _as_utc(day_start).isoformat(), _as_utc(month_start).isoformat()
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT
                    COUNT(*) AS total_count,
                    SUM(CASE WHEN created_at >= ? AND movement_type = 'IN'
                             THEN quantity ELSE 0 END) AS today_in,
                    SUM(CASE WHEN created_at >= ? AND movement_type = 'OUT'
                             THEN quantity ELSE 0 END) AS today_out,
                    SUM(CASE WHEN created_at >= ? THEN 1 ELSE 0 END) AS today_count,
                    SUM(CASE WHEN created_at >= ? AND movement_type = 'IN'
                             THEN quantity ELSE 0 END) AS month_in,
                    SUM(CASE WHEN created_at >= ? AND movement_type = 'OUT'
                             THEN quantity ELSE 0 END) AS month_out,
                    SUM(CASE WHEN created_at >= ? THEN 1 ELSE 0 END) AS month_count
                FROM stock_movements
                """,
                (day, day, day, month, month, month),
            )
            row = await cursor.fetchone()
            return MovementStats(
                today=MovementTotals(
                    inbound=quantize(row["today_in"] or 0),
                    outbound=quantize(row["today_out"] or 0),
                    count=row["today_count"] or 0,
                ),
                month=MovementTotals(
                    inbound=quantize(row["month_in"] or 0),
                    outbound=quantize(row["month_out"] or 0),
                    count=row["month_count"] or 0,
                ),
                total_count=row["total_count"],
            )

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> StockMovement:
        return StockMovement(
            id=row["id"],
            material_id=row["material_id"],
            material_code=row["material_code"],
            material_name=row["material_name"],
            movement_type=MovementType(row["movement_type"]),
            quantity=row["quantity"],
            unit=row["unit"],
            unit_price=row["unit_price"],
            total_price=row["total_price"],
            reason=row["reason"],
            reference=row["reference"],
            location=row["location"],
            performed_by=row["performed_by"],
            work_order_id=row["work_order_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
