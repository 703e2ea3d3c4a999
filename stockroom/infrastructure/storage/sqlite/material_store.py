"""
SQLite implementation of material storage.

current_stock is written once, as zero, on insert. All later changes go
through SQLiteLedgerStore.
"""

import uuid
from datetime import UTC, datetime
from typing import Any

import aiosqlite

from stockroom.config import get_logger
from stockroom.core.entities.material import LOW_STOCK_RATIO, Material, StockStatus
from stockroom.core.interfaces.material_store import IMaterialStore
from stockroom.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)

_CRITICAL_SQL = "current_stock <= min_stock_level"
_LOW_SQL = (
    "(current_stock > min_stock_level AND max_stock_level > 0 "
    "AND current_stock * 1.0 / max_stock_level < ?)"
)


def _generate_id() -> str:
    """Generate a new UUID text ID."""
    return str(uuid.uuid4())


def _material_filters(
    search: str | None,
    category: str | None,
    stock_status: StockStatus | None,
) -> tuple[str, list[Any]]:
    """WHERE clause and parameters shared by list and count."""
    clauses: list[str] = []
    params: list[Any] = []

    if search:
        pattern = f"%{search.strip()}%"
        clauses.append("(name LIKE ? OR code LIKE ? OR description LIKE ?)")
        params.extend([pattern, pattern, pattern])
    if category:
        clauses.append("category = ?")
        params.append(category)
    if stock_status == StockStatus.CRITICAL:
        clauses.append(_CRITICAL_SQL)
    elif stock_status == StockStatus.LOW:
        clauses.append(_LOW_SQL)
        params.append(LOW_STOCK_RATIO)
    elif stock_status == StockStatus.NORMAL:
        clauses.append(f"NOT ({_CRITICAL_SQL}) AND NOT {_LOW_SQL}")
        params.append(LOW_STOCK_RATIO)

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


class SQLiteMaterialStore(IMaterialStore):
    """SQLite implementation of material storage."""

    async def create_material(self, material: Material) -> Material:
        """Insert a material with zero stock."""
        if not material.id:
            material.id = _generate_id()
        material.current_stock = 0.0
        material.updated_at = datetime.now(UTC)
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO materials (
                    id, code, name, description, category, unit, unit_price,
                    current_stock, min_stock_level, max_stock_level,
                    location, supplier, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    material.id,
                    material.code,
                    material.name,
                    material.description,
                    material.category,
                    material.unit,
                    material.unit_price,
                    material.current_stock,
                    material.min_stock_level,
                    material.max_stock_level,
                    material.location,
                    material.supplier,
                    material.created_at.isoformat(),
                    material.updated_at.isoformat(),
                ),
            )
        logger.info("material_created", material_id=material.id, code=material.code)
        return material

    async def get_material(self, material_id: str) -> Material | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM materials WHERE id = ?", (material_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_material(row) if row else None

    async def get_by_code(self, code: str) -> Material | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM materials WHERE code = ?", (code.strip().upper(),)
            )
            row = await cursor.fetchone()
            return self._row_to_material(row) if row else None

    async def list_materials(
        self,
        limit: int = 100,
        offset: int = 0,
        search: str | None = None,
        category: str | None = None,
        stock_status: StockStatus | None = None,
    ) -> list[Material]:
        """List materials ordered by name."""
        where, params = _material_filters(search, category, stock_status)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM materials {where} ORDER BY name, code LIMIT ? OFFSET ?",
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_material(row) for row in rows]

    async def count_materials(
        self,
        search: str | None = None,
        category: str | None = None,
        stock_status: StockStatus | None = None,
    ) -> int:
        where, params = _material_filters(search, category, stock_status)
        async with get_connection() as conn:
            cursor = await conn.execute(f"SELECT COUNT(*) FROM materials {where}", params)
            row = await cursor.fetchone()
            return row[0] if row else 0

    async def list_categories(self) -> list[str]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT DISTINCT category FROM materials ORDER BY category"
            )
            rows = await cursor.fetchall()
            return [row[0] for row in rows if row[0]]

    async def update_material(self, material: Material) -> Material:
        """Update metadata; current_stock keeps its stored value."""
        material.updated_at = datetime.now(UTC)
        async with get_transaction() as conn:
            await conn.execute(
                """
                UPDATE materials SET
                    code = ?, name = ?, description = ?, category = ?,
                    unit = ?, unit_price = ?, min_stock_level = ?,
                    max_stock_level = ?, location = ?, supplier = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    material.code,
                    material.name,
                    material.description,
                    material.category,
                    material.unit,
                    material.unit_price,
                    material.min_stock_level,
                    material.max_stock_level,
                    material.location,
                    material.supplier,
                    material.updated_at.isoformat(),
                    material.id,
                ),
            )
            cursor = await conn.execute(
                "SELECT * FROM materials WHERE id = ?", (material.id,)
            )
            row = await cursor.fetchone()
        return self._row_to_material(row) if row else material

    async def count_references(self, material_id: str) -> tuple[int, int]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT COUNT(*) FROM bom_items WHERE material_id = ?", (material_id,)
            )
            bom_items = (await cursor.fetchone())[0]
            cursor = await conn.execute(
                "SELECT COUNT(*) FROM stock_movements WHERE material_id = ?",
                (material_id,),
            )
            movements = (await cursor.fetchone())[0]
            return bom_items, movements

    async def delete_material(self, material_id: str) -> bool:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM materials WHERE id = ?", (material_id,)
            )
            return cursor.rowcount > 0

    @staticmethod
    def _row_to_material(row: aiosqlite.Row) -> Material:
        return Material(
            id=row["id"],
            code=row["code"],
            name=row["name"],
            description=row["description"],
            category=row["category"],
            unit=row["unit"],
            unit_price=row["unit_price"],
            current_stock=row["current_stock"],
            min_stock_level=row["min_stock_level"],
            max_stock_level=row["max_stock_level"],
            location=row["location"],
            supplier=row["supplier"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
