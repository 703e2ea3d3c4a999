"""SQLite implementation of machine and BOM storage."""

import uuid
from datetime import UTC, date, datetime
from typing import Any

import aiosqlite

from stockroom.config import get_logger
from stockroom.core.entities.machine import BOMItem, Machine, MachineStatus
from stockroom.core.exceptions import DuplicateBOMEntryError
from stockroom.core.interfaces.machine_store import IMachineStore
from stockroom.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


def _generate_id() -> str:
    """Generate a new UUID text ID."""
    return str(uuid.uuid4())


class SQLiteMachineStore(IMachineStore):
    """SQLite implementation of machine and BOM storage."""

    async def create_machine(self, machine: Machine) -> Machine:
        if not machine.id:
            machine.id = _generate_id()
        machine.updated_at = datetime.now(UTC)
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO machines (
                    id, code, name, description, category, location, status,
                    manufacturer, model, serial_number, installation_date,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    machine.id,
                    machine.code,
                    machine.name,
                    machine.description,
                    machine.category,
                    machine.location,
                    machine.status.value,
                    machine.manufacturer,
                    machine.model,
                    machine.serial_number,
                    machine.installation_date.isoformat() if machine.installation_date else None,
                    machine.created_at.isoformat(),
                    machine.updated_at.isoformat(),
                ),
            )
        logger.info("machine_stored", machine_id=machine.id, code=machine.code)
        return machine

    async def get_machine(self, machine_id: str) -> Machine | None:
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM machines WHERE id = ?", (machine_id,))
            row = await cursor.fetchone()
            return self._row_to_machine(row) if row else None

    async def get_by_code(self, code: str) -> Machine | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM machines WHERE code = ?", (code.strip().upper(),)
            )
            row = await cursor.fetchone()
            return self._row_to_machine(row) if row else None

    async def list_machines(
        self,
        limit: int = 100,
        offset: int = 0,
        search: str | None = None,
        status: MachineStatus | None = None,
        category: str | None = None,
    ) -> list[Machine]:
        clauses: list[str] = []
        params: list[Any] = []
        if search:
            pattern = f"%{search.strip()}%"
            clauses.append("(name LIKE ? OR code LIKE ? OR description LIKE ?)")
            params.extend([pattern, pattern, pattern])
        if status:
            clauses.append("status = ?")
            params.append(MachineStatus(status).value)
        if category:
            clauses.append("category = ?")
            params.append(category)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM machines {where} ORDER BY code LIMIT ? OFFSET ?",
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_machine(row) for row in rows]

    async def list_categories(self) -> list[str]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT DISTINCT category FROM machines ORDER BY category"
            )
            rows = await cursor.fetchall()
            return [row[0] for row in rows if row[0]]

    async def update_machine(self, machine: Machine) -> Machine:
        machine.updated_at = datetime.now(UTC)
        async with get_transaction() as conn:
            await conn.execute(
                """
                UPDATE machines SET
                    code = ?, name = ?, description = ?, category = ?,
                    location = ?, status = ?, manufacturer = ?, model = ?,
                    serial_number = ?, installation_date = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    machine.code,
                    machine.name,
                    machine.description,
                    machine.category,
                    machine.location,
                    machine.status.value,
                    machine.manufacturer,
                    machine.model,
                    machine.serial_number,
                    machine.installation_date.isoformat() if machine.installation_date else None,
                    machine.updated_at.isoformat(),
                    machine.id,
                ),
            )
        return machine

    async def delete_machine(self, machine_id: str) -> int:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM bom_items WHERE machine_id = ?", (machine_id,)
            )
            removed = cursor.rowcount
            cursor = await conn.execute("DELETE FROM machines WHERE id = ?", (machine_id,))
            if cursor.rowcount == 0:
                return -1
            return removed

    # BOM

    async def get_bom(self, machine_id: str) -> list[BOMItem]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM bom_items
                WHERE machine_id = ?
                ORDER BY position, created_at
                """,
                (machine_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_item(row) for row in rows]

    async def get_bom_item(self, item_id: str) -> BOMItem | None:
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM bom_items WHERE id = ?", (item_id,))
            row = await cursor.fetchone()
            return self._row_to_item(row) if row else None

    async def find_bom_item(self, machine_id: str, material_id: str) -> BOMItem | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM bom_items WHERE machine_id = ? AND material_id = ?",
                (machine_id, material_id),
            )
            row = await cursor.fetchone()
            return self._row_to_item(row) if row else None

    async def add_bom_item(self, item: BOMItem) -> BOMItem:
        if not item.id:
            item.id = _generate_id()
        item.updated_at = datetime.now(UTC)
        try:
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    "SELECT COALESCE(MAX(position), -1) + 1 FROM bom_items WHERE machine_id = ?",
                    (item.machine_id,),
                )
                item.position = (await cursor.fetchone())[0]
                await conn.execute(
                    """
                    INSERT INTO bom_items (
                        id, machine_id, material_id, material_code, material_name,
                        quantity, unit, unit_price, notes, position,
                        created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        item.id,
                        item.machine_id,
                        item.material_id,
                        item.material_code or "",
                        item.material_name or "",
                        item.quantity,
                        item.unit or "",
                        item.unit_price,
                        item.notes,
                        item.position,
                        item.created_at.isoformat(),
                        item.updated_at.isoformat(),
                    ),
                )
        except aiosqlite.IntegrityError as e:
            if "UNIQUE" in str(e):
                raise DuplicateBOMEntryError(item.machine_id, item.material_id) from e
            raise
        return item

    async def update_bom_item(self, item: BOMItem) -> BOMItem:
        item.updated_at = datetime.now(UTC)
        async with get_transaction() as conn:
            await conn.execute(
                """
                UPDATE bom_items SET
                    quantity = ?, unit_price = ?, notes = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    item.quantity,
                    item.unit_price,
                    item.notes,
                    item.updated_at.isoformat(),
                    item.id,
                ),
            )
        return item

    async def delete_bom_item(self, item_id: str) -> bool:
        async with get_transaction() as conn:
            cursor = await conn.execute("DELETE FROM bom_items WHERE id = ?", (item_id,))
            return cursor.rowcount > 0

    @staticmethod
    def _row_to_machine(row: aiosqlite.Row) -> Machine:
        return Machine(
            id=row["id"],
            code=row["code"],
            name=row["name"],
            description=row["description"],
            category=row["category"],
            location=row["location"],
            status=MachineStatus(row["status"]),
            manufacturer=row["manufacturer"],
            model=row["model"],
            serial_number=row["serial_number"],
            installation_date=(
                date.fromisoformat(row["installation_date"])
                if row["installation_date"]
                else None
            ),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    @staticmethod
    def _row_to_item(row: aiosqlite.Row) -> BOMItem:
        return BOMItem(
            id=row["id"],
            machine_id=row["machine_id"],
            material_id=row["material_id"],
            material_code=row["material_code"],
            material_name=row["material_name"],
            quantity=row["quantity"],
            unit=row["unit"],
            unit_price=row["unit_price"],
            notes=row["notes"],
            position=row["position"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
