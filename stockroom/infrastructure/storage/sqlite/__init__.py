"""SQLite storage implementations."""

from stockroom.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from stockroom.infrastructure.storage.sqlite.inventory_store import SQLiteLedgerStore
from stockroom.infrastructure.storage.sqlite.machine_store import SQLiteMachineStore
from stockroom.infrastructure.storage.sqlite.material_store import SQLiteMaterialStore
from stockroom.infrastructure.storage.sqlite.work_order_store import SQLiteWorkOrderStore

# Singleton instances
_material_store: SQLiteMaterialStore | None = None
_ledger_store: SQLiteLedgerStore | None = None
_machine_store: SQLiteMachineStore | None = None
_work_order_store: SQLiteWorkOrderStore | None = None


async def get_material_store() -> SQLiteMaterialStore:
    """Get singleton material store instance."""
    global _material_store
    if _material_store is None:
        _material_store = SQLiteMaterialStore()
    return _material_store


async def get_ledger_store() -> SQLiteLedgerStore:
    """Get singleton ledger store instance."""
    global _ledger_store
    if _ledger_store is None:
        _ledger_store = SQLiteLedgerStore()
    return _ledger_store


async def get_machine_store() -> SQLiteMachineStore:
    """Get singleton machine store instance."""
    global _machine_store
    if _machine_store is None:
        _machine_store = SQLiteMachineStore()
    return _machine_store


async def get_work_order_store() -> SQLiteWorkOrderStore:
    """Get singleton work order store instance."""
    global _work_order_store
    if _work_order_store is None:
        _work_order_store = SQLiteWorkOrderStore()
    return _work_order_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteMaterialStore",
    "SQLiteLedgerStore",
    "SQLiteMachineStore",
    "SQLiteWorkOrderStore",
    # Factory functions
    "get_material_store",
    "get_ledger_store",
    "get_machine_store",
    "get_work_order_store",
]
