"""Storage infrastructure implementations."""

from stockroom.infrastructure.storage.sqlite import (
    SQLiteLedgerStore,
    SQLiteMachineStore,
    SQLiteMaterialStore,
    SQLiteWorkOrderStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteMaterialStore",
    "SQLiteLedgerStore",
    "SQLiteMachineStore",
    "SQLiteWorkOrderStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
