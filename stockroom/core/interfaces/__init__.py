"""Core interfaces (ports) for dependency injection."""

from stockroom.core.interfaces.inventory_store import ILedgerStore
from stockroom.core.interfaces.machine_store import IMachineStore
from stockroom.core.interfaces.material_store import IMaterialStore
from stockroom.core.interfaces.work_order_store import IWorkOrderStore

__all__ = [
    "ILedgerStore",
    "IMachineStore",
    "IMaterialStore",
    "IWorkOrderStore",
]
