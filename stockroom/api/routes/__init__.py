"""API route modules."""

from stockroom.api.routes.health import router as health_router
from stockroom.api.routes.machines import router as machines_router
from stockroom.api.routes.materials import router as materials_router
from stockroom.api.routes.movements import router as movements_router
from stockroom.api.routes.work_orders import router as work_orders_router

__all__ = [
    "health_router",
    "materials_router",
    "movements_router",
    "machines_router",
    "work_orders_router",
]
