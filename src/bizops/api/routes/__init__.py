"""API routes."""

from bizops.api.routes.directory import router as directory_router
from bizops.api.routes.health import router as health_router
from bizops.api.routes.orders import router as orders_router
from bizops.api.routes.supplier_orders import router as supplier_orders_router
from bizops.api.routes.time_entries import router as time_entries_router

__all__ = [
    "directory_router",
    "health_router",
    "orders_router",
    "supplier_orders_router",
    "time_entries_router",
]
