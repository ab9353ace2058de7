from fastapi import APIRouter

from backend.app.api.v1.endpoints import (
    deliveries,
    inventory,
    pickup_logs,
    suppliers,
)

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(suppliers.router, prefix="/suppliers", tags=["suppliers"])
api_router.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
api_router.include_router(pickup_logs.router, prefix="/pickup-logs", tags=["pickup-logs"])
api_router.include_router(deliveries.router, prefix="/deliveries", tags=["deliveries"])
