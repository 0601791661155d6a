from fastapi import APIRouter
from smm_panel.api.v1.endpoints import (
    admin,
    auth,
    categories,
    dashboard,
    external,
    orders,
    services,
    tickets,
    transactions,
    users,
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(categories.router, prefix="/categories", tags=["categories"])
router.include_router(services.router, prefix="/services", tags=["services"])
router.include_router(orders.router, prefix="/orders", tags=["orders"])
router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
router.include_router(tickets.router, prefix="/tickets", tags=["tickets"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
router.include_router(external.router, prefix="/external", tags=["external"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
