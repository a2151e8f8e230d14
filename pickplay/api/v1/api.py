"""API v1 router composition."""

from fastapi import APIRouter

from pickplay.api.v1.endpoints import audit, auth, orders, payment_methods, permissions, products

api_router: APIRouter = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(payment_methods.router, prefix="/payment-methods", tags=["payment-methods"])
api_router.include_router(audit.router, prefix="/audit", tags=["audit"])
api_router.include_router(permissions.router, prefix="/permissions", tags=["permissions"])
