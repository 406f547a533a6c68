from fastapi import APIRouter
from paydesk.api.v1.endpoints import health, payments, shared_links

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(shared_links.router, prefix="/shared-links", tags=["shared-links"])
