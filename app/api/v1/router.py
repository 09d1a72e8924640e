"""API V1 Router"""

from fastapi import APIRouter

# Import endpoint routers
from app.api.v1.endpoints import schools, invoices, collections, dashboard

# Create API v1 router
api_router = APIRouter()

# Include endpoint routers with prefixes and tags
api_router.include_router(schools.router, prefix="/schools", tags=["Schools"])
api_router.include_router(invoices.router, prefix="/invoices", tags=["Invoices"])
api_router.include_router(collections.router, prefix="/collections", tags=["Collections"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
