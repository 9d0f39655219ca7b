"""Main router for API v1.

This router combines all v1 endpoints under /api/v1 prefix.
"""

from fastapi import APIRouter

from banestes.api.v1.clients.routes import router as clients_router
from banestes.api.v1.summary.routes import router as summary_router

# Create main v1 router
api_router = APIRouter()

api_router.include_router(clients_router)
api_router.include_router(summary_router)
