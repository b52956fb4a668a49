from fastapi import APIRouter

from studykit.api.routes import content, health, plans, queries

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(queries.router, prefix="/queries", tags=["queries"])
api_router.include_router(content.router, prefix="/content", tags=["content"])
api_router.include_router(plans.router, prefix="/user", tags=["user"])
