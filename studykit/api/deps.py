"""FastAPI dependencies for generation services.

The session factory and registry are built once in the lifespan and kept on
app.state; tests set app.state directly or override get_registry via
app.dependency_overrides.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studykit.generation.registry import GeneratorRegistry
from studykit.services.orchestrator import ContentOrchestrator, build_orchestrator
from studykit.services.plan_service import UserPlanService
from studykit.services.query_store import QueryStore


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """Raises RuntimeError if the lifespan has not initialized the database."""
    session_factory = getattr(request.app.state, "session_factory", None)
    if session_factory is None:
        raise RuntimeError("Database not initialized")
    return session_factory


def get_registry(request: Request) -> GeneratorRegistry:
    return request.app.state.registry


def get_orchestrator(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    registry: GeneratorRegistry = Depends(get_registry),
) -> ContentOrchestrator:
    return build_orchestrator(session_factory, registry)


def get_query_store(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> QueryStore:
    return QueryStore(session_factory)


def get_plan_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> UserPlanService:
    return UserPlanService(session_factory)
