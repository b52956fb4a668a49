"""QueryStore: research queries, ownership checks and status transitions."""

import structlog
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studykit.core.exceptions import ForbiddenError, NotFoundError
from studykit.db.models.artifact import Artifact
from studykit.db.models.query import Query
from studykit.schemas.artifacts import ComplexityLevel, QueryStatus

logger = structlog.get_logger(__name__)


class QueryStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def create(
        self,
        user_id: str,
        query_text: str,
        topic: str | None = None,
        complexity_level: ComplexityLevel = ComplexityLevel.COLLEGE,
    ) -> Query:
        query = Query(
            user_id=user_id,
            query_text=query_text,
            topic=topic,
            complexity_level=complexity_level.value,
            status=QueryStatus.PENDING.value,
        )
        async with self.session_factory() as session:
            session.add(query)
            await session.commit()
            await session.refresh(query)
        logger.info("query_created", query_id=query.id, user_id=user_id)
        return query

    async def get(self, query_id: str) -> Query | None:
        async with self.session_factory() as session:
            return await session.get(Query, query_id)

    async def get_owned(self, user_id: str, query_id: str) -> Query:
        """Fetch a query and verify the caller owns it.

        Raises:
            NotFoundError: If the query does not exist
            ForbiddenError: If the query belongs to another user
        """
        query = await self.get(query_id)
        if query is None:
            raise NotFoundError("Query not found")
        if query.user_id != user_id:
            logger.warning("query_access_denied", query_id=query_id, user_id=user_id)
            raise ForbiddenError("Forbidden")
        return query

    async def mark_status(self, query_id: str, status: QueryStatus) -> None:
        async with self.session_factory() as session:
            query = await session.get(Query, query_id)
            if query is None:
                return
            query.status = status.value
            await session.commit()
        logger.info("query_status_changed", query_id=query_id, status=status.value)

    async def delete(self, user_id: str, query_id: str) -> None:
        """Delete a query together with every artifact derived from it."""
        await self.get_owned(user_id, query_id)
        async with self.session_factory() as session:
            await session.execute(delete(Artifact).where(Artifact.query_id == query_id))
            await session.execute(delete(Query).where(Query.id == query_id))
            await session.commit()
        logger.info("query_deleted", query_id=query_id, user_id=user_id)
