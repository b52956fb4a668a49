"""UserPlanService: reads and updates a user's plan tier."""

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studykit.db.models.user_settings import UserSettings
from studykit.domain.plans import PlanTier, resolve_tier

logger = structlog.get_logger(__name__)


class UserPlanService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_tier(self, user_id: str) -> PlanTier:
        """Resolve the user's current tier. Users without settings are free."""
        async with self.session_factory() as session:
            result = await session.execute(select(UserSettings.plan).where(UserSettings.user_id == user_id))
            return resolve_tier(result.scalar_one_or_none())

    async def set_tier(self, user_id: str, tier: PlanTier) -> None:
        """Upsert the user's plan. Existing artifacts are untouched."""
        async with self.session_factory() as session:
            result = await session.execute(select(UserSettings).where(UserSettings.user_id == user_id))
            user_settings = result.scalar_one_or_none()
            if user_settings is None:
                session.add(UserSettings(user_id=user_id, plan=tier.value))
            else:
                user_settings.plan = tier.value
            await session.commit()
        logger.info("user_plan_updated", user_id=user_id, plan=tier.value)
