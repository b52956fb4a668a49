"""QuotaGate: decides whether a new generation is allowed under the user's plan.

Limits are per query per artifact type. A negative decision is returned,
never raised; the orchestrator turns it into QuotaExceededError.
"""

import structlog

from studykit.domain.plans import QUOTA_NOUNS, PlanCatalog, PlanTier
from studykit.schemas.artifacts import ArtifactType
from studykit.schemas.plans import AllowanceItem, ContentAllowance, QuotaDecision
from studykit.services.artifact_store import ArtifactStore
from studykit.services.plan_service import UserPlanService

logger = structlog.get_logger(__name__)

AUDIO_ON_DEMAND_MESSAGE = "Audio already generated for this topic. Upgrade to Pro for on-demand audio generation."


def _limit_message(tier: PlanTier, artifact_type: ArtifactType, limit: int) -> str:
    singular, plural = QUOTA_NOUNS.get(artifact_type, (artifact_type.value, artifact_type.value))
    noun = singular if limit == 1 else plural
    message = f"You've reached the {tier.value.upper()} plan limit of {limit} {noun} per topic."
    if tier == PlanTier.FREE:
        message += " Upgrade to Pro for more!"
    return message


class QuotaGate:
    def __init__(self, store: ArtifactStore, plans: UserPlanService, catalog: PlanCatalog | None = None):
        self.store = store
        self.plans = plans
        self.catalog = catalog or PlanCatalog()

    async def resolve_tier(self, user_id: str) -> PlanTier:
        return await self.plans.get_tier(user_id)

    async def check_quota(self, user_id: str, query_id: str, artifact_type: ArtifactType) -> QuotaDecision:
        """Check whether ``user_id`` may generate one more ``artifact_type`` for the query.

        Steps:
        1. Resolve tier (free when unset)
        2. Look up the per-type limit (unlisted types are unlimited)
        3. Count historical generations for (query, type)
        4. Allow while current < limit
        5. Audio only: without on-demand audio, any existing generation refuses
        """
        tier = await self.resolve_tier(user_id)
        limit = self.catalog.limit_for(tier, artifact_type)
        current = await self.store.count_by_type(query_id, artifact_type)

        if current >= limit:
            decision = QuotaDecision(
                allowed=False,
                current_count=current,
                limit=limit,
                tier=tier.value,
                reason=_limit_message(tier, artifact_type, limit),
            )
        elif (
            artifact_type == ArtifactType.AUDIO
            and not self.catalog.limits_for(tier).audio_on_demand
            and current > 0
        ):
            decision = QuotaDecision(
                allowed=False,
                current_count=current,
                limit=limit,
                tier=tier.value,
                reason=AUDIO_ON_DEMAND_MESSAGE,
            )
        else:
            decision = QuotaDecision(allowed=True, current_count=current, limit=limit, tier=tier.value)

        logger.debug(
            "quota_checked",
            user_id=user_id,
            query_id=query_id,
            artifact_type=artifact_type.value,
            tier=tier.value,
            current=current,
            limit=limit,
            allowed=decision.allowed,
        )
        return decision

    async def get_allowance(self, user_id: str, query_id: str) -> ContentAllowance:
        """Per-type usage and remaining generations for a query."""
        tier = await self.resolve_tier(user_id)
        limits = self.catalog.limits_for(tier)
        counts = await self.store.count_all(query_id)

        def item(artifact_type: ArtifactType, limit: int) -> AllowanceItem:
            used = counts.get(artifact_type.value, 0)
            return AllowanceItem(used=used, limit=limit, remaining=max(limit - used, 0))

        return ContentAllowance(
            plan=tier.value,
            audio=item(ArtifactType.AUDIO, limits.audio),
            presentations=item(ArtifactType.PRESENTATION, limits.presentations),
            flashcards=item(ArtifactType.FLASHCARDS, limits.flashcards),
            quizzes=item(ArtifactType.QUIZ, limits.quizzes),
            audio_on_demand=limits.audio_on_demand,
        )
