"""ContentOrchestrator: ensure an artifact exists for a query, generating it at most once.

Flow for ensure_artifact():
Validating -> CacheCheck -> QuotaCheck -> Generating(primary) ->
[Generating(fallback)] -> Persisting -> Done, with early exits on rejection
or failure. There is no retry transition; a failed request leaves nothing
persisted and the caller may simply ask again.
"""

from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studykit.core.exceptions import (
    ConflictError,
    GenerationError,
    MissingSourceError,
    NotFoundError,
    QuotaExceededError,
    ValidationError,
)
from studykit.db.models.artifact import Artifact
from studykit.db.models.query import Query
from studykit.domain.plans import PlanCatalog, PlanTier
from studykit.domain.policies import ARTIFACT_POLICIES, ArtifactPolicy, audio_key, quiz_slot
from studykit.generation.registry import GeneratorRegistry
from studykit.schemas.artifacts import ArtifactType, ComplexityLevel, GenerationOptions, QueryStatus
from studykit.schemas.plans import ContentAllowance
from studykit.services.artifact_store import ArtifactStore, SqlAlchemyArtifactStore
from studykit.services.plan_service import UserPlanService
from studykit.services.query_store import QueryStore
from studykit.services.quota_gate import QuotaGate

logger = structlog.get_logger(__name__)

TITLE_SUFFIXES: dict[ArtifactType, str] = {
    ArtifactType.PRESENTATION: "Presentation",
    ArtifactType.DIAGRAMS: "Diagrams",
    ArtifactType.CONCEPT_MAP: "Concept Map",
    ArtifactType.FLASHCARDS: "Flashcards",
}


@dataclass(frozen=True)
class EnsureResult:
    artifact: Artifact
    cached: bool
    degraded: bool


@dataclass
class _Source:
    text: str | None = None
    title: str | None = None


class ContentOrchestrator:
    """Coordinates ownership, caching, quota, generation and persistence."""

    def __init__(
        self,
        store: ArtifactStore,
        queries: QueryStore,
        quota_gate: QuotaGate,
        registry: GeneratorRegistry,
        policies: dict[ArtifactType, ArtifactPolicy] | None = None,
    ):
        self.store = store
        self.queries = queries
        self.quota_gate = quota_gate
        self.registry = registry
        self.policies = ARTIFACT_POLICIES if policies is None else policies

    async def ensure_artifact(
        self,
        user_id: str,
        query_id: str,
        artifact_type: ArtifactType,
        options: GenerationOptions | None = None,
    ) -> EnsureResult:
        """Return the artifact of ``artifact_type`` for the query, generating it if needed.

        Raises:
            NotFoundError: Query (or audio source content) does not exist
            ForbiddenError: Query belongs to another user
            QuotaExceededError: Plan quota refuses a new generation
            MissingSourceError: Derived type requested before its source text exists
            GenerationError: Primary failed and no fallback applied
        """
        options = (options or GenerationOptions()).model_copy(deep=True)
        policy = self.policies.get(artifact_type)
        if policy is None:
            raise ValidationError(f"Unsupported content type: {artifact_type}")
        log = logger.bind(user_id=user_id, query_id=query_id, artifact_type=artifact_type.value)

        # Validating
        query = await self.queries.get_owned(user_id, query_id)
        options.level = _level_of(query)

        # CacheCheck
        if policy.one_shot and not (policy.regenerable and options.regenerate):
            existing = await self.store.find_existing(query_id, artifact_type)
            if existing is not None:
                log.info("artifact_cache_hit", artifact_id=existing.id)
                return EnsureResult(artifact=existing, cached=True, degraded=existing.degraded)

        # QuotaCheck
        decision = await self.quota_gate.check_quota(user_id, query_id, artifact_type)
        if not decision.allowed:
            log.info("artifact_quota_refused", current=decision.current_count, limit=decision.limit)
            raise QuotaExceededError(decision.reason or "Plan limit reached", decision.current_count, decision.limit)

        source = await self._resolve_source(query, artifact_type, policy, options)
        slot, sequence = await self._prepare_instance(query_id, artifact_type, decision.tier, options)

        # Version observed under the quota decision; the overwrite only lands on it
        expected_version = 0
        if policy.upsert:
            current = await self.store.get(audio_key(options.content_id))
            expected_version = current.version_number if current is not None else 0

        # Generating
        topic = query.topic or query.query_text
        try:
            outcome = await self.registry.dispatch(artifact_type, topic, source.text, options)
        except GenerationError:
            log.error("artifact_generation_failed")
            if artifact_type == ArtifactType.ARTICLE:
                await self.queries.mark_status(query_id, QueryStatus.FAILED)
            raise

        # Persisting
        title = self._title(query, artifact_type, source, options)
        try:
            if policy.upsert:
                artifact = await self.store.upsert_by_derived_key(
                    audio_key(options.content_id),
                    query_id,
                    artifact_type,
                    title,
                    outcome.payload,
                    degraded=outcome.degraded,
                    storage_url=outcome.payload.get("storageUrl"),
                    expected_version=expected_version,
                    max_generations=decision.limit,
                )
            else:
                artifact = await self.store.create(
                    query_id,
                    artifact_type,
                    title,
                    outcome.payload,
                    slot=slot,
                    sequence=sequence,
                    degraded=outcome.degraded,
                )
        except ConflictError:
            winner = await self._refetch(query_id, artifact_type, policy, options)
            if winner is None or winner.version_number <= expected_version:
                # Nothing newer to hand back; the quota was used up by another request
                decision = await self.quota_gate.check_quota(user_id, query_id, artifact_type)
                if not decision.allowed:
                    log.info("artifact_quota_refused", current=decision.current_count, limit=decision.limit)
                    raise QuotaExceededError(
                        decision.reason or "Plan limit reached", decision.current_count, decision.limit
                    ) from None
                raise
            log.info("artifact_conflict_resolved", artifact_id=winner.id)
            return EnsureResult(artifact=winner, cached=True, degraded=winner.degraded)

        if artifact_type == ArtifactType.ARTICLE:
            await self.queries.mark_status(query_id, QueryStatus.COMPLETED)

        log.info("artifact_generated", artifact_id=artifact.id, strategy=outcome.strategy, degraded=outcome.degraded)
        return EnsureResult(artifact=artifact, cached=False, degraded=outcome.degraded)

    async def _resolve_source(
        self,
        query: Query,
        artifact_type: ArtifactType,
        policy: ArtifactPolicy,
        options: GenerationOptions,
    ) -> _Source:
        if not policy.requires_source:
            return _Source()

        if artifact_type == ArtifactType.AUDIO and options.content_id:
            content = await self.store.get(options.content_id)
            if content is None or content.query_id != query.id:
                raise NotFoundError("Content not found")
        else:
            content = await self.store.find_existing(query.id, ArtifactType.ARTICLE)
            if content is None:
                raise MissingSourceError("Article not found. Generate the article first.")
            options.content_id = options.content_id or content.id

        text = (content.payload or {}).get("text")
        if not isinstance(text, str) or not text.strip():
            raise MissingSourceError("No text content to convert")
        return _Source(text=text, title=content.title)

    async def _prepare_instance(
        self,
        query_id: str,
        artifact_type: ArtifactType,
        tier: str,
        options: GenerationOptions,
    ) -> tuple[str, int]:
        """Pick the storage slot and fill instance-specific options."""
        if artifact_type == ArtifactType.QUIZ:
            existing_sets = await self.store.list_by_type(query_id, artifact_type)
            options.set_number = len(existing_sets) + 1
            options.previous_questions = [
                question["question"]
                for quiz in existing_sets
                for question in (quiz.payload or {}).get("questions", [])
                if isinstance(question, dict) and question.get("question")
            ]
            return quiz_slot(options.set_number), options.set_number

        if artifact_type == ArtifactType.AUDIO:
            limits = self.quota_gate.catalog.limits_for(PlanTier(tier))
            options.char_limit = limits.audio_char_limit
            return audio_key(options.content_id or query_id), 1

        return "1", 1

    async def _refetch(
        self,
        query_id: str,
        artifact_type: ArtifactType,
        policy: ArtifactPolicy,
        options: GenerationOptions,
    ) -> Artifact | None:
        if policy.upsert:
            return await self.store.get(audio_key(options.content_id))
        return await self.store.find_existing(query_id, artifact_type)

    def _title(self, query: Query, artifact_type: ArtifactType, source: _Source, options: GenerationOptions) -> str:
        if artifact_type == ArtifactType.ARTICLE:
            return query.query_text
        if artifact_type == ArtifactType.QUIZ:
            return f"{query.query_text} - Quiz Set {options.set_number}"
        if artifact_type == ArtifactType.AUDIO:
            return f"{source.title or query.query_text} - Audio"
        return f"{query.query_text} - {TITLE_SUFFIXES[artifact_type]}"

    async def get_artifact(self, user_id: str, artifact_id: str) -> Artifact:
        artifact = await self.store.get(artifact_id)
        if artifact is None:
            raise NotFoundError("Content not found")
        await self.queries.get_owned(user_id, artifact.query_id)
        return artifact

    async def delete_artifact(self, user_id: str, artifact_id: str) -> None:
        """Delete an artifact owned by ``user_id``. Frees its quota slots."""
        artifact = await self.get_artifact(user_id, artifact_id)
        await self.store.delete(artifact.id)
        logger.info("artifact_deleted", artifact_id=artifact_id, user_id=user_id, query_id=artifact.query_id)

    async def get_allowance(self, user_id: str, query_id: str) -> ContentAllowance:
        await self.queries.get_owned(user_id, query_id)
        return await self.quota_gate.get_allowance(user_id, query_id)


def _level_of(query: Query) -> ComplexityLevel:
    try:
        return ComplexityLevel(query.complexity_level)
    except ValueError:
        return ComplexityLevel.COLLEGE


def build_orchestrator(
    session_factory: async_sessionmaker[AsyncSession],
    registry: GeneratorRegistry,
    catalog: PlanCatalog | None = None,
) -> ContentOrchestrator:
    """Wire an orchestrator with SQLAlchemy-backed stores."""
    store = SqlAlchemyArtifactStore(session_factory)
    queries = QueryStore(session_factory)
    quota_gate = QuotaGate(store, UserPlanService(session_factory), catalog)
    return ContentOrchestrator(store, queries, quota_gate, registry)
