"""ArtifactStore: persistence of generated artifacts keyed by (query, type).

The store never retries. A unique (query_id, artifact_type, slot) constraint
turns a concurrent duplicate create into ConflictError, and in-place
overwrites are conditional on the version the caller last saw. The caller
resolves either conflict by re-reading.
"""

from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studykit.core.exceptions import ConflictError
from studykit.db.models.artifact import Artifact
from studykit.schemas.artifacts import ArtifactType

logger = structlog.get_logger(__name__)


@runtime_checkable
class ArtifactStore(Protocol):
    """Persistence contract consumed by QuotaGate and the orchestrator."""

    async def find_existing(self, query_id: str, artifact_type: ArtifactType) -> Artifact | None: ...

    async def count_by_type(self, query_id: str, artifact_type: ArtifactType) -> int: ...

    async def create(
        self,
        query_id: str,
        artifact_type: ArtifactType,
        title: str,
        payload: dict[str, Any],
        *,
        slot: str = "1",
        sequence: int = 1,
        degraded: bool = False,
        storage_url: str | None = None,
    ) -> Artifact: ...

    async def upsert_by_derived_key(
        self,
        derived_key: str,
        query_id: str,
        artifact_type: ArtifactType,
        title: str,
        payload: dict[str, Any],
        *,
        degraded: bool = False,
        storage_url: str | None = None,
        expected_version: int | None = None,
        max_generations: int | None = None,
    ) -> Artifact: ...

    async def get(self, artifact_id: str) -> Artifact | None: ...

    async def list_by_type(self, query_id: str, artifact_type: ArtifactType) -> list[Artifact]: ...

    async def count_all(self, query_id: str) -> dict[str, int]: ...

    async def delete(self, artifact_id: str) -> bool: ...


class SqlAlchemyArtifactStore:
    """ArtifactStore backed by the artifacts table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find_existing(self, query_id: str, artifact_type: ArtifactType) -> Artifact | None:
        """Return the latest artifact of a type for a query, if any."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(Artifact)
                .where(
                    Artifact.query_id == query_id,
                    Artifact.artifact_type == artifact_type.value,
                )
                .order_by(Artifact.sequence.desc(), Artifact.generated_at.desc())
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def count_by_type(self, query_id: str, artifact_type: ArtifactType) -> int:
        """Count historical generations of a type for a query.

        Each row contributes its version_number, so an artifact regenerated in
        place counts once per generation.
        """
        async with self.session_factory() as session:
            result = await session.execute(
                select(func.coalesce(func.sum(Artifact.version_number), 0)).where(
                    Artifact.query_id == query_id,
                    Artifact.artifact_type == artifact_type.value,
                )
            )
            return int(result.scalar_one())

    async def count_all(self, query_id: str) -> dict[str, int]:
        """Historical generation counts for every type present on a query."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(Artifact.artifact_type, func.sum(Artifact.version_number))
                .where(Artifact.query_id == query_id)
                .group_by(Artifact.artifact_type)
            )
            return {artifact_type: int(total) for artifact_type, total in result.all()}

    async def create(
        self,
        query_id: str,
        artifact_type: ArtifactType,
        title: str,
        payload: dict[str, Any],
        *,
        slot: str = "1",
        sequence: int = 1,
        degraded: bool = False,
        storage_url: str | None = None,
    ) -> Artifact:
        """Insert a new artifact in the given slot.

        Raises:
            ConflictError: If the slot is already taken for this query and type
        """
        artifact = Artifact(
            query_id=query_id,
            artifact_type=artifact_type.value,
            title=title,
            payload=payload,
            storage_url=storage_url,
            degraded=degraded,
            slot=slot,
            sequence=sequence,
            version_number=1,
        )
        async with self.session_factory() as session:
            session.add(artifact)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise ConflictError(query_id, artifact_type.value, slot) from exc
            await session.refresh(artifact)

        logger.info(
            "artifact_created",
            artifact_id=artifact.id,
            query_id=query_id,
            artifact_type=artifact_type.value,
            slot=slot,
            degraded=degraded,
        )
        return artifact

    async def upsert_by_derived_key(
        self,
        derived_key: str,
        query_id: str,
        artifact_type: ArtifactType,
        title: str,
        payload: dict[str, Any],
        *,
        degraded: bool = False,
        storage_url: str | None = None,
        expected_version: int | None = None,
        max_generations: int | None = None,
    ) -> Artifact:
        """Create the artifact stored under ``derived_key`` or overwrite it in place.

        Overwrites rotate current payload -> previous_payload and bump
        version_number (same rotation as a regenerate). The bump is a single
        conditional UPDATE on the version read here, so two writers racing on
        the same row cannot both succeed.

        Args:
            expected_version: Version the caller saw before generating (0 for
                no row). A different current version is a conflict.
            max_generations: Refuse the write once the historical count for
                (query, type) has reached this value.

        Raises:
            ConflictError: Another request wrote first, or the count is used up
        """
        async with self.session_factory() as session:
            result = await session.execute(
                select(Artifact).where(Artifact.id == derived_key).with_for_update()  # Row-level lock
            )
            artifact = result.scalar_one_or_none()
            current_version = artifact.version_number if artifact is not None else 0

            if expected_version is not None and current_version != expected_version:
                raise ConflictError(query_id, artifact_type.value, derived_key)

            if max_generations is not None:
                result = await session.execute(
                    select(func.coalesce(func.sum(Artifact.version_number), 0)).where(
                        Artifact.query_id == query_id,
                        Artifact.artifact_type == artifact_type.value,
                    )
                )
                if int(result.scalar_one()) >= max_generations:
                    raise ConflictError(query_id, artifact_type.value, derived_key)

            if artifact is None:
                result = await session.execute(
                    select(func.count(Artifact.id)).where(
                        Artifact.query_id == query_id,
                        Artifact.artifact_type == artifact_type.value,
                    )
                )
                artifact = Artifact(
                    id=derived_key,
                    query_id=query_id,
                    artifact_type=artifact_type.value,
                    title=title,
                    payload=payload,
                    storage_url=storage_url,
                    degraded=degraded,
                    slot=derived_key,
                    sequence=int(result.scalar_one()) + 1,
                    version_number=1,
                )
                session.add(artifact)
            else:
                result = await session.execute(
                    update(Artifact)
                    .where(Artifact.id == derived_key, Artifact.version_number == current_version)
                    .values(
                        previous_payload=Artifact.payload,
                        payload=payload,
                        title=title,
                        storage_url=storage_url,
                        degraded=degraded,
                        version_number=Artifact.version_number + 1,
                        generated_at=datetime.now(UTC),
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    await session.rollback()
                    raise ConflictError(query_id, artifact_type.value, derived_key)

            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise ConflictError(query_id, artifact_type.value, derived_key) from exc
            await session.refresh(artifact)

        logger.info(
            "artifact_upserted",
            artifact_id=artifact.id,
            query_id=query_id,
            artifact_type=artifact_type.value,
            version_number=artifact.version_number,
        )
        return artifact

    async def get(self, artifact_id: str) -> Artifact | None:
        async with self.session_factory() as session:
            return await session.get(Artifact, artifact_id)

    async def list_by_type(self, query_id: str, artifact_type: ArtifactType) -> list[Artifact]:
        """All artifacts of a type for a query, oldest first."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(Artifact)
                .where(
                    Artifact.query_id == query_id,
                    Artifact.artifact_type == artifact_type.value,
                )
                .order_by(Artifact.sequence.asc(), Artifact.generated_at.asc())
            )
            return list(result.scalars().all())

    async def delete(self, artifact_id: str) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(delete(Artifact).where(Artifact.id == artifact_id))
            await session.commit()
            return result.rowcount > 0
