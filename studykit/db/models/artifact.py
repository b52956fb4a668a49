"""Artifact model: generated learning content with JSON payloads."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint

from studykit.db.base import Base


class Artifact(Base):
    """Artifact ("content") model.

    Stores one generated learning object for a query: article, quiz, flashcards,
    presentation, diagrams, concept map or audio narration. The payload schema
    is type-specific and opaque to the orchestrator.

    Rows are addressed by (query_id, artifact_type, slot). One-shot types only
    ever use slot "1"; quiz sets use "set-N"; audio rows use the id of the
    content they narrate and are regenerated in place.
    """

    __tablename__ = "artifacts"

    id = Column(String(128), primary_key=True, default=lambda: str(uuid.uuid4()))
    query_id = Column(String(36), ForeignKey("queries.id"), nullable=False, index=True)
    artifact_type = Column(String(50), nullable=False)  # ArtifactType enum value
    title = Column(Text, nullable=False, default="")

    payload = Column(JSON, nullable=False, default=dict)
    previous_payload = Column(JSON, nullable=True)  # None until regenerated in place
    storage_url = Column(String(1000), nullable=True)

    # Produced by a fallback strategy rather than the primary generator
    degraded = Column(Boolean, nullable=False, default=False)

    slot = Column(String(128), nullable=False, default="1")
    sequence = Column(Integer, nullable=False, default=1)  # instance ordinal within query/type
    version_number = Column(Integer, nullable=False, default=1)  # in-place regenerations + 1

    generated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Unique slot per query and type closes the check-then-create race
    __table_args__ = (UniqueConstraint("query_id", "artifact_type", "slot", name="uq_query_artifact_slot"),)
