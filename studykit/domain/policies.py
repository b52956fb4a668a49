"""Per-type idempotence policy.

One table decides, for each artifact type, whether an existing artifact
short-circuits generation, whether the base article is needed, and how a new
instance is stored.
"""

from dataclasses import dataclass

from studykit.schemas.artifacts import ArtifactType


@dataclass(frozen=True)
class ArtifactPolicy:
    one_shot: bool  # an existing artifact is returned instead of generating
    requires_source: bool  # generation needs the query's article text
    regenerable: bool = False  # options.regenerate creates a new numbered instance
    upsert: bool = False  # regeneration overwrites the row under a derived key


ARTIFACT_POLICIES: dict[ArtifactType, ArtifactPolicy] = {
    ArtifactType.ARTICLE: ArtifactPolicy(one_shot=True, requires_source=False),
    ArtifactType.PRESENTATION: ArtifactPolicy(one_shot=True, requires_source=True),
    ArtifactType.DIAGRAMS: ArtifactPolicy(one_shot=True, requires_source=True),
    ArtifactType.CONCEPT_MAP: ArtifactPolicy(one_shot=True, requires_source=True),
    ArtifactType.FLASHCARDS: ArtifactPolicy(one_shot=True, requires_source=True),
    ArtifactType.QUIZ: ArtifactPolicy(one_shot=True, requires_source=True, regenerable=True),
    ArtifactType.AUDIO: ArtifactPolicy(one_shot=False, requires_source=True, upsert=True),
}


def audio_key(content_id: str) -> str:
    """Derived id of the audio artifact narrating ``content_id``."""
    return f"{content_id}-audio"


def quiz_slot(set_number: int) -> str:
    return f"set-{set_number}"
