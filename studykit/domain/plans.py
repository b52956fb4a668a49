"""Plan catalog: per-tier quotas and feature flags.

Pure data plus lookups. Limits are counted per query per artifact type.
"""

from dataclasses import dataclass
from enum import StrEnum

from studykit.schemas.artifacts import ArtifactType

# Sentinel limit meaning "effectively unlimited"
UNLIMITED = 999


class PlanTier(StrEnum):
    FREE = "free"
    PRO = "pro"


@dataclass(frozen=True)
class PlanLimits:
    audio: int
    presentations: int
    flashcards: int
    quizzes: int
    audio_on_demand: bool
    audio_char_limit: int


PLAN_LIMITS: dict[PlanTier, PlanLimits] = {
    PlanTier.FREE: PlanLimits(
        audio=1,
        presentations=1,
        flashcards=1,
        quizzes=1,
        audio_on_demand=False,
        audio_char_limit=5_000,
    ),
    PlanTier.PRO: PlanLimits(
        audio=5,
        presentations=UNLIMITED,
        flashcards=5,
        quizzes=UNLIMITED,
        audio_on_demand=True,
        audio_char_limit=10_000,
    ),
}

# Artifact types with a numeric quota; everything else is unlimited
QUOTA_FIELDS: dict[ArtifactType, str] = {
    ArtifactType.AUDIO: "audio",
    ArtifactType.PRESENTATION: "presentations",
    ArtifactType.FLASHCARDS: "flashcards",
    ArtifactType.QUIZ: "quizzes",
}

# (singular, plural) used in quota messages
QUOTA_NOUNS: dict[ArtifactType, tuple[str, str]] = {
    ArtifactType.AUDIO: ("audio narration", "audio narrations"),
    ArtifactType.PRESENTATION: ("presentation", "presentations"),
    ArtifactType.FLASHCARDS: ("flashcard deck", "flashcard decks"),
    ArtifactType.QUIZ: ("quiz", "quizzes"),
}


def resolve_tier(value: str | None) -> PlanTier:
    """Map a stored plan slug to a tier. Unset or unknown reads as free."""
    try:
        return PlanTier(value) if value else PlanTier.FREE
    except ValueError:
        return PlanTier.FREE


class PlanCatalog:
    """Lookup table mapping (tier, artifact type) to a quota."""

    def __init__(self, limits: dict[PlanTier, PlanLimits] | None = None):
        self._limits = limits if limits is not None else PLAN_LIMITS

    def limits_for(self, tier: PlanTier) -> PlanLimits:
        return self._limits.get(tier, self._limits[PlanTier.FREE])

    def limit_for(self, tier: PlanTier, artifact_type: ArtifactType) -> int:
        field = QUOTA_FIELDS.get(artifact_type)
        if field is None:
            return UNLIMITED
        return getattr(self.limits_for(tier), field)

    @staticmethod
    def is_unlimited(limit: int) -> bool:
        return limit >= UNLIMITED

    def plan_features(self, tier: PlanTier) -> dict[str, bool | int]:
        """Feature summary shown on the plan page."""
        limits = self.limits_for(tier)
        is_pro = tier == PlanTier.PRO
        return {
            "unlimitedSearches": True,
            "articleGeneration": True,
            "audioLimit": limits.audio,
            "presentationLimit": limits.presentations,
            "flashcardLimit": limits.flashcards,
            "quizLimit": limits.quizzes,
            "audioOnDemand": limits.audio_on_demand,
            "diagrams": True,
            "conceptMaps": True,
            "downloadContent": is_pro,
            "prioritySupport": is_pro,
            "noAds": is_pro,
        }
