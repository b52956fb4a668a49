"""Pydantic schemas for artifact generation and management.

Payload models mirror the JSON the web client renders, so field names are
camelCase on the wire (``totalSlides``, ``correctAnswer``) and snake_case in
Python. Every payload model accepts either form.
"""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ArtifactType(StrEnum):
    """Seven artifact types derived from a query."""

    ARTICLE = "article"
    QUIZ = "quiz"
    FLASHCARDS = "flashcards"
    PRESENTATION = "presentation"
    DIAGRAMS = "diagrams"
    CONCEPT_MAP = "concept-map"
    AUDIO = "audio"


class ComplexityLevel(StrEnum):
    ELEMENTARY = "elementary"
    HIGH_SCHOOL = "high-school"
    COLLEGE = "college"
    ADULT = "adult"


class QueryStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ==================== ARTIFACT PAYLOAD SCHEMAS ====================


class ArticleContent(_Payload):
    text: str = Field(..., min_length=1, description="Full article body")
    level: str = Field(ComplexityLevel.COLLEGE.value)
    sources: list[dict[str, Any]] = Field(default_factory=list)


class QuizQuestion(_Payload):
    id: int
    question: str
    type: str = Field("multiple-choice", description="multiple-choice | true-false | short-answer | fill-blank")
    difficulty: str = "medium"
    options: list[str] | None = None
    correct_answer: str = Field(..., alias="correctAnswer")
    explanation: str = ""
    category: str = "concept"


class QuizContent(_Payload):
    topic: str
    level: str
    set_number: int = Field(1, alias="setNumber")
    total_questions: int = Field(0, alias="totalQuestions")
    questions: list[QuizQuestion] = Field(..., min_length=1)


class Flashcard(_Payload):
    id: int
    question: str
    answer: str
    category: str = "concept"
    difficulty: str = "medium"


class FlashcardDeck(_Payload):
    topic: str
    level: str
    total_cards: int = Field(0, alias="totalCards")
    cards: list[Flashcard] = Field(..., min_length=1)


class PresentationSlide(_Payload):
    id: int
    type: str = Field(..., description="title | definition | bullet-points | equation | comparison | summary")
    title: str | None = None
    subtitle: str | None = None
    content: str | None = None
    points: list[str] | None = None
    equation: str | None = None
    left_column: list[str] | None = Field(None, alias="leftColumn")
    right_column: list[str] | None = Field(None, alias="rightColumn")
    background: str = "light"


class PresentationContent(_Payload):
    topic: str
    level: str
    total_slides: int = Field(0, alias="totalSlides")
    slides: list[PresentationSlide] = Field(..., min_length=1)


class Diagram(_Payload):
    id: int
    title: str
    type: str = Field("process", description="flowchart | cycle | hierarchy | comparison | timeline | process | concept-map")
    description: str = ""
    mermaid_code: str = Field(..., alias="mermaidCode")


class DiagramSet(_Payload):
    diagrams: list[Diagram] = Field(..., min_length=1)


class ConceptNode(_Payload):
    id: str
    label: str
    description: str
    category: str
    x: float
    y: float
    color: str


class ConceptLink(_Payload):
    from_: str = Field(..., alias="from")
    to: str
    label: str | None = None


class ConceptMapContent(_Payload):
    main_topic: str = Field(..., alias="mainTopic")
    nodes: list[ConceptNode]
    links: list[ConceptLink]


class AudioContent(_Payload):
    storage_url: str = Field(..., alias="storageUrl")
    voice_id: str = Field(..., alias="voiceId")
    original_content_id: str | None = Field(None, alias="originalContentId")
    source_length: int = Field(..., alias="sourceLength")
    truncated: bool = False
    truncated_at: int | None = Field(None, alias="truncatedAt")
    duration: int = 0


# ==================== GENERATION OPTIONS ====================


class GenerationOptions(BaseModel):
    """Type-specific knobs passed through the orchestrator to a strategy.

    The orchestrator fills in the query-derived fields (level, set_number,
    previous_questions, char_limit) before dispatch.
    """

    level: ComplexityLevel = ComplexityLevel.COLLEGE
    count: int = Field(3, ge=1, le=10, description="Diagram count")
    card_count: int = Field(15, ge=1, le=50)
    num_questions: int = Field(10, ge=1, le=50)
    regenerate: bool = Field(False, description="Create a new instance for regenerable types")
    set_number: int = 1
    previous_questions: list[str] = Field(default_factory=list)
    content_id: str | None = Field(None, description="Content to narrate (audio); defaults to the article")
    voice_id: str | None = None
    char_limit: int | None = None


# ==================== RESPONSE SCHEMAS ====================


class ArtifactResponse(BaseModel):
    """Persisted artifact record as returned to clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    query_id: str = Field(..., serialization_alias="queryId")
    content_type: ArtifactType = Field(..., serialization_alias="contentType")
    title: str
    payload: dict[str, Any]
    storage_url: str | None = Field(None, serialization_alias="storageUrl")
    degraded: bool = False
    version_number: int = Field(1, serialization_alias="versionNumber")
    generated_at: datetime = Field(..., serialization_alias="generatedAt")

    @classmethod
    def from_artifact(cls, artifact: Any) -> "ArtifactResponse":
        return cls(
            id=artifact.id,
            query_id=artifact.query_id,
            content_type=ArtifactType(artifact.artifact_type),
            title=artifact.title,
            payload=artifact.payload or {},
            storage_url=artifact.storage_url,
            degraded=artifact.degraded,
            version_number=artifact.version_number,
            generated_at=artifact.generated_at,
        )


# ==================== REQUEST SCHEMAS ====================


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query_id: str = Field(..., alias="queryId", min_length=1)


class ArticleRequest(_Request):
    pass


class PresentationRequest(_Request):
    pass


class ConceptMapRequest(_Request):
    pass


class DiagramsRequest(_Request):
    count: int = Field(3, ge=1, le=10)


class FlashcardsRequest(_Request):
    card_count: int = Field(15, alias="cardCount", ge=1, le=50)


class QuizRequest(_Request):
    num_questions: int = Field(10, alias="numQuestions", ge=1, le=50)
    regenerate: bool = False


class AudioRequest(_Request):
    content_id: str = Field(..., alias="contentId", min_length=1)
    voice_id: str | None = Field(None, alias="voiceId")
