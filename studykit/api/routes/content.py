"""Content API routes: one endpoint per artifact type plus read, delete and allowance.

Handlers stay thin: parse the body, call ContentOrchestrator.ensure_artifact()
and shape the response. StudyKitError subclasses are rendered by the
application exception handler.
"""

from fastapi import APIRouter, Depends, status

from studykit.api.deps import get_orchestrator
from studykit.core.auth import AuthUser, require_auth
from studykit.schemas.artifacts import (
    ArticleRequest,
    ArtifactResponse,
    ArtifactType,
    AudioRequest,
    ConceptMapRequest,
    DiagramsRequest,
    FlashcardsRequest,
    GenerationOptions,
    PresentationRequest,
    QuizRequest,
)
from studykit.services.orchestrator import ContentOrchestrator

router = APIRouter()


@router.post("/article")
async def generate_article(
    request: ArticleRequest,
    user: AuthUser = Depends(require_auth),
    orchestrator: ContentOrchestrator = Depends(get_orchestrator),
) -> dict:
    result = await orchestrator.ensure_artifact(user.user_id, request.query_id, ArtifactType.ARTICLE)
    return {"success": True, "articleId": result.artifact.id, "cached": result.cached}


@router.post("/presentation")
async def generate_presentation(
    request: PresentationRequest,
    user: AuthUser = Depends(require_auth),
    orchestrator: ContentOrchestrator = Depends(get_orchestrator),
) -> dict:
    result = await orchestrator.ensure_artifact(user.user_id, request.query_id, ArtifactType.PRESENTATION)
    payload = result.artifact.payload or {}
    return {
        "success": True,
        "presentationId": result.artifact.id,
        "slideCount": payload.get("totalSlides", len(payload.get("slides", []))),
        "cached": result.cached,
        "degraded": result.degraded,
    }


@router.post("/diagrams")
async def generate_diagrams(
    request: DiagramsRequest,
    user: AuthUser = Depends(require_auth),
    orchestrator: ContentOrchestrator = Depends(get_orchestrator),
) -> dict:
    result = await orchestrator.ensure_artifact(
        user.user_id, request.query_id, ArtifactType.DIAGRAMS, GenerationOptions(count=request.count)
    )
    return {
        "success": True,
        "diagramsId": result.artifact.id,
        "diagramCount": len((result.artifact.payload or {}).get("diagrams", [])),
        "cached": result.cached,
        "degraded": result.degraded,
    }


@router.post("/flashcards")
async def generate_flashcards(
    request: FlashcardsRequest,
    user: AuthUser = Depends(require_auth),
    orchestrator: ContentOrchestrator = Depends(get_orchestrator),
) -> dict:
    result = await orchestrator.ensure_artifact(
        user.user_id, request.query_id, ArtifactType.FLASHCARDS, GenerationOptions(card_count=request.card_count)
    )
    return {
        "success": True,
        "deckId": result.artifact.id,
        "cardCount": len((result.artifact.payload or {}).get("cards", [])),
        "cached": result.cached,
    }


@router.post("/quiz/generate")
async def generate_quiz(
    request: QuizRequest,
    user: AuthUser = Depends(require_auth),
    orchestrator: ContentOrchestrator = Depends(get_orchestrator),
) -> dict:
    options = GenerationOptions(num_questions=request.num_questions, regenerate=request.regenerate)
    result = await orchestrator.ensure_artifact(user.user_id, request.query_id, ArtifactType.QUIZ, options)
    payload = result.artifact.payload or {}
    return {
        "success": True,
        "quizId": result.artifact.id,
        "setNumber": payload.get("setNumber", result.artifact.sequence),
        "questionCount": len(payload.get("questions", [])),
        "cached": result.cached,
    }


@router.post("/concept-map")
async def generate_concept_map(
    request: ConceptMapRequest,
    user: AuthUser = Depends(require_auth),
    orchestrator: ContentOrchestrator = Depends(get_orchestrator),
) -> dict:
    result = await orchestrator.ensure_artifact(user.user_id, request.query_id, ArtifactType.CONCEPT_MAP)
    return {
        "success": True,
        "conceptMapId": result.artifact.id,
        "conceptMap": result.artifact.payload,
        "cached": result.cached,
    }


@router.post("/audio/generate")
async def generate_audio(
    request: AudioRequest,
    user: AuthUser = Depends(require_auth),
    orchestrator: ContentOrchestrator = Depends(get_orchestrator),
) -> dict:
    options = GenerationOptions(content_id=request.content_id, voice_id=request.voice_id)
    result = await orchestrator.ensure_artifact(user.user_id, request.query_id, ArtifactType.AUDIO, options)
    payload = result.artifact.payload or {}
    return {
        "success": True,
        "audioUrl": result.artifact.storage_url,
        "truncated": payload.get("truncated", False),
        "cached": result.cached,
    }


@router.get("/allowance/{query_id}")
async def get_allowance(
    query_id: str,
    user: AuthUser = Depends(require_auth),
    orchestrator: ContentOrchestrator = Depends(get_orchestrator),
) -> dict:
    """Per-type usage for a query, used by the client to show remaining generations."""
    allowance = await orchestrator.get_allowance(user.user_id, query_id)
    return {
        "plan": allowance.plan,
        "audio": allowance.audio.model_dump(),
        "presentations": allowance.presentations.model_dump(),
        "flashcards": allowance.flashcards.model_dump(),
        "quizzes": allowance.quizzes.model_dump(),
        "audioOnDemand": allowance.audio_on_demand,
    }


@router.get("/{artifact_id}")
async def get_content(
    artifact_id: str,
    user: AuthUser = Depends(require_auth),
    orchestrator: ContentOrchestrator = Depends(get_orchestrator),
) -> dict:
    artifact = await orchestrator.get_artifact(user.user_id, artifact_id)
    return ArtifactResponse.from_artifact(artifact).model_dump(mode="json", by_alias=True)


@router.delete("/{artifact_id}", status_code=status.HTTP_200_OK)
async def delete_content(
    artifact_id: str,
    user: AuthUser = Depends(require_auth),
    orchestrator: ContentOrchestrator = Depends(get_orchestrator),
) -> dict:
    await orchestrator.delete_artifact(user.user_id, artifact_id)
    return {"success": True}
