"""Default registry wiring from settings.

Real providers are used when their credentials are configured; otherwise the
scenario fakes stand in so the service runs locally without API keys.
"""

import structlog

from studykit.core.config import Settings, get_settings
from studykit.generation.fallbacks import (
    KeyPointConceptMapStrategy,
    SentenceSlidesFallback,
    TemplateDiagramsFallback,
)
from studykit.generation.registry import GeneratorRegistry
from studykit.generation.strategies import (
    ArticleStrategy,
    AudioNarrationStrategy,
    DiagramStrategy,
    FlashcardStrategy,
    PresentationStrategy,
    QuizStrategy,
)
from studykit.providers.anthropic_text import AnthropicTextGenerator
from studykit.providers.base import AudioStorage, SpeechSynthesizer, TextGenerator
from studykit.providers.elevenlabs import ElevenLabsSynthesizer
from studykit.providers.fake import SpeechSynthesizerFake, TextGeneratorFake
from studykit.providers.storage import LocalAudioStorage, S3AudioStorage
from studykit.schemas.artifacts import ArtifactType

logger = structlog.get_logger(__name__)


def build_text_generator(settings: Settings) -> TextGenerator:
    if settings.anthropic_api_key:
        return AnthropicTextGenerator()
    logger.warning("text_generator_fake_in_use", reason="no_anthropic_api_key")
    return TextGeneratorFake()


def build_speech_synthesizer(settings: Settings) -> SpeechSynthesizer:
    if settings.elevenlabs_api_key:
        return ElevenLabsSynthesizer()
    logger.warning("speech_synthesizer_fake_in_use", reason="no_elevenlabs_api_key")
    return SpeechSynthesizerFake()


def build_audio_storage(settings: Settings) -> AudioStorage:
    if settings.audio_bucket:
        return S3AudioStorage(
            bucket=settings.audio_bucket,
            public_base_url=settings.audio_public_base_url,
            endpoint_url=settings.audio_endpoint_url,
            region=settings.audio_region,
        )
    return LocalAudioStorage(settings.local_audio_dir)


def build_default_registry(
    settings: Settings | None = None,
    *,
    text: TextGenerator | None = None,
    speech: SpeechSynthesizer | None = None,
    storage: AudioStorage | None = None,
) -> GeneratorRegistry:
    """Bind every artifact type to its primary and fallback strategy."""
    settings = settings or get_settings()
    text = text or build_text_generator(settings)
    speech = speech or build_speech_synthesizer(settings)
    storage = storage or build_audio_storage(settings)
    chars = settings.source_text_chars

    registry = GeneratorRegistry(timeout_seconds=settings.generation_timeout_seconds)
    registry.register(ArtifactType.ARTICLE, ArticleStrategy(text))
    registry.register(ArtifactType.QUIZ, QuizStrategy(text, chars))
    registry.register(ArtifactType.FLASHCARDS, FlashcardStrategy(text, chars))
    registry.register(ArtifactType.PRESENTATION, PresentationStrategy(text, chars), SentenceSlidesFallback())
    registry.register(ArtifactType.DIAGRAMS, DiagramStrategy(text, chars), TemplateDiagramsFallback())
    registry.register(ArtifactType.CONCEPT_MAP, KeyPointConceptMapStrategy())
    registry.register(
        ArtifactType.AUDIO,
        AudioNarrationStrategy(speech, storage, settings.default_voice_id),
    )
    return registry
