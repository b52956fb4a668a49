"""Primary generation strategies.

Strategy contract: ``await strategy.generate(topic, source_text, options)``
returns a JSON-ready payload dict. Provider failures surface as
GenerationError; unusable LLM output surfaces as ParseError.
"""

import time
from abc import ABC, abstractmethod
from typing import Any, ClassVar
from uuid import uuid4

import structlog
from pydantic import ValidationError as PydanticValidationError

from studykit.core.exceptions import GenerationError, ParseError
from studykit.generation import prompts
from studykit.generation.extraction import extract_json
from studykit.providers.base import AudioStorage, SpeechSynthesizer, TextGenerator
from studykit.schemas.artifacts import (
    ArticleContent,
    AudioContent,
    DiagramSet,
    FlashcardDeck,
    GenerationOptions,
    PresentationContent,
    QuizContent,
    _Payload,
)

logger = structlog.get_logger(__name__)

DEFAULT_SOURCE_CHARS = 4000


class LLMStrategy(ABC):
    """Prompt -> completion -> extract JSON -> validate against a payload schema.

    Subclasses set ``schema`` as a class attribute and implement build_prompt().
    """

    name: ClassVar[str] = "llm"

    def __init__(self, client: TextGenerator, source_chars: int = DEFAULT_SOURCE_CHARS):
        self.client = client
        self.source_chars = source_chars

    @property
    @abstractmethod
    def schema(self) -> type[_Payload]:
        """Payload model the completion is validated against."""

    @abstractmethod
    def build_prompt(self, topic: str, source_text: str | None, options: GenerationOptions) -> str:
        """Render the user prompt for this artifact type."""

    def finalize(self, content: Any, topic: str, options: GenerationOptions) -> Any:
        """Hook to normalize validated content before it is dumped."""
        return content

    def source_prefix(self, source_text: str | None) -> str:
        return (source_text or "")[: self.source_chars]

    async def generate(self, topic: str, source_text: str | None, options: GenerationOptions) -> dict[str, Any]:
        prompt = self.build_prompt(topic, source_text, options)
        completion = await self.client.generate(prompt, system=prompts.SYSTEM_PROMPT)

        data = extract_json(completion)
        if not isinstance(data, dict):
            raise ParseError(f"{self.name}: expected a JSON object, got {type(data).__name__}")
        try:
            content = self.schema.model_validate(data)
        except PydanticValidationError as exc:
            raise ParseError(f"{self.name}: response does not match schema ({exc.error_count()} errors)") from exc

        return self.finalize(content, topic, options).to_payload()


class ArticleStrategy:
    """Writes the base article from the topic alone; output is plain text."""

    name = "llm_article"

    def __init__(self, client: TextGenerator):
        self.client = client

    async def generate(self, topic: str, source_text: str | None, options: GenerationOptions) -> dict[str, Any]:
        level = options.level.value
        prompt = prompts.ARTICLE_PROMPT.format(
            topic=topic,
            level=level,
            level_guidance=prompts.level_guidance(level),
        )
        text = await self.client.generate(prompt, system=prompts.SYSTEM_PROMPT)
        if not text.strip():
            raise GenerationError("Empty article", "article")
        return ArticleContent(text=text.strip(), level=level).to_payload()


class QuizStrategy(LLMStrategy):
    name = "llm_quiz"
    schema = QuizContent

    def build_prompt(self, topic: str, source_text: str | None, options: GenerationOptions) -> str:
        return prompts.QUIZ_PROMPT.format(
            topic=topic,
            level=options.level.value,
            set_number=options.set_number,
            focus=prompts.quiz_focus(options.set_number),
            previous_block=prompts.previous_questions_block(options.previous_questions),
            source_text=self.source_prefix(source_text),
            num_questions=options.num_questions,
        )

    def finalize(self, content: QuizContent, topic: str, options: GenerationOptions) -> QuizContent:
        content.set_number = options.set_number
        content.total_questions = len(content.questions)
        return content


class FlashcardStrategy(LLMStrategy):
    name = "llm_flashcards"
    schema = FlashcardDeck

    def build_prompt(self, topic: str, source_text: str | None, options: GenerationOptions) -> str:
        return prompts.FLASHCARD_PROMPT.format(
            topic=topic,
            level=options.level.value,
            card_count=options.card_count,
            source_text=self.source_prefix(source_text),
        )

    def finalize(self, content: FlashcardDeck, topic: str, options: GenerationOptions) -> FlashcardDeck:
        content.total_cards = len(content.cards)
        return content


class PresentationStrategy(LLMStrategy):
    name = "llm_presentation"
    schema = PresentationContent

    def build_prompt(self, topic: str, source_text: str | None, options: GenerationOptions) -> str:
        return prompts.PRESENTATION_PROMPT.format(
            topic=topic,
            level=options.level.value,
            source_text=self.source_prefix(source_text),
        )

    def finalize(self, content: PresentationContent, topic: str, options: GenerationOptions) -> PresentationContent:
        content.total_slides = len(content.slides)
        return content


class DiagramStrategy(LLMStrategy):
    name = "llm_diagrams"
    schema = DiagramSet

    def build_prompt(self, topic: str, source_text: str | None, options: GenerationOptions) -> str:
        return prompts.DIAGRAM_PROMPT.format(
            topic=topic,
            level=options.level.value,
            count=options.count,
            source_text=self.source_prefix(source_text),
        )

    def finalize(self, content: DiagramSet, topic: str, options: GenerationOptions) -> DiagramSet:
        content.diagrams = content.diagrams[: options.count]
        return content


class AudioNarrationStrategy:
    """Synthesizes speech for a content's text and stores the MP3.

    Text longer than ``options.char_limit`` is cut and suffixed with "...".
    The returned payload carries the storage URL under ``storageUrl``.
    """

    name = "speech_synthesis"

    def __init__(self, speech: SpeechSynthesizer, storage: AudioStorage, default_voice_id: str):
        self.speech = speech
        self.storage = storage
        self.default_voice_id = default_voice_id

    async def generate(self, topic: str, source_text: str | None, options: GenerationOptions) -> dict[str, Any]:
        text = source_text or ""
        if not text.strip():
            raise GenerationError("No text content to convert", "audio")

        source_length = len(text)
        limit = options.char_limit or source_length
        truncated = source_length > limit
        if truncated:
            text = text[:limit] + "..."

        voice_id = options.voice_id or self.default_voice_id
        audio = await self.speech.generate(text, voice_id)

        content_id = options.content_id or "query"
        key = f"audio/{content_id}-{int(time.time() * 1000)}-{uuid4().hex}.mp3"
        url = await self.storage.upload(key, audio, content_type="audio/mpeg")

        logger.info("audio_narration_generated", key=key, chars=len(text), truncated=truncated)
        return AudioContent(
            storage_url=url,
            voice_id=voice_id,
            original_content_id=options.content_id,
            source_length=source_length,
            truncated=truncated,
            truncated_at=limit if truncated else None,
        ).to_payload()
