"""Tests for LLM-backed strategies and audio narration."""

import json
from unittest.mock import patch

import pytest

from studykit.core.exceptions import GenerationError, ParseError
from studykit.generation.strategies import (
    ArticleStrategy,
    AudioNarrationStrategy,
    DiagramStrategy,
    FlashcardStrategy,
    LLMStrategy,
    PresentationStrategy,
    QuizStrategy,
)
from studykit.providers.fake import InMemoryAudioStorage, SpeechSynthesizerFake, TextGeneratorFake
from studykit.schemas.artifacts import ComplexityLevel, GenerationOptions, QuizContent

pytestmark = pytest.mark.unit


class _CannedText:
    """TextGenerator returning a fixed completion and recording prompts."""

    def __init__(self, completion: str):
        self.completion = completion
        self.prompts: list[str] = []

    async def generate(self, prompt, system=None):
        self.prompts.append(prompt)
        return self.completion


async def test_article_strategy_returns_text_and_level():
    payload = await ArticleStrategy(TextGeneratorFake()).generate(
        "Photosynthesis", None, GenerationOptions(level=ComplexityLevel.ELEMENTARY)
    )
    assert payload["text"].startswith("# Photosynthesis")
    assert payload["level"] == "elementary"


async def test_quiz_strategy_normalizes_set_number_and_total():
    options = GenerationOptions(set_number=2, previous_questions=["What is light?"])
    client = TextGeneratorFake()

    payload = await QuizStrategy(client).generate("Photosynthesis", "source text", options)

    assert payload["setNumber"] == 2
    assert payload["totalQuestions"] == len(payload["questions"]) == 3
    assert payload["questions"][0]["correctAnswer"] == "Chloroplasts"
    prompt = client.calls[0]
    assert "Set #2" in prompt
    assert "real-world applications" in prompt
    assert "1. What is light?" in prompt


async def test_source_text_is_bounded_in_prompt():
    client = _CannedText(json.dumps({"topic": "t", "level": "college", "cards": [{"id": 1, "question": "q", "answer": "a"}]}))
    await FlashcardStrategy(client, source_chars=10).generate("t", "A" * 10 + "B" * 50, GenerationOptions())
    assert "A" * 10 in client.prompts[0]
    assert "B" not in client.prompts[0].split("Source material:")[1].split("Each card")[0]


async def test_flashcards_total_matches_cards():
    payload = await FlashcardStrategy(TextGeneratorFake()).generate("t", "src", GenerationOptions())
    assert payload["totalCards"] == len(payload["cards"]) == 2


async def test_presentation_total_matches_slides():
    payload = await PresentationStrategy(TextGeneratorFake()).generate("t", "src", GenerationOptions())
    assert payload["totalSlides"] == 3


async def test_diagrams_capped_to_requested_count():
    diagrams = [{"id": i, "title": f"d{i}", "mermaidCode": "graph TD\n A-->B"} for i in range(1, 5)]
    client = _CannedText(json.dumps({"diagrams": diagrams}))
    payload = await DiagramStrategy(client).generate("t", "src", GenerationOptions(count=2))
    assert [d["id"] for d in payload["diagrams"]] == [1, 2]


async def test_malformed_completion_raises_parse_error():
    with pytest.raises(ParseError):
        await PresentationStrategy(TextGeneratorFake(scenario="malformed")).generate("t", "src", GenerationOptions())


async def test_schema_mismatch_raises_parse_error():
    client = _CannedText('{"topic": "t", "level": "college", "slides": []}')
    with pytest.raises(ParseError, match="does not match schema"):
        await PresentationStrategy(client).generate("t", "src", GenerationOptions())


def test_llm_strategy_base_cannot_be_instantiated():
    with pytest.raises(TypeError):
        LLMStrategy(TextGeneratorFake())


def test_llm_strategy_requires_schema_and_prompt():
    class NoSchema(LLMStrategy):
        def build_prompt(self, topic, source_text, options):
            return topic

    class NoPrompt(LLMStrategy):
        schema = QuizContent

    for cls in (NoSchema, NoPrompt):
        with pytest.raises(TypeError):
            cls(TextGeneratorFake())


async def test_provider_failure_raises_generation_error():
    with pytest.raises(GenerationError):
        await QuizStrategy(TextGeneratorFake(scenario="llm_failure")).generate("t", "src", GenerationOptions())


class TestAudioNarration:
    async def test_short_text_is_not_truncated(self):
        speech, storage = SpeechSynthesizerFake(), InMemoryAudioStorage()
        strategy = AudioNarrationStrategy(speech, storage, default_voice_id="voice-default")

        payload = await strategy.generate("t", "Hello world", GenerationOptions(content_id="c1", char_limit=5000))

        assert payload["truncated"] is False
        assert "truncatedAt" not in payload
        assert payload["sourceLength"] == 11
        assert payload["voiceId"] == "voice-default"
        assert payload["originalContentId"] == "c1"
        assert payload["storageUrl"].startswith("https://audio.test/audio/c1-")
        assert speech.calls == [("Hello world", "voice-default")]
        assert len(storage.objects) == 1

    async def test_long_text_is_truncated_with_ellipsis(self):
        speech = SpeechSynthesizerFake()
        strategy = AudioNarrationStrategy(speech, InMemoryAudioStorage(), default_voice_id="v")

        payload = await strategy.generate(
            "t", "x" * 120, GenerationOptions(content_id="c1", char_limit=100, voice_id="custom")
        )

        assert payload["truncated"] is True
        assert payload["truncatedAt"] == 100
        assert payload["sourceLength"] == 120
        text, voice = speech.calls[0]
        assert text == "x" * 100 + "..."
        assert voice == "custom"

    async def test_synthesis_failure_propagates(self):
        strategy = AudioNarrationStrategy(SpeechSynthesizerFake(fail=True), InMemoryAudioStorage(), "v")
        with pytest.raises(GenerationError):
            await strategy.generate("t", "text", GenerationOptions(content_id="c1"))

    async def test_empty_text_rejected(self):
        strategy = AudioNarrationStrategy(SpeechSynthesizerFake(), InMemoryAudioStorage(), "v")
        with pytest.raises(GenerationError):
            await strategy.generate("t", "  ", GenerationOptions(content_id="c1"))

    async def test_same_millisecond_uploads_get_distinct_keys(self):
        storage = InMemoryAudioStorage()
        strategy = AudioNarrationStrategy(SpeechSynthesizerFake(), storage, "v")

        with patch("studykit.generation.strategies.time.time", return_value=1_700_000_000.0):
            first = await strategy.generate("t", "text", GenerationOptions(content_id="c1"))
            second = await strategy.generate("t", "text", GenerationOptions(content_id="c1"))

        assert first["storageUrl"] != second["storageUrl"]
        assert len(storage.objects) == 2
