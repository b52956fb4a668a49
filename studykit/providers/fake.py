"""Scenario-based fakes for the provider protocols.

Used when no API keys are configured (local development) and throughout the
test suite. All scenarios return instantly unless ``delay`` is set.

TextGeneratorFake scenarios:
- happy_path: realistic JSON wrapped in prose and markdown fences
- llm_failure: every call raises GenerationError
- malformed: prose with no JSON in it
"""

import asyncio
import json

from studykit.core.exceptions import GenerationError

_ARTICLE_TEXT = (
    "# Photosynthesis\n\n"
    "Photosynthesis is the process plants use to convert light energy into chemical energy. "
    "It takes place mainly in the chloroplasts of leaf cells, where chlorophyll absorbs light. "
    "The light-dependent reactions split water and release oxygen as a by-product. "
    "The Calvin cycle then fixes carbon dioxide into sugars the plant uses to grow. "
    "Without photosynthesis, most life on Earth would lack both food and oxygen."
)

_QUIZ = {
    "topic": "Photosynthesis",
    "level": "college",
    "setNumber": 1,
    "totalQuestions": 3,
    "questions": [
        {
            "id": 1,
            "question": "Where does photosynthesis mainly take place?",
            "type": "multiple-choice",
            "difficulty": "easy",
            "options": ["Chloroplasts", "Mitochondria", "Nucleus", "Ribosomes"],
            "correctAnswer": "Chloroplasts",
            "explanation": "Chloroplasts contain chlorophyll, which absorbs light.",
            "category": "concept",
        },
        {
            "id": 2,
            "question": "Oxygen is released during the light-dependent reactions.",
            "type": "true-false",
            "difficulty": "medium",
            "options": ["True", "False"],
            "correctAnswer": "True",
            "explanation": "Water is split and oxygen is released.",
            "category": "process",
        },
        {
            "id": 3,
            "question": "The cycle that fixes carbon dioxide is the ____ cycle.",
            "type": "fill-blank",
            "difficulty": "medium",
            "correctAnswer": "Calvin",
            "explanation": "The Calvin cycle builds sugars from CO2.",
            "category": "process",
        },
    ],
}

_FLASHCARDS = {
    "topic": "Photosynthesis",
    "level": "college",
    "totalCards": 2,
    "cards": [
        {"id": 1, "question": "What pigment absorbs light?", "answer": "Chlorophyll", "category": "definition"},
        {"id": 2, "question": "What gas is fixed in the Calvin cycle?", "answer": "Carbon dioxide", "category": "process"},
    ],
}

_PRESENTATION = {
    "topic": "Photosynthesis",
    "level": "college",
    "totalSlides": 3,
    "slides": [
        {"id": 1, "type": "title", "title": "Photosynthesis", "subtitle": "How plants capture light", "background": "gradient-blue"},
        {
            "id": 2,
            "type": "bullet-points",
            "title": "Two stages",
            "points": ["Light-dependent reactions", "Calvin cycle"],
            "background": "light",
        },
        {"id": 3, "type": "summary", "title": "Summary", "content": "Light becomes sugar.", "background": "gradient-purple"},
    ],
}

_DIAGRAMS = {
    "diagrams": [
        {
            "id": 1,
            "title": "Photosynthesis overview",
            "type": "flowchart",
            "description": "Inputs and outputs",
            "mermaidCode": "graph LR\n  A[Light + Water + CO2] --> B[Chloroplast]\n  B --> C[Glucose + O2]",
        },
    ],
}


class TextGeneratorFake:
    """TextGenerator test double choosing a canned response from the prompt's JSON shape."""

    VALID_SCENARIOS = {"happy_path", "llm_failure", "malformed"}

    def __init__(self, scenario: str = "happy_path", delay: float = 0.0):
        if scenario not in self.VALID_SCENARIOS:
            raise ValueError(f"Unknown scenario: {scenario}. Valid scenarios: {self.VALID_SCENARIOS}")
        self.scenario = scenario
        self.delay = delay
        self.calls: list[str] = []

    async def generate(self, prompt: str, system: str | None = None) -> str:
        self.calls.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)

        if self.scenario == "llm_failure":
            raise GenerationError("Anthropic API rate limit exceeded. Retry after 60 seconds.")
        if self.scenario == "malformed":
            return "I'm sorry, I can't produce that in the requested format right now."

        if '"questions"' in prompt:
            payload = _QUIZ
        elif '"cards"' in prompt:
            payload = _FLASHCARDS
        elif '"slides"' in prompt:
            payload = _PRESENTATION
        elif '"diagrams"' in prompt:
            payload = _DIAGRAMS
        else:
            return _ARTICLE_TEXT
        return f"Here is the content you asked for:\n```json\n{json.dumps(payload, indent=2)}\n```\nLet me know if you need changes."


class SpeechSynthesizerFake:
    """SpeechSynthesizer test double returning fake MP3 bytes."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple[str, str]] = []

    async def generate(self, text: str, voice_id: str) -> bytes:
        self.calls.append((text, voice_id))
        if self.fail:
            raise GenerationError("Speech synthesis failed", "audio")
        return b"ID3fake-mp3:" + text[:32].encode()


class InMemoryAudioStorage:
    """AudioStorage test double keeping uploads in a dict."""

    def __init__(self, base_url: str = "https://audio.test"):
        self.base_url = base_url
        self.objects: dict[str, bytes] = {}

    async def upload(self, key: str, data: bytes, content_type: str = "audio/mpeg") -> str:
        self.objects[key] = data
        return f"{self.base_url}/{key}"
