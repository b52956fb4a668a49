"""Deterministic local generators.

Used as fallbacks when the LLM primary fails, and as the primary for the
concept map. None of these make network calls or raise for non-empty input.
"""

import math
import re
from typing import Any

from studykit.schemas.artifacts import (
    ConceptLink,
    ConceptMapContent,
    ConceptNode,
    Diagram,
    DiagramSet,
    GenerationOptions,
    PresentationContent,
    PresentationSlide,
)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_MERMAID_UNSAFE = re.compile(r"[\[\]{}()<>\"|;#`]")

CONCEPT_MAP_CENTER = (400, 250)
CONCEPT_MAP_RADIUS = 150
CENTER_COLOR = "#60a5fa"
POINT_COLORS = ["#4ade80", "#a78bfa", "#fbbf24"]


def split_sentences(text: str) -> list[str]:
    return [s.strip() for s in _SENTENCE_SPLIT.split(text or "") if s.strip()]


def extract_key_points(text: str, count: int = 6) -> list[str]:
    """First ``count`` sentences longer than 20 chars, cut to 40 chars for display."""
    sentences = [s for s in split_sentences(text) if len(s) > 20]
    return [s[:40] for s in sentences[:count]]


def extract_key_terms(text: str, count: int = 6) -> list[str]:
    """Distinct long words from the start of the text, safe inside mermaid labels."""
    words = [_MERMAID_UNSAFE.sub("", w).strip(",.:!?'") for w in (text or "").split()]
    words = [w for w in words if len(w) > 5][:10]
    return list(dict.fromkeys(words))[:count]


def _label(text: str) -> str:
    return _MERMAID_UNSAFE.sub("", text).strip()


class SentenceSlidesFallback:
    """Three slides: title, first sentences as bullet points, summary."""

    name = "sentence_slides"

    async def generate(self, topic: str, source_text: str | None, options: GenerationOptions) -> dict[str, Any]:
        level = options.level.value
        sentences = split_sentences(source_text or "")
        slides = [
            PresentationSlide(
                id=1,
                type="title",
                title=topic,
                subtitle=f"Educational Overview for {level} Level",
                background="gradient-blue",
            ),
            PresentationSlide(
                id=2,
                type="bullet-points",
                title="Key Points",
                points=[s[:80] for s in sentences[:5]],
                background="light",
            ),
            PresentationSlide(
                id=3,
                type="summary",
                title="Summary",
                content=sentences[0] if sentences else "Please read the full article for details.",
                background="gradient-purple",
            ),
        ]
        return PresentationContent(topic=topic, level=level, total_slides=len(slides), slides=slides).to_payload()


class TemplateDiagramsFallback:
    """Overview, process and cycle diagrams filled with key terms from the source."""

    name = "template_diagrams"

    async def generate(self, topic: str, source_text: str | None, options: GenerationOptions) -> dict[str, Any]:
        terms = extract_key_terms(source_text or "")

        def term(index: int, default: str) -> str:
            return terms[index] if index < len(terms) else default

        title = _label(topic) or "Topic"
        templates = [
            Diagram(
                id=1,
                title=f"{title} Overview",
                type="concept-map",
                description="Main concept and key components",
                mermaid_code=(
                    f"graph TD\n    A[{title}]\n"
                    f"    A --> B[{term(0, 'Aspect 1')}]\n"
                    f"    A --> C[{term(1, 'Aspect 2')}]\n"
                    f"    A --> D[{term(2, 'Aspect 3')}]"
                ),
            ),
            Diagram(
                id=2,
                title="Process Flow",
                type="flowchart",
                description="Step-by-step progression",
                mermaid_code=(
                    f"graph LR\n    A[Start] --> B[{term(3, 'Step 1')}]\n"
                    f"    B --> C[{term(4, 'Step 2')}]\n"
                    "    C --> D[Result]"
                ),
            ),
            Diagram(
                id=3,
                title="Key Cycle",
                type="cycle",
                description="Recurring process or cycle",
                mermaid_code="graph TD\n    A[Phase 1] --> B[Phase 2]\n    B --> C[Phase 3]\n    C --> A",
            ),
        ]
        count = max(1, min(options.count, len(templates)))
        return DiagramSet(diagrams=templates[:count]).to_payload()


class KeyPointConceptMapStrategy:
    """Radial concept map: the topic at the center, key points around it."""

    name = "key_point_map"

    async def generate(self, topic: str, source_text: str | None, options: GenerationOptions) -> dict[str, Any]:
        points = extract_key_points(source_text or "", 6)
        center_x, center_y = CONCEPT_MAP_CENTER

        nodes = [
            ConceptNode(
                id="center",
                label=topic[:30],
                description=topic,
                category="main",
                x=center_x,
                y=center_y,
                color=CENTER_COLOR,
            )
        ]
        links: list[ConceptLink] = []
        for index, point in enumerate(points):
            angle = index / len(points) * 2 * math.pi
            node_id = f"point-{index}"
            nodes.append(
                ConceptNode(
                    id=node_id,
                    label=point[:30],
                    description=point,
                    category="key-point",
                    x=round(center_x + CONCEPT_MAP_RADIUS * math.cos(angle), 2),
                    y=round(center_y + CONCEPT_MAP_RADIUS * math.sin(angle), 2),
                    color=POINT_COLORS[index % len(POINT_COLORS)],
                )
            )
            links.append(ConceptLink(from_="center", to=node_id))

        return ConceptMapContent(main_topic=topic, nodes=nodes, links=links).to_payload()
