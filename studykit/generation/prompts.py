"""Prompts for LLM-backed artifact generation.

Each prompt asks for JSON only and embeds an example of the exact shape the
payload schemas validate. Templates are filled with str.format, so literal
braces in the JSON examples are doubled.
"""

SYSTEM_PROMPT = (
    "You are an expert educator who turns research into clear learning material. "
    "When asked for JSON, respond with valid JSON only: no markdown, no commentary."
)

LEVEL_GUIDANCE: dict[str, str] = {
    "elementary": "Use simple words, short sentences and everyday examples a 10-year-old understands.",
    "high-school": "Use clear explanations with some technical terms, each defined when first used.",
    "college": "Use precise academic language, cover mechanisms and cite key evidence.",
    "adult": "Be practical and concise; favor real-world relevance over theory.",
}

# Focus area per quiz set, cycled by set number
SET_FOCUSES: list[str] = [
    "core concepts, definitions, and fundamental principles",
    "real-world applications, examples, and practical uses",
    'common misconceptions, edge cases, and "why" questions',
    "historical context, development, and key figures or events",
    "comparisons, relationships between concepts, and synthesis",
    "critical thinking, analysis, and problem-solving scenarios",
]

# Previously asked questions included in a regeneration prompt
MAX_PREVIOUS_QUESTIONS = 30

ARTICLE_PROMPT = """Write an educational article about "{topic}" for {level}-level readers.

{level_guidance}

Structure the article with a short introduction, 3-5 sections with markdown headings, and a conclusion.
Return the article text only.
"""

QUIZ_PROMPT = """Create a practice quiz (Set #{set_number}) about "{topic}" for {level}-level students.

This set should focus specifically on: {focus}
{previous_block}
Source material:
{source_text}

Generate exactly {num_questions} questions. Mix multiple-choice (4 options), true-false, fill-blank and short-answer.
Return JSON in this shape:
{{
  "topic": "{topic}",
  "level": "{level}",
  "setNumber": {set_number},
  "totalQuestions": {num_questions},
  "questions": [
    {{
      "id": 1,
      "question": "...",
      "type": "multiple-choice",
      "difficulty": "easy",
      "options": ["A", "B", "C", "D"],
      "correctAnswer": "A",
      "explanation": "...",
      "category": "concept"
    }}
  ]
}}
"""

FLASHCARD_PROMPT = """Create {card_count} study flashcards about "{topic}" for {level}-level students.

Source material:
{source_text}

Each card has one focused question and a concise answer.
Return JSON in this shape:
{{
  "topic": "{topic}",
  "level": "{level}",
  "totalCards": {card_count},
  "cards": [
    {{"id": 1, "question": "...", "answer": "...", "category": "definition", "difficulty": "easy"}}
  ]
}}
"""

PRESENTATION_PROMPT = """Create a slide presentation about "{topic}" for {level}-level students.

Source material:
{source_text}

Use 6-10 slides. Slide types: title, definition, bullet-points, equation, comparison, summary.
Return JSON in this shape:
{{
  "topic": "{topic}",
  "level": "{level}",
  "totalSlides": 2,
  "slides": [
    {{"id": 1, "type": "title", "title": "{topic}", "subtitle": "...", "background": "gradient-blue"}},
    {{"id": 2, "type": "bullet-points", "title": "...", "points": ["..."], "background": "light"}}
  ]
}}
"""

DIAGRAM_PROMPT = """Create {count} mermaid diagrams that explain "{topic}" for {level}-level students.

Source material:
{source_text}

Choose from flowchart, cycle, hierarchy, comparison, timeline and process diagrams.
Use valid mermaid syntax and keep node labels under 30 characters.
Return JSON in this shape:
{{
  "diagrams": [
    {{
      "id": 1,
      "title": "...",
      "type": "flowchart",
      "description": "...",
      "mermaidCode": "graph TD\\n  A[Start] --> B[End]"
    }}
  ]
}}
"""


def level_guidance(level: str) -> str:
    return LEVEL_GUIDANCE.get(level, LEVEL_GUIDANCE["college"])


def quiz_focus(set_number: int) -> str:
    return SET_FOCUSES[(max(set_number, 1) - 1) % len(SET_FOCUSES)]


def previous_questions_block(previous_questions: list[str]) -> str:
    """Exclusion list for a regenerated quiz set, newest questions kept."""
    if not previous_questions:
        return ""
    recent = previous_questions[-MAX_PREVIOUS_QUESTIONS:]
    lines = "\n".join(f"{i}. {question}" for i, question in enumerate(recent, start=1))
    return f"\nIMPORTANT - Do NOT generate questions similar to these already-asked questions:\n{lines}\n"
