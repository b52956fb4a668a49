"""Structured extraction of JSON from LLM completions.

LLMs wrap JSON in markdown fences, prepend prose, or append commentary.
extract_json tries progressively looser strategies and raises ParseError
when none yields a JSON object or array.
"""

import json
from typing import Any

from studykit.core.exceptions import ParseError

MAX_RESPONSE_CHARS = 200_000

_CLOSERS = {"{": "}", "[": "]"}


def strip_json_fences(content: str) -> str:
    """Remove markdown code fences wrapping JSON output."""
    content = content.strip()
    if content.startswith("```"):
        first_newline = content.find("\n")
        if first_newline != -1:
            content = content[first_newline + 1 :]
        if content.endswith("```"):
            content = content[:-3].rstrip()
    return content


def _first_opener(text: str) -> int:
    positions = [pos for pos in (text.find("{"), text.find("[")) if pos != -1]
    return min(positions) if positions else -1


def _balanced_slice(text: str, start: int) -> str | None:
    """Return the balanced JSON value starting at ``start``, honoring strings."""
    stack: list[str] = []
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            stack.append(_CLOSERS[char])
        elif char in ("}", "]"):
            if not stack or stack.pop() != char:
                return None
            if not stack:
                return text[start : index + 1]
    return None


def extract_json(text: str, max_chars: int = MAX_RESPONSE_CHARS) -> dict | list:
    """Extract the first JSON object or array from an LLM response.

    Strategies, in order:
    1. Parse the fence-stripped text directly
    2. Slice from the first opener to the matching last closer
    3. Scan for a balanced value, skipping braces inside strings

    Raises:
        ParseError: If the input is empty, oversized, or holds no JSON value
    """
    if not text or not text.strip():
        raise ParseError("Empty response from generator")
    if len(text) > max_chars:
        raise ParseError(f"Response too large to parse ({len(text)} chars)")

    content = strip_json_fences(text)
    try:
        parsed: Any = json.loads(content)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, (dict, list)):
        return parsed

    start = _first_opener(content)
    if start == -1:
        raise ParseError("No JSON object found in response")

    end = content.rfind(_CLOSERS[content[start]])
    if end > start:
        try:
            parsed = json.loads(content[start : end + 1])
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, (dict, list)):
            return parsed

    candidate = _balanced_slice(content, start)
    if candidate is not None:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Malformed JSON in response: {exc.msg}") from exc

    raise ParseError("Unterminated JSON in response")
