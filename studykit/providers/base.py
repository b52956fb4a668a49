"""Provider protocols: the narrow contracts generation strategies depend on.

Implementations translate their SDK's exceptions into GenerationError so
strategies and the registry only ever see the application taxonomy.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class TextGenerator(Protocol):
    async def generate(self, prompt: str, system: str | None = None) -> str:
        """Return the completion text for ``prompt``."""
        ...


@runtime_checkable
class SpeechSynthesizer(Protocol):
    async def generate(self, text: str, voice_id: str) -> bytes:
        """Return MP3 audio for ``text`` spoken by ``voice_id``."""
        ...


@runtime_checkable
class AudioStorage(Protocol):
    async def upload(self, key: str, data: bytes, content_type: str = "audio/mpeg") -> str:
        """Store ``data`` under ``key`` and return its public URL."""
        ...
