"""ElevenLabs text-to-speech adapter over httpx."""

import httpx
import structlog

from studykit.core.config import get_settings
from studykit.core.exceptions import GenerationError

logger = structlog.get_logger(__name__)

ELEVENLABS_BASE_URL = "https://api.elevenlabs.io/v1"
_TIMEOUT = httpx.Timeout(60.0, connect=10.0)


class ElevenLabsSynthesizer:
    """SpeechSynthesizer calling POST /text-to-speech/{voice_id}/stream.

    ``transport`` lets tests substitute an httpx.MockTransport.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model_id: str | None = None,
        base_url: str = ELEVENLABS_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.api_key = api_key or settings.elevenlabs_api_key
        self.model_id = model_id or settings.elevenlabs_model_id
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    async def generate(self, text: str, voice_id: str) -> bytes:
        url = f"{self.base_url}/text-to-speech/{voice_id}/stream"
        body = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": {"stability": 0.5, "similarity_boost": 0.75},
        }
        headers = {"xi-api-key": self.api_key, "Accept": "audio/mpeg"}

        try:
            async with httpx.AsyncClient(timeout=_TIMEOUT, transport=self._transport) as client:
                response = await client.post(url, json=body, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "elevenlabs_request_failed",
                status_code=exc.response.status_code,
                voice_id=voice_id,
            )
            raise GenerationError(f"ElevenLabs returned HTTP {exc.response.status_code}", "audio") from exc
        except httpx.HTTPError as exc:
            logger.warning("elevenlabs_unreachable", error=str(exc), error_type=type(exc).__name__)
            raise GenerationError("ElevenLabs request failed", "audio") from exc

        if not response.content:
            raise GenerationError("ElevenLabs returned no audio", "audio")

        logger.info("elevenlabs_audio_generated", voice_id=voice_id, chars=len(text), bytes=len(response.content))
        return response.content
