"""GeneratorRegistry: per-type primary strategy plus optional fallback.

dispatch() runs the primary under asyncio.wait_for. On GenerationError (a
timeout is one), or on ParseError when the binding allows it, the fallback
runs and its payload is tagged ``degraded: true``. Without a fallback the
failure propagates as GenerationError. There is no retry.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Protocol

import structlog

from studykit.core.exceptions import GenerationError, ParseError
from studykit.schemas.artifacts import ArtifactType, GenerationOptions

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0


class GenerationStrategy(Protocol):
    name: str

    async def generate(self, topic: str, source_text: str | None, options: GenerationOptions) -> dict[str, Any]: ...


@dataclass(frozen=True)
class StrategyBinding:
    primary: GenerationStrategy
    fallback: GenerationStrategy | None = None
    fallback_on_parse_error: bool = True


@dataclass(frozen=True)
class GenerationOutcome:
    payload: dict[str, Any]
    degraded: bool
    strategy: str


class GeneratorRegistry:
    def __init__(self, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        self.timeout_seconds = timeout_seconds
        self._bindings: dict[ArtifactType, StrategyBinding] = {}

    def register(
        self,
        artifact_type: ArtifactType,
        primary: GenerationStrategy,
        fallback: GenerationStrategy | None = None,
        *,
        fallback_on_parse_error: bool = True,
    ) -> None:
        self._bindings[artifact_type] = StrategyBinding(primary, fallback, fallback_on_parse_error)

    def binding(self, artifact_type: ArtifactType) -> StrategyBinding:
        try:
            return self._bindings[artifact_type]
        except KeyError:
            raise GenerationError(f"No generator registered for {artifact_type.value}", artifact_type.value) from None

    def has_fallback(self, artifact_type: ArtifactType) -> bool:
        return self.binding(artifact_type).fallback is not None

    async def _run_primary(
        self,
        binding: StrategyBinding,
        artifact_type: ArtifactType,
        topic: str,
        source_text: str | None,
        options: GenerationOptions,
    ) -> dict[str, Any]:
        try:
            return await asyncio.wait_for(
                binding.primary.generate(topic, source_text, options),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as exc:
            raise GenerationError(
                f"{binding.primary.name} timed out after {self.timeout_seconds}s", artifact_type.value
            ) from exc

    async def dispatch(
        self,
        artifact_type: ArtifactType,
        topic: str,
        source_text: str | None,
        options: GenerationOptions,
    ) -> GenerationOutcome:
        binding = self.binding(artifact_type)
        try:
            payload = await self._run_primary(binding, artifact_type, topic, source_text, options)
        except (GenerationError, ParseError) as exc:
            fallback_allowed = isinstance(exc, GenerationError) or binding.fallback_on_parse_error
            logger.warning(
                "generation_primary_failed",
                artifact_type=artifact_type.value,
                strategy=binding.primary.name,
                error=str(exc),
                error_type=type(exc).__name__,
                has_fallback=binding.fallback is not None,
            )
            if binding.fallback is None or not fallback_allowed:
                if isinstance(exc, GenerationError):
                    if exc.artifact_type is None:
                        exc.artifact_type = artifact_type.value
                    raise
                raise GenerationError(str(exc), artifact_type.value) from exc

            payload = await binding.fallback.generate(topic, source_text, options)
            if not payload:
                raise GenerationError(f"{binding.fallback.name} produced no content", artifact_type.value) from exc
            logger.info(
                "generation_fallback_used",
                artifact_type=artifact_type.value,
                strategy=binding.fallback.name,
            )
            return GenerationOutcome(payload={**payload, "degraded": True}, degraded=True, strategy=binding.fallback.name)

        if not payload:
            raise GenerationError(f"{binding.primary.name} produced no content", artifact_type.value)
        return GenerationOutcome(payload=payload, degraded=False, strategy=binding.primary.name)
