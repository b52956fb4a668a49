"""Application exception taxonomy.

Every error the orchestrator surfaces carries the HTTP status code the API
layer renders it with, plus optional extra fields for the response body.
"""

from typing import Any


class StudyKitError(Exception):
    """Base exception for StudyKit application."""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        return {"error": self.message}


class ValidationError(StudyKitError):
    """Raised when a request is malformed."""

    status_code = 400


class NotFoundError(StudyKitError):
    """Raised when a query, artifact or source content does not exist."""

    status_code = 404


class ForbiddenError(StudyKitError):
    """Raised when the caller does not own the query."""

    status_code = 403


class QuotaExceededError(StudyKitError):
    """Raised when the plan quota refuses a new generation."""

    status_code = 403

    def __init__(self, reason: str, current: int, limit: int):
        self.current = current
        self.limit = limit
        super().__init__(reason)

    def to_response(self) -> dict[str, Any]:
        return {"error": self.message, "current": self.current, "limit": self.limit}


class MissingSourceError(StudyKitError):
    """Raised when a derived artifact has no base article to work from."""

    status_code = 400


class GenerationError(StudyKitError):
    """Raised when a generation provider fails, times out or returns garbage."""

    status_code = 500

    def __init__(self, message: str, artifact_type: str | None = None):
        self.artifact_type = artifact_type
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        label = self.artifact_type or "content"
        return {"error": f"Failed to generate {label}. Please try again.", "retryable": True}


class ParseError(StudyKitError):
    """Raised when structured data cannot be extracted from a provider response."""

    status_code = 500


class ConflictError(StudyKitError):
    """Raised when a concurrent request already created the same artifact slot."""

    status_code = 409

    def __init__(self, query_id: str, artifact_type: str, slot: str):
        self.query_id = query_id
        self.artifact_type = artifact_type
        self.slot = slot
        super().__init__(f"Artifact {artifact_type} ({slot}) already exists for query {query_id}")
