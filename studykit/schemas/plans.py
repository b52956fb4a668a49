"""Schemas for quota decisions and plan allowance responses."""

from pydantic import BaseModel


class QuotaDecision(BaseModel):
    """Outcome of a quota check. Computed fresh per request, never persisted."""

    allowed: bool
    current_count: int
    limit: int
    tier: str
    reason: str | None = None


class AllowanceItem(BaseModel):
    used: int
    limit: int
    remaining: int


class ContentAllowance(BaseModel):
    plan: str
    audio: AllowanceItem
    presentations: AllowanceItem
    flashcards: AllowanceItem
    quizzes: AllowanceItem
    audio_on_demand: bool
