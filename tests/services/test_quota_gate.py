"""Tests for QuotaGate decisions and allowance reporting."""

import pytest

from studykit.domain.plans import PlanTier
from studykit.schemas.artifacts import ArtifactType
from studykit.services.quota_gate import AUDIO_ON_DEMAND_MESSAGE, QuotaGate

pytestmark = pytest.mark.integration


@pytest.fixture
def gate(store, plans):
    return QuotaGate(store, plans)


async def test_free_user_first_presentation_allowed(gate, make_query):
    query = await make_query("user-free")
    decision = await gate.check_quota("user-free", query.id, ArtifactType.PRESENTATION)
    assert decision.allowed is True
    assert (decision.current_count, decision.limit, decision.tier) == (0, 1, "free")


async def test_free_user_second_flashcards_refused_with_upgrade_hint(gate, store, make_query):
    query = await make_query("user-free")
    await store.create(query.id, ArtifactType.FLASHCARDS, "Deck", {"cards": [1]})

    decision = await gate.check_quota("user-free", query.id, ArtifactType.FLASHCARDS)

    assert decision.allowed is False
    assert decision.reason == "You've reached the FREE plan limit of 1 flashcard deck per topic. Upgrade to Pro for more!"


async def test_pro_refusal_has_no_upgrade_hint(gate, store, plans, make_query):
    await plans.set_tier("user-pro", PlanTier.PRO)
    query = await make_query("user-pro")
    for n in range(5):
        await store.upsert_by_derived_key("c1-audio", query.id, ArtifactType.AUDIO, "Audio", {"v": n})

    decision = await gate.check_quota("user-pro", query.id, ArtifactType.AUDIO)

    assert decision.allowed is False
    assert (decision.current_count, decision.limit) == (5, 5)
    assert decision.reason == "You've reached the PRO plan limit of 5 audio narrations per topic."


async def test_unlimited_types_always_allowed(gate, store, make_query):
    query = await make_query("user-free")
    await store.create(query.id, ArtifactType.DIAGRAMS, "Diagrams", {"diagrams": [1]})
    decision = await gate.check_quota("user-free", query.id, ArtifactType.DIAGRAMS)
    assert decision.allowed is True


async def test_audio_on_demand_gate_with_custom_catalog(store, plans, make_query):
    from dataclasses import replace

    from studykit.domain.plans import PLAN_LIMITS, PlanCatalog

    # Free tier with a higher numeric audio quota still refuses a second generation
    limits = {**PLAN_LIMITS, PlanTier.FREE: replace(PLAN_LIMITS[PlanTier.FREE], audio=3)}
    gate = QuotaGate(store, plans, PlanCatalog(limits))
    query = await make_query("user-free")
    await store.upsert_by_derived_key("c1-audio", query.id, ArtifactType.AUDIO, "Audio", {"v": 1})

    decision = await gate.check_quota("user-free", query.id, ArtifactType.AUDIO)

    assert decision.allowed is False
    assert decision.reason == AUDIO_ON_DEMAND_MESSAGE


async def test_upgrade_raises_limit_immediately(gate, store, plans, make_query):
    query = await make_query("user-up")
    await store.create(query.id, ArtifactType.PRESENTATION, "Slides", {"slides": [1]})
    assert (await gate.check_quota("user-up", query.id, ArtifactType.PRESENTATION)).allowed is False

    await plans.set_tier("user-up", PlanTier.PRO)

    assert (await gate.check_quota("user-up", query.id, ArtifactType.PRESENTATION)).allowed is True


async def test_get_allowance(gate, store, make_query):
    query = await make_query("user-free")
    await store.create(query.id, ArtifactType.QUIZ, "Quiz", {"questions": [1]})

    allowance = await gate.get_allowance("user-free", query.id)

    assert allowance.plan == "free"
    assert allowance.quizzes.model_dump() == {"used": 1, "limit": 1, "remaining": 0}
    assert allowance.audio.model_dump() == {"used": 0, "limit": 1, "remaining": 1}
    assert allowance.audio_on_demand is False
