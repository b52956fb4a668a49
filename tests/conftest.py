"""Shared test fixtures for all test groups."""

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from studykit.core.config import Settings
from studykit.db.base import Base, make_session_factory
from studykit.generation.defaults import build_default_registry
from studykit.providers.fake import InMemoryAudioStorage, SpeechSynthesizerFake, TextGeneratorFake
from studykit.schemas.artifacts import ArtifactType, ComplexityLevel
from studykit.services.artifact_store import SqlAlchemyArtifactStore
from studykit.services.orchestrator import build_orchestrator
from studykit.services.plan_service import UserPlanService
from studykit.services.query_store import QueryStore

ARTICLE_TEXT = (
    "Photosynthesis converts light energy into chemical energy inside plant cells. "
    "Chlorophyll in the chloroplasts absorbs mostly red and blue wavelengths of light. "
    "The light-dependent reactions split water molecules and release oxygen gas. "
    "The Calvin cycle uses ATP and NADPH to fix carbon dioxide into glucose. "
    "Plants store the resulting sugars as starch for later growth and repair. "
    "Nearly every food chain on Earth depends on this process."
)


@pytest.fixture
async def engine(tmp_path) -> AsyncEngine:
    """File-backed SQLite engine with all tables created.

    A file (not :memory:) so concurrent sessions get separate connections.
    """
    import studykit.db.models  # noqa: F401

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'studykit_test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(engine)


@pytest.fixture
def store(session_factory) -> SqlAlchemyArtifactStore:
    return SqlAlchemyArtifactStore(session_factory)


@pytest.fixture
def queries(session_factory) -> QueryStore:
    return QueryStore(session_factory)


@pytest.fixture
def plans(session_factory) -> UserPlanService:
    return UserPlanService(session_factory)


@pytest.fixture
def text_fake():
    """Fresh TextGeneratorFake with happy_path scenario (default)."""
    return TextGeneratorFake(scenario="happy_path")


@pytest.fixture
def speech_fake():
    return SpeechSynthesizerFake()


@pytest.fixture
def audio_storage():
    return InMemoryAudioStorage()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(generation_timeout_seconds=2.0, anthropic_api_key="", elevenlabs_api_key="", audio_bucket="")


@pytest.fixture
def make_registry(test_settings, speech_fake, audio_storage):
    """Build the default registry around a given text generator."""

    def _make(text):
        return build_default_registry(test_settings, text=text, speech=speech_fake, storage=audio_storage)

    return _make


@pytest.fixture
def registry(make_registry, text_fake):
    return make_registry(text_fake)


@pytest.fixture
def orchestrator(session_factory, registry):
    return build_orchestrator(session_factory, registry)


@pytest.fixture
def make_query(queries):
    async def _make(user_id: str = "user-free", text: str = "How does photosynthesis work?"):
        return await queries.create(user_id, text, topic="Photosynthesis", complexity_level=ComplexityLevel.COLLEGE)

    return _make


@pytest.fixture
def seed_article(store):
    """Persist a base article for a query so derived types have source text."""

    async def _seed(query_id: str, text: str = ARTICLE_TEXT):
        return await store.create(query_id, ArtifactType.ARTICLE, "Photosynthesis", {"text": text, "level": "college"})

    return _seed
