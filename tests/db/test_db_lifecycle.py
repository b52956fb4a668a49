"""Tests for engine construction and teardown."""

import pytest
from sqlalchemy import text

import studykit.db.base as db_base
from studykit.db import close_db, init_db

pytestmark = pytest.mark.integration


async def test_init_db_returns_engine_and_factory_with_tables(tmp_path):
    engine, session_factory = await init_db(f"sqlite+aiosqlite:///{tmp_path / 'lifecycle.db'}")
    try:
        async with session_factory() as session:
            for table in ("artifacts", "queries", "user_settings"):
                result = await session.execute(text(f"SELECT count(*) FROM {table}"))
                assert result.scalar_one() == 0
    finally:
        await close_db(engine)


async def test_init_db_keeps_no_module_state(tmp_path):
    first, _ = await init_db(f"sqlite+aiosqlite:///{tmp_path / 'a.db'}")
    second, _ = await init_db(f"sqlite+aiosqlite:///{tmp_path / 'b.db'}")
    try:
        assert first is not second
        assert not hasattr(db_base, "_session_factory")
        assert not hasattr(db_base, "_engine")
    finally:
        await close_db(first)
        await close_db(second)
