"""
Unit Tests for the request-scoped session dependency and engine lifecycle.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from snack.backend.core import database


@pytest.fixture
def session():
    session = AsyncMock()
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=session)
    context.__aexit__ = AsyncMock(return_value=None)
    factory = MagicMock(return_value=context)
    with patch.object(database, "get_session_factory", return_value=factory):
        yield session


@pytest.mark.asyncio
async def test_commits_when_handler_returns(session):
    dependency = database.get_db_session()
    assert await anext(dependency) is session

    with pytest.raises(StopAsyncIteration):
        await anext(dependency)

    session.commit.assert_awaited_once()
    session.rollback.assert_not_awaited()


@pytest.mark.asyncio
async def test_rolls_back_and_reraises_when_handler_fails(session):
    dependency = database.get_db_session()
    await anext(dependency)

    with pytest.raises(ValueError):
        await dependency.athrow(ValueError("handler failed"))

    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_dispose_resets_engine_state():
    engine = AsyncMock()
    database._EngineState.engine = engine
    database._EngineState.sessions = MagicMock()

    await database.dispose_engine()

    engine.dispose.assert_awaited_once()
    assert database._EngineState.engine is None
    assert database._EngineState.sessions is None


@pytest.mark.asyncio
async def test_dispose_without_engine_is_noop():
    database._EngineState.engine = None
    await database.dispose_engine()
    assert database._EngineState.sessions is None
