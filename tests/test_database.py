"""
Тесты для модуля работы с базой данных
"""
import pytest
from sqlalchemy import text, make_url
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from newsdesk.config.settings import get_settings
from newsdesk.db.database import get_session, enable_sqlite_foreign_keys, engine, async_session


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_session():
    """Тест получения сессии базы данных"""
    session_count = 0

    # Тестируем что get_session возвращает асинхронный генератор
    async for session in get_session():
        assert isinstance(session, AsyncSession)
        session_count += 1
        break  # Выходим после первой итерации

    assert session_count == 1


@pytest.mark.unit
def test_engine_uses_configured_url():
    """Тест что движок создан по DATABASE_URL из окружения"""
    expected = make_url(get_settings().DATABASE_URL)
    assert engine.dialect.name == expected.get_backend_name()
    assert async_session.kw["expire_on_commit"] is False


@pytest.mark.database
@pytest.mark.asyncio
async def test_sqlite_foreign_keys_enabled():
    """Тест включения проверки внешних ключей для SQLite"""
    test_engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    enable_sqlite_foreign_keys(test_engine)

    try:
        async with test_engine.connect() as conn:
            result = await conn.execute(text("PRAGMA foreign_keys"))
            assert result.scalar() == 1
    finally:
        await test_engine.dispose()


@pytest.mark.database
@pytest.mark.asyncio
async def test_session_rollback(test_db_session, create_user):
    """Тест отката незакоммиченных изменений"""
    user = await create_user()

    user.name = "Changed"
    await test_db_session.rollback()
    await test_db_session.refresh(user)

    assert user.name == "Reader"
