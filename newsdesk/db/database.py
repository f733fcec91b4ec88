"""
Модуль для работы с базой данных с использованием SQLAlchemy (asyncpg в продакшене, aiosqlite локально и в тестах).
Создаёт асинхронный движок, сессии и предоставляет функции для инициализации и закрытия базы данных.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
    AsyncSession
)
from typing import AsyncGenerator
from loguru import logger

from newsdesk.config.settings import get_settings


def enable_sqlite_foreign_keys(target: AsyncEngine) -> None:
    """Включает проверку внешних ключей для SQLite (каскадное удаление комментариев и уведомлений)"""
    if target.dialect.name != "sqlite":
        return

    @event.listens_for(target.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


settings = get_settings()

# Создаём движок
engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
)
enable_sqlite_foreign_keys(engine)

# Создаём асинхронную сессию
async_session = async_sessionmaker(
    engine,
    expire_on_commit=False,
    class_=AsyncSession
)


# Генератор для получения сессии базы данных
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session


# Функция для создания таблиц в базе данных
async def init_db() -> None:
    """Создает все таблицы в базе данных согласно моделям"""
    from newsdesk.models.models import Base

    async with engine.begin() as conn:
        # Создаем все таблицы
        await conn.run_sync(Base.metadata.create_all)
        logger.info("✅ База данных инициализирована")


# Функция для закрытия подключений
async def close_db() -> None:
    """Закрывает подключения к базе данных"""
    await engine.dispose()
    logger.info("🔌 Подключения к базе данных закрыты")
