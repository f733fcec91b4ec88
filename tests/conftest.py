"""
Конфигурация тестов и общие фикстуры
"""
import io
import os

# Тесты работают с SQLite в памяти, настройки читаются при импорте модулей
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from newsdesk.api.app import app
from newsdesk.config.settings import Settings, get_settings
from newsdesk.db.database import get_session, enable_sqlite_foreign_keys
from newsdesk.models.models import Base, User, Category, News, NewsStatus, UserRole
from newsdesk.services.security import hash_password
from newsdesk.storage.media import MediaStorage, UploadedImage

API_KEY = "test-api-key"
MEDIA_KEY = "test-media-key"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Тестовая база данных в памяти"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    enable_sqlite_foreign_keys(engine)

    # Создаем таблицы
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Закрываем движок после теста
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Фабрика сессий тестовой базы"""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def test_db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Сессия для подготовки данных и проверок"""
    async with session_factory() as session:
        yield session


@pytest.fixture
def media_root(tmp_path):
    """Временная публичная директория для медиафайлов"""
    root = tmp_path / "public"
    root.mkdir()
    return root


@pytest.fixture
def test_settings(media_root) -> Settings:
    """Настройки с тестовыми ключами и временной директорией"""
    settings = Settings()
    settings.PRIVATE_API_KEY = API_KEY
    settings.LICENSE_API_KEY = MEDIA_KEY
    settings.PUBLIC_DIR = str(media_root)
    settings.PAGE_SIZE = 5
    return settings


@pytest.fixture
def storage(test_settings) -> MediaStorage:
    return MediaStorage(test_settings)


@pytest.fixture
def api_headers():
    return {"X-Api-Key": API_KEY}


@pytest.fixture
def media_headers():
    return {"Authorization": f"Bearer {MEDIA_KEY}"}


@pytest_asyncio.fixture
async def client(session_factory, test_settings) -> AsyncGenerator[AsyncClient, None]:
    """HTTP клиент поверх приложения с тестовой базой и настройками"""

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_settings] = lambda: test_settings

    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
            yield http_client
    finally:
        app.dependency_overrides.clear()


def make_png(color: str = "red", size=(4, 4)) -> bytes:
    """PNG изображение в памяти"""
    buffer = io.BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def png_upload(png_bytes) -> UploadedImage:
    return UploadedImage(filename="picture.png", content=png_bytes)


# Фабрики тестовых данных

@pytest.fixture
def create_user(test_db_session):
    async def _create_user(
        name: str = "Reader",
        email: str = "reader@newsdesk.io",
        password: str = "secret123",
        role: UserRole = UserRole.USER,
    ) -> User:
        user = User(name=name, email=email, password=hash_password(password), role=role)
        test_db_session.add(user)
        await test_db_session.commit()
        return user

    return _create_user


@pytest.fixture
def create_category(test_db_session):
    async def _create_category(name: str = "Tech", gambar: str = None) -> Category:
        category = Category(name=name, gambar=gambar)
        test_db_session.add(category)
        await test_db_session.commit()
        return category

    return _create_category


@pytest.fixture
def create_news(test_db_session):
    async def _create_news(
        author: User,
        category: Category = None,
        title: str = "Test News Title",
        contents: str = "Test news contents",
        views: int = 1,
        status: NewsStatus = NewsStatus.DRAFT,
        gambar: str = None,
        thumbnail: str = None,
    ) -> News:
        news = News(
            title=title,
            contents=contents,
            author_id=author.id,
            category_id=category.id if category else None,
            views=views,
            status=status,
            gambar=gambar,
            thumbnail=thumbnail,
        )
        test_db_session.add(news)
        await test_db_session.commit()
        return news

    return _create_news

