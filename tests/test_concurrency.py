"""
Тесты параллельных просмотров новости
"""
import asyncio

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from newsdesk.db.database import enable_sqlite_foreign_keys
from newsdesk.models.models import Base, User, News
from newsdesk.services.news import NewsService


@pytest.mark.integration
@pytest.mark.slow
@pytest.mark.asyncio
async def test_concurrent_views_are_not_lost(tmp_path, storage):
    """Тест что N параллельных просмотров увеличивают счётчик ровно на N"""
    # Файловая база, чтобы у каждой сессии было своё подключение
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'views.db'}")
    enable_sqlite_foreign_keys(engine)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        async with factory() as session:
            author = User(name="Author", email="author@newsdesk.io", password="hash")
            session.add(author)
            await session.flush()
            news = News(title="Hot", contents="Body", author_id=author.id, views=1)
            session.add(news)
            await session.commit()
            news_id = news.id

        async def view():
            async with factory() as session:
                news, _ = await NewsService(session, storage).get(news_id)
                return news.views

        concurrent_views = 10
        seen = await asyncio.gather(*(view() for _ in range(concurrent_views)))

        async with factory() as session:
            views = await session.scalar(select(News.views).where(News.id == news_id))

        # Каждый запрос увидел своё значение счётчика
        assert views == 1 + concurrent_views
        assert sorted(seen) == list(range(2, 2 + concurrent_views))
    finally:
        await engine.dispose()
