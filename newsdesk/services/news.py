"""
Сервис новостей: списки с фильтрами и сортировками, просмотр со счётчиком,
создание и обновление с картинками, смена статуса, удаление и статистика
"""
import enum
from typing import Any, Dict, Optional, Tuple

from loguru import logger
from sqlalchemy import select, update, delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from newsdesk.models.models import News, NewsStatus, Comment, Category, User, UserRole
from newsdesk.services.errors import ValidationError, NotFoundError
from newsdesk.services.pagination import paginate
from newsdesk.storage.media import MediaStorage, UploadedImage

NEWS_FOLDER = "media/news"


class NewsSort(str, enum.Enum):
    LATEST = "latest"
    VIEWS = "views"
    RATING = "rating"


# Новость вместе со средней оценкой (None, если оценок нет)
NewsWithRating = Tuple[News, Optional[float]]


def _ratings_subquery():
    """Средняя оценка по каждой новости"""
    return (
        select(
            Comment.news_id.label("news_id"),
            func.avg(Comment.rating).label("average_rating"),
        )
        .group_by(Comment.news_id)
        .subquery("ratings")
    )


def _as_float(value) -> Optional[float]:
    return float(value) if value is not None else None


class NewsService:
    """Операции над новостями"""

    def __init__(self, db: AsyncSession, storage: MediaStorage, page_size: int = 5):
        self.db = db
        self.storage = storage
        self.page_size = page_size

    # READ

    def _query(self, sort: NewsSort = NewsSort.LATEST):
        ratings = _ratings_subquery()
        query = (
            select(News, ratings.c.average_rating)
            .outerjoin(ratings, ratings.c.news_id == News.id)
            .options(joinedload(News.author), joinedload(News.category))
        )

        if sort == NewsSort.VIEWS:
            query = query.order_by(News.views.desc(), News.created_at.desc())
        elif sort == NewsSort.RATING:
            query = query.order_by(
                ratings.c.average_rating.desc().nulls_last(), News.created_at.desc()
            )
        else:
            query = query.order_by(News.created_at.desc())

        return query.order_by(News.id.desc())

    async def _fetch(self, news_id: int) -> NewsWithRating:
        query = (
            self._query()
            .where(News.id == news_id)
            .execution_options(populate_existing=True)
        )
        row = (await self.db.execute(query)).first()
        if row is None:
            raise NotFoundError("News not found")
        return row[0], _as_float(row[1])

    async def get_or_404(self, news_id: int) -> News:
        news = await self.db.get(News, news_id)
        if not news:
            raise NotFoundError("News not found")
        return news

    async def list(
        self,
        status: Optional[NewsStatus] = None,
        sort: NewsSort = NewsSort.LATEST,
        page: int = 1,
    ) -> Dict[str, Any]:
        """Список новостей постранично; items содержит пары (новость, средняя оценка)"""
        query = self._query(sort)
        count_query = select(func.count(News.id))

        if status is not None:
            query = query.where(News.status == status)
            count_query = count_query.where(News.status == status)

        news_page = await paginate(self.db, query, count_query, page, self.page_size, scalars=False)
        news_page["items"] = [(row[0], _as_float(row[1])) for row in news_page["items"]]
        return news_page

    async def highlight(self, sort: NewsSort = NewsSort.LATEST) -> NewsWithRating:
        """Первая опубликованная новость по выбранной сортировке"""
        query = self._query(sort).where(News.status == NewsStatus.PUBLISHED).limit(1)
        row = (await self.db.execute(query)).first()
        if row is None:
            raise NotFoundError("No news found")
        return row[0], _as_float(row[1])

    async def _increment_views(self, news_id: int) -> None:
        # Один атомарный UPDATE, без чтения значения перед записью
        result = await self.db.execute(
            update(News)
            .where(News.id == news_id)
            .values(views=News.views + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFoundError("News not found")

    async def get(self, news_id: int) -> NewsWithRating:
        """Детальная новость, каждый успешный просмотр увеличивает views"""
        await self._increment_views(news_id)
        news = await self._fetch(news_id)
        await self.db.commit()
        return news

    async def add_view(self, news_id: int) -> int:
        await self._increment_views(news_id)
        views = await self.db.scalar(select(News.views).where(News.id == news_id))
        await self.db.commit()

        logger.info(f"👁️ Просмотры новости ID {news_id} увеличены, теперь {views}")
        return views

    # WRITE

    async def _validate_references(
        self,
        category_id: Optional[int],
        author_id: Optional[int],
    ) -> None:
        errors = {}
        if category_id is not None:
            exists = await self.db.scalar(select(Category.id).where(Category.id == category_id))
            if exists is None:
                errors["categoryId"] = ["The selected categoryId is invalid."]
        if author_id is not None:
            exists = await self.db.scalar(select(User.id).where(User.id == author_id))
            if exists is None:
                errors["authorId"] = ["The selected authorId is invalid."]
        if errors:
            raise ValidationError(errors)

    def _validate_images(self, image: Optional[UploadedImage], thumbnail: Optional[UploadedImage]) -> None:
        if image is not None:
            self.storage.validate_image("gambar", image)
        if thumbnail is not None:
            self.storage.validate_image("thumbnail", thumbnail)

    async def create(
        self,
        title: str,
        contents: str,
        author_id: int,
        category_id: Optional[int] = None,
        link_youtube: Optional[str] = None,
        status: Optional[NewsStatus] = None,
        image: Optional[UploadedImage] = None,
        thumbnail: Optional[UploadedImage] = None,
        default_status: NewsStatus = NewsStatus.DRAFT,
    ) -> NewsWithRating:
        await self._validate_references(category_id, author_id)
        self._validate_images(image, thumbnail)

        image_path = self.storage.save(image, NEWS_FOLDER) if image is not None else None
        thumbnail_path = (
            self.storage.save(thumbnail, NEWS_FOLDER, prefix="thumb-") if thumbnail is not None else None
        )

        news = News(
            title=title,
            contents=contents,
            author_id=author_id,
            category_id=category_id,
            gambar=image_path,
            thumbnail=thumbnail_path,
            link_youtube=link_youtube,
            views=1,
            status=status or default_status,
        )
        self.db.add(news)

        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            self.storage.delete_quietly(image_path)
            self.storage.delete_quietly(thumbnail_path)
            raise

        logger.info(f"📰 Создана новость ID {news.id} со статусом {news.status.value}")
        return await self._fetch(news.id)

    async def update(
        self,
        news_id: int,
        title: str,
        contents: str,
        category_id: Optional[int] = None,
        author_id: Optional[int] = None,
        link_youtube: Optional[str] = None,
        status: Optional[NewsStatus] = None,
        image: Optional[UploadedImage] = None,
        thumbnail: Optional[UploadedImage] = None,
    ) -> NewsWithRating:
        """Обновление новости; необязательные поля меняются, только если переданы"""
        news = await self.get_or_404(news_id)

        await self._validate_references(category_id, author_id)
        self._validate_images(image, thumbnail)

        news.title = title
        news.contents = contents
        if category_id is not None:
            news.category_id = category_id
        if author_id is not None:
            news.author_id = author_id
        if link_youtube is not None:
            news.link_youtube = link_youtube
        if status is not None:
            news.status = status

        replaced, stored = [], []
        if image is not None:
            replaced.append(news.gambar)
            news.gambar = self.storage.save(image, NEWS_FOLDER)
            stored.append(news.gambar)

        if thumbnail is not None:
            replaced.append(news.thumbnail)
            news.thumbnail = self.storage.save(thumbnail, NEWS_FOLDER, prefix="thumb-")
            stored.append(news.thumbnail)

        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            for path in stored:
                self.storage.delete_quietly(path)
            raise

        # Прежние файлы удаляются после коммита
        for path in replaced:
            self.storage.delete_quietly(path)

        logger.info(f"✏️ Обновлена новость ID {news_id}")
        return await self._fetch(news_id)

    async def set_status(self, news_id: int, status: NewsStatus) -> News:
        """Переход в любой статус из любого"""
        news = await self.get_or_404(news_id)
        news.status = status
        await self.db.commit()

        logger.info(f"🔁 Статус новости ID {news_id} изменён на {status.value}")
        return news

    async def publish(self, news_id: int) -> News:
        return await self.set_status(news_id, NewsStatus.PUBLISHED)

    async def draft(self, news_id: int) -> News:
        return await self.set_status(news_id, NewsStatus.DRAFT)

    async def review(self, news_id: int) -> News:
        return await self.set_status(news_id, NewsStatus.PENDING_REVIEW)

    async def delete(self, news_id: int) -> None:
        """Удаляет новость; оценки и уведомления удаляются каскадом в базе"""
        news = await self.get_or_404(news_id)
        image_path, thumbnail_path = news.gambar, news.thumbnail

        await self.db.execute(delete(News).where(News.id == news_id))
        await self.db.commit()

        self.storage.delete_quietly(image_path)
        self.storage.delete_quietly(thumbnail_path)
        logger.info(f"🗑️ Удалена новость ID {news_id}")

    # STATS

    async def dashboard_stats(self) -> Dict[str, int]:
        async def count_status(status: NewsStatus) -> int:
            return await self.db.scalar(
                select(func.count(News.id)).where(News.status == status)
            ) or 0

        return {
            "total_pending_review": await count_status(NewsStatus.PENDING_REVIEW),
            "total_published": await count_status(NewsStatus.PUBLISHED),
            "total_rejected": await count_status(NewsStatus.REJECTED),
            "total_views": int(await self.db.scalar(select(func.coalesce(func.sum(News.views), 0))) or 0),
            "total_readers": await self.db.scalar(
                select(func.count(User.id)).where(User.role == UserRole.USER)
            ) or 0,
            "total_categories": await self.db.scalar(select(func.count(Category.id))) or 0,
            "total_news": await self.db.scalar(select(func.count(News.id))) or 0,
        }
