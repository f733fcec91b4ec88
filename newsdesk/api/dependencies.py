"""
Зависимости FastAPI для сервисов
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.config.settings import Settings, get_settings
from newsdesk.db.database import get_session
from newsdesk.services.categories import CategoryService
from newsdesk.services.comments import CommentService
from newsdesk.services.news import NewsService
from newsdesk.services.notifications import NotificationService
from newsdesk.services.users import UserService
from newsdesk.storage.media import MediaStorage


def get_media_storage(settings: Settings = Depends(get_settings)) -> MediaStorage:
    return MediaStorage(settings)


def get_user_service(db: AsyncSession = Depends(get_session)) -> UserService:
    return UserService(db)


def get_category_service(
    db: AsyncSession = Depends(get_session),
    storage: MediaStorage = Depends(get_media_storage),
    settings: Settings = Depends(get_settings),
) -> CategoryService:
    return CategoryService(db, storage, page_size=settings.PAGE_SIZE)


def get_news_service(
    db: AsyncSession = Depends(get_session),
    storage: MediaStorage = Depends(get_media_storage),
    settings: Settings = Depends(get_settings),
) -> NewsService:
    return NewsService(db, storage, page_size=settings.PAGE_SIZE)


def get_comment_service(db: AsyncSession = Depends(get_session)) -> CommentService:
    return CommentService(db)


def get_notification_service(db: AsyncSession = Depends(get_session)) -> NotificationService:
    return NotificationService(db)
