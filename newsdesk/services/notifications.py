"""
Сервис уведомлений: общие и связанные с новостями
"""
from typing import List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from newsdesk.models.models import Notification, News
from newsdesk.services.errors import ValidationError


class NotificationService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, title: str, news_id: Optional[int] = None, gambar: Optional[str] = None) -> Notification:
        """Картинка связанной новости копируется в момент создания и дальше не меняется"""
        image = gambar

        if news_id is not None:
            news = await self.db.get(News, news_id)
            if news is None:
                raise ValidationError.for_field("newsId", "The selected newsId is invalid.")
            image = news.gambar

        notification = Notification(title=title, news_id=news_id, gambar=image)
        self.db.add(notification)
        await self.db.commit()

        logger.info(f"🔔 Создано уведомление ID {notification.id}")
        return notification

    async def list_all(self) -> List[Notification]:
        result = await self.db.execute(
            select(Notification)
            .options(joinedload(Notification.news))
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        return list(result.scalars().all())

    async def list_general(self) -> List[Notification]:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.news_id.is_(None))
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        return list(result.scalars().all())

    async def list_news_related(self) -> List[Notification]:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.news_id.is_not(None))
            .options(joinedload(Notification.news).joinedload(News.author))
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        return list(result.scalars().all())
