"""
Сервис оценок (комментариев) новостей
"""
from typing import Dict, List, Any
from decimal import Decimal, ROUND_HALF_UP

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from newsdesk.models.models import Comment, News, User
from newsdesk.services.errors import ValidationError, NotFoundError, ConflictError


def _mean_rating(ratings: List[int]) -> float:
    """Среднее с округлением до десятых, половина округляется вверх (2.25 -> 2.3)"""
    if not ratings:
        return 0.0
    mean = Decimal(sum(ratings)) / Decimal(len(ratings))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class CommentService:
    """Оценки от 1 до 5, не более одной на пару (пользователь, новость)"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _ensure_news(self, news_id: int) -> None:
        exists = await self.db.scalar(select(News.id).where(News.id == news_id))
        if exists is None:
            raise NotFoundError("News not found")

    async def _ensure_user(self, user_id: int) -> None:
        exists = await self.db.scalar(select(User.id).where(User.id == user_id))
        if exists is None:
            raise ValidationError.for_field("userId", "The selected userId is invalid.")

    @staticmethod
    def _check_rating(rating: int) -> None:
        if not 1 <= rating <= 5:
            raise ValidationError.for_field("rating", "The rating must be between 1 and 5.")

    async def create(self, news_id: int, user_id: int, rating: int) -> Comment:
        await self._ensure_news(news_id)
        self._check_rating(rating)
        await self._ensure_user(user_id)

        comment = Comment(user_id=user_id, news_id=news_id, rating=rating)
        self.db.add(comment)

        # Уникальность пары обеспечивает ограничение uq_comment_user_news
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.warning(f"⚠️ Повторная оценка новости ID {news_id} пользователем ID {user_id}")
            raise ConflictError("User has already rated this news")

        logger.info(f"⭐ Оценка {rating} для новости ID {news_id} от пользователя ID {user_id}")
        return comment

    async def update(self, news_id: int, user_id: int, rating: int) -> Comment:
        """Только обновление существующей оценки, без создания"""
        await self._ensure_news(news_id)
        self._check_rating(rating)
        await self._ensure_user(user_id)

        result = await self.db.execute(
            select(Comment).where(Comment.user_id == user_id, Comment.news_id == news_id)
        )
        comment = result.scalar_one_or_none()
        if comment is None:
            raise NotFoundError(
                "Rating by this user for this news not found. Use POST to create a new one."
            )

        comment.rating = rating
        await self.db.commit()
        return comment

    async def list(self, news_id: int) -> Dict[str, Any]:
        """Оценки новости (новые первыми) с именем автора и средним значением"""
        await self._ensure_news(news_id)

        result = await self.db.execute(
            select(Comment)
            .where(Comment.news_id == news_id)
            .options(joinedload(Comment.user))
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        comments: List[Comment] = list(result.scalars().all())

        total = len(comments)
        average = _mean_rating([c.rating for c in comments])

        return {
            "comments": comments,
            "total_ratings": total,
            "average_rating": average,
        }
