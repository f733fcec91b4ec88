"""
Модели базы данных новостного портала.
Пользователи, категории, новости, оценки (комментарии) и уведомления
"""

import enum
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import (
    String, Text, Integer, DateTime, Enum, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import (
    Mapped, mapped_column, DeclarativeBase, relationship
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    USER = "USER"
    EDITOR = "EDITOR"
    ADMIN = "ADMIN"


class NewsStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING_REVIEW = "PENDING_REVIEW"
    PUBLISHED = "PUBLISHED"
    REJECTED = "REJECTED"


# SQLAlchemy ORM модели для работы с базой данных
class Base(DeclarativeBase):
    pass


class TimestampMixin:
    # Значения проставляются на стороне Python, чтобы не перечитывать строку после flush
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=20), default=UserRole.USER, nullable=False
    )


class Category(TimestampMixin, Base):
    __tablename__ = "category"

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    gambar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class News(TimestampMixin, Base):
    __tablename__ = "news"

    id: Mapped[int] = mapped_column(primary_key=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    category_id: Mapped[Optional[int]] = mapped_column(
        "categoryId", ForeignKey("category.id", ondelete="CASCADE"), nullable=True, index=True
    )
    author_id: Mapped[int] = mapped_column(
        "authorId", ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    contents: Mapped[str] = mapped_column(Text, nullable=False)
    gambar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    thumbnail: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    link_youtube: Mapped[Optional[str]] = mapped_column("linkYoutube", String(255), nullable=True)
    views: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    status: Mapped[NewsStatus] = mapped_column(
        Enum(NewsStatus, native_enum=False, length=20), default=NewsStatus.DRAFT, nullable=False
    )

    # Связи загружаются только явно (joinedload), ленивая загрузка запрещена
    author: Mapped["User"] = relationship(lazy="raise")
    category: Mapped[Optional["Category"]] = relationship(lazy="raise")


class Comment(TimestampMixin, Base):
    __tablename__ = "comment"
    __table_args__ = (UniqueConstraint("userId", "newsId", name="uq_comment_user_news"),)  # Одна оценка на пару

    id: Mapped[int] = mapped_column(primary_key=True)

    user_id: Mapped[int] = mapped_column(
        "userId", ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    news_id: Mapped[int] = mapped_column(
        "newsId", ForeignKey("news.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)

    user: Mapped["User"] = relationship(lazy="raise")


class Notification(TimestampMixin, Base):
    __tablename__ = "notification"

    id: Mapped[int] = mapped_column(primary_key=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    news_id: Mapped[Optional[int]] = mapped_column(
        "newsId", ForeignKey("news.id", ondelete="CASCADE"), nullable=True, index=True
    )
    # Снимок картинки новости на момент создания
    gambar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    news: Mapped[Optional["News"]] = relationship(lazy="raise")
