"""
Pydantic модели для FastAPI endpoints
"""
from datetime import datetime
from typing import Any, Optional, List, Dict, Generic, TypeVar
from pydantic import BaseModel, ConfigDict, Field, EmailStr, AliasChoices

from newsdesk.models.models import UserRole, NewsStatus

DataT = TypeVar("DataT")
ItemT = TypeVar("ItemT")


def camel_field(name: str, camel_name: str, default: Any = ...) -> Any:
    """Поле, которое в JSON называется camelCase, а читается и по имени атрибута ORM"""
    return Field(
        default,
        validation_alias=AliasChoices(name, camel_name),
        serialization_alias=camel_name,
    )


class ORMModel(BaseModel):
    """Базовая модель для ответа из ORM объектов"""
    model_config = ConfigDict(from_attributes=True)


# ENVELOPES

class SuccessResponse(BaseModel, Generic[DataT]):
    """Стандартный успешный ответ"""
    status: str = "success"
    message: str
    data: Optional[DataT] = None


class ListResponse(BaseModel, Generic[ItemT]):
    """Успешный ответ со списком и количеством"""
    status: str = "success"
    message: str
    count: int
    data: List[ItemT]


class PageData(BaseModel, Generic[ItemT]):
    """Страница списка с пагинацией"""
    items: List[ItemT]
    total: int
    page: int
    page_size: int
    total_pages: int


class ErrorResponse(BaseModel):
    """Модель ошибки"""
    status: str = "error"
    message: str
    errors: Optional[Dict[str, List[str]]] = None
    detail: Optional[str] = None


# USERS

class UserResponse(ORMModel):
    """Пользователь без пароля"""
    id: int
    name: str
    email: str
    role: UserRole
    created_at: datetime
    updated_at: datetime


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    # Клиенты присылают email в поле name
    identifier: str = Field(validation_alias=AliasChoices("name", "email"), min_length=1)
    password: str = Field(min_length=1)


class UserUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[UserRole] = None


# CATEGORIES

class CategoryResponse(ORMModel):
    id: int
    name: str
    gambar: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CategoryDeleteResult(BaseModel):
    deleted_category_id: int
    deleted_category_name: str
    associated_news_deleted: int


class CategoryNewsItem(ORMModel):
    id: int
    title: str
    contents: str


class CategoryNewsResponse(BaseModel):
    status: str = "success"
    message: str
    category_name: str
    count: int
    data: PageData[CategoryNewsItem]


# NEWS

class AuthorRef(ORMModel):
    id: int
    name: str


class CategoryRef(ORMModel):
    id: int
    name: str


class NewsResponse(ORMModel):
    """Модель новости для ответа API"""
    id: int
    title: str
    category_id: Optional[int] = camel_field("category_id", "categoryId", None)
    author_id: int = camel_field("author_id", "authorId")
    contents: str
    gambar: Optional[str] = None
    thumbnail: Optional[str] = None
    link_youtube: Optional[str] = camel_field("link_youtube", "linkYoutube", None)
    views: int
    status: NewsStatus
    created_at: datetime
    updated_at: datetime
    author: Optional[AuthorRef] = None
    category: Optional[CategoryRef] = None
    average_rating: Optional[float] = None


class ViewsResponse(BaseModel):
    status: str = "success"
    message: str
    news_id: int = camel_field("news_id", "newsId")
    new_views: int = camel_field("new_views", "newViews")


class StatusChangeResponse(BaseModel):
    status: str = "success"
    message: str
    news_id: int = camel_field("news_id", "newsId")
    new_status: NewsStatus = camel_field("new_status", "newStatus")


class DashboardStats(BaseModel):
    """Счётчики для панели администратора"""
    total_pending_review: int
    total_published: int
    total_rejected: int
    total_views: int
    total_readers: int
    total_categories: int
    total_news: int


# COMMENTS (RATINGS)

class RatingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(alias="userId")
    rating: int = Field(ge=1, le=5)


class CommentResponse(ORMModel):
    id: int
    user_id: int = camel_field("user_id", "userId")
    news_id: int = camel_field("news_id", "newsId")
    rating: int
    created_at: datetime
    updated_at: datetime


class CommentWithUser(CommentResponse):
    user: Optional[AuthorRef] = None


class RatingMeta(BaseModel):
    total_ratings: int
    average_rating: float


class CommentListResponse(BaseModel):
    status: str = "success"
    message: str
    meta: RatingMeta
    data: List[CommentWithUser]


# NOTIFICATIONS

class NotificationCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1, max_length=255)
    news_id: Optional[int] = Field(None, alias="newsId")
    gambar: Optional[str] = None


class NotificationResponse(ORMModel):
    id: int
    title: str
    news_id: Optional[int] = camel_field("news_id", "newsId", None)
    gambar: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class NotificationItem(BaseModel):
    """Уведомление с краткими данными новости"""
    id: int
    title: str
    created_at: datetime
    news_id: Optional[int] = None
    news_title: Optional[str] = None
    news_image: Optional[str] = None


class GeneralNotificationItem(BaseModel):
    id: int
    type: str = "general_alert"
    title: str
    image: Optional[str] = None
    created_at: datetime


class NewsNotificationItem(BaseModel):
    id: int
    type: str = "news_related"
    news_id: int
    title: str
    news_title: Optional[str] = None
    image: Optional[str] = None
    author_name: Optional[str] = None
    created_at: datetime
