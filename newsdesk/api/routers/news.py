"""
API маршруты для работы с новостями
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Form, File, UploadFile

from newsdesk.api.auth import require_api_key
from newsdesk.api.dependencies import get_news_service
from newsdesk.api.models import (
    SuccessResponse, PageData, NewsResponse,
    ViewsResponse, StatusChangeResponse, DashboardStats
)
from newsdesk.models.models import NewsStatus
from newsdesk.services.news import NewsService, NewsSort

# Роутеры для группировки endpoints
news_router = APIRouter(prefix="/news", tags=["News"], dependencies=[Depends(require_api_key)])
dashboard_router = APIRouter(prefix="/dashboard", tags=["Dashboard"], dependencies=[Depends(require_api_key)])


def news_response(news, average_rating: Optional[float] = None) -> NewsResponse:
    return NewsResponse.model_validate(news).model_copy(update={"average_rating": average_rating})


# READ

@news_router.get("", response_model=SuccessResponse[PageData[NewsResponse]])
async def list_news(
    status: Optional[NewsStatus] = Query(None, description="Фильтр по статусу"),
    sort: NewsSort = Query(NewsSort.LATEST, description="latest, views или rating"),
    page: int = Query(1, ge=1, description="Номер страницы"),
    service: NewsService = Depends(get_news_service)
):
    """Получить список новостей с пагинацией, фильтрацией и сортировкой"""
    news_page = await service.list(status=status, sort=sort, page=page)
    items = [news_response(news, rating) for news, rating in news_page.pop("items")]

    return SuccessResponse(
        message="Successfully fetched news list",
        data=PageData[NewsResponse](items=items, **news_page)
    )


@news_router.get("/highlight", response_model=SuccessResponse[NewsResponse])
async def highlight_news(
    sort: NewsSort = Query(NewsSort.LATEST, description="latest, views или rating"),
    service: NewsService = Depends(get_news_service)
):
    """Одна опубликованная новость: самая свежая, самая просматриваемая или с лучшей оценкой"""
    news, rating = await service.highlight(sort)
    return SuccessResponse(message="Successfully fetched news", data=news_response(news, rating))


@news_router.get("/{news_id}", response_model=SuccessResponse[NewsResponse])
async def get_news(news_id: int, service: NewsService = Depends(get_news_service)):
    """Получить новость по ID (увеличивает счётчик просмотров)"""
    news, rating = await service.get(news_id)
    return SuccessResponse(message="Successfully fetched news detail", data=news_response(news, rating))


# CREATE

async def _create_news(
    service: NewsService,
    default_status: NewsStatus,
    title: str,
    contents: str,
    author_id: int,
    category_id: Optional[int],
    link_youtube: Optional[str],
    status: Optional[NewsStatus],
    gambar: Optional[UploadFile],
    thumbnail: Optional[UploadFile],
) -> SuccessResponse[NewsResponse]:
    news, rating = await service.create(
        title=title,
        contents=contents,
        author_id=author_id,
        category_id=category_id,
        link_youtube=link_youtube,
        status=status,
        image=await service.storage.read_upload(gambar),
        thumbnail=await service.storage.read_upload(thumbnail),
        default_status=default_status,
    )
    return SuccessResponse(message="News created successfully", data=news_response(news, rating))


@news_router.post("", response_model=SuccessResponse[NewsResponse], status_code=201)
async def create_news(
    title: str = Form(..., min_length=1, max_length=255),
    contents: str = Form(..., min_length=1),
    author_id: int = Form(..., alias="authorId"),
    category_id: Optional[int] = Form(None, alias="categoryId"),
    link_youtube: Optional[str] = Form(None, alias="linkYoutube", max_length=255),
    status: Optional[NewsStatus] = Form(None),
    gambar: Optional[UploadFile] = File(None),
    thumbnail: Optional[UploadFile] = File(None),
    service: NewsService = Depends(get_news_service)
):
    """Создать новость (по умолчанию DRAFT)"""
    return await _create_news(
        service, NewsStatus.DRAFT, title, contents, author_id,
        category_id, link_youtube, status, gambar, thumbnail
    )


@news_router.post("/admin", response_model=SuccessResponse[NewsResponse], status_code=201)
async def create_news_admin(
    title: str = Form(..., min_length=1, max_length=255),
    contents: str = Form(..., min_length=1),
    author_id: int = Form(..., alias="authorId"),
    category_id: Optional[int] = Form(None, alias="categoryId"),
    link_youtube: Optional[str] = Form(None, alias="linkYoutube", max_length=255),
    status: Optional[NewsStatus] = Form(None),
    gambar: Optional[UploadFile] = File(None),
    thumbnail: Optional[UploadFile] = File(None),
    service: NewsService = Depends(get_news_service)
):
    """Создать новость из админки (по умолчанию PUBLISHED)"""
    return await _create_news(
        service, NewsStatus.PUBLISHED, title, contents, author_id,
        category_id, link_youtube, status, gambar, thumbnail
    )


# UPDATE

@news_router.put("/{news_id}", response_model=SuccessResponse[NewsResponse])
async def update_news(
    news_id: int,
    title: str = Form(..., min_length=1, max_length=255),
    contents: str = Form(..., min_length=1),
    author_id: Optional[int] = Form(None, alias="authorId"),
    category_id: Optional[int] = Form(None, alias="categoryId"),
    link_youtube: Optional[str] = Form(None, alias="linkYoutube", max_length=255),
    status: Optional[NewsStatus] = Form(None),
    gambar: Optional[UploadFile] = File(None),
    thumbnail: Optional[UploadFile] = File(None),
    service: NewsService = Depends(get_news_service)
):
    news, rating = await service.update(
        news_id,
        title=title,
        contents=contents,
        category_id=category_id,
        author_id=author_id,
        link_youtube=link_youtube,
        status=status,
        image=await service.storage.read_upload(gambar),
        thumbnail=await service.storage.read_upload(thumbnail),
    )
    return SuccessResponse(message="News updated successfully", data=news_response(news, rating))


@news_router.patch("/{news_id}/views", response_model=ViewsResponse)
async def add_view(news_id: int, service: NewsService = Depends(get_news_service)):
    views = await service.add_view(news_id)
    return ViewsResponse(message="Views incremented successfully.", news_id=news_id, new_views=views)


@news_router.patch("/{news_id}/publish", response_model=StatusChangeResponse)
async def publish_news(news_id: int, service: NewsService = Depends(get_news_service)):
    news = await service.publish(news_id)
    return StatusChangeResponse(message="News successfully published.", news_id=news_id, new_status=news.status)


@news_router.patch("/{news_id}/draft", response_model=StatusChangeResponse)
async def draft_news(news_id: int, service: NewsService = Depends(get_news_service)):
    news = await service.draft(news_id)
    return StatusChangeResponse(message="News successfully moved to draft.", news_id=news_id, new_status=news.status)


@news_router.patch("/{news_id}/review", response_model=StatusChangeResponse)
async def review_news(news_id: int, service: NewsService = Depends(get_news_service)):
    news = await service.review(news_id)
    return StatusChangeResponse(message="News successfully sent to review.", news_id=news_id, new_status=news.status)


# DELETE

@news_router.delete("/{news_id}", response_model=SuccessResponse[dict])
async def delete_news(news_id: int, service: NewsService = Depends(get_news_service)):
    await service.delete(news_id)
    return SuccessResponse(message="News deleted successfully")


# DASHBOARD

@dashboard_router.get("/stats", response_model=SuccessResponse[DashboardStats])
async def dashboard_stats(service: NewsService = Depends(get_news_service)):
    """Счётчики новостей, просмотров, читателей и категорий"""
    stats = await service.dashboard_stats()
    return SuccessResponse(message="Successfully fetched dashboard stats", data=DashboardStats(**stats))
