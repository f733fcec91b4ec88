"""
API маршруты для работы с категориями
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Form, File, UploadFile

from newsdesk.api.auth import require_api_key
from newsdesk.api.dependencies import get_category_service
from newsdesk.api.models import (
    SuccessResponse, ListResponse, PageData, CategoryResponse,
    CategoryNewsItem, CategoryNewsResponse, CategoryDeleteResult
)
from newsdesk.services.categories import CategoryService

categories_router = APIRouter(
    prefix="/categories", tags=["Categories"], dependencies=[Depends(require_api_key)]
)


@categories_router.get("", response_model=ListResponse[CategoryResponse])
async def list_categories(service: CategoryService = Depends(get_category_service)):
    """Все категории, новые первыми"""
    categories = await service.list()
    return ListResponse(
        message="Successfully fetched all categories",
        count=len(categories),
        data=[CategoryResponse.model_validate(category) for category in categories]
    )


@categories_router.get("/{category_id}/news", response_model=CategoryNewsResponse)
async def news_in_category(
    category_id: int,
    page: int = Query(1, ge=1, description="Номер страницы"),
    service: CategoryService = Depends(get_category_service)
):
    """Новости категории с пагинацией"""
    category, news_page = await service.news_in_category(category_id, page)
    items = [CategoryNewsItem.model_validate(news) for news in news_page.pop("items")]

    return CategoryNewsResponse(
        message=f"Successfully fetched news for category: {category.name} (ID: {category_id})",
        category_name=category.name,
        count=len(items),
        data=PageData[CategoryNewsItem](items=items, **news_page)
    )


@categories_router.post("", response_model=SuccessResponse[CategoryResponse], status_code=201)
async def create_category(
    name: str = Form(..., min_length=1, max_length=255),
    gambar: Optional[UploadFile] = File(None),
    service: CategoryService = Depends(get_category_service)
):
    """Создать категорию (multipart, картинка необязательна)"""
    image = await service.storage.read_upload(gambar)
    category = await service.create(name, image)
    return SuccessResponse(message="Category created successfully", data=CategoryResponse.model_validate(category))


@categories_router.put("/{category_id}", response_model=SuccessResponse[CategoryResponse])
async def update_category(
    category_id: int,
    name: Optional[str] = Form(None, min_length=1, max_length=255),
    gambar: Optional[UploadFile] = File(None),
    service: CategoryService = Depends(get_category_service)
):
    image = await service.storage.read_upload(gambar)
    category = await service.update(category_id, name=name, image=image)
    return SuccessResponse(message="Category updated successfully", data=CategoryResponse.model_validate(category))


@categories_router.delete("/{category_id}", response_model=SuccessResponse[CategoryDeleteResult])
async def delete_category(category_id: int, service: CategoryService = Depends(get_category_service)):
    """Удалить категорию вместе с её новостями и файлами"""
    result = await service.delete(category_id)
    return SuccessResponse(
        message="Category and associated news deleted successfully",
        data=CategoryDeleteResult(**result)
    )
