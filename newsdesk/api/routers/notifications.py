"""
API маршруты для уведомлений
"""
from typing import List

from fastapi import APIRouter, Depends

from newsdesk.api.auth import require_api_key
from newsdesk.api.dependencies import get_notification_service
from newsdesk.api.models import (
    SuccessResponse, NotificationResponse, NotificationCreateRequest,
    NotificationItem, GeneralNotificationItem, NewsNotificationItem
)
from newsdesk.services.notifications import NotificationService

notifications_router = APIRouter(
    prefix="/notifications", tags=["Notifications"], dependencies=[Depends(require_api_key)]
)


@notifications_router.get("", response_model=SuccessResponse[List[NotificationItem]])
async def list_notifications(service: NotificationService = Depends(get_notification_service)):
    """Все уведомления с кратким описанием новости"""
    notifications = await service.list_all()
    items = [
        NotificationItem(
            id=notification.id,
            title=notification.title,
            created_at=notification.created_at,
            news_id=notification.news_id,
            news_title=notification.news.title if notification.news else None,
            news_image=notification.news.gambar if notification.news else None,
        )
        for notification in notifications
    ]
    return SuccessResponse(message="Successfully fetched notifications list", data=items)


@notifications_router.get("/general", response_model=SuccessResponse[List[GeneralNotificationItem]])
async def list_general_notifications(service: NotificationService = Depends(get_notification_service)):
    """Общие уведомления (без новости)"""
    notifications = await service.list_general()
    items = [
        GeneralNotificationItem(
            id=notification.id,
            title=notification.title,
            image=notification.gambar,
            created_at=notification.created_at,
        )
        for notification in notifications
    ]
    return SuccessResponse(message="Successfully fetched general notifications", data=items)


@notifications_router.get("/news", response_model=SuccessResponse[List[NewsNotificationItem]])
async def list_news_notifications(service: NotificationService = Depends(get_notification_service)):
    """Уведомления о новостях с названием новости и именем автора"""
    notifications = await service.list_news_related()
    items = [
        NewsNotificationItem(
            id=notification.id,
            news_id=notification.news_id,
            title=notification.title,
            news_title=notification.news.title,
            # Картинка берётся из снимка, сделанного при создании уведомления
            image=notification.gambar,
            author_name=notification.news.author.name,
            created_at=notification.created_at,
        )
        for notification in notifications
    ]
    return SuccessResponse(message="Successfully fetched news related notifications", data=items)


@notifications_router.post("", response_model=SuccessResponse[NotificationResponse], status_code=201)
async def create_notification(
    payload: NotificationCreateRequest,
    service: NotificationService = Depends(get_notification_service)
):
    notification = await service.create(payload.title, news_id=payload.news_id, gambar=payload.gambar)
    return SuccessResponse(
        message="Notification created successfully",
        data=NotificationResponse.model_validate(notification)
    )
