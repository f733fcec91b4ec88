"""
API маршруты для оценок новостей
"""
from fastapi import APIRouter, Depends

from newsdesk.api.auth import require_api_key
from newsdesk.api.dependencies import get_comment_service
from newsdesk.api.models import (
    SuccessResponse, CommentResponse, CommentWithUser,
    CommentListResponse, RatingMeta, RatingRequest
)
from newsdesk.services.comments import CommentService

comments_router = APIRouter(
    prefix="/news/{news_id}/comments", tags=["Comments"], dependencies=[Depends(require_api_key)]
)


@comments_router.post("", response_model=SuccessResponse[CommentResponse], status_code=201)
async def create_comment(
    news_id: int,
    payload: RatingRequest,
    service: CommentService = Depends(get_comment_service)
):
    """Добавить оценку; повторная оценка того же пользователя вернёт 409"""
    comment = await service.create(news_id, payload.user_id, payload.rating)
    return SuccessResponse(message="Rating added successfully", data=CommentResponse.model_validate(comment))


@comments_router.put("", response_model=SuccessResponse[CommentResponse])
async def update_comment(
    news_id: int,
    payload: RatingRequest,
    service: CommentService = Depends(get_comment_service)
):
    comment = await service.update(news_id, payload.user_id, payload.rating)
    return SuccessResponse(message="Rating updated successfully", data=CommentResponse.model_validate(comment))


@comments_router.get("", response_model=CommentListResponse)
async def list_comments(news_id: int, service: CommentService = Depends(get_comment_service)):
    """Оценки новости с именами пользователей и средним значением"""
    result = await service.list(news_id)
    return CommentListResponse(
        message="Successfully fetched comments/ratings",
        meta=RatingMeta(
            total_ratings=result["total_ratings"],
            average_rating=result["average_rating"]
        ),
        data=[CommentWithUser.model_validate(comment) for comment in result["comments"]]
    )
