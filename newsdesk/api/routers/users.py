"""
Маршруты регистрации, входа и управления пользователями
"""
from fastapi import APIRouter, Depends

from newsdesk.api.auth import require_api_key
from newsdesk.api.dependencies import get_user_service
from newsdesk.api.models import (
    SuccessResponse, ListResponse, UserResponse,
    RegisterRequest, LoginRequest, UserUpdateRequest
)
from newsdesk.services.users import UserService

# Вход и регистрация без API ключа, остальное только с ключом
auth_router = APIRouter(tags=["Auth"])
users_router = APIRouter(prefix="/users", tags=["Users"], dependencies=[Depends(require_api_key)])


@auth_router.post("/register", response_model=SuccessResponse[UserResponse], status_code=201)
async def register(
    payload: RegisterRequest,
    service: UserService = Depends(get_user_service)
):
    """Регистрация пользователя с ролью USER"""
    user = await service.register(payload.name, payload.email, payload.password)
    return SuccessResponse(message="User created successfully", data=UserResponse.model_validate(user))


@auth_router.post("/login", response_model=SuccessResponse[UserResponse])
async def login(
    payload: LoginRequest,
    service: UserService = Depends(get_user_service)
):
    """Вход по email и паролю"""
    user = await service.login(payload.identifier, payload.password)
    return SuccessResponse(message="Login successful", data=UserResponse.model_validate(user))


@users_router.get("", response_model=ListResponse[UserResponse])
async def list_users(service: UserService = Depends(get_user_service)):
    """Все пользователи без паролей"""
    users = await service.list_users()
    return ListResponse(
        message="Successfully fetched all users",
        count=len(users),
        data=[UserResponse.model_validate(user) for user in users]
    )


@users_router.patch("/{user_id}/role/editor", response_model=SuccessResponse[UserResponse])
async def promote_to_editor(user_id: int, service: UserService = Depends(get_user_service)):
    user = await service.promote_to_editor(user_id)
    return SuccessResponse(
        message=f"Successfully updated user ID {user_id} role to EDITOR",
        data=UserResponse.model_validate(user)
    )


@users_router.put("/{user_id}", response_model=SuccessResponse[UserResponse])
async def update_user(
    user_id: int,
    payload: UserUpdateRequest,
    service: UserService = Depends(get_user_service)
):
    """Частичное обновление; понижение до USER переводит новости автора в DRAFT"""
    user = await service.update(
        user_id,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.role,
    )
    return SuccessResponse(message="User updated successfully", data=UserResponse.model_validate(user))
