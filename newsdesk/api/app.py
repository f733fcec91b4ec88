"""
Основное FastAPI приложение новостного сервиса
"""
import time
from contextlib import asynccontextmanager
from typing import Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from newsdesk.api.models import ErrorResponse
from newsdesk.api.routers.categories import categories_router
from newsdesk.api.routers.comments import comments_router
from newsdesk.api.routers.media import media_router
from newsdesk.api.routers.news import news_router, dashboard_router
from newsdesk.api.routers.notifications import notifications_router
from newsdesk.api.routers.users import auth_router, users_router
from newsdesk.config.settings import get_settings
from newsdesk.db.database import init_db, close_db
from newsdesk.services.errors import ServiceError, ValidationError

settings = get_settings()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Управление жизненным циклом приложения"""
    # Startup
    logger.info("🚀 Запуск FastAPI приложения...")
    try:
        # Инициализация базы данных
        logger.info("📊 Инициализация базы данных...")
        await init_db()

        yield

    except Exception as e:
        logger.error(f"❌ Ошибка инициализации: {e}")
        raise
    finally:
        # Shutdown
        logger.info("🔌 Закрытие подключений к базе данных...")
        await close_db()
        logger.info("✅ FastAPI приложение остановлено")


# Создание экземпляра FastAPI
app = FastAPI(
    title="Newsdesk API",
    description="""
    REST API новостного портала

    ## Возможности

    * **Пользователи** - регистрация, вход, роли
    * **Категории** - категории с картинками и каскадным удалением
    * **Новости** - статусы публикации, просмотры, рейтинги
    * **Оценки** - одна оценка от 1 до 5 на пользователя
    * **Уведомления** - общие и связанные с новостями
    * **Медиа** - выдача загруженных файлов
    """,
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Настройка CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Подключение роутеров
for router in (
    auth_router,
    users_router,
    categories_router,
    news_router,
    comments_router,
    dashboard_router,
    notifications_router,
    media_router,
):
    app.include_router(router, prefix=settings.API_PREFIX)


def _error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message, **extra).model_dump(exclude_none=True)
    )


# Обработка ошибок
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Ошибки сервисного слоя превращаются в стандартный ответ"""
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc.message}")
    else:
        logger.warning(f"⚠️ {request.method} {request.url.path} - {exc.status_code}: {exc.message}")

    errors = exc.errors if isinstance(exc, ValidationError) else None
    return _error_response(exc.status_code, exc.message, errors=errors)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Ошибки валидации запроса в формате {поле: [сообщения]}"""
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "header")]
        field = ".".join(location) or "request"
        errors.setdefault(field, []).append(error.get("msg", "Invalid value"))

    logger.warning(f"⚠️ {request.method} {request.url.path} - 422: {errors}")
    return _error_response(422, ValidationError.message, errors=errors)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Ошибки базы данных, текст запроса наружу не отдаётся"""
    logger.error(f"❌ Ошибка базы данных в {request.method} {request.url.path}: {exc}")
    return _error_response(500, "Database error.", detail=str(exc) if settings.DEBUG else None)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Глобальная обработка неожиданных ошибок"""
    logger.error(f"❌ Неожиданная ошибка в {request.method} {request.url.path}: {exc}")

    # Показываем детали ошибки только в режиме отладки
    return _error_response(500, "Internal server error.", detail=str(exc) if settings.DEBUG else None)


# Базовые endpoints
@app.get("/", tags=["Root"])
async def root():
    """Корневой endpoint"""
    return {
        "message": "Newsdesk API",
        "version": settings.VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "api_base": settings.API_PREFIX
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Проверка здоровья сервиса"""
    return {"status": "healthy"}


# Middleware для логирования запросов
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Логирование HTTP запросов"""
    start_time = time.time()
    logger.info(f"🌐 {request.method} {request.url.path}")

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(
        f"✅ {request.method} {request.url.path} - {response.status_code} ({process_time:.3f}s)"
    )

    return response
