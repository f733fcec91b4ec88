"""
Главный модуль новостного сервиса: логирование в файл и запуск uvicorn
"""
import asyncio
from pathlib import Path

import uvicorn
from dotenv import load_dotenv
from loguru import logger

# Загрузка переменных окружения до чтения настроек
load_dotenv()

from newsdesk.config.settings import get_settings  # noqa: E402
from newsdesk.api.app import app as fastapi_app  # noqa: E402

settings = get_settings()

# Создаем директорию для логов если её нет
log_dir = Path(settings.LOG_DIR)
log_dir.mkdir(exist_ok=True)

# Путь к файлу логов
log_file = log_dir / "newsdesk.log"

logger.add(
    str(log_file),
    rotation="100 MB",
    retention="30 days",
    level="INFO",
    format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"
)


async def run_fastapi():
    """Запуск FastAPI сервера"""
    try:
        logger.info(f"🌐 Запуск FastAPI сервера на {settings.HOST}:{settings.PORT}...")
        config = uvicorn.Config(
            app=fastapi_app,
            host=settings.HOST,
            port=settings.PORT,
            log_level="info",
            access_log=True
        )
        server = uvicorn.Server(config)
        await server.serve()
    except Exception as e:
        logger.error(f"❌ Ошибка FastAPI сервера: {e}")
        raise


def main():
    """Главная функция запуска приложения (база инициализируется в lifespan)"""
    logger.info("🚀 Запуск Newsdesk API...")
    try:
        asyncio.run(run_fastapi())
    except KeyboardInterrupt:
        logger.info("⏹️ Получен сигнал остановки...")
    finally:
        logger.info("✅ Приложение завершено")


if __name__ == "__main__":
    main()
