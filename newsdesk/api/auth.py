"""
Проверка статических ключей доступа
"""
import hmac
from typing import Optional

from fastapi import Depends, Header, Request
from loguru import logger

from newsdesk.config.settings import Settings, get_settings
from newsdesk.services.errors import AuthError


async def require_api_key(
    request: Request,
    x_api_key: Optional[str] = Header(None, alias="X-Api-Key"),
    settings: Settings = Depends(get_settings),
) -> None:
    """Ключ из заголовка X-Api-Key должен совпадать с PRIVATE_API_KEY"""
    if not x_api_key or not settings.PRIVATE_API_KEY or x_api_key != settings.PRIVATE_API_KEY:
        logger.warning(f"⚠️ Неверный API ключ: {request.method} {request.url.path}")
        raise AuthError("Unauthorized access: invalid API key")


async def require_media_key(
    request: Request,
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Bearer токен медиашлюза сравнивается с LICENSE_API_KEY за постоянное время"""
    token = None
    if authorization:
        scheme, _, value = authorization.partition(" ")
        if scheme.lower() == "bearer" and value:
            token = value.strip()

    if not token or not settings.LICENSE_API_KEY or not hmac.compare_digest(
        token.encode("utf-8"), settings.LICENSE_API_KEY.encode("utf-8")
    ):
        logger.warning(f"⚠️ Неверный ключ медиашлюза: {request.url.path}")
        raise AuthError("Unauthorized: Invalid API Key")
