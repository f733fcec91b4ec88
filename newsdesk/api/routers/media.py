"""
Медиашлюз: выдача загруженных файлов из публичной директории
"""
from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from newsdesk.api.auth import require_media_key
from newsdesk.api.dependencies import get_media_storage
from newsdesk.storage.media import MediaStorage

media_router = APIRouter(prefix="/media", tags=["Media"], dependencies=[Depends(require_media_key)])


@media_router.get("/{path:path}")
async def get_media(path: str, storage: MediaStorage = Depends(get_media_storage)):
    """Файл из PUBLIC_DIR; пути с '..' отклоняются"""
    file_path = storage.resolve(path)
    return FileResponse(file_path, media_type=storage.guess_mime_type(file_path))
