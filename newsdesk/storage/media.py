"""
Хранилище медиафайлов в публичной директории.
Проверка загружаемых изображений, сохранение, удаление и выдача файлов
"""
import io
import mimetypes
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from loguru import logger
from PIL import Image, UnidentifiedImageError

from newsdesk.config.settings import Settings
from newsdesk.services.errors import ValidationError, StorageError, BadRequestError, NotFoundError

# Форматы Pillow, которые принимаем как изображение
ALLOWED_IMAGE_FORMATS = {"JPEG", "PNG", "GIF"}


@dataclass
class UploadedImage:
    """Загруженный файл, прочитанный в память"""
    filename: str
    content: bytes

    @property
    def extension(self) -> str:
        return Path(self.filename).suffix.lstrip(".").lower()

    @classmethod
    async def from_upload(cls, upload, limit: Optional[int] = None) -> Optional["UploadedImage"]:
        """
        Читает UploadFile FastAPI; пустое поле формы означает отсутствие файла.
        С limit читается не больше limit + 1 байт: этого хватает, чтобы отклонить слишком большой файл
        """
        if upload is None or not upload.filename:
            return None
        content = await upload.read(limit + 1 if limit is not None else -1)
        return cls(filename=upload.filename, content=content)


class MediaStorage:
    """Работа с файлами в PUBLIC_DIR"""

    def __init__(self, settings: Settings):
        self.root = Path(settings.PUBLIC_DIR)
        self.max_size = settings.MAX_IMAGE_SIZE
        self.allowed_extensions = settings.ALLOWED_EXTENSIONS

    async def read_upload(self, upload) -> Optional[UploadedImage]:
        """Загрузка из формы, прочитанная не больше чем на MAX_IMAGE_SIZE + 1 байт"""
        return await UploadedImage.from_upload(upload, limit=self.max_size)

    def validate_image(self, field: str, image: UploadedImage) -> None:
        """Проверяет расширение, размер и что файл действительно является изображением"""
        if image.extension not in self.allowed_extensions:
            raise ValidationError.for_field(
                field, f"The {field} must be a file of type: {', '.join(self.allowed_extensions)}."
            )

        if len(image.content) > self.max_size:
            raise ValidationError.for_field(
                field, f"The {field} must not be greater than {self.max_size // 1024} kilobytes."
            )

        try:
            with Image.open(io.BytesIO(image.content)) as img:
                image_format = img.format
                img.verify()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError):
            raise ValidationError.for_field(field, f"The {field} must be an image.")

        if image_format not in ALLOWED_IMAGE_FORMATS:
            raise ValidationError.for_field(field, f"The {field} must be an image.")

    @staticmethod
    def generate_name(image: UploadedImage, prefix: str = "") -> str:
        """Имя файла вида {timestamp}-{prefix}{random}.{ext}"""
        return f"{int(time.time())}-{prefix}{uuid.uuid4().hex[:10]}.{image.extension}"

    def save(self, image: UploadedImage, folder: str, prefix: str = "") -> str:
        """Сохраняет файл в PUBLIC_DIR/folder и возвращает относительный путь"""
        name = self.generate_name(image, prefix)
        target_dir = self.root / folder

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            (target_dir / name).write_bytes(image.content)
        except OSError as e:
            logger.error(f"❌ Не удалось сохранить файл {folder}/{name}: {e}")
            raise StorageError("Could not store uploaded file.") from e

        relative_path = f"{folder}/{name}"
        logger.info(f"💾 Файл сохранён: {relative_path}")
        return relative_path

    def delete_quietly(self, relative_path: Optional[str]) -> bool:
        """Удаляет файл, ошибка удаления только логируется"""
        if not relative_path:
            return False

        file_path = self.root / relative_path
        try:
            if file_path.is_file():
                file_path.unlink()
                logger.info(f"🗑️ Файл удалён: {relative_path}")
                return True
        except OSError as e:
            logger.warning(f"⚠️ Не удалось удалить файл {relative_path}: {e}")
        return False

    def resolve(self, path: str) -> Path:
        """Путь к файлу внутри PUBLIC_DIR для выдачи через медиашлюз"""
        normalized = path.replace("\\", "/")
        if ".." in normalized:
            raise BadRequestError("Invalid path")

        file_path = self.root / normalized.lstrip("/")
        if not file_path.is_file():
            raise NotFoundError("File not found")
        return file_path

    @staticmethod
    def guess_mime_type(file_path: Path) -> str:
        """MIME тип по содержимому для изображений, иначе по расширению"""
        try:
            with Image.open(file_path) as img:
                mime_type = Image.MIME.get(img.format)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError):
            mime_type = None

        if not mime_type:
            mime_type, _ = mimetypes.guess_type(str(file_path))
        return mime_type or "application/octet-stream"
