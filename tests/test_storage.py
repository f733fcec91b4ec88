"""
Тесты хранилища медиафайлов и хеширования паролей
"""
import io

import pytest
from fastapi import UploadFile
from PIL import Image

from newsdesk.services.errors import ValidationError, BadRequestError, NotFoundError
from newsdesk.services.security import hash_password, verify_password
from newsdesk.storage.media import UploadedImage


@pytest.mark.unit
def test_validate_image_accepts_png(storage, png_upload):
    """Тест что корректный PNG проходит проверку"""
    storage.validate_image("gambar", png_upload)


@pytest.mark.unit
def test_validate_image_rejects_extension(storage, png_bytes):
    """Тест отклонения недопустимого расширения"""
    image = UploadedImage(filename="picture.bmp", content=png_bytes)

    with pytest.raises(ValidationError) as exc_info:
        storage.validate_image("gambar", image)

    assert "gambar" in exc_info.value.errors
    assert exc_info.value.status_code == 422


@pytest.mark.unit
def test_validate_image_rejects_large_file(storage, png_bytes):
    """Тест ограничения размера в 2 МБ"""
    content = png_bytes + b"\0" * (2 * 1024 * 1024)
    image = UploadedImage(filename="big.png", content=content)

    with pytest.raises(ValidationError) as exc_info:
        storage.validate_image("thumbnail", image)

    assert "thumbnail" in exc_info.value.errors


@pytest.mark.unit
def test_validate_image_rejects_non_image(storage):
    """Тест что текстовый файл с расширением картинки отклоняется"""
    image = UploadedImage(filename="fake.jpg", content=b"definitely not an image")

    with pytest.raises(ValidationError) as exc_info:
        storage.validate_image("gambar", image)

    assert exc_info.value.errors == {"gambar": ["The gambar must be an image."]}


@pytest.mark.unit
def test_validate_image_rejects_decompression_bomb(storage, png_bytes, monkeypatch):
    """Тест что картинка со слишком большим разрешением отклоняется как невалидная"""
    # PNG 4x4 превышает удвоенный лимит в 4 пикселя
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 4)
    image = UploadedImage(filename="bomb.png", content=png_bytes)

    with pytest.raises(ValidationError) as exc_info:
        storage.validate_image("gambar", image)

    assert exc_info.value.errors == {"gambar": ["The gambar must be an image."]}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_read_upload_is_bounded(storage):
    """Тест что из формы читается не больше лимита плюс один байт"""
    storage.max_size = 1024
    upload = UploadFile(io.BytesIO(b"\0" * 5000), filename="big.png")

    image = await storage.read_upload(upload)

    assert len(image.content) == 1025
    with pytest.raises(ValidationError) as exc_info:
        storage.validate_image("gambar", image)
    assert exc_info.value.errors == {"gambar": ["The gambar must not be greater than 1 kilobytes."]}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_read_upload_empty_field(storage):
    assert await storage.read_upload(None) is None
    assert await storage.read_upload(UploadFile(io.BytesIO(b""), filename="")) is None


@pytest.mark.unit
def test_save_and_delete(storage, png_upload, media_root):
    """Тест сохранения файла и тихого удаления"""
    path = storage.save(png_upload, "media/category/1")

    assert path.startswith("media/category/1/")
    assert path.endswith(".png")
    assert (media_root / path).read_bytes() == png_upload.content

    assert storage.delete_quietly(path) is True
    assert not (media_root / path).exists()

    # Повторное удаление и пустой путь не приводят к ошибке
    assert storage.delete_quietly(path) is False
    assert storage.delete_quietly(None) is False


@pytest.mark.unit
def test_generated_names_are_unique(storage, png_upload):
    """Тест формата и уникальности имён файлов"""
    first = storage.generate_name(png_upload, prefix="thumb-")
    second = storage.generate_name(png_upload, prefix="thumb-")

    assert first != second
    assert "-thumb-" in first
    assert first.endswith(".png")


@pytest.mark.unit
def test_resolve_rejects_parent_traversal(storage):
    """Тест запрета выхода за пределы публичной директории"""
    with pytest.raises(BadRequestError):
        storage.resolve("../secret.txt")

    with pytest.raises(BadRequestError):
        storage.resolve("media\\..\\..\\secret.txt")


@pytest.mark.unit
def test_resolve_missing_file(storage):
    with pytest.raises(NotFoundError):
        storage.resolve("media/news/missing.png")


@pytest.mark.unit
def test_resolve_existing_file(storage, png_upload, media_root):
    path = storage.save(png_upload, "media/news")

    assert storage.resolve(path) == media_root / path
    assert storage.guess_mime_type(storage.resolve(path)) == "image/png"


@pytest.mark.unit
def test_password_hashing():
    """Тест что пароль хранится только в виде хеша"""
    hashed = hash_password("secret123")

    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong-password", hashed)


@pytest.mark.unit
def test_password_verify_with_broken_hash():
    """Тест что некорректный хеш не приводит к исключению"""
    assert verify_password("secret123", "not-a-bcrypt-hash") is False


@pytest.mark.unit
def test_mime_type_detected_from_content(png_bytes, media_root, storage):
    """Тест что тип картинки определяется по содержимому, а не по расширению"""
    folder = media_root / "media" / "raw"
    folder.mkdir(parents=True)
    (folder / "cover.bin").write_bytes(png_bytes)
    (folder / "notes.txt").write_text("plain text")

    assert storage.guess_mime_type(folder / "cover.bin") == "image/png"
    assert storage.guess_mime_type(folder / "notes.txt") == "text/plain"
