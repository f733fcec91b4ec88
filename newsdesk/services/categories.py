"""
Сервис категорий: список, создание с картинкой, обновление и каскадное удаление
"""
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import select, delete, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.models.models import Category, News
from newsdesk.services.errors import ValidationError, NotFoundError, StorageError
from newsdesk.services.pagination import paginate
from newsdesk.storage.media import MediaStorage, UploadedImage

NAME_TAKEN = "The name has already been taken."


def category_folder(category_id: int) -> str:
    return f"media/category/{category_id}"


class CategoryService:
    """Операции над категориями"""

    def __init__(self, db: AsyncSession, storage: MediaStorage, page_size: int = 5):
        self.db = db
        self.storage = storage
        self.page_size = page_size

    async def get_or_404(self, category_id: int) -> Category:
        category = await self.db.get(Category, category_id)
        if not category:
            raise NotFoundError(f"Category not found with ID: {category_id}")
        return category

    async def exists(self, category_id: int) -> bool:
        result = await self.db.execute(select(Category.id).where(Category.id == category_id))
        return result.scalar_one_or_none() is not None

    async def _ensure_name_free(self, name: str, exclude_id: Optional[int] = None) -> None:
        query = select(Category.id).where(Category.name == name)
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)

        result = await self.db.execute(query)
        if result.first() is not None:
            raise ValidationError.for_field("name", NAME_TAKEN)

    async def list(self) -> List[Category]:
        """Все категории, новые первыми"""
        result = await self.db.execute(
            select(Category).order_by(Category.created_at.desc(), Category.id.desc())
        )
        return list(result.scalars().all())

    async def news_in_category(self, category_id: int, page: int = 1) -> Tuple[Category, Dict[str, Any]]:
        """Новости категории постранично (id, title, contents)"""
        category = await self.get_or_404(category_id)

        query = select(News).where(News.category_id == category_id).order_by(News.id)
        count_query = select(func.count(News.id)).where(News.category_id == category_id)

        news_page = await paginate(self.db, query, count_query, page, self.page_size)
        return category, news_page

    async def create(self, name: str, image: Optional[UploadedImage] = None) -> Category:
        """
        Создаёт категорию.

        Путь картинки содержит id категории, поэтому запись сначала сохраняется
        (flush выдаёт id), затем файл кладётся в media/category/{id} и путь
        записывается в ту же транзакцию. Ошибка сохранения файла откатывает запись.
        """
        await self._ensure_name_free(name)
        if image is not None:
            self.storage.validate_image("gambar", image)

        category = Category(name=name, gambar=None)
        self.db.add(category)

        stored_path = None
        try:
            await self.db.flush()

            if image is not None:
                stored_path = self.storage.save(image, category_folder(category.id))
                category.gambar = stored_path

            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            self.storage.delete_quietly(stored_path)
            raise ValidationError.for_field("name", NAME_TAKEN)
        except (StorageError, SQLAlchemyError):
            await self.db.rollback()
            self.storage.delete_quietly(stored_path)
            raise

        logger.info(f"📁 Создана категория ID {category.id}: {category.name}")
        return category

    async def update(
        self,
        category_id: int,
        name: Optional[str] = None,
        image: Optional[UploadedImage] = None,
    ) -> Category:
        category = await self.get_or_404(category_id)

        if name is not None:
            await self._ensure_name_free(name, exclude_id=category.id)
        if image is not None:
            self.storage.validate_image("gambar", image)

        if name is not None:
            category.name = name

        old_image = None
        new_image = None
        if image is not None:
            old_image = category.gambar
            new_image = self.storage.save(image, category_folder(category.id))
            category.gambar = new_image

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            self.storage.delete_quietly(new_image)
            raise ValidationError.for_field("name", NAME_TAKEN)
        except SQLAlchemyError:
            await self.db.rollback()
            self.storage.delete_quietly(new_image)
            raise

        # Старый файл удаляется только после коммита, неудача не прерывает обновление
        self.storage.delete_quietly(old_image)

        logger.info(f"✏️ Обновлена категория ID {category.id}")
        return category

    async def delete(self, category_id: int) -> Dict[str, Any]:
        """
        Удаляет категорию вместе с её новостями в одной транзакции.
        Файлы удаляются только после коммита.
        """
        category = await self.get_or_404(category_id)
        category_name = category.name
        category_image = category.gambar

        result = await self.db.execute(
            select(News.id, News.gambar, News.thumbnail).where(News.category_id == category_id)
        )
        related_news = result.all()

        try:
            await self.db.execute(delete(News).where(News.category_id == category_id))
            await self.db.execute(delete(Category).where(Category.id == category_id))
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        for news in related_news:
            self.storage.delete_quietly(news.gambar)
            self.storage.delete_quietly(news.thumbnail)
        self.storage.delete_quietly(category_image)

        logger.info(f"🗑️ Удалена категория ID {category_id} и {len(related_news)} связанных новостей")
        return {
            "deleted_category_id": category_id,
            "deleted_category_name": category_name,
            "associated_news_deleted": len(related_news),
        }
