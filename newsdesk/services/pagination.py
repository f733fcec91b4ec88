from typing import Any, Dict

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession


async def paginate(
    db: AsyncSession,
    query: Select,
    count_query: Select,
    page: int,
    page_size: int,
    scalars: bool = True,
) -> Dict[str, Any]:
    """
    Пагинация результатов для запроса в базу данных

    Args:
        db: Сессия базы данных
        query: SQLAlchemy запрос (уже с фильтрами и сортировкой)
        count_query: Запрос количества с теми же фильтрами
        page: Номер страницы (начиная с 1)
        page_size: Размер страницы
        scalars: Вернуть ORM объекты (первый столбец) или строки целиком

    Returns:
        Dict с ключами items, total, page, page_size, total_pages
    """
    # Считаем общее количество
    total = await db.scalar(count_query) or 0

    # Применяем лимит и смещение
    offset = (page - 1) * page_size
    result = await db.execute(query.offset(offset).limit(page_size))
    items = result.scalars().all() if scalars else result.all()

    # Рассчитываем общее количество страниц
    total_pages = (total + page_size - 1) // page_size

    return {
        "items": list(items),
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages,
    }
