"""
Сервис пользователей: регистрация, вход, список, смена роли и обновление данных
"""
from typing import List, Optional

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.models.models import User, UserRole, News, NewsStatus
from newsdesk.services.errors import ValidationError, NotFoundError, AuthError
from newsdesk.services.security import hash_password, verify_password


class UserService:
    """Операции над пользователями"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_or_404(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def exists(self, user_id: int) -> bool:
        result = await self.db.execute(select(User.id).where(User.id == user_id))
        return result.scalar_one_or_none() is not None

    async def _ensure_email_free(self, email: str, exclude_id: Optional[int] = None) -> None:
        query = select(User.id).where(User.email == email)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)

        result = await self.db.execute(query)
        if result.first() is not None:
            raise ValidationError.for_field("email", "The email has already been taken.")

    async def register(self, name: str, email: str, password: str) -> User:
        """Регистрирует пользователя с ролью USER"""
        await self._ensure_email_free(email)

        user = User(
            name=name,
            email=email,
            password=hash_password(password),
            role=UserRole.USER,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Параллельная регистрация с тем же email
            await self.db.rollback()
            raise ValidationError.for_field("email", "The email has already been taken.")

        logger.info(f"👤 Зарегистрирован пользователь ID {user.id}")
        return user

    async def login(self, identifier: str, password: str) -> User:
        """Проверка email и пароля, токен не выдаётся"""
        result = await self.db.execute(select(User).where(User.email == identifier))
        user = result.scalar_one_or_none()

        if not user or not verify_password(password, user.password):
            logger.warning("⚠️ Неудачная попытка входа")
            raise AuthError("Invalid credentials: wrong name or password.")

        return user

    async def list_users(self) -> List[User]:
        result = await self.db.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def promote_to_editor(self, user_id: int) -> User:
        user = await self.get_or_404(user_id)
        user.role = UserRole.EDITOR
        await self.db.commit()

        logger.info(f"⬆️ Пользователь ID {user_id} получил роль EDITOR")
        return user

    async def update(
        self,
        user_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
        role: Optional[UserRole] = None,
    ) -> User:
        """
        Частичное обновление пользователя.

        Понижение до USER переводит все новости автора в DRAFT в той же транзакции,
        что и смена роли.
        """
        user = await self.get_or_404(user_id)

        if email is not None:
            await self._ensure_email_free(email, exclude_id=user.id)

        if role is not None and role != user.role and role == UserRole.USER:
            result = await self.db.execute(
                update(News)
                .where(News.author_id == user.id)
                .values(status=NewsStatus.DRAFT)
            )
            logger.info(f"⬇️ Пользователь ID {user.id} понижен до USER, {result.rowcount} новостей переведено в DRAFT")

        if name is not None:
            user.name = name
        if email is not None:
            user.email = email
        if password is not None:
            user.password = hash_password(password)
        if role is not None:
            user.role = role

        await self.db.commit()
        return user
