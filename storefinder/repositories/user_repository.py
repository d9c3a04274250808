from typing import Optional, Set
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.dialects import postgresql, sqlite
from storefinder.models.user import User, hearts
import logging

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """
        Получает пользователя по ID.

        Args:
            user_id: ID пользователя

        Returns:
            Optional[User]: Объект пользователя или None, если пользователь не найден
        """
        query = select(User).where(User.id == user_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_chat_id(self, chat_id: int) -> Optional[User]:
        result = await self.session.execute(select(User).filter_by(chat_id=chat_id))
        return result.scalars().first()

    async def create(self, name: str, chat_id: Optional[int] = None) -> User:
        user = User(name=name, chat_id=chat_id)
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def update_name(self, user: User, name: str) -> User:
        """Обновить имя пользователя"""
        user.name = name
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def get_heart_ids(self, user_id: int) -> Set[int]:
        result = await self.session.execute(
            select(hearts.c.store_id).where(hearts.c.user_id == user_id)
        )
        return set(result.scalars().all())

    def _insert_heart(self, user_id: int, store_id: int):
        dialect = self.session.bind.dialect.name
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
        return (
            insert(hearts)
            .values(user_id=user_id, store_id=store_id)
            .on_conflict_do_nothing()
        )

    async def toggle_heart(self, user_id: int, store_id: int) -> bool:
        """
        Переключает заведение в избранном пользователя.

        Удаление и вставка выполняются условными операциями в БД в одной
        транзакции, без чтения всего множества избранного. Строка пользователя
        блокируется до конца транзакции, поэтому параллельные переключения
        одного пользователя выполняются по очереди.

        Returns:
            bool: True если заведение добавлено, False если удалено
        """
        await self.session.execute(
            select(User.id).where(User.id == user_id).with_for_update()
        )
        removed = await self.session.execute(
            delete(hearts).where(
                hearts.c.user_id == user_id, hearts.c.store_id == store_id
            )
        )
        added = removed.rowcount == 0
        if added:
            await self.session.execute(self._insert_heart(user_id, store_id))
        await self.session.commit()
        return added
