from typing import List, Set
from sqlalchemy.ext.asyncio import AsyncSession
from storefinder.core.errors import NotFoundError
from storefinder.models.store import Store
from storefinder.repositories.store_repository import StoreRepository
from storefinder.repositories.user_repository import UserRepository
import logging

logger = logging.getLogger(__name__)


class HeartService:
    def __init__(self, session: AsyncSession):
        self.users = UserRepository(session)
        self.stores = StoreRepository(session)

    async def toggle_heart(self, user_id: int, store_id: int) -> Set[int]:
        """
        Добавляет заведение в избранное или убирает его, если оно уже там.

        Returns:
            Set[int]: Актуальное множество ID избранных заведений

        Raises:
            NotFoundError: пользователь или заведение не найдены
        """
        if await self.users.get_by_id(user_id) is None:
            raise NotFoundError("User", user_id)
        if await self.stores.get_by_id(store_id) is None:
            raise NotFoundError("Store", store_id)

        added = await self.users.toggle_heart(user_id, store_id)
        logger.info(
            "Пользователь %s %s заведение %s в избранном",
            user_id,
            "добавил" if added else "убрал",
            store_id,
        )
        return await self.users.get_heart_ids(user_id)

    async def get_hearts(self, user_id: int) -> Set[int]:
        return await self.users.get_heart_ids(user_id)

    async def list_hearted(self, user_id: int) -> List[Store]:
        """Получить все заведения из избранного пользователя"""
        return await self.stores.list_hearted_by(user_id)
