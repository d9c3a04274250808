from typing import Any, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from storefinder.core.errors import NotFoundError
from storefinder.models.store import Store
from storefinder.models.user import User
from storefinder.repositories.store_repository import StoreRepository
from storefinder.services.tag_service import TagService
from storefinder.utils.permissions import confirm_owner
import logging

logger = logging.getLogger(__name__)


class StoreService:
    def __init__(self, session: AsyncSession, tag_service: Optional[TagService] = None):
        self.repo = StoreRepository(session)
        self.tags = tag_service or TagService(session)

    async def create_store(self, author: User, data: Dict[str, Any]) -> Store:
        """Создать заведение от имени пользователя; автор берётся из сессии"""
        store = await self.repo.create(author.id, data)
        logger.info("Создано заведение %s (%s)", store.name, store.slug)
        await self.tags.invalidate()
        return store

    async def update_store(
        self, store_id: int, data: Dict[str, Any], requester: User
    ) -> Store:
        store = await self.repo.update(store_id, data, requester)
        logger.info("Обновлено заведение %s (%s)", store.name, store.slug)
        await self.tags.invalidate()
        return store

    async def get_for_edit(self, store_id: int, requester: User) -> Store:
        """
        Получить заведение для редактирования.

        Raises:
            NotFoundError: заведение не найдено
            PermissionDeniedError: пользователь не является автором
        """
        store = await self.repo.get_by_id(store_id)
        if store is None:
            raise NotFoundError("Store", store_id)

        denied = confirm_owner(store, requester)
        if denied is not None:
            logger.warning(
                "Пользователь %s пытался редактировать чужое заведение %s",
                denied.user_id,
                store_id,
            )
            raise denied
        return store

    async def get_by_id(self, store_id: int) -> Optional[Store]:
        """Получить заведение по ID"""
        return await self.repo.get_by_id(store_id)

    async def get_by_slug(self, slug: str) -> Optional[Store]:
        """Получить заведение по slug"""
        return await self.repo.get_by_slug(slug)
