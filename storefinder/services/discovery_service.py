"""
Фасад поиска заведений: пагинация, поиск, теги, рейтинг и избранное.
"""

import math
from typing import Any, List, Optional, Union
from sqlalchemy.ext.asyncio import AsyncSession
from storefinder.core.config import STORES_PAGE_SIZE
from storefinder.core.errors import NotFoundError
from storefinder.models.store import Store
from storefinder.repositories.store_repository import StoreRepository
from storefinder.repositories.types import (
    NearbyStore,
    RankedStore,
    StoreListing,
    TagListing,
)
from storefinder.services.tag_service import TagService
from storefinder.utils.validators import parse_page
import logging

logger = logging.getLogger(__name__)


class DiscoveryService:
    def __init__(
        self,
        session: AsyncSession,
        page_size: int = STORES_PAGE_SIZE,
        tag_service: Optional[TagService] = None,
    ):
        self.repo = StoreRepository(session)
        self.tags = tag_service or TagService(session)
        self.page_size = page_size

    async def get_stores(self, page: Union[str, int, None] = None) -> StoreListing:
        """
        Страница списка заведений с отзывами.

        Если страница за пределами диапазона (пусто и skip > 0), вместо
        пустого результата возвращается redirect_to с номером последней страницы.

        Raises:
            ValidationError: номер страницы не является целым положительным числом
        """
        page = parse_page(page)
        result = await self.repo.list_paginated(
            page, self.page_size, include_reviews=True
        )
        page_count = math.ceil(result.total_count / self.page_size)
        skip = (page - 1) * self.page_size

        if not result.items and skip:
            redirect_to = max(page_count, 1)
            logger.info(
                "Запрошена страница %s из %s, перенаправление на %s",
                page,
                page_count,
                redirect_to,
            )
            return StoreListing(
                items=[],
                page=page,
                page_count=page_count,
                total_count=result.total_count,
                redirect_to=redirect_to,
            )

        return StoreListing(
            items=result.items,
            page=page,
            page_count=page_count,
            total_count=result.total_count,
        )

    async def get_by_tag(self, tag: Optional[str] = None) -> TagListing:
        tag = tag.strip() if tag else None
        tags = await self.tags.aggregate()
        stores = await self.repo.find_by_tag(tag or None)
        return TagListing(tags=tags, selected_tag=tag or None, stores=stores)

    async def get_by_slug(self, slug: str) -> Store:
        store = await self.repo.get_by_slug(slug, include_reviews=True)
        if store is None:
            raise NotFoundError("Store", slug)
        return store

    async def search(self, query: str) -> List[Store]:
        return await self.repo.search_by_text(query)

    async def near(self, lng: Any, lat: Any) -> List[NearbyStore]:
        return await self.repo.find_near(lng, lat)

    async def top_stores(self) -> List[RankedStore]:
        return await self.repo.top_rated()

    async def hearted(self, user_id: int) -> List[Store]:
        return await self.repo.list_hearted_by(user_id)
