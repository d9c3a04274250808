from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from storefinder.core.config import TAGS_CACHE_TTL
from storefinder.repositories.store_repository import StoreRepository
from storefinder.repositories.types import TagCount
from storefinder.utils.cache import (
    TAG_COUNTS_KEY,
    get_cached_data,
    set_cached_data,
    invalidate_cache,
)
import logging

logger = logging.getLogger(__name__)


class TagService:
    def __init__(self, session: AsyncSession, cache_ttl: int = TAGS_CACHE_TTL):
        self.repo = StoreRepository(session)
        self.cache_ttl = cache_ttl

    async def aggregate(self) -> List[TagCount]:
        """
        Количество заведений по каждому тегу, по убыванию.

        Заведение с N тегами учитывается в N группах, заведения без тегов
        не учитываются. Результат кэшируется в Redis на cache_ttl секунд.
        """
        if self.cache_ttl > 0:
            cached = await get_cached_data(TAG_COUNTS_KEY)
            if cached is not None:
                return [TagCount(tag=item["tag"], count=item["count"]) for item in cached]

        counts = [TagCount(tag=tag, count=total) for tag, total in await self.repo.tag_counts()]

        if self.cache_ttl > 0:
            await set_cached_data(
                TAG_COUNTS_KEY,
                [{"tag": item.tag, "count": item.count} for item in counts],
                ttl=self.cache_ttl,
            )
        return counts

    async def invalidate(self) -> None:
        if self.cache_ttl > 0:
            await invalidate_cache(TAG_COUNTS_KEY)
