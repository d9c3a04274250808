from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from storefinder.core.errors import NotFoundError
from storefinder.models.review import Review
from storefinder.models.user import User
from storefinder.repositories.review_repository import ReviewRepository
from storefinder.repositories.store_repository import StoreRepository
import logging

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(self, session: AsyncSession):
        self.repo = ReviewRepository(session)
        self.stores = StoreRepository(session)

    async def add_review(self, author: User, store_id: int, text: str, rating) -> Review:
        """
        Оставить отзыв о заведении.

        Raises:
            NotFoundError: заведение не найдено
            ValidationError: пустой текст или оценка вне диапазона 1..5
        """
        if await self.stores.get_by_id(store_id) is None:
            raise NotFoundError("Store", store_id)

        review = await self.repo.create(author.id, store_id, text, rating)
        logger.info(
            "Отзыв %s на заведение %s от пользователя %s",
            review.rating,
            store_id,
            author.id,
        )
        return review

    async def list_for_store(self, store_id: int) -> List[Review]:
        return await self.repo.get_by_store(store_id)
