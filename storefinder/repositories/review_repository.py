from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from storefinder.models.review import Review
from storefinder.utils.validators import validate_rating, validate_required_text


class ReviewRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, author_id: int, store_id: int, text: str, rating) -> Review:
        """Создать отзыв; оценка и текст проверяются до записи в БД"""
        review = Review(
            author_id=author_id,
            store_id=store_id,
            text=validate_required_text("text", text),
            rating=validate_rating(rating),
        )
        self.session.add(review)
        await self.session.commit()
        await self.session.refresh(review)
        return review

    async def get_by_store(self, store_id: int) -> List[Review]:
        result = await self.session.execute(
            select(Review)
            .options(selectinload(Review.author))
            .filter_by(store_id=store_id)
            .order_by(Review.created.desc(), Review.id.desc())
        )
        return list(result.scalars().all())
