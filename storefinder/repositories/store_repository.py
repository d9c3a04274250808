import logging
import operator
from functools import reduce
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, case, exists, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from storefinder.core.config import (
    SEARCH_LIMIT,
    NEAR_LIMIT,
    NEAR_MAX_DISTANCE,
    TOP_STORES_LIMIT,
    TOP_RATING_FLOOR,
)
from storefinder.core.errors import NotFoundError, ValidationError
from storefinder.models.review import Review
from storefinder.models.store import Store, StoreTag
from storefinder.models.user import hearts
from storefinder.repositories.types import NearbyStore, RankedStore, StorePage
from storefinder.utils.geo import bounding_box, haversine
from storefinder.utils.permissions import confirm_owner
from storefinder.utils.slug import slugify, unique_slug
from storefinder.utils.validators import parse_point, validate_store_data

logger = logging.getLogger(__name__)

NAME_WEIGHT = 3
TAG_WEIGHT = 2
DESCRIPTION_WEIGHT = 1


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class StoreRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _newest_first(stmt):
        return stmt.order_by(Store.created.desc(), Store.id.desc())

    @staticmethod
    def _with_reviews(stmt):
        return stmt.options(selectinload(Store.reviews).selectinload(Review.author))

    async def get_by_id(
        self, store_id: int, include_reviews: bool = False
    ) -> Optional[Store]:
        stmt = select(Store).filter_by(id=store_id)
        if include_reviews:
            stmt = self._with_reviews(stmt)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_slug(
        self, slug: str, include_reviews: bool = False
    ) -> Optional[Store]:
        stmt = select(Store).options(selectinload(Store.author)).filter_by(slug=slug)
        if include_reviews:
            stmt = self._with_reviews(stmt)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(Store.id)))
        return result.scalar() or 0

    async def list_paginated(
        self, page: int, page_size: int, include_reviews: bool = False
    ) -> StorePage:
        """
        Страница заведений, новые первыми.

        Args:
            page: Номер страницы, начиная с 1
            page_size: Размер страницы
            include_reviews: Подгрузить отзывы (и их авторов) к каждому заведению
        """
        skip = (page - 1) * page_size
        stmt = self._newest_first(select(Store)).offset(skip).limit(page_size)
        if include_reviews:
            stmt = self._with_reviews(stmt)

        # Одна AsyncSession не допускает параллельных запросов
        result = await self.session.execute(stmt)
        items = list(result.scalars().all())
        total_count = await self.count()
        return StorePage(items=items, total_count=total_count)

    async def search_by_text(self, query: str, limit: int = SEARCH_LIMIT) -> List[Store]:
        """
        Полнотекстовый поиск по названию, тегам и описанию.

        Каждое слово запроса добавляет к релевантности вес совпавшего поля:
        название 3, тег 2, описание 1. Заведения без совпадений не возвращаются.
        """
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("q", "Поисковый запрос не может быть пустым", query)

        parts = []
        for term in query.lower().split():
            pattern = _like_pattern(term)
            parts.append(
                case(
                    (func.lower(Store.name).like(pattern, escape="\\"), NAME_WEIGHT),
                    else_=0,
                )
            )
            parts.append(
                case(
                    (
                        exists().where(
                            StoreTag.store_id == Store.id,
                            func.lower(StoreTag.name) == term,
                        ),
                        TAG_WEIGHT,
                    ),
                    else_=0,
                )
            )
            parts.append(
                case(
                    (
                        func.lower(func.coalesce(Store.description, "")).like(
                            pattern, escape="\\"
                        ),
                        DESCRIPTION_WEIGHT,
                    ),
                    else_=0,
                )
            )

        score = reduce(operator.add, parts)
        stmt = (
            select(Store, score.label("score"))
            .where(score > 0)
            .order_by(score.desc(), Store.created.desc(), Store.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_near(
        self,
        lng: Any,
        lat: Any,
        max_distance: int = NEAR_MAX_DISTANCE,
        limit: int = NEAR_LIMIT,
    ) -> List[NearbyStore]:
        """
        Заведения в радиусе max_distance метров от точки, ближайшие первыми.

        SQL отбирает кандидатов по ограничивающей рамке, точное расстояние
        считается по формуле гаверсинуса.
        """
        lng, lat = parse_point(lng, lat)
        if max_distance <= 0:
            raise ValidationError(
                "max_distance", "Радиус поиска должен быть положительным", max_distance
            )

        min_lat, max_lat, lng_delta = bounding_box(lng, lat, max_distance)
        conditions = [Store.lat.between(min_lat, max_lat)]
        if lng_delta is not None:
            west, east = lng - lng_delta, lng + lng_delta
            if west < -180:
                conditions.append(or_(Store.lng >= west + 360, Store.lng <= east))
            elif east > 180:
                conditions.append(or_(Store.lng >= west, Store.lng <= east - 360))
            else:
                conditions.append(Store.lng.between(west, east))

        stmt = select(
            Store.id,
            Store.slug,
            Store.name,
            Store.description,
            Store.location_type,
            Store.lng,
            Store.lat,
            Store.address,
            Store.photo,
        ).where(*conditions)
        result = await self.session.execute(stmt)

        nearby = []
        for row in result.all():
            distance = haversine(lat, lng, row.lat, row.lng)
            if distance > max_distance:
                continue
            nearby.append(
                NearbyStore(
                    id=row.id,
                    slug=row.slug,
                    name=row.name,
                    description=row.description,
                    location={
                        "type": row.location_type,
                        "coordinates": [row.lng, row.lat],
                        "address": row.address,
                    },
                    photo=row.photo,
                    distance=distance,
                )
            )

        nearby.sort(key=lambda store: (store.distance, store.id))
        return nearby[:limit]

    async def find_by_tag(self, tag: Optional[str] = None) -> List[Store]:
        """Заведения с указанным тегом или, если тег не задан, с любым тегом"""
        if tag:
            condition = Store.tag_links.any(StoreTag.name == tag)
        else:
            condition = Store.tag_links.any()
        result = await self.session.execute(
            self._newest_first(select(Store).where(condition))
        )
        return list(result.scalars().all())

    async def tag_counts(self) -> List[Tuple[str, int]]:
        count = func.count(StoreTag.store_id).label("count")
        stmt = (
            select(StoreTag.name, count)
            .group_by(StoreTag.name)
            .order_by(count.desc(), StoreTag.name)
        )
        result = await self.session.execute(stmt)
        return [(name, total) for name, total in result.all()]

    async def top_rated(
        self, limit: int = TOP_STORES_LIMIT, rating_floor: int = TOP_RATING_FLOOR
    ) -> List[RankedStore]:
        """
        Рейтинг заведений по средней оценке.

        В рейтинг попадают заведения, у которых есть хотя бы один отзыв
        с оценкой не ниже rating_floor; среднее считается по всем отзывам.
        При равной средней выше заведение с большим числом отзывов.
        """
        average = func.avg(Review.rating).label("average_rating")
        review_count = func.count(Review.id).label("review_count")
        stmt = (
            select(Store, average, review_count)
            .join(Review, Review.store_id == Store.id)
            .group_by(Store.id)
            .having(func.max(Review.rating) >= rating_floor)
            .order_by(average.desc(), review_count.desc(), Store.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [
            RankedStore(store=store, average_rating=float(avg), review_count=total)
            for store, avg, total in result.all()
        ]

    async def list_hearted_by(self, user_id: int) -> List[Store]:
        stmt = (
            select(Store)
            .join(hearts, hearts.c.store_id == Store.id)
            .where(hearts.c.user_id == user_id)
        )
        result = await self.session.execute(self._newest_first(stmt))
        return list(result.scalars().all())

    async def _taken_slugs(self, base: str) -> List[str]:
        result = await self.session.execute(
            select(Store.slug).where(
                or_(Store.slug == base, Store.slug.like(f"{base}-%"))
            )
        )
        return list(result.scalars().all())

    async def create(self, author_id: int, data: Dict[str, Any]) -> Store:
        cleaned = validate_store_data(data)
        base = slugify(cleaned["name"])
        slug = unique_slug(base, await self._taken_slugs(base))

        location = cleaned["location"]
        store = Store(
            name=cleaned["name"],
            slug=slug,
            description=cleaned.get("description"),
            location_type="Point",
            lng=location["lng"],
            lat=location["lat"],
            address=location["address"],
            photo=cleaned.get("photo"),
            author_id=author_id,
        )
        store.tag_links = {StoreTag(name=tag) for tag in cleaned.get("tags", set())}
        self.session.add(store)
        await self.session.commit()
        await self.session.refresh(store)
        return store

    async def update(self, store_id: int, data: Dict[str, Any], requester: Any) -> Store:
        """
        Частичное обновление заведения его автором.

        Raises:
            NotFoundError: заведение не найдено
            PermissionDeniedError: requester не является автором
            ValidationError: некорректные данные
        """
        store = await self.get_by_id(store_id)
        if store is None:
            raise NotFoundError("Store", store_id)

        denied = confirm_owner(store, requester)
        if denied is not None:
            raise denied

        cleaned = validate_store_data(data, partial=True)

        if "name" in cleaned:
            store.name = cleaned["name"]
        if "description" in cleaned:
            store.description = cleaned["description"]
        if "photo" in cleaned:
            store.photo = cleaned["photo"]
        if "location" in cleaned:
            location = cleaned["location"]
            store.lng = location["lng"]
            store.lat = location["lat"]
            store.address = location["address"]
        store.location_type = "Point"

        if "tags" in cleaned:
            current = {link.name: link for link in store.tag_links}
            for name in set(current) - cleaned["tags"]:
                store.tag_links.remove(current[name])
            for name in cleaned["tags"] - set(current):
                store.tag_links.add(StoreTag(name=name))

        self.session.add(store)
        await self.session.commit()
        await self.session.refresh(store)
        return store
