"""Результаты запросов репозиториев и сервисов поиска."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from storefinder.models.store import Store


@dataclass
class StorePage:
    items: List[Store]
    total_count: int


@dataclass(frozen=True)
class NearbyStore:
    """Проекция заведения для карты: только поля, нужные для метки."""

    id: int
    slug: str
    name: str
    description: Optional[str]
    location: Dict[str, Any]
    photo: Optional[str]
    distance: float  # метры


@dataclass(frozen=True)
class TagCount:
    tag: str
    count: int


@dataclass
class RankedStore:
    store: Store
    average_rating: float
    review_count: int


@dataclass
class StoreListing:
    """
    Страница списка заведений.

    redirect_to заполнен, когда запрошенная страница за пределами диапазона:
    это не ошибка, вызывающий код должен показать указанную страницу.
    """

    items: List[Store]
    page: int
    page_count: int
    total_count: int
    redirect_to: Optional[int] = None


@dataclass
class TagListing:
    tags: List[TagCount]
    selected_tag: Optional[str]
    stores: List[Store] = field(default_factory=list)
