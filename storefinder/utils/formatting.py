from html import escape
from typing import Iterable, List, Optional, Set

from aiogram.utils.keyboard import InlineKeyboardBuilder

from storefinder.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from storefinder.models.store import Store
from storefinder.repositories.types import NearbyStore, RankedStore, TagCount

FIELD_NAMES = {
    "name": "Название",
    "description": "Описание",
    "tags": "Теги",
    "location": "Местоположение",
    "photo": "Фото",
    "page": "Номер страницы",
    "q": "Поисковый запрос",
    "lng": "Долгота",
    "lat": "Широта",
    "rating": "Оценка",
    "text": "Текст отзыва",
}


def error_text(error: Exception) -> str:
    """Текст для пользователя по типизированной ошибке"""
    if isinstance(error, ValidationError):
        field = FIELD_NAMES.get(error.field, error.field)
        return f"⚠️ {field}: {error.message}"
    if isinstance(error, NotFoundError):
        return "🔍 Заведение не найдено." if error.entity == "Store" else "🔍 Не найдено."
    if isinstance(error, PermissionDeniedError):
        return "⛔ Редактировать заведение может только его автор."
    return "❌ Произошла ошибка."


def format_tags(tags: Iterable[str]) -> str:
    return ", ".join(f"#{escape(tag)}" for tag in sorted(tags))


def format_store_line(store: Store, hearted: Optional[Set[int]] = None) -> str:
    heart = "♥ " if hearted and store.id in hearted else ""
    line = f"{heart}<b>{escape(store.name)}</b> — /store {store.slug} (id {store.id})"
    if store.tags:
        line += f"\n   {format_tags(store.tags)}"
    return line


def format_store_list(stores: List[Store], hearted: Optional[Set[int]] = None) -> str:
    if not stores:
        return "Заведений не найдено."
    return "\n".join(format_store_line(store, hearted) for store in stores)


def format_store_card(store: Store) -> str:
    """Карточка заведения; отзывы и автор должны быть загружены заранее"""
    lines = [f"<b>{escape(store.name)}</b>"]
    if store.description:
        lines.append(escape(store.description))
    if store.tags:
        lines.append(format_tags(store.tags))
    if store.address:
        lines.append(f"📍 {escape(store.address)}")
    lines.append(f"🌐 {store.lat:.5f}, {store.lng:.5f}")

    reviews = store.reviews
    if reviews:
        average = sum(review.rating for review in reviews) / len(reviews)
        lines.append(f"⭐ {average:.1f} ({len(reviews)} отзывов)")
        for review in sorted(reviews, key=lambda r: (r.created, r.id), reverse=True)[:5]:
            lines.append(
                f"• {'★' * review.rating}{'☆' * (5 - review.rating)} "
                f"{escape(review.author.name)}: {escape(review.text)}"
            )
    else:
        lines.append("Отзывов пока нет.")
    return "\n".join(lines)


def format_nearby(stores: List[NearbyStore]) -> str:
    if not stores:
        return "Рядом заведений не найдено."
    return "\n".join(
        f"<b>{escape(store.name)}</b> — {store.distance / 1000:.1f} км, /store {store.slug}"
        for store in stores
    )


def format_top(ranked: List[RankedStore]) -> str:
    if not ranked:
        return "Пока нет заведений с отзывами."
    return "\n".join(
        f"{place}. <b>{escape(item.store.name)}</b> — ⭐ {item.average_rating:.1f} "
        f"({item.review_count} отзывов), /store {item.store.slug}"
        for place, item in enumerate(ranked, start=1)
    )


def format_tag_counts(tags: List[TagCount], selected: Optional[str] = None) -> str:
    if not tags:
        return "Тегов пока нет."
    return " ".join(
        f"<b>#{escape(item.tag)} ({item.count})</b>"
        if item.tag == selected
        else f"#{escape(item.tag)} ({item.count})"
        for item in tags
    )


def heart_keyboard(stores: List[Store], hearted: Optional[Set[int]] = None):
    """Инлайн-кнопки ♥/♡ для каждого заведения в списке"""
    builder = InlineKeyboardBuilder()
    for store in stores:
        mark = "♥" if hearted and store.id in hearted else "♡"
        builder.button(text=f"{mark} {store.name}", callback_data=f"heart:{store.id}")
    builder.adjust(1)
    return builder.as_markup()
