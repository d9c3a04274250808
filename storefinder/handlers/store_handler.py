from pathlib import Path
from aiogram import F, Router, types
from aiogram.filters import Command, CommandObject
from aiogram.types import FSInputFile
from storefinder.core.config import UPLOAD_DIR
from storefinder.core.database import get_session
from storefinder.core.errors import NotFoundError, ValidationError
from storefinder.services.discovery_service import DiscoveryService
from storefinder.services.heart_service import HeartService
from storefinder.utils.formatting import (
    error_text,
    format_nearby,
    format_store_card,
    format_store_list,
    format_tag_counts,
    format_top,
    heart_keyboard,
)
import logging

router = Router()
logger = logging.getLogger(__name__)


async def _hearted(session, user) -> set:
    if user is None:
        return set()
    return await HeartService(session).get_hearts(user.id)


@router.message(Command("stores"))
async def cmd_stores(message: types.Message, command: CommandObject, user=None):
    async with get_session() as session:
        discovery = DiscoveryService(session)
        try:
            listing = await discovery.get_stores(command.args)
        except ValidationError as e:
            await message.answer(error_text(e))
            return

        if listing.redirect_to is not None:
            await message.answer(
                f"ℹ️ Вы запросили страницу {listing.page}, но её не существует. "
                f"Показываю страницу {listing.redirect_to}."
            )
            listing = await discovery.get_stores(listing.redirect_to)

        hearted = await _hearted(session, user)

    header = (
        f"🏪 Заведения: страница {listing.page} из {max(listing.page_count, 1)} "
        f"(всего {listing.total_count})"
    )
    text = f"{header}\n\n{format_store_list(listing.items, hearted)}"
    if listing.page < listing.page_count:
        text += f"\n\nДальше: /stores {listing.page + 1}"

    markup = heart_keyboard(listing.items, hearted) if user and listing.items else None
    await message.answer(text, parse_mode="HTML", reply_markup=markup)


@router.message(Command("store"))
async def cmd_store(message: types.Message, command: CommandObject):
    slug = (command.args or "").strip()
    if not slug:
        await message.answer("Укажите slug заведения: /store &lt;slug&gt;", parse_mode="HTML")
        return

    async with get_session() as session:
        try:
            store = await DiscoveryService(session).get_by_slug(slug)
        except NotFoundError as e:
            await message.answer(error_text(e))
            return
        card = format_store_card(store)

    photo_path = Path(UPLOAD_DIR) / store.photo if store.photo else None
    if photo_path is not None and photo_path.exists():
        await message.answer_photo(FSInputFile(photo_path), caption=card, parse_mode="HTML")
    else:
        await message.answer(card, parse_mode="HTML")


@router.message(Command("tags"))
async def cmd_tags(message: types.Message, command: CommandObject, user=None):
    async with get_session() as session:
        listing = await DiscoveryService(session).get_by_tag(command.args)
        hearted = await _hearted(session, user)

    title = f"#{listing.selected_tag}" if listing.selected_tag else "все теги"
    text = (
        f"🏷 {format_tag_counts(listing.tags, listing.selected_tag)}\n\n"
        f"Заведения ({title}):\n{format_store_list(listing.stores, hearted)}"
    )
    await message.answer(text, parse_mode="HTML")


@router.message(Command("search"))
async def cmd_search(message: types.Message, command: CommandObject):
    async with get_session() as session:
        try:
            stores = await DiscoveryService(session).search(command.args or "")
        except ValidationError as e:
            await message.answer(error_text(e))
            return

    await message.answer(
        f"🔎 Результаты поиска:\n{format_store_list(stores)}", parse_mode="HTML"
    )


@router.message(F.location)
async def process_location(message: types.Message):
    location = message.location
    async with get_session() as session:
        try:
            stores = await DiscoveryService(session).near(
                location.longitude, location.latitude
            )
        except ValidationError as e:
            await message.answer(error_text(e))
            return

    await message.answer(f"📍 Рядом с вами:\n{format_nearby(stores)}", parse_mode="HTML")


@router.message(Command("top"))
async def cmd_top(message: types.Message):
    async with get_session() as session:
        ranked = await DiscoveryService(session).top_stores()

    await message.answer(f"🏆 Лучшие заведения:\n{format_top(ranked)}", parse_mode="HTML")
