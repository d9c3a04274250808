from typing import Optional, Tuple
from aiogram import Router, types
from aiogram.filters import Command, CommandObject
from aiogram.fsm.context import FSMContext
from aiogram.utils.keyboard import ReplyKeyboardBuilder
from storefinder.core.states import AddStoreStates, EditStoreStates, ReviewStates
from storefinder.core.database import get_session
from storefinder.core.errors import StoreFinderError, ValidationError
from storefinder.services.discovery_service import DiscoveryService
from storefinder.services.review_service import ReviewService
from storefinder.services.store_service import StoreService
from storefinder.utils.formatting import error_text
from storefinder.utils.media import resize_and_store
from storefinder.utils.menu import get_main_keyboard
from storefinder.utils.validators import validate_rating
import logging

router = Router()
logger = logging.getLogger(__name__)

NOT_REGISTERED_TEXT = "Сначала зарегистрируйтесь: /start"
SKIP_WORDS = {"-", "/skip", "пропустить"}

EDIT_FIELDS = {
    "Название": "name",
    "Описание": "description",
    "Теги": "tags",
    "Местоположение": "location",
    "Фото": "photo",
}


def _is_skip(message: types.Message) -> bool:
    return (message.text or "").strip().lower() in SKIP_WORDS


def _location_payload(message: types.Message) -> Optional[dict]:
    if not message.location:
        return None
    return {
        "coordinates": [message.location.longitude, message.location.latitude],
        "address": message.venue.address if message.venue else None,
    }


async def _download_photo(message: types.Message) -> Optional[Tuple[bytes, str]]:
    """Скачивает фото или документ-изображение из сообщения"""
    if message.photo:
        buffer = await message.bot.download(message.photo[-1])
        return buffer.read(), "image/jpeg"
    if message.document:
        buffer = await message.bot.download(message.document)
        return buffer.read(), message.document.mime_type or ""
    return None


# --- Добавление заведения ---


@router.message(Command("add"))
async def cmd_add(message: types.Message, state: FSMContext, user=None):
    if user is None:
        await message.answer(NOT_REGISTERED_TEXT)
        return

    await state.clear()
    await message.answer("Введите название заведения:")
    await state.set_state(AddStoreStates.waiting_name)


@router.message(AddStoreStates.waiting_name)
async def process_add_name(message: types.Message, state: FSMContext):
    name = (message.text or "").strip()
    if not name:
        await message.answer("Название не может быть пустым. Введите название:")
        return

    await state.update_data(name=name)
    await message.answer("Опишите заведение (или «-», чтобы пропустить):")
    await state.set_state(AddStoreStates.waiting_description)


@router.message(AddStoreStates.waiting_description)
async def process_add_description(message: types.Message, state: FSMContext):
    description = None if _is_skip(message) else (message.text or "").strip()
    await state.update_data(description=description)
    await message.answer("Перечислите теги через запятую (или «-»):")
    await state.set_state(AddStoreStates.waiting_tags)


@router.message(AddStoreStates.waiting_tags)
async def process_add_tags(message: types.Message, state: FSMContext):
    tags = [] if _is_skip(message) else (message.text or "").split(",")
    await state.update_data(tags=[tag.strip() for tag in tags if tag.strip()])

    kb = ReplyKeyboardBuilder()
    kb.button(text="📍 Отправить геолокацию", request_location=True)
    await message.answer(
        "Отправьте местоположение заведения:",
        reply_markup=kb.as_markup(resize_keyboard=True, one_time_keyboard=True),
    )
    await state.set_state(AddStoreStates.waiting_location)


@router.message(AddStoreStates.waiting_location)
async def process_add_location(message: types.Message, state: FSMContext):
    location = _location_payload(message)
    if location is None:
        await message.answer("Нужна геолокация. Отправьте местоположение заведения:")
        return

    await state.update_data(location=location)
    await message.answer("Пришлите фото заведения (или «-», чтобы пропустить):")
    await state.set_state(AddStoreStates.waiting_photo)


@router.message(AddStoreStates.waiting_photo)
async def process_add_photo(message: types.Message, state: FSMContext, user=None):
    if user is None:
        await state.clear()
        await message.answer(NOT_REGISTERED_TEXT)
        return

    data = await state.get_data()
    payload = {
        "name": data.get("name"),
        "description": data.get("description"),
        "tags": data.get("tags", []),
        "location": data.get("location"),
    }

    try:
        if not _is_skip(message):
            upload = await _download_photo(message)
            if upload is None:
                await message.answer("Пришлите изображение или «-», чтобы пропустить:")
                return
            payload["photo"] = await resize_and_store(*upload)

        async with get_session() as session:
            store = await StoreService(session).create_store(user, payload)
    except ValidationError as e:
        await state.clear()
        await message.answer(error_text(e), reply_markup=get_main_keyboard(True))
        return

    await state.clear()
    await message.answer(
        f"✅ Заведение «{store.name}» создано: /store {store.slug}",
        reply_markup=get_main_keyboard(True),
    )


# --- Редактирование заведения ---


@router.message(Command("edit"))
async def cmd_edit(
    message: types.Message, command: CommandObject, state: FSMContext, user=None
):
    if user is None:
        await message.answer(NOT_REGISTERED_TEXT)
        return

    args = (command.args or "").strip()
    if not args.isdigit():
        await message.answer("Укажите ID заведения: /edit &lt;id&gt;", parse_mode="HTML")
        return

    async with get_session() as session:
        try:
            store = await StoreService(session).get_for_edit(int(args), user)
        except StoreFinderError as e:
            await message.answer(error_text(e))
            return

    await state.clear()
    await state.update_data(store_id=store.id, address=store.address)

    kb = ReplyKeyboardBuilder()
    for label in EDIT_FIELDS:
        kb.button(text=label)
    kb.adjust(2)
    await message.answer(
        f"Что изменить в «{store.name}»?",
        reply_markup=kb.as_markup(resize_keyboard=True, one_time_keyboard=True),
    )
    await state.set_state(EditStoreStates.waiting_field)


@router.message(EditStoreStates.waiting_field)
async def process_edit_field(message: types.Message, state: FSMContext):
    field = EDIT_FIELDS.get((message.text or "").strip())
    if field is None:
        await message.answer("Выберите поле из списка.")
        return

    await state.update_data(field=field)
    prompts = {
        "name": "Введите новое название:",
        "description": "Введите новое описание (или «-», чтобы очистить):",
        "tags": "Перечислите теги через запятую (или «-», чтобы очистить):",
        "location": "Отправьте новое местоположение:",
        "photo": "Пришлите новое фото (или «-», чтобы удалить):",
    }
    await message.answer(prompts[field])
    await state.set_state(EditStoreStates.waiting_value)


@router.message(EditStoreStates.waiting_value)
async def process_edit_value(message: types.Message, state: FSMContext, user=None):
    if user is None:
        await state.clear()
        await message.answer(NOT_REGISTERED_TEXT)
        return

    data = await state.get_data()
    field = data.get("field")
    store_id = data.get("store_id")

    try:
        if field == "location":
            location = _location_payload(message)
            if location is None:
                await message.answer("Нужна геолокация. Отправьте местоположение:")
                return
            location["address"] = location["address"] or data.get("address")
            patch = {"location": location}
        elif field == "photo":
            if _is_skip(message):
                patch = {"photo": None}
            else:
                upload = await _download_photo(message)
                if upload is None:
                    await message.answer("Пришлите изображение или «-»:")
                    return
                patch = {"photo": await resize_and_store(*upload)}
        elif field == "tags":
            patch = {"tags": [] if _is_skip(message) else (message.text or "").split(",")}
        elif field == "description":
            patch = {"description": None if _is_skip(message) else message.text}
        else:
            patch = {field: message.text}

        async with get_session() as session:
            store = await StoreService(session).update_store(store_id, patch, user)
    except StoreFinderError as e:
        await state.clear()
        await message.answer(error_text(e), reply_markup=get_main_keyboard(True))
        return

    await state.clear()
    await message.answer(
        f"✅ Заведение «{store.name}» обновлено: /store {store.slug}",
        reply_markup=get_main_keyboard(True),
    )


# --- Отзывы ---


@router.message(Command("review"))
async def cmd_review(
    message: types.Message, command: CommandObject, state: FSMContext, user=None
):
    if user is None:
        await message.answer(NOT_REGISTERED_TEXT)
        return

    slug = (command.args or "").strip()
    if not slug:
        await message.answer("Укажите slug заведения: /review &lt;slug&gt;", parse_mode="HTML")
        return

    async with get_session() as session:
        try:
            store = await DiscoveryService(session).get_by_slug(slug)
        except StoreFinderError as e:
            await message.answer(error_text(e))
            return

    await state.clear()
    await state.update_data(store_id=store.id, store_name=store.name)

    kb = ReplyKeyboardBuilder()
    for rating in range(1, 6):
        kb.button(text=str(rating))
    kb.adjust(5)
    await message.answer(
        f"Ваша оценка «{store.name}» от 1 до 5:",
        reply_markup=kb.as_markup(resize_keyboard=True, one_time_keyboard=True),
    )
    await state.set_state(ReviewStates.waiting_rating)


@router.message(ReviewStates.waiting_rating)
async def process_review_rating(message: types.Message, state: FSMContext):
    try:
        rating = validate_rating((message.text or "").strip())
    except ValidationError as e:
        await message.answer(error_text(e))
        return

    await state.update_data(rating=rating)
    await message.answer("Напишите отзыв:")
    await state.set_state(ReviewStates.waiting_text)


@router.message(ReviewStates.waiting_text)
async def process_review_text(message: types.Message, state: FSMContext, user=None):
    if user is None:
        await state.clear()
        await message.answer(NOT_REGISTERED_TEXT)
        return

    data = await state.get_data()
    async with get_session() as session:
        try:
            await ReviewService(session).add_review(
                user, data["store_id"], message.text or "", data["rating"]
            )
        except ValidationError as e:
            await message.answer(error_text(e))
            return
        except StoreFinderError as e:
            await state.clear()
            await message.answer(error_text(e), reply_markup=get_main_keyboard(True))
            return

    await state.clear()
    await message.answer(
        f"✅ Спасибо! Отзыв о «{data ['store_name']}» сохранён.",
        reply_markup=get_main_keyboard(True),
    )
