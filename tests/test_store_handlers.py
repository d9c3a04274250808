import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from aiogram.filters import CommandObject
from aiogram.fsm.context import FSMContext
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import Message, Chat, Location, User as TgUser

from storefinder.core.states import AuthStates, ReviewStates
from storefinder.handlers.auth_handler import cmd_start, process_name
from storefinder.handlers.edit_handler import (
    cmd_edit,
    cmd_review,
    process_review_rating,
    process_review_text,
)
from storefinder.handlers.heart_handler import callback_heart, cmd_hearts
from storefinder.handlers.store_handler import (
    cmd_search,
    cmd_stores,
    cmd_top,
    process_location,
)
from storefinder.services.heart_service import HeartService
from storefinder.services.review_service import ReviewService
from storefinder.services.user_service import UserService


@pytest.fixture
def create_message():
    def _create_message(text="", chat_id=123456789, from_user_id=123456789):
        message = AsyncMock(spec=Message)
        message.text = text
        message.chat = Chat(id=chat_id, type="private")
        message.from_user = TgUser(id=from_user_id, is_bot=False, first_name="Test")
        message.location = None
        message.venue = None

        message.answer = AsyncMock()
        return message

    return _create_message


@pytest.fixture
def state():
    storage = MemoryStorage()
    return FSMContext(storage=storage, key="test")


@pytest.fixture
def session_patch(session):

    class SessionContext:
        async def __aenter__(self):
            return session

        async def __aexit__(self, *args):
            pass

    targets = [
        "storefinder.handlers.store_handler.get_session",
        "storefinder.handlers.heart_handler.get_session",
        "storefinder.handlers.edit_handler.get_session",
        "storefinder.handlers.auth_handler.get_session",
    ]
    patchers = [patch(target, return_value=SessionContext()) for target in targets]
    for patcher in patchers:
        patcher.start()
    yield session
    for patcher in patchers:
        patcher.stop()


def answers(message):
    return [call.args[0] for call in message.answer.call_args_list]


@pytest.mark.asyncio
async def test_cmd_stores_redirects_out_of_range_page(
    create_message, session_patch, make_store
):
    for i in range(5):
        await make_store(f"Store {i}")

    message = create_message("/stores 3")
    await cmd_stores(message, CommandObject(command="stores", args="3"))

    texts = answers(message)
    assert len(texts) == 2
    assert "страницу 3" in texts[0]
    assert "страницу 2" in texts[0]
    assert "страница 2 из 2" in texts[1]
    assert "Store 0" in texts[1]


@pytest.mark.asyncio
async def test_cmd_stores_invalid_page(create_message, session_patch):
    message = create_message("/stores abc")
    await cmd_stores(message, CommandObject(command="stores", args="abc"))

    assert "Номер страницы" in answers(message)[0]


@pytest.mark.asyncio
async def test_cmd_stores_marks_hearted(create_message, session_patch, author, make_store):
    store = await make_store("Loved")
    await HeartService(session_patch).toggle_heart(author.id, store.id)

    message = create_message("/stores")
    await cmd_stores(message, CommandObject(command="stores"), user=author)

    assert "♥ <b>Loved</b>" in answers(message)[0]
    markup = message.answer.call_args.kwargs["reply_markup"]
    assert markup.inline_keyboard[0][0].callback_data == f"heart:{store.id}"


@pytest.mark.asyncio
async def test_cmd_search(create_message, session_patch, make_store):
    await make_store("Coffee House")

    message = create_message("/search coffee")
    await cmd_search(message, CommandObject(command="search", args="coffee"))
    assert "Coffee House" in answers(message)[0]

    empty = create_message("/search")
    await cmd_search(empty, CommandObject(command="search"))
    assert "Поисковый запрос" in answers(empty)[0]


@pytest.mark.asyncio
async def test_process_location(create_message, session_patch, make_store):
    await make_store("Around The Corner", lng=30.52, lat=50.451)

    message = create_message()
    message.location = Location(longitude=30.52, latitude=50.45)
    await process_location(message)

    text = answers(message)[0]
    assert "Around The Corner" in text
    assert "0.1 км" in text


@pytest.mark.asyncio
async def test_cmd_top(create_message, session_patch, author, make_store):
    store = await make_store("Best")
    await ReviewService(session_patch).add_review(author, store.id, "Great", 5)

    message = create_message("/top")
    await cmd_top(message)

    assert "1. <b>Best</b> — ⭐ 5.0" in answers(message)[0]


@pytest.mark.asyncio
async def test_callback_heart_toggles(session_patch, author, make_store):
    store = await make_store("Tap")
    callback = AsyncMock()
    callback.data = f"heart:{store.id}"

    await callback_heart(callback, user=author)
    callback.answer.assert_called_with("♥ В избранном")
    assert await HeartService(session_patch).get_hearts(author.id) == {store.id}

    await callback_heart(callback, user=author)
    callback.answer.assert_called_with("Убрано из избранного")
    assert await HeartService(session_patch).get_hearts(author.id) == set()


@pytest.mark.asyncio
async def test_callback_heart_requires_registration(session_patch):
    callback = AsyncMock()
    callback.data = "heart:1"

    await callback_heart(callback, user=None)

    callback.answer.assert_called_once()
    assert callback.answer.call_args.kwargs["show_alert"] is True


@pytest.mark.asyncio
async def test_cmd_hearts_empty(create_message, session_patch, author):
    message = create_message("/hearts")
    await cmd_hearts(message, user=author)

    assert answers(message) == ["В избранном пока пусто."]


@pytest.mark.asyncio
async def test_cmd_edit_by_non_owner(
    create_message, state, session_patch, other_user, make_store
):
    store = await make_store("Not Yours")

    message = create_message(f"/edit {store.id}")
    await cmd_edit(
        message, CommandObject(command="edit", args=str(store.id)), state, user=other_user
    )

    assert "только его автор" in answers(message)[0]
    assert await state.get_state() is None


@pytest.mark.asyncio
async def test_review_dialog(create_message, state, session_patch, author, make_store):
    store = await make_store("Bistro")

    start = create_message("/review bistro")
    await cmd_review(start, CommandObject(command="review", args="bistro"), state, user=author)
    assert await state.get_state() == ReviewStates.waiting_rating

    bad_rating = create_message("9")
    await process_review_rating(bad_rating, state)
    assert "Оценка" in answers(bad_rating)[0]
    assert await state.get_state() == ReviewStates.waiting_rating

    rating = create_message("4")
    await process_review_rating(rating, state)
    assert await state.get_state() == ReviewStates.waiting_text

    text = create_message("Очень вкусно")
    await process_review_text(text, state, user=author)
    assert "Bistro" in answers(text)[0]
    assert await state.get_state() is None

    reviews = await ReviewService(session_patch).list_for_store(store.id)
    assert [(r.rating, r.text) for r in reviews] == [(4, "Очень вкусно")]


@pytest.mark.asyncio
async def test_start_registers_user(create_message, state, session_patch):
    message = create_message("/start", from_user_id=555)
    await cmd_start(message, state, user=None)
    assert await state.get_state() == AuthStates.waiting_name

    name = create_message("Карина", from_user_id=555)
    await process_name(name, state)

    user = await UserService(session_patch).get_by_chat_id(555)
    assert user is not None
    assert user.name == "Карина"
    assert await state.get_state() is None
