from aiogram import F, Router, types
from aiogram.filters import Command, CommandObject
from storefinder.core.database import get_session
from storefinder.core.errors import NotFoundError
from storefinder.services.heart_service import HeartService
from storefinder.utils.formatting import error_text, format_store_list, heart_keyboard
import logging

router = Router()
logger = logging.getLogger(__name__)

NOT_REGISTERED_TEXT = "Сначала зарегистрируйтесь: /start"


async def _toggle(user, store_id: int) -> tuple:
    async with get_session() as session:
        hearts = await HeartService(session).toggle_heart(user.id, store_id)
    return store_id in hearts, len(hearts)


@router.message(Command("heart"))
async def cmd_heart(message: types.Message, command: CommandObject, user=None):
    if user is None:
        await message.answer(NOT_REGISTERED_TEXT)
        return

    args = (command.args or "").strip()
    if not args.isdigit():
        await message.answer("Укажите ID заведения: /heart &lt;id&gt;", parse_mode="HTML")
        return

    try:
        added, total = await _toggle(user, int(args))
    except NotFoundError as e:
        await message.answer(error_text(e))
        return

    status = "добавлено в избранное ♥" if added else "убрано из избранного"
    await message.answer(f"Заведение {status}. В избранном: {total}.")


@router.callback_query(F.data.startswith("heart:"))
async def callback_heart(callback: types.CallbackQuery, user=None):
    if user is None:
        await callback.answer(NOT_REGISTERED_TEXT, show_alert=True)
        return

    raw_id = callback.data.split(":", 1)[1]
    if not raw_id.isdigit():
        await callback.answer("Некорректная кнопка", show_alert=True)
        return

    try:
        added, total = await _toggle(user, int(raw_id))
    except NotFoundError as e:
        await callback.answer(error_text(e), show_alert=True)
        return

    await callback.answer("♥ В избранном" if added else "Убрано из избранного")


@router.message(Command("hearts"))
async def cmd_hearts(message: types.Message, user=None):
    if user is None:
        await message.answer(NOT_REGISTERED_TEXT)
        return

    async with get_session() as session:
        service = HeartService(session)
        stores = await service.list_hearted(user.id)
        hearted = {store.id for store in stores}

    if not stores:
        await message.answer("В избранном пока пусто.")
        return

    await message.answer(
        f"♥ Избранное:\n{format_store_list(stores, hearted)}",
        parse_mode="HTML",
        reply_markup=heart_keyboard(stores, hearted),
    )
