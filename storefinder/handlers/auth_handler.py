from aiogram import Router, types
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from storefinder.core.states import AuthStates
from storefinder.core.database import get_session
from storefinder.core.errors import ValidationError
from storefinder.services.user_service import UserService
from storefinder.utils.formatting import error_text
from storefinder.utils.menu import get_menu_text, get_main_keyboard
import logging

router = Router()
logger = logging.getLogger(__name__)


@router.message(Command("start"))
async def cmd_start(message: types.Message, state: FSMContext, user=None):
    await state.clear()

    if user is not None:
        await message.answer(
            f"С возвращением, {user.name}!", reply_markup=get_main_keyboard(True)
        )
        await message.answer(get_menu_text(True), parse_mode="HTML")
        return

    await message.answer("Здравствуйте! Как вас представить в отзывах?")
    await state.set_state(AuthStates.waiting_name)


@router.message(Command("help"))
async def cmd_help(message: types.Message, user=None):
    registered = user is not None
    await message.answer(
        get_menu_text(registered),
        parse_mode="HTML",
        reply_markup=get_main_keyboard(registered),
    )


@router.message(AuthStates.waiting_name)
async def process_name(message: types.Message, state: FSMContext):
    async with get_session() as session:
        try:
            user = await UserService(session).get_or_create(
                message.from_user.id, message.text or ""
            )
        except ValidationError as e:
            await message.answer(error_text(e))
            return

    await state.clear()
    await message.answer(
        f"✅ Вы зарегистрированы как {user.name}.", reply_markup=get_main_keyboard(True)
    )
    await message.answer(get_menu_text(True), parse_mode="HTML")
