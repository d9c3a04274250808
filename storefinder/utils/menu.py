from aiogram import types
from aiogram.utils.keyboard import ReplyKeyboardBuilder

USER_MENU_TEXT = """
🗺 <b>Каталог заведений</b>

Доступные команды:
/stores [страница] - Все заведения, новые первыми
/store &lt;slug&gt; - Карточка заведения
/tags [тег] - Теги и заведения с тегом
/search &lt;запрос&gt; - Поиск по названию, тегам и описанию
/top - Лучшие заведения по отзывам
/hearts - Избранное
/add - Добавить заведение
/edit &lt;id&gt; - Изменить своё заведение
/review &lt;slug&gt; - Оставить отзыв
/help - Показать это сообщение

Отправьте геолокацию, чтобы найти заведения рядом.
"""

GUEST_MENU_TEXT = """
👋 <b>Добро пожаловать!</b>

Для работы с каталогом необходимо зарегистрироваться.
Доступные команды:
/start - Зарегистрироваться
/help - Показать это сообщение
"""


def get_menu_text(registered: bool) -> str:
    """Возвращает текст меню в зависимости от того, зарегистрирован ли пользователь"""
    return USER_MENU_TEXT if registered else GUEST_MENU_TEXT


def get_main_keyboard(registered: bool = False):
    """Создает клавиатуру в зависимости от того, зарегистрирован ли пользователь"""
    builder = ReplyKeyboardBuilder()

    if registered:
        builder.row(
            types.KeyboardButton(text="/stores"), types.KeyboardButton(text="/top")
        )
        builder.row(
            types.KeyboardButton(text="/tags"), types.KeyboardButton(text="/hearts")
        )
        builder.row(
            types.KeyboardButton(text="📍 Рядом со мной", request_location=True),
            types.KeyboardButton(text="/add"),
        )
        builder.row(types.KeyboardButton(text="/help"))
    else:
        builder.row(types.KeyboardButton(text="/start"))
        builder.row(types.KeyboardButton(text="/help"))

    return builder.as_markup(resize_keyboard=True)
