"""
Middleware, определяющий текущего пользователя по chat_id
"""

from typing import Callable, Dict, Any, Awaitable
from aiogram import BaseMiddleware
from aiogram.types import TelegramObject
from storefinder.core.database import get_session
from storefinder.services.user_service import UserService
import logging

logger = logging.getLogger(__name__)


class CurrentUserMiddleware(BaseMiddleware):
    """
    Передаёт обработчикам зарегистрированного пользователя в data["user"].
    Для незарегистрированных чатов передаётся None.
    """

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:

        tg_user = data.get("event_from_user") or getattr(event, "from_user", None)
        data["user"] = None
        if tg_user is None:
            return await handler(event, data)

        async with get_session() as session:
            data["user"] = await UserService(session).get_by_chat_id(tg_user.id)

        return await handler(event, data)
