from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from storefinder.repositories.user_repository import UserRepository
from storefinder.models.user import User
from storefinder.utils.validators import validate_required_text
import logging

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, session: AsyncSession):
        self.repo = UserRepository(session)
        self.session = session

    async def get_or_create(self, chat_id: int, name: str) -> User:
        """Зарегистрировать пользователя Telegram или вернуть существующего"""
        name = validate_required_text("name", name)
        user = await self.repo.get_by_chat_id(chat_id)
        if not user:
            user = await self.repo.create(name, chat_id)
            logger.info(f"Зарегистрирован пользователь {name} (chat_id: {chat_id})")
        elif user.name != name:
            user = await self.repo.update_name(user, name)
        return user

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """
        Получает пользователя по ID.

        Args:
            user_id: ID пользователя

        Returns:
            Optional[User]: Объект пользователя или None, если пользователь не найден
        """
        return await self.repo.get_by_id(user_id)

    async def get_by_chat_id(self, chat_id: int) -> Optional[User]:
        """Получить пользователя по chat_id"""
        return await self.repo.get_by_chat_id(chat_id)
