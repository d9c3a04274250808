"""
Типизированные ошибки слоя поиска и управления заведениями.

Все ошибки несут структурированные поля, по которым обработчики бота
формируют сообщение пользователю. Ядро само текст для пользователя не собирает.
"""

from typing import Any, Optional


class StoreFinderError(Exception):
    """Базовая ошибка приложения"""


class ValidationError(StoreFinderError):
    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"{field}: {message}")


class NotFoundError(StoreFinderError):
    def __init__(self, entity: str, key: Any):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key!r} not found")


class PermissionDeniedError(StoreFinderError):
    """Попытка изменить заведение пользователем, который им не владеет."""

    def __init__(self, store_id: int, user_id: Optional[int]):
        self.store_id = store_id
        self.user_id = user_id
        super().__init__(f"user {user_id} does not own store {store_id}")
