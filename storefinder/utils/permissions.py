from typing import Any, Optional

from storefinder.core.errors import PermissionDeniedError
from storefinder.models.store import Store


def is_owner(store: Store, user: Any) -> bool:
    return user is not None and store.author_id == getattr(user, "id", None)


def confirm_owner(store: Store, user: Any) -> Optional[PermissionDeniedError]:
    """
    Проверяет, что пользователь является автором заведения.

    Возвращает ошибку вместо её выбрасывания: вызывающий код обязан
    проверить результат до того, как выполнять какие-либо изменения.
    """
    if is_owner(store, user):
        return None
    return PermissionDeniedError(store.id, getattr(user, "id", None))
