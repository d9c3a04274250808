import json
import logging
from typing import Any, Optional
from storefinder.core.config import REDIS_DSN
import redis.asyncio as redis

logger = logging.getLogger(__name__)

# Клиент не подключается до первого запроса
redis_client = redis.from_url(REDIS_DSN, decode_responses=True)

TAG_COUNTS_KEY = "tags:counts"


async def get_cached_data(key: str) -> Optional[Any]:
    """
    Получает данные из кэша.

    Args:
        key: Ключ кэша

    Returns:
        Optional[Any]: Десериализованные данные или None, если данных нет
    """
    try:
        data = await redis_client.get(key)
        if data:
            return json.loads(data)
        return None
    except Exception as e:
        logger.error(f"Error getting data from cache: {e}")
        return None


async def set_cached_data(key: str, data: Any, ttl: int = 3600) -> bool:
    """
    Сохраняет данные в кэш.

    Args:
        key: Ключ для сохранения данных
        data: Данные для сохранения (будут сериализованы в JSON)
        ttl: Время жизни кэша в секундах (по умолчанию 1 час)

    Returns:
        bool: True если данные успешно сохранены, False в случае ошибки
    """
    try:
        serialized_data = json.dumps(data)
        await redis_client.set(key, serialized_data, ex=ttl)
        return True
    except Exception as e:
        logger.error(f"Error setting data to cache: {e}")
        return False


async def invalidate_cache(key: str) -> int:
    """
    Инвалидирует кэш по ключу.

    Args:
        key: Ключ для удаления

    Returns:
        int: Количество удаленных ключей
    """
    try:
        return await redis_client.delete(key)
    except Exception as e:
        logger.error(f"Error invalidating cache: {e}")
        return 0
