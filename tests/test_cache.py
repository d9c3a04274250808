import pytest
import json
from unittest.mock import patch, AsyncMock
from storefinder.utils.cache import get_cached_data, set_cached_data, invalidate_cache


@pytest.mark.asyncio
async def test_cache_operations():
    """Тест базовых операций с кэшем"""

    redis_mock = AsyncMock()
    redis_mock.get.return_value = None

    test_key = "tags:counts"
    test_data = [{"tag": "cafe", "count": 2}]

    with patch("storefinder.utils.cache.redis_client", redis_mock):
        cached_data = await get_cached_data(test_key)
        assert cached_data is None
        redis_mock.get.assert_called_once_with(test_key)

    redis_mock.reset_mock()
    redis_mock.set.return_value = True
    with patch("storefinder.utils.cache.redis_client", redis_mock):
        assert await set_cached_data(test_key, test_data, ttl=60)
        redis_mock.set.assert_called_once_with(test_key, json.dumps(test_data), ex=60)

    redis_mock.reset_mock()
    redis_mock.get.return_value = json.dumps(test_data)
    with patch("storefinder.utils.cache.redis_client", redis_mock):
        assert await get_cached_data(test_key) == test_data

    redis_mock.reset_mock()
    redis_mock.delete.return_value = 1
    with patch("storefinder.utils.cache.redis_client", redis_mock):
        assert await invalidate_cache(test_key) == 1
        redis_mock.delete.assert_called_once_with(test_key)


@pytest.mark.asyncio
async def test_cache_errors_are_logged_not_raised():
    """Недоступный Redis не ломает запросы"""

    redis_mock = AsyncMock()
    redis_mock.get.side_effect = ConnectionError("redis down")
    redis_mock.set.side_effect = ConnectionError("redis down")
    redis_mock.delete.side_effect = ConnectionError("redis down")

    with patch("storefinder.utils.cache.redis_client", redis_mock):
        assert await get_cached_data("k") is None
        assert await set_cached_data("k", [1]) is False
        assert await invalidate_cache("k") == 0
