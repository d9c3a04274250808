import asyncio
import logging
import sys
from pathlib import Path
from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.redis import RedisStorage

# Добавляем корень проекта в PYTHONPATH
sys.path.append(str(Path(__file__).resolve().parent.parent))

from storefinder.core.config import BOT_TOKEN, REDIS_DSN
from storefinder.core.database import engine, Base
from storefinder.handlers.auth_handler import router as auth_router
from storefinder.handlers.edit_handler import router as edit_router
from storefinder.handlers.heart_handler import router as heart_router
from storefinder.handlers.store_handler import router as store_router
from storefinder.middleware import CurrentUserMiddleware

import storefinder.models  # noqa: F401  регистрирует таблицы в Base.metadata


async def on_startup():
    # Создаем таблицы в БД
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def main():
    storage = RedisStorage.from_url(REDIS_DSN)

    bot = Bot(token=BOT_TOKEN)
    await bot.delete_webhook(drop_pending_updates=True)

    dp = Dispatcher(storage=storage)

    dp.message.middleware(CurrentUserMiddleware())
    dp.callback_query.middleware(CurrentUserMiddleware())

    # Диалоги добавления/редактирования раньше поиска: геолокация внутри
    # диалога не должна уходить в поиск рядом
    dp.include_router(auth_router)
    dp.include_router(edit_router)
    dp.include_router(heart_router)
    dp.include_router(store_router)

    async def global_error_handler(event) -> bool:
        logging.getLogger("aiogram").error(
            "Exception %s, update %s", event.exception, event.update
        )
        return True

    dp.errors.register(global_error_handler)

    await on_startup()
    await dp.start_polling(bot)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    asyncio.run(main())
