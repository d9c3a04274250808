from contextlib import asynccontextmanager
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, AsyncEngine
from sqlalchemy.orm import sessionmaker, declarative_base

from storefinder.core.config import DATABASE_URL


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def configure_sqlite(engine: AsyncEngine) -> AsyncEngine:
    """
    Настраивает подключения SQLite.

    Встроенная lower() в SQLite приводит к нижнему регистру только ASCII,
    поэтому она заменяется на str.lower для поиска по кириллице.
    Транзакции открываются через BEGIN IMMEDIATE: пишущие транзакции
    выполняются по очереди, как при блокировке строки в PostgreSQL.
    Для других СУБД ничего не меняет.
    """
    if engine.dialect.name != "sqlite":
        return engine

    @event.listens_for(engine.sync_engine, "connect")
    def on_connect(dbapi_connection, connection_record):
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)
        # Транзакциями управляет SQLAlchemy, а не драйвер
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


engine = configure_sqlite(create_async_engine(DATABASE_URL, echo=False, future=True))
AsyncSessionLocal = sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
Base = declarative_base()


@asynccontextmanager
async def get_session():
    async with AsyncSessionLocal() as session:
        yield session
