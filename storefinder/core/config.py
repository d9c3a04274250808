import os
from dotenv import load_dotenv

load_dotenv(override=True)

BOT_TOKEN = os.getenv("BOT_TOKEN")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./storefinder.db")


REDIS_DSN = os.getenv("REDIS_DSN", "redis://localhost:6379/0")
TAGS_CACHE_TTL = int(os.getenv("TAGS_CACHE_TTL", "3600"))


STORES_PAGE_SIZE = int(os.getenv("STORES_PAGE_SIZE", "4"))
SEARCH_LIMIT = int(os.getenv("SEARCH_LIMIT", "5"))
NEAR_LIMIT = int(os.getenv("NEAR_LIMIT", "10"))
NEAR_MAX_DISTANCE = int(os.getenv("NEAR_MAX_DISTANCE", "10000"))  # метры
TOP_STORES_LIMIT = int(os.getenv("TOP_STORES_LIMIT", "10"))
TOP_RATING_FLOOR = int(os.getenv("TOP_RATING_FLOOR", "3"))


UPLOAD_DIR = os.getenv("UPLOAD_DIR", "./uploads")
PHOTO_WIDTH = int(os.getenv("PHOTO_WIDTH", "800"))
