"""
Модели данных бота StoreFinder.
"""

from .user import User, hearts
from .store import Store, StoreTag
from .review import Review

__all__ = [
    "User",
    "hearts",
    "Store",
    "StoreTag",
    "Review",
]
