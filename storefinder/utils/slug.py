import re
import unicodedata
from typing import Iterable


def slugify(name: str) -> str:
    """Строит URL-безопасный slug из названия (только латиница, цифры и дефисы)"""
    normalized = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode()
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    return slug or "store"


def unique_slug(base: str, taken: Iterable[str]) -> str:
    """
    Подбирает свободный slug: base, затем base-2, base-3 и т.д.

    Args:
        base: Базовый slug
        taken: Уже занятые slug с тем же префиксом
    """
    taken = set(taken)
    if base not in taken:
        return base

    n = 2
    while f"{base}-{n}" in taken:
        n += 1
    return f"{base}-{n}"
