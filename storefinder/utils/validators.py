import math
import re
import logging
from typing import Any, Dict, Iterable, Optional, Set, Union

from storefinder.core.errors import ValidationError

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5
MAX_NAME_LENGTH = 100
MAX_TAG_LENGTH = 40
# Смещение страницы должно помещаться в INTEGER БД
MAX_PAGE = 1_000_000

STORE_FIELDS = {"name", "description", "tags", "location", "photo"}


def parse_page(raw: Union[str, int, None]) -> int:
    """
    Разбирает номер страницы из запроса.

    Отсутствующее или пустое значение означает первую страницу.
    Всё, что не является целым положительным числом, отклоняется.
    Слишком большие номера ограничиваются MAX_PAGE: такая страница пуста,
    и список перенаправляет на последнюю существующую.

    Raises:
        ValidationError: если значение не целое или меньше 1
    """
    if raw is None:
        return 1
    if isinstance(raw, bool):
        raise ValidationError("page", "Номер страницы должен быть целым числом", raw)
    if isinstance(raw, int):
        page = raw
    else:
        text = str(raw).strip()
        if not text:
            return 1
        if not re.match(r"^[0-9]+$", text):
            raise ValidationError(
                "page", "Номер страницы должен быть целым числом", raw
            )
        page = int(text)

    if page < 1:
        raise ValidationError("page", "Номер страницы должен быть не меньше 1", raw)
    return min(page, MAX_PAGE)


def parse_coordinate(field: str, raw: Any, limit: float) -> float:
    """Преобразует долготу/широту в число и проверяет диапазон [-limit, limit]"""
    if isinstance(raw, bool) or raw is None:
        raise ValidationError(field, "Координата должна быть числом", raw)
    try:
        value = float(str(raw).replace(",", ".")) if isinstance(raw, str) else float(raw)
    except (TypeError, ValueError):
        raise ValidationError(field, "Координата должна быть числом", raw)

    if not math.isfinite(value):
        raise ValidationError(field, "Координата должна быть конечным числом", raw)
    if abs(value) > limit:
        raise ValidationError(
            field, f"Координата должна лежать в диапазоне ±{limit:g}", raw
        )
    return value


def parse_point(lng: Any, lat: Any) -> tuple:
    return parse_coordinate("lng", lng, 180.0), parse_coordinate("lat", lat, 90.0)


def validate_required_text(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, "Поле обязательно для заполнения", value)
    return value.strip()


def validate_rating(rating: Any) -> int:
    """
    Проверяет оценку отзыва.

    Args:
        rating: Оценка (целое число или строка с целым числом)

    Returns:
        int: Оценка в диапазоне [1, 5]

    Raises:
        ValidationError: если оценка не целая или вне диапазона
    """
    if isinstance(rating, bool):
        raise ValidationError("rating", "Оценка должна быть целым числом", rating)
    if isinstance(rating, str):
        if not re.match(r"^-?[0-9]+$", rating.strip()):
            raise ValidationError("rating", "Оценка должна быть целым числом", rating)
        rating = int(rating.strip())
    if not isinstance(rating, int):
        raise ValidationError("rating", "Оценка должна быть целым числом", rating)
    if rating < MIN_RATING or rating > MAX_RATING:
        raise ValidationError(
            "rating", f"Оценка должна быть от {MIN_RATING} до {MAX_RATING}", rating
        )
    return rating


def normalize_tags(tags: Optional[Iterable[str]]) -> Set[str]:
    """Приводит набор тегов к множеству непустых строк без лишних пробелов"""
    if tags is None:
        return set()
    if isinstance(tags, str):
        tags = tags.split(",")

    result = set()
    for tag in tags:
        if not isinstance(tag, str):
            raise ValidationError("tags", "Тег должен быть строкой", tag)
        tag = tag.strip()
        if not tag:
            continue
        if len(tag) > MAX_TAG_LENGTH:
            raise ValidationError(
                "tags", f"Тег длиннее {MAX_TAG_LENGTH} символов", tag
            )
        result.add(tag)
    return result


def validate_location(location: Any) -> Dict[str, Any]:
    """
    Проверяет геоточку вида {"coordinates": [lng, lat], "address": "..."}.

    Тип точки всегда принудительно выставляется в "Point".
    """
    if not isinstance(location, dict):
        raise ValidationError("location", "Необходимо указать местоположение", location)

    coordinates = location.get("coordinates")
    if not isinstance(coordinates, (list, tuple)) or len(coordinates) != 2:
        raise ValidationError(
            "location", "Координаты должны быть парой [долгота, широта]", coordinates
        )
    lng, lat = parse_point(coordinates[0], coordinates[1])

    address = location.get("address")
    if address is not None and not isinstance(address, str):
        raise ValidationError("location", "Адрес должен быть строкой", address)

    return {
        "type": "Point",
        "lng": lng,
        "lat": lat,
        "address": address.strip() if address else None,
    }


def validate_store_data(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """
    Проверяет данные заведения и возвращает нормализованный словарь.

    Args:
        data: Входные данные (name, description, tags, location, photo)
        partial: True для частичного обновления, обязательные поля не требуются

    Raises:
        ValidationError: если обязательные поля отсутствуют или некорректны
    """
    if not isinstance(data, dict):
        raise ValidationError("store", "Данные заведения должны быть словарём", data)

    unknown = set(data) - STORE_FIELDS
    if unknown:
        raise ValidationError(
            sorted(unknown)[0], "Неизвестное поле заведения", data[sorted(unknown)[0]]
        )

    cleaned: Dict[str, Any] = {}

    if "name" in data or not partial:
        name = validate_required_text("name", data.get("name"))
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationError(
                "name", f"Название длиннее {MAX_NAME_LENGTH} символов", name
            )
        cleaned["name"] = name

    if "location" in data or not partial:
        cleaned["location"] = validate_location(data.get("location"))

    if "description" in data:
        description = data["description"]
        if description is not None and not isinstance(description, str):
            raise ValidationError("description", "Описание должно быть строкой", description)
        cleaned["description"] = description.strip() if description else None

    if "tags" in data:
        cleaned["tags"] = normalize_tags(data["tags"])

    if "photo" in data:
        photo = data["photo"]
        if photo is not None and not isinstance(photo, str):
            raise ValidationError("photo", "Имя файла фото должно быть строкой", photo)
        cleaned["photo"] = photo or None

    return cleaned
