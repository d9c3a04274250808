import asyncio
import io
import logging
import uuid
from pathlib import Path
from typing import Optional

from PIL import Image

from storefinder.core.config import UPLOAD_DIR, PHOTO_WIDTH
from storefinder.core.errors import ValidationError

logger = logging.getLogger(__name__)

PIL_FORMATS = {
    "jpeg": "JPEG",
    "jpg": "JPEG",
    "png": "PNG",
    "gif": "GIF",
    "webp": "WEBP",
}


def _extension(mime_type: str) -> str:
    extension = mime_type.split("/", 1)[1].split(";", 1)[0].strip().lower()
    return "jpg" if extension == "jpeg" else extension


def resize_image(raw_bytes: bytes, extension: str, width: int = PHOTO_WIDTH) -> bytes:
    """
    Уменьшает изображение до заданной ширины с сохранением пропорций.
    Изображения уже нужной ширины или уже не увеличиваются.
    """
    pil_format = PIL_FORMATS.get(extension, "PNG")
    with Image.open(io.BytesIO(raw_bytes)) as img:
        if pil_format == "JPEG":
            img = img.convert("RGB")
        if img.width > width:
            height = max(1, round(img.height * width / img.width))
            img = img.resize((width, height))
        output = io.BytesIO()
        img.save(output, format=pil_format)
        return output.getvalue()


def _write_photo(raw_bytes: bytes, extension: str, upload_dir: Path) -> str:
    filename = f"{uuid.uuid4()}.{extension}"
    upload_dir.mkdir(parents=True, exist_ok=True)
    (upload_dir / filename).write_bytes(resize_image(raw_bytes, extension))
    return filename


async def resize_and_store(
    raw_bytes: bytes, mime_type: Optional[str], upload_dir: Optional[str] = None
) -> str:
    """
    Принимает загруженное фото, уменьшает его и сохраняет на диск.

    Args:
        raw_bytes: Содержимое файла
        mime_type: MIME-тип файла, допускаются только image/*
        upload_dir: Каталог для сохранения (по умолчанию UPLOAD_DIR)

    Returns:
        str: Имя сохранённого файла

    Raises:
        ValidationError: если файл не является изображением
    """
    if not mime_type or not mime_type.startswith("image/"):
        raise ValidationError("photo", "Этот тип файла не поддерживается", mime_type)
    if not raw_bytes:
        raise ValidationError("photo", "Файл пуст", mime_type)

    extension = _extension(mime_type)
    target = Path(upload_dir or UPLOAD_DIR)
    try:
        filename = await asyncio.to_thread(_write_photo, raw_bytes, extension, target)
    except (OSError, Image.DecompressionBombError) as e:
        raise ValidationError("photo", f"Не удалось обработать изображение: {e}", mime_type)

    logger.info("Фото сохранено: %s", filename)
    return filename
