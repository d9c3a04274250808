import io
import pytest
from unittest.mock import patch
from PIL import Image
from storefinder.core.errors import ValidationError
from storefinder.utils.media import resize_and_store


def make_image(width, height, fmt="PNG"):
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), (200, 100, 50)).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.mark.asyncio
async def test_rejects_non_image_before_processing(tmp_path):
    with patch("storefinder.utils.media._write_photo") as write_mock:
        with pytest.raises(ValidationError) as exc:
            await resize_and_store(b"%PDF-1.4", "application/pdf", str(tmp_path))
        with pytest.raises(ValidationError):
            await resize_and_store(b"data", None, str(tmp_path))

    assert exc.value.field == "photo"
    write_mock.assert_not_called()
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_resizes_to_photo_width(tmp_path):
    filename = await resize_and_store(make_image(1600, 1200), "image/png", str(tmp_path))

    assert filename.endswith(".png")
    with Image.open(tmp_path / filename) as img:
        assert img.size == (800, 600)


@pytest.mark.asyncio
async def test_small_images_are_not_upscaled(tmp_path):
    filename = await resize_and_store(
        make_image(400, 300, "JPEG"), "image/jpeg", str(tmp_path)
    )

    assert filename.endswith(".jpg")
    with Image.open(tmp_path / filename) as img:
        assert img.size == (400, 300)


@pytest.mark.asyncio
async def test_corrupt_image_is_rejected(tmp_path):
    with pytest.raises(ValidationError) as exc:
        await resize_and_store(b"not really a png", "image/png", str(tmp_path))
    assert exc.value.field == "photo"
