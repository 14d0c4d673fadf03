from __future__ import annotations

import base64
import io
from typing import Union

from PIL import Image, UnidentifiedImageError

from media_providers.core.errors import ArgumentError, DecodeError

DEFAULT_IMAGE_SIZE = 512

ImageInput = Union[Image.Image, bytes]


def prepare_image(image: ImageInput, size: int = DEFAULT_IMAGE_SIZE) -> bytes:
    """Normalize an image to a size x size RGB JPEG."""
    if image is None or (isinstance(image, (bytes, bytearray)) and not image):
        raise ArgumentError("Image cannot be empty.")

    if isinstance(image, (bytes, bytearray)):
        try:
            image = Image.open(io.BytesIO(image))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise DecodeError(f"Could not read image bytes: {e}") from e

    if not isinstance(image, Image.Image):
        raise ArgumentError(f"Unsupported image type: {type(image).__name__}")

    prepared = image if image.mode == "RGB" else image.convert("RGB")
    if prepared.size != (size, size):
        prepared = prepared.resize((size, size), Image.BILINEAR)

    buf = io.BytesIO()
    try:
        prepared.save(buf, format="JPEG")
    except OSError as e:
        raise DecodeError(f"Failed to encode image to JPEG: {e}") from e

    jpeg = buf.getvalue()
    if not jpeg:
        raise DecodeError("Failed to encode image to JPEG.")
    return jpeg


def to_data_uri(jpeg: bytes) -> str:
    return "data:image/jpeg;base64," + base64.b64encode(jpeg).decode("ascii")
