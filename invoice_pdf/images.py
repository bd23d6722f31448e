"""Logo and stamp loading with silent fallback."""

from __future__ import annotations

import base64
import binascii
import io
import logging
from dataclasses import dataclass
from typing import Any, Optional

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

# 1x1 light grey PNG drawn in place of a logo that cannot be decoded.
PLACEHOLDER_IMAGE = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


class ImageLoadError(ValueError):
    """Raised when an image reference cannot be turned into drawable image data."""


@dataclass(frozen=True)
class ImageHandle:
    data: bytes
    width: int
    height: int
    format: str

    def stream(self) -> io.BytesIO:
        return io.BytesIO(self.data)


def decode_image_ref(ref: Any) -> bytes:
    if isinstance(ref, (bytes, bytearray)):
        return bytes(ref)
    if not isinstance(ref, str) or not ref.strip():
        raise ImageLoadError("Image reference is empty.")

    header, sep, payload = ref.strip().partition(",")
    if not sep or not header.startswith("data:"):
        raise ImageLoadError(
            "Image reference must be a data URI; resolve URLs and paths before rendering."
        )
    if not header.endswith(";base64"):
        raise ImageLoadError("Only base64 data URIs are supported.")
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as exc:
        raise ImageLoadError(f"Invalid base64 image payload: {exc}") from exc


def load_image(ref: Any) -> ImageHandle:
    data = decode_image_ref(ref)
    if not data:
        raise ImageLoadError("Image payload is empty.")
    try:
        with Image.open(io.BytesIO(data)) as image:
            width, height = image.size
            image_format = image.format or "UNKNOWN"
            image.verify()
        # verify() leaves pixel data undecoded; truncated files only fail on load().
        with Image.open(io.BytesIO(data)) as image:
            image.load()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise ImageLoadError(f"Unreadable image data: {exc}") from exc
    return ImageHandle(data=data, width=width, height=height, format=image_format)


def load_image_or_default(ref: Any, fallback: Any = PLACEHOLDER_IMAGE) -> Optional[ImageHandle]:
    """Load ref, then fallback; None when neither can be drawn."""
    for candidate in (ref, fallback):
        if candidate is None:
            continue
        try:
            return load_image(candidate)
        except ImageLoadError as exc:
            logger.warning("Skipping image: %s", exc)
    return None
