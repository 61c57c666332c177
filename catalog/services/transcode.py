from __future__ import annotations

import io
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from catalog.errors import TranscodeError

OUTPUT_FORMAT = "WEBP"
OUTPUT_CONTENT_TYPE = "image/webp"
OUTPUT_EXTENSION = ".webp"


@dataclass(frozen=True)
class TranscodedImage:
    data: bytes
    content_type: str
    extension: str
    width: int
    height: int


def has_alpha(img: Image.Image) -> bool:
    # RGBA, LA, PA e os pre-multiplicados (RGBa, La), ou tRNS em P/L/RGB
    return "A" in img.getbands() or "a" in img.mode or "transparency" in img.info


def transcode_image(data: bytes, *, quality: int = 80) -> TranscodedImage:
    """
    Re-encode an uploaded image as WebP, keeping its dimensions.

    Whatever the client sent (jpeg, png, gif...) is discarded; only the first
    frame is kept. Alpha survives, every other mode is converted to RGB.
    """
    if not 1 <= int(quality) <= 100:
        raise ValueError(f"quality must be between 1 and 100, got {quality}")
    if not data:
        raise TranscodeError("empty image")

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            img = img.convert("RGBA" if has_alpha(img) else "RGB")

            buf = io.BytesIO()
            img.save(buf, format=OUTPUT_FORMAT, quality=int(quality), method=4)
            w, h = img.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        raise TranscodeError(f"could not decode image: {e}") from e

    return TranscodedImage(
        data=buf.getvalue(),
        content_type=OUTPUT_CONTENT_TYPE,
        extension=OUTPUT_EXTENSION,
        width=w,
        height=h,
    )
