"""Avatar image helpers built on Pillow.

Uploads are sniffed from their bytes rather than trusted from the
client-supplied content type or file name, and a small preview is
rendered for storage alongside the avatar row.
"""

import io
from typing import Tuple

from PIL import Image

ALLOWED_FORMATS = {"PNG", "JPEG", "GIF", "WEBP"}
FORMAT_SUFFIXES = {"PNG": ".png", "JPEG": ".jpg", "GIF": ".gif", "WEBP": ".webp"}


class UnsupportedImageError(ValueError):
    """Raised when an upload is not an image format we accept."""


def sniff_image(payload: bytes) -> Tuple[str, str]:
    """Return `(format, media_type)` for `payload` or raise `UnsupportedImageError`.

    `verify()` only checks headers for some formats (a truncated JPEG
    passes), so callers must still decode via `make_preview`.
    """
    try:
        with Image.open(io.BytesIO(payload)) as img:
            img.verify()
            fmt = img.format
    except Exception as exc:
        raise UnsupportedImageError("unsupported file content; expected an image") from exc
    if fmt not in ALLOWED_FORMATS:
        raise UnsupportedImageError(f"unsupported image format: {fmt}")
    return fmt, Image.MIME.get(fmt, "application/octet-stream")


def suffix_for(fmt: str) -> str:
    return FORMAT_SUFFIXES.get(fmt, f".{fmt.lower()}")


def make_preview(payload: bytes, width: int) -> bytes:
    """Render `payload` scaled down to at most `width` pixels wide.

    The aspect ratio is kept and the original format is reused, so the
    preview can be served with the same media type. Images already
    narrower than `width` are re-encoded unchanged in size. Raises
    `UnsupportedImageError` when the pixel data cannot be decoded.
    """
    # verify() leaves the image unusable, so reopen for decoding
    try:
        with Image.open(io.BytesIO(payload)) as img:
            fmt = img.format
            img.load()
            if img.width > width:
                height = max(1, round(img.height * width / img.width))
                preview = img.resize((width, height))
            else:
                preview = img.copy()
    except (OSError, SyntaxError, ValueError) as exc:
        raise UnsupportedImageError(f"image could not be decoded: {exc}") from exc
    out = io.BytesIO()
    preview.save(out, format=fmt)
    return out.getvalue()
