"""Convert uploaded image files into EncodedImage payloads."""

import base64
import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from ..errors import FileReadError
from ..models import EncodedImage


EXTENSION_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
}


def sniff_mime_type(image_bytes: bytes, suffix: str = "") -> str:
    """Detect the image format from magic bytes, falling back to the extension."""
    if image_bytes[:3] == b'\xff\xd8\xff':
        return "image/jpeg"
    if image_bytes[:8] == b'\x89PNG\r\n\x1a\n':
        return "image/png"
    if image_bytes[:4] == b'RIFF' and image_bytes[8:12] == b'WEBP':
        return "image/webp"
    if image_bytes[:6] in (b'GIF87a', b'GIF89a'):
        return "image/gif"
    return EXTENSION_MIME_TYPES.get(suffix.lower(), "image/png")


def encode_bytes(image_bytes: bytes, suffix: str = "") -> EncodedImage:
    """Encode raw image bytes, using Pillow to identify the format."""
    mime_type = None
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            if img.format:
                mime_type = Image.MIME.get(img.format)
    except (UnidentifiedImageError, OSError):
        # Content is not validated; the model decides what it accepts
        mime_type = None

    return EncodedImage(
        data=base64.b64encode(image_bytes).decode("utf-8"),
        mime_type=mime_type or sniff_mime_type(image_bytes, suffix),
    )


def encode_file(path: Path | str) -> EncodedImage:
    """Read an image file into an EncodedImage.

    Raises:
        FileReadError: if the file is missing, unreadable or empty.
    """
    path = Path(path)
    try:
        image_bytes = path.read_bytes()
    except OSError as e:
        raise FileReadError(f"Cannot read {path}: {e}", path=path) from e

    if not image_bytes:
        raise FileReadError(f"{path} is empty", path=path)

    return encode_bytes(image_bytes, path.suffix)

