"""Image header inspection for tray icons and stickers."""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

from PIL import Image, UnidentifiedImageError

WEBP_FORMAT = "WEBP"


class ImageDecodeError(ValueError):
    """Raised when bytes cannot be decoded as an image."""


@dataclass(frozen=True)
class ImageInfo:
    """Decoded image properties.

    Attributes:
        format: Pillow format name (e.g., "PNG", "WEBP").
        width: Width in pixels.
        height: Height in pixels.
        frame_count: Number of frames; 1 for static images.
    """

    format: str
    width: int
    height: int
    frame_count: int = 1

    @property
    def is_animated(self) -> bool:
        return self.frame_count > 1


def decode_image(data: bytes) -> ImageInfo:
    """Decode image bytes and report format, size and frame count.

    The first frame is fully decoded so truncated or corrupt payloads are
    rejected here rather than by the consumer.

    Raises:
        ImageDecodeError: If data is not a decodable image.
    """
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            return ImageInfo(
                format=img.format or "",
                width=img.width,
                height=img.height,
                frame_count=getattr(img, "n_frames", 1),
            )
    except (
        UnidentifiedImageError,
        OSError,
        SyntaxError,
        ValueError,
        Image.DecompressionBombError,
    ) as e:
        raise ImageDecodeError(str(e)) from e
