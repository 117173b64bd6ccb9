"""Integrity validation for sticker packs and their image assets."""

from stickerpacks.validation.images import ImageDecodeError, ImageInfo, decode_image
from stickerpacks.validation.validator import (
    FetchAssetBytes,
    validate_sticker_pack,
    verify_sticker_pack_validity,
)

__all__ = [
    "FetchAssetBytes",
    "ImageDecodeError",
    "ImageInfo",
    "decode_image",
    "validate_sticker_pack",
    "verify_sticker_pack_validity",
]
