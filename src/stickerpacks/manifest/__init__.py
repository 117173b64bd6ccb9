"""Sticker pack manifest model and contents.json parser."""

from stickerpacks.manifest.model import (
    Manifest,
    Sticker,
    StickerPack,
)
from stickerpacks.manifest.parser import (
    STICKER_FILE_EXTENSION,
    check_sticker_pack_shape,
    dump_manifest,
    load_manifest,
    parse_manifest,
    parse_sticker_packs,
)

__all__ = [
    "STICKER_FILE_EXTENSION",
    "Manifest",
    "Sticker",
    "StickerPack",
    "check_sticker_pack_shape",
    "dump_manifest",
    "load_manifest",
    "parse_manifest",
    "parse_sticker_packs",
]
