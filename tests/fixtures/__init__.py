"""Test fixtures: generated sticker images and pack folders."""

from tests.fixtures.packs import (
    InMemoryAssets,
    animated_webp_bytes,
    make_pack,
    manifest_document,
    png_bytes,
    webp_bytes,
    write_content_root,
)

__all__ = [
    "InMemoryAssets",
    "animated_webp_bytes",
    "make_pack",
    "manifest_document",
    "png_bytes",
    "webp_bytes",
    "write_content_root",
]
