"""contents.json parser.

Walks the decoded document key by key in document order. The top-level
envelope is strict (unknown keys are errors) while pack and sticker records
skip keys they do not recognise, so newer producers can add leaf fields.

Shape checks done here are limited to what makes the model usable: required
fields present and non-empty, sticker filenames are .webp, and neither pack
identifiers nor asset filenames can walk out of the asset folder. Semantic
limits are left to the integrity validator.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import IO, TYPE_CHECKING, Any

import orjson

from stickerpacks.errors import SchemaError
from stickerpacks.manifest.model import Manifest, Sticker, StickerPack

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

STICKER_FILE_EXTENSION = ".webp"

# Top-level keys; anything else is rejected
ANDROID_PLAY_STORE_LINK = "androidPlayStoreLink"
IOS_APP_STORE_LINK = "iosAppStoreLink"
STICKER_PACKS = "stickerPacks"

_PACK_STRING_FIELDS: dict[str, str] = {
    "identifier": "identifier",
    "name": "name",
    "publisher": "publisher",
    "trayImageFile": "tray_image_file",
    "publisherEmail": "publisher_email",
    "publisherWebsite": "publisher_website",
    "privacyPolicyWebsite": "privacy_policy_website",
    "licenseAgreementWebsite": "license_agreement_website",
}


def _is_traversal(value: str) -> bool:
    return ".." in value or "/" in value


def _expect_string(value: Any, key: str) -> str:
    if not isinstance(value, str):
        msg = f"Field {key!r} must be a string, got {type(value).__name__}"
        raise SchemaError(msg)
    return value


def _expect_array(value: Any, key: str) -> list[Any]:
    if not isinstance(value, list):
        msg = f"Field {key!r} must be an array, got {type(value).__name__}"
        raise SchemaError(msg)
    return value


def _expect_object(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        msg = f"{what} must be an object, got {type(value).__name__}"
        raise SchemaError(msg)
    return value


def _read_document(source: IO[bytes] | bytes | str) -> Any:
    if isinstance(source, (bytes, str)):
        data = source
    else:
        data = source.read()
    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as e:
        msg = f"Manifest is not valid JSON: {e}"
        raise SchemaError(msg) from e


def _check_sticker_image_file(image_file: str | None) -> None:
    if not image_file:
        raise SchemaError("Sticker imageFileName cannot be empty")
    if not image_file.endswith(STICKER_FILE_EXTENSION):
        msg = f"Sticker image file must be a {STICKER_FILE_EXTENSION} file, image file: {image_file}"
        raise SchemaError(msg)
    if _is_traversal(image_file):
        msg = f"Sticker image file must not contain .. or / (directory traversal), image file: {image_file}"
        raise SchemaError(msg)


def _check_pack_fields(fields: Mapping[str, str | None], stickers: tuple[Sticker, ...] | None) -> None:
    identifier = fields.get("identifier")
    if not identifier:
        raise SchemaError("Sticker pack identifier cannot be empty")
    if not fields.get("name"):
        raise SchemaError(f"Sticker pack name cannot be empty, identifier: {identifier}")
    if not fields.get("publisher"):
        raise SchemaError(f"Sticker pack publisher cannot be empty, identifier: {identifier}")
    tray_image_file = fields.get("tray_image_file")
    if not tray_image_file:
        raise SchemaError(f"Sticker pack trayImageFile cannot be empty, identifier: {identifier}")
    if not stickers:
        raise SchemaError(f"Sticker list is empty, identifier: {identifier}")
    if _is_traversal(identifier):
        msg = f"Sticker pack identifier must not contain .. or / (directory traversal): {identifier}"
        raise SchemaError(msg)
    if _is_traversal(tray_image_file):
        msg = f"Tray image file must not contain .. or / (directory traversal), tray image file: {tray_image_file}"
        raise SchemaError(msg)


def check_sticker_pack_shape(pack: StickerPack) -> None:
    """Apply the parse-time shape checks to an already built pack.

    Anything written back to contents.json must pass these, otherwise the
    next load of the manifest fails for every pack in it.

    Raises:
        SchemaError: Same conditions and messages as parse_manifest.
    """
    for sticker in pack.stickers:
        _check_sticker_image_file(sticker.image_file_name)
    _check_pack_fields(
        {
            "identifier": pack.identifier,
            "name": pack.name,
            "publisher": pack.publisher,
            "tray_image_file": pack.tray_image_file,
        },
        pack.stickers,
    )


def _read_stickers(value: Any) -> tuple[Sticker, ...]:
    stickers: list[Sticker] = []
    for raw in _expect_array(value, "stickers"):
        obj = _expect_object(raw, "Sticker entry")
        image_file: str | None = None
        emojis: list[str] = []
        for key, item in obj.items():
            if key == "imageFileName":
                image_file = _expect_string(item, key)
            elif key == "emojis":
                emojis = [_expect_string(e, key) for e in _expect_array(item, key)]
            else:
                logger.debug("Skipping unknown sticker field %r", key)

        _check_sticker_image_file(image_file)
        assert image_file is not None
        stickers.append(Sticker(image_file_name=image_file, emojis=tuple(emojis)))
    return tuple(stickers)


def _read_sticker_pack(raw: Any) -> StickerPack:
    obj = _expect_object(raw, "Sticker pack entry")
    fields: dict[str, str] = {}
    stickers: tuple[Sticker, ...] | None = None
    for key, value in obj.items():
        if key in _PACK_STRING_FIELDS:
            fields[_PACK_STRING_FIELDS[key]] = _expect_string(value, key)
        elif key == "stickers":
            stickers = _read_stickers(value)
        else:
            logger.debug("Skipping unknown sticker pack field %r", key)

    _check_pack_fields(fields, stickers)
    assert stickers is not None
    return StickerPack(stickers=stickers, **fields)


def parse_manifest(source: IO[bytes] | bytes | str) -> Manifest:
    """Parse a contents.json document.

    Args:
        source: Binary stream, bytes or str holding the JSON document.

    Returns:
        Manifest with store links applied to every pack.

    Raises:
        SchemaError: On invalid JSON, unknown top-level keys, missing or
            empty required fields, traversal sequences, duplicate
            identifiers or an empty pack list.
    """
    document = _expect_object(_read_document(source), "Manifest document")

    android_link: str | None = None
    ios_link: str | None = None
    packs: list[StickerPack] = []
    for key, value in document.items():
        if key == ANDROID_PLAY_STORE_LINK:
            android_link = _expect_string(value, key)
        elif key == IOS_APP_STORE_LINK:
            ios_link = _expect_string(value, key)
        elif key == STICKER_PACKS:
            packs.extend(_read_sticker_pack(raw) for raw in _expect_array(value, key))
        else:
            raise SchemaError(f"Unknown field in manifest: {key}")

    if not packs:
        raise SchemaError("Sticker pack list cannot be empty")

    seen: set[str] = set()
    for pack in packs:
        if pack.identifier in seen:
            raise SchemaError(f"Duplicate sticker pack identifier: {pack.identifier}")
        seen.add(pack.identifier)

    return Manifest(
        sticker_packs=tuple(p.with_store_links(android_link, ios_link) for p in packs),
        android_play_store_link=android_link,
        ios_app_store_link=ios_link,
    )


def parse_sticker_packs(source: IO[bytes] | bytes | str) -> list[StickerPack]:
    """Parse a contents.json document into its ordered list of packs."""
    return list(parse_manifest(source).sticker_packs)


def load_manifest(manifest_path: Path) -> Manifest:
    """Load and parse a manifest file.

    Raises:
        FileNotFoundError: If the manifest file doesn't exist.
        SchemaError: If the document is malformed.
    """
    with manifest_path.open("rb") as f:
        manifest = parse_manifest(f)
    logger.debug("Parsed %d sticker pack(s) from %s", len(manifest.sticker_packs), manifest_path.name)
    return manifest


def dump_manifest(manifest: Manifest) -> bytes:
    """Serialize a manifest back to contents.json bytes."""
    return orjson.dumps(manifest.to_dict(), option=orjson.OPT_INDENT_2)
