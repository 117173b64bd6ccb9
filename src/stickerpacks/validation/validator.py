"""Integrity validator for sticker packs.

Checks run in a fixed order and the first failure aborts the pack:

1. identifier, publisher and name text fields
2. tray image filename present
3. store, license, privacy policy and publisher website links
4. publisher email
5. tray icon size and dimensions
6. sticker count
7. per sticker: emoji count, filename, size, dimensions, single frame

The order is part of the contract: the same invalid pack always reports the
same violation. The validator only reads asset bytes through the supplied
callable and never mutates the pack.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from stickerpacks.config import ValidationLimits
from stickerpacks.errors import (
    AssetNotFound,
    BinaryFormatViolation,
    CountViolation,
    FieldViolation,
    LinkViolation,
    ValidationViolation,
)
from stickerpacks.manifest.model import Sticker, StickerPack
from stickerpacks.validation.images import WEBP_FORMAT, ImageDecodeError, decode_image
from stickerpacks.validation.rules import (
    has_valid_identifier_chars,
    is_empty,
    is_url_in_domain,
    is_valid_email,
    is_valid_website_url,
)

logger = logging.getLogger(__name__)

FetchAssetBytes = Callable[[str, str], bytes]

DEFAULT_LIMITS = ValidationLimits()


def _check_text_field(
    value: str | None,
    label: str,
    identifier: str | None,
    limits: ValidationLimits,
) -> None:
    suffix = f", sticker pack identifier: {identifier}" if identifier else ""
    if is_empty(value):
        raise FieldViolation(f"Sticker pack {label} is empty{suffix}", identifier=identifier)
    assert value is not None
    if len(value) > limits.char_count_max:
        raise FieldViolation(
            f"Sticker pack {label} cannot exceed {limits.char_count_max} characters{suffix}",
            identifier=identifier,
        )


def _check_identifier_chars(identifier: str) -> None:
    if not has_valid_identifier_chars(identifier):
        raise FieldViolation(
            f"{identifier} contains invalid characters, allowed characters are "
            "a to z, A to Z, 0 to 9, _ , ' - . and space character",
            identifier=identifier,
        )
    if ".." in identifier:
        raise FieldViolation(f"{identifier} cannot contain ..", identifier=identifier)


def _check_website(url: str | None, label: str, identifier: str) -> None:
    if is_empty(url):
        return
    assert url is not None
    try:
        valid = is_valid_website_url(url)
    except LinkViolation as e:
        raise LinkViolation(str(e), identifier=identifier) from e
    if not valid:
        raise LinkViolation(
            f"Make sure to include http or https in url links, {label} is not a valid url: {url}",
            identifier=identifier,
        )


def _check_store_link(url: str | None, label: str, domain: str, identifier: str) -> None:
    if is_empty(url):
        return
    assert url is not None
    _check_website(url, label, identifier)
    if not is_url_in_domain(url, domain):
        raise LinkViolation(
            f"{label} should use the store domain: {domain}, link: {url}",
            identifier=identifier,
        )


def _fetch(fetch_asset_bytes: FetchAssetBytes, identifier: str, filename: str) -> bytes:
    try:
        return fetch_asset_bytes(identifier, filename)
    except AssetNotFound as e:
        raise AssetNotFound(
            f"Cannot open asset, sticker pack identifier: {identifier}, filename: {filename}"
        ) from e
    except OSError as e:
        raise AssetNotFound(
            f"Cannot read asset, sticker pack identifier: {identifier}, filename: {filename}"
        ) from e


def _check_tray_image(
    pack: StickerPack,
    fetch_asset_bytes: FetchAssetBytes,
    limits: ValidationLimits,
) -> None:
    identifier = pack.identifier
    filename = pack.tray_image_file
    data = _fetch(fetch_asset_bytes, identifier, filename)
    if len(data) > limits.tray_image_file_size_max_bytes:
        raise BinaryFormatViolation(
            f"Tray image should be less than {limits.tray_image_file_size_max_kb} KB, "
            f"tray image file: {filename}",
            identifier=identifier,
            filename=filename,
        )
    try:
        info = decode_image(data)
    except ImageDecodeError as e:
        raise BinaryFormatViolation(
            f"Error decoding tray image, sticker pack identifier: {identifier}, filename: {filename}",
            identifier=identifier,
            filename=filename,
        ) from e

    low, high = limits.tray_image_dimension_min, limits.tray_image_dimension_max
    if not low <= info.height <= high:
        raise BinaryFormatViolation(
            f"Tray image height should be between {low} and {high} pixels, current tray image "
            f"height is {info.height}, tray image file: {filename}",
            identifier=identifier,
            filename=filename,
        )
    if not low <= info.width <= high:
        raise BinaryFormatViolation(
            f"Tray image width should be between {low} and {high} pixels, current tray image "
            f"width is {info.width}, tray image file: {filename}",
            identifier=identifier,
            filename=filename,
        )


def _check_sticker_file(
    identifier: str,
    filename: str,
    fetch_asset_bytes: FetchAssetBytes,
    limits: ValidationLimits,
) -> None:
    context = f"sticker pack identifier: {identifier}, filename: {filename}"
    data = _fetch(fetch_asset_bytes, identifier, filename)
    if len(data) > limits.sticker_file_size_max_bytes:
        raise BinaryFormatViolation(
            f"Sticker should be less than {limits.sticker_file_size_limit_kb} KB, {context}",
            identifier=identifier,
            filename=filename,
        )
    try:
        info = decode_image(data)
    except ImageDecodeError as e:
        raise BinaryFormatViolation(
            f"Error parsing webp image, {context}", identifier=identifier, filename=filename
        ) from e
    if info.format != WEBP_FORMAT:
        raise BinaryFormatViolation(
            f"Error parsing webp image, found {info.format or 'unknown'} data, {context}",
            identifier=identifier,
            filename=filename,
        )

    if info.height != limits.sticker_image_height:
        raise BinaryFormatViolation(
            f"Sticker height should be {limits.sticker_image_height}, {context}",
            identifier=identifier,
            filename=filename,
        )
    if info.width != limits.sticker_image_width:
        raise BinaryFormatViolation(
            f"Sticker width should be {limits.sticker_image_width}, {context}",
            identifier=identifier,
            filename=filename,
        )
    if info.is_animated:
        raise BinaryFormatViolation(
            f"Sticker should be a static image, no animated sticker support at the moment, {context}",
            identifier=identifier,
            filename=filename,
        )


def _check_sticker(
    identifier: str,
    sticker: Sticker,
    fetch_asset_bytes: FetchAssetBytes,
    limits: ValidationLimits,
) -> None:
    if len(sticker.emojis) > limits.emoji_limit:
        raise CountViolation(
            f"Emoji count exceeds limit, sticker pack identifier: {identifier}, "
            f"filename: {sticker.image_file_name}",
            identifier=identifier,
            filename=sticker.image_file_name,
        )
    if is_empty(sticker.image_file_name):
        raise FieldViolation(
            f"No file path for sticker, sticker pack identifier: {identifier}",
            identifier=identifier,
        )
    _check_sticker_file(identifier, sticker.image_file_name, fetch_asset_bytes, limits)


def verify_sticker_pack_validity(
    pack: StickerPack,
    fetch_asset_bytes: FetchAssetBytes,
    limits: ValidationLimits | None = None,
) -> None:
    """Check a sticker pack against every integrity rule, in order.

    Args:
        pack: Pack to check.
        fetch_asset_bytes: Returns raw bytes for (identifier, filename);
            raises AssetNotFound when the asset is unknown.
        limits: Validation limits. Uses defaults if not provided.

    Raises:
        ValidationViolation: First rule the pack breaks.
        AssetNotFound: If the tray icon or a sticker cannot be fetched.
    """
    limits = limits or DEFAULT_LIMITS

    _check_text_field(pack.identifier, "identifier", None, limits)
    identifier = pack.identifier
    _check_identifier_chars(identifier)
    _check_text_field(pack.publisher, "publisher", identifier, limits)
    _check_text_field(pack.name, "name", identifier, limits)

    if is_empty(pack.tray_image_file):
        raise FieldViolation(
            f"Sticker pack tray id is empty, sticker pack identifier: {identifier}",
            identifier=identifier,
        )

    _check_store_link(
        pack.android_play_store_link, "Android Play Store link", limits.play_store_domain, identifier
    )
    _check_store_link(
        pack.ios_app_store_link, "iOS App Store link", limits.apple_store_domain, identifier
    )
    _check_website(pack.license_agreement_website, "license agreement link", identifier)
    _check_website(pack.privacy_policy_website, "privacy policy link", identifier)
    _check_website(pack.publisher_website, "publisher website link", identifier)

    if not is_empty(pack.publisher_email) and not is_valid_email(pack.publisher_email or ""):
        raise FieldViolation(
            f"Publisher email does not seem valid, sticker pack identifier: {identifier}",
            identifier=identifier,
        )

    _check_tray_image(pack, fetch_asset_bytes, limits)

    count = len(pack.stickers)
    if count < limits.sticker_count_min or count > limits.sticker_count_max:
        raise CountViolation(
            f"Sticker pack sticker count should be between {limits.sticker_count_min} and "
            f"{limits.sticker_count_max} inclusive, it currently has {count}, "
            f"sticker pack identifier: {identifier}",
            identifier=identifier,
        )

    for sticker in pack.stickers:
        _check_sticker(identifier, sticker, fetch_asset_bytes, limits)

    logger.debug("Sticker pack %s passed validation (%d stickers)", identifier, count)


def validate_sticker_pack(
    pack: StickerPack,
    fetch_asset_bytes: FetchAssetBytes,
    limits: ValidationLimits | None = None,
) -> list[str]:
    """Validate a sticker pack and return error messages.

    Validation is fail-fast, so the list holds at most one message.

    Returns:
        List of validation error messages (empty if valid).
    """
    try:
        verify_sticker_pack_validity(pack, fetch_asset_bytes, limits)
    except (ValidationViolation, AssetNotFound) as e:
        return [str(e)]
    return []
