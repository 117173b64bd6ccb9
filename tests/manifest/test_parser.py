"""Tests for the contents.json parser."""

from __future__ import annotations

import dataclasses
import io
from typing import TYPE_CHECKING, Any

import orjson
import pytest

from stickerpacks.errors import SchemaError
from stickerpacks.manifest.model import Manifest, Sticker, StickerPack
from stickerpacks.manifest.parser import (
    check_sticker_pack_shape,
    dump_manifest,
    load_manifest,
    parse_manifest,
    parse_sticker_packs,
)

if TYPE_CHECKING:
    from pathlib import Path


def _pack(**overrides: Any) -> dict[str, Any]:
    pack: dict[str, Any] = {
        "identifier": "abc",
        "name": "Cats",
        "publisher": "Jane",
        "trayImageFile": "tray.png",
        "stickers": [
            {"imageFileName": "01.webp", "emojis": ["😺", "😸"]},
            {"imageFileName": "02.webp"},
            {"imageFileName": "03.webp", "emojis": []},
        ],
    }
    pack.update(overrides)
    return pack


def _doc(*packs: dict[str, Any], **top: Any) -> bytes:
    document: dict[str, Any] = dict(top)
    document["stickerPacks"] = list(packs) if packs else [_pack()]
    return orjson.dumps(document)


class TestParseManifest:
    """Tests for parse_manifest on valid documents."""

    def test_parses_single_pack(self) -> None:
        manifest = parse_manifest(_doc())

        assert isinstance(manifest, Manifest)
        assert manifest.identifiers == ["abc"]
        pack = manifest.sticker_packs[0]
        assert pack.name == "Cats"
        assert pack.publisher == "Jane"
        assert pack.tray_image_file == "tray.png"

    def test_sticker_order_preserved(self) -> None:
        pack = parse_manifest(_doc()).sticker_packs[0]

        assert [s.image_file_name for s in pack.stickers] == ["01.webp", "02.webp", "03.webp"]
        assert pack.stickers[0] == Sticker("01.webp", ("😺", "😸"))
        assert pack.stickers[1].emojis == ()

    def test_pack_order_preserved(self) -> None:
        manifest = parse_manifest(_doc(_pack(identifier="b"), _pack(identifier="a")))
        assert manifest.identifiers == ["b", "a"]

    def test_optional_fields(self) -> None:
        pack = parse_manifest(
            _doc(
                _pack(
                    publisherEmail="jane@example.com",
                    publisherWebsite="https://example.com",
                    privacyPolicyWebsite="https://example.com/privacy",
                    licenseAgreementWebsite="https://example.com/license",
                )
            )
        ).sticker_packs[0]

        assert pack.publisher_email == "jane@example.com"
        assert pack.publisher_website == "https://example.com"
        assert pack.privacy_policy_website == "https://example.com/privacy"
        assert pack.license_agreement_website == "https://example.com/license"

    def test_absent_optional_fields_are_none(self) -> None:
        pack = parse_manifest(_doc()).sticker_packs[0]
        assert pack.publisher_email is None
        assert pack.android_play_store_link is None

    def test_store_links_applied_to_every_pack(self) -> None:
        manifest = parse_manifest(
            _doc(
                _pack(identifier="a"),
                _pack(identifier="b"),
                androidPlayStoreLink="https://play.google.com/store/apps/details?id=x",
                iosAppStoreLink="https://itunes.apple.com/app/x",
            )
        )

        for pack in manifest.sticker_packs:
            assert pack.android_play_store_link == "https://play.google.com/store/apps/details?id=x"
            assert pack.ios_app_store_link == "https://itunes.apple.com/app/x"

    def test_store_links_after_pack_list_still_applied(self) -> None:
        data = (
            b'{"stickerPacks": ' + orjson.dumps([_pack()]) + b', "iosAppStoreLink": "https://itunes.apple.com/x"}'
        )
        pack = parse_manifest(data).sticker_packs[0]
        assert pack.ios_app_store_link == "https://itunes.apple.com/x"

    def test_accepts_binary_stream(self) -> None:
        manifest = parse_manifest(io.BytesIO(_doc()))
        assert manifest.identifiers == ["abc"]

    def test_parse_sticker_packs_returns_list(self) -> None:
        packs = parse_sticker_packs(_doc(_pack(identifier="a"), _pack(identifier="b")))
        assert [p.identifier for p in packs] == ["a", "b"]


class TestKeyStrictness:
    """Top level rejects unknown keys; pack and sticker records skip them."""

    def test_unknown_top_level_key_rejected(self) -> None:
        with pytest.raises(SchemaError, match="Unknown field in manifest: version"):
            parse_manifest(_doc(version="2"))

    def test_unknown_pack_key_skipped(self) -> None:
        pack = parse_manifest(_doc(_pack(animated=False, extra={"nested": [1, 2]}))).sticker_packs[0]
        assert pack.identifier == "abc"

    def test_unknown_sticker_key_skipped(self) -> None:
        stickers = [
            {"imageFileName": "01.webp", "accessibilityText": "cat"},
            {"imageFileName": "02.webp"},
            {"imageFileName": "03.webp"},
        ]
        pack = parse_manifest(_doc(_pack(stickers=stickers))).sticker_packs[0]
        assert len(pack.stickers) == 3


class TestStructuralErrors:
    """Shape errors abort the whole parse."""

    def test_invalid_json(self) -> None:
        with pytest.raises(SchemaError, match="not valid JSON"):
            parse_manifest(b"{not json")

    def test_top_level_not_object(self) -> None:
        with pytest.raises(SchemaError, match="must be an object"):
            parse_manifest(b"[]")

    def test_zero_packs_rejected(self) -> None:
        with pytest.raises(SchemaError, match="cannot be empty"):
            parse_manifest(b'{"stickerPacks": []}')

    def test_missing_pack_list_rejected(self) -> None:
        with pytest.raises(SchemaError, match="cannot be empty"):
            parse_manifest(b'{"androidPlayStoreLink": "https://play.google.com/x"}')

    @pytest.mark.parametrize("field", ["identifier", "name", "publisher", "trayImageFile"])
    def test_empty_required_field(self, field: str) -> None:
        with pytest.raises(SchemaError):
            parse_manifest(_doc(_pack(**{field: ""})))

    @pytest.mark.parametrize("field", ["identifier", "name", "publisher", "trayImageFile", "stickers"])
    def test_missing_required_field(self, field: str) -> None:
        pack = _pack()
        del pack[field]
        with pytest.raises(SchemaError):
            parse_manifest(_doc(pack))

    def test_empty_sticker_list(self) -> None:
        with pytest.raises(SchemaError, match="Sticker list is empty"):
            parse_manifest(_doc(_pack(stickers=[])))

    def test_sticker_without_filename(self) -> None:
        with pytest.raises(SchemaError, match="imageFileName cannot be empty"):
            parse_manifest(_doc(_pack(stickers=[{"emojis": ["😺"]}])))

    def test_sticker_must_be_webp(self) -> None:
        with pytest.raises(SchemaError, match="01.png"):
            parse_manifest(_doc(_pack(stickers=[{"imageFileName": "01.png"}])))

    @pytest.mark.parametrize("identifier", ["../etc", "a/b", "a..b", "/abs"])
    def test_identifier_traversal_rejected(self, identifier: str) -> None:
        with pytest.raises(SchemaError, match="directory traversal"):
            parse_manifest(_doc(_pack(identifier=identifier)))

    @pytest.mark.parametrize("filename", ["../01.webp", "dir/01.webp", "a..webp"])
    def test_sticker_filename_traversal_rejected(self, filename: str) -> None:
        with pytest.raises(SchemaError, match="directory traversal"):
            parse_manifest(_doc(_pack(stickers=[{"imageFileName": filename}])))

    @pytest.mark.parametrize("tray", ["../tray.png", "icons/tray.png"])
    def test_tray_filename_traversal_rejected(self, tray: str) -> None:
        with pytest.raises(SchemaError, match="directory traversal"):
            parse_manifest(_doc(_pack(trayImageFile=tray)))

    def test_wrong_type_rejected(self) -> None:
        with pytest.raises(SchemaError, match="'identifier' must be a string"):
            parse_manifest(_doc(_pack(identifier=5)))

    def test_emoji_must_be_string(self) -> None:
        with pytest.raises(SchemaError, match="'emojis' must be a string"):
            parse_manifest(_doc(_pack(stickers=[{"imageFileName": "01.webp", "emojis": [1]}])))

    def test_duplicate_identifier_rejected(self) -> None:
        with pytest.raises(SchemaError, match="Duplicate sticker pack identifier: abc"):
            parse_manifest(_doc(_pack(), _pack()))

    def test_error_in_second_pack_returns_nothing(self) -> None:
        """All-or-nothing: a valid first pack is not returned on its own."""
        with pytest.raises(SchemaError):
            parse_sticker_packs(_doc(_pack(identifier="ok"), _pack(identifier="bad/id")))


class TestCheckStickerPackShape:
    """Parse-time shape checks applied to a built StickerPack."""

    @staticmethod
    def _built(**overrides: Any) -> StickerPack:
        pack = parse_sticker_packs(_doc())[0]
        return dataclasses.replace(pack, **overrides)

    def test_parsed_pack_passes(self) -> None:
        check_sticker_pack_shape(self._built())

    def test_sticker_must_be_webp(self) -> None:
        stickers = (Sticker(image_file_name="0.png", emojis=("😺",)),)
        with pytest.raises(SchemaError, match="must be a .webp file, image file: 0.png"):
            check_sticker_pack_shape(self._built(stickers=stickers))

    @pytest.mark.parametrize("filename", ["../01.webp", "dir/01.webp"])
    def test_sticker_traversal(self, filename: str) -> None:
        stickers = (Sticker(image_file_name=filename),)
        with pytest.raises(SchemaError, match="directory traversal"):
            check_sticker_pack_shape(self._built(stickers=stickers))

    @pytest.mark.parametrize("tray", ["../tray.png", "icons/tray.png"])
    def test_tray_traversal(self, tray: str) -> None:
        with pytest.raises(SchemaError, match="Tray image file must not contain"):
            check_sticker_pack_shape(self._built(tray_image_file=tray))

    def test_identifier_traversal(self) -> None:
        with pytest.raises(SchemaError, match="directory traversal"):
            check_sticker_pack_shape(self._built(identifier="../abc"))

    @pytest.mark.parametrize("field", ["identifier", "name", "publisher", "tray_image_file"])
    def test_empty_required_field(self, field: str) -> None:
        with pytest.raises(SchemaError, match="cannot be empty"):
            check_sticker_pack_shape(self._built(**{field: ""}))

    def test_empty_sticker_list(self) -> None:
        with pytest.raises(SchemaError, match="Sticker list is empty"):
            check_sticker_pack_shape(self._built(stickers=()))

    def test_same_message_as_parser(self) -> None:
        with pytest.raises(SchemaError) as parsed:
            parse_manifest(_doc(_pack(stickers=[{"imageFileName": "01.png"}])))
        with pytest.raises(SchemaError) as built:
            check_sticker_pack_shape(self._built(stickers=(Sticker(image_file_name="01.png"),)))
        assert str(built.value) == str(parsed.value)


class TestLoadAndDump:
    """Tests for load_manifest and dump_manifest."""

    def test_load_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "contents.json"
        path.write_bytes(_doc())

        manifest = load_manifest(path)
        assert manifest.identifiers == ["abc"]

    def test_load_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_manifest(tmp_path / "contents.json")

    def test_dump_uses_manifest_field_names(self) -> None:
        manifest = parse_manifest(_doc(androidPlayStoreLink="https://play.google.com/x"))
        data = orjson.loads(dump_manifest(manifest))

        assert data["androidPlayStoreLink"] == "https://play.google.com/x"
        assert data["stickerPacks"][0]["trayImageFile"] == "tray.png"
        assert data["stickerPacks"][0]["stickers"][0]["imageFileName"] == "01.webp"

    def test_dump_then_parse_preserves_manifest(self) -> None:
        manifest = parse_manifest(
            _doc(_pack(publisherEmail="jane@example.com"), iosAppStoreLink="https://itunes.apple.com/x")
        )
        assert parse_manifest(dump_manifest(manifest)) == manifest
