"""Tests for the manifest-backed pack store."""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

import orjson
import pytest

from stickerpacks.config import ProviderConfig
from stickerpacks.errors import (
    AssetNotFound,
    BinaryFormatViolation,
    CountViolation,
    SchemaError,
)
from stickerpacks.manifest.model import Sticker
from stickerpacks.manifest.parser import load_manifest
from stickerpacks.store.packs import LoadReport, PackStore
from tests.fixtures.packs import make_pack, png_bytes, webp_bytes, write_content_root

if TYPE_CHECKING:
    from pathlib import Path


def _write_pack_assets(root: Path, identifier: str, sticker_count: int = 3) -> None:
    pack_dir = root / identifier
    pack_dir.mkdir(parents=True, exist_ok=True)
    (pack_dir / "tray.png").write_bytes(png_bytes())
    for i in range(1, sticker_count + 1):
        (pack_dir / f"{i:02d}.webp").write_bytes(webp_bytes())


class TestLoad:
    """Tests for PackStore.load."""

    def test_missing_manifest_is_empty_store(self, tmp_path: Path) -> None:
        report = PackStore(ProviderConfig(content_root=tmp_path)).load()

        assert report == LoadReport()
        assert report.is_clean

    def test_valid_packs_accepted_in_order(self, tmp_path: Path) -> None:
        write_content_root(tmp_path, make_pack("b"), make_pack("a"))

        report = PackStore(ProviderConfig(content_root=tmp_path)).load()

        assert [p.identifier for p in report.accepted] == ["b", "a"]
        assert report.is_clean

    def test_store_links_carried_into_packs(self, tmp_path: Path) -> None:
        write_content_root(
            tmp_path,
            make_pack("abc"),
            androidPlayStoreLink="https://play.google.com/store/apps/details?id=x",
        )

        report = PackStore(ProviderConfig(content_root=tmp_path)).load()

        assert report.accepted[0].android_play_store_link == "https://play.google.com/store/apps/details?id=x"

    def test_custom_manifest_name(self, tmp_path: Path) -> None:
        write_content_root(tmp_path, make_pack("abc"), manifest_name="packs.json")
        config = ProviderConfig(content_root=tmp_path, manifest_name="packs.json")

        assert len(PackStore(config).load().accepted) == 1

    def test_malformed_manifest_raises(self, tmp_path: Path) -> None:
        (tmp_path / "contents.json").write_bytes(b'{"stickerPacks": [], "extra": 1}')
        with pytest.raises(SchemaError):
            PackStore(ProviderConfig(content_root=tmp_path)).load()

    def test_strict_raises_on_first_invalid_pack(self, tmp_path: Path) -> None:
        write_content_root(tmp_path, make_pack("good"), make_pack("bad", sticker_count=2))

        with pytest.raises(CountViolation) as exc_info:
            PackStore(ProviderConfig(content_root=tmp_path)).load()
        assert exc_info.value.identifier == "bad"

    def test_strict_raises_on_missing_asset(self, tmp_path: Path) -> None:
        write_content_root(tmp_path, make_pack("abc"))
        (tmp_path / "abc" / "02.webp").unlink()

        with pytest.raises(AssetNotFound, match="02.webp"):
            PackStore(ProviderConfig(content_root=tmp_path)).load()

    def test_lenient_drops_invalid_pack(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        write_content_root(tmp_path, make_pack("good"), make_pack("bad", sticker_count=2))
        config = ProviderConfig(content_root=tmp_path, strict=False)

        with caplog.at_level(logging.ERROR, logger="stickerpacks.store.packs"):
            report = PackStore(config).load()

        assert [p.identifier for p in report.accepted] == ["good"]
        assert list(report.rejected) == ["bad"]
        assert "sticker count" in report.rejected["bad"]
        assert not report.is_clean
        assert "Rejected sticker pack bad" in caplog.text

    def test_rejected_is_read_only(self, tmp_path: Path) -> None:
        write_content_root(tmp_path, make_pack("good"), make_pack("bad", sticker_count=2))
        report = PackStore(ProviderConfig(content_root=tmp_path, strict=False)).load()

        with pytest.raises(TypeError):
            report.rejected["good"] = "forged"  # type: ignore[index]
        assert list(report.rejected) == ["bad"]

    def test_lenient_drops_pack_with_bad_sticker(self, tmp_path: Path) -> None:
        write_content_root(tmp_path, make_pack("abc"), sticker=webp_bytes((256, 256)))
        config = ProviderConfig(content_root=tmp_path, strict=False)

        report = PackStore(config).load()

        assert report.accepted == ()
        assert "Sticker height should be 512" in report.rejected["abc"]

    def test_load_is_repeatable(self, tmp_path: Path) -> None:
        write_content_root(tmp_path, make_pack("abc"))
        store = PackStore(ProviderConfig(content_root=tmp_path))

        assert store.load() == store.load()


class TestValidate:
    """Tests for PackStore.validate."""

    def test_uses_asset_folder(self, tmp_path: Path) -> None:
        _write_pack_assets(tmp_path, "abc")
        (tmp_path / "abc" / "tray.png").write_bytes(png_bytes((600, 600)))
        store = PackStore(ProviderConfig(content_root=tmp_path))

        with pytest.raises(BinaryFormatViolation, match="tray.png"):
            store.validate(make_pack("abc"))


class TestAddPack:
    """Tests for PackStore.add_pack."""

    def test_creates_manifest(self, tmp_path: Path) -> None:
        _write_pack_assets(tmp_path, "abc")
        store = PackStore(ProviderConfig(content_root=tmp_path))

        manifest = store.add_pack(make_pack("abc"))

        assert manifest.identifiers == ["abc"]
        assert load_manifest(tmp_path / "contents.json") == manifest
        assert not (tmp_path / "contents.json.tmp").exists()

    def test_appends_to_existing_manifest(self, tmp_path: Path) -> None:
        write_content_root(tmp_path, make_pack("first"))
        _write_pack_assets(tmp_path, "second")
        store = PackStore(ProviderConfig(content_root=tmp_path))

        store.add_pack(make_pack("second"))

        assert [p.identifier for p in store.load().accepted] == ["first", "second"]

    def test_new_pack_inherits_store_links(self, tmp_path: Path) -> None:
        write_content_root(tmp_path, make_pack("first"), iosAppStoreLink="https://itunes.apple.com/app/x")
        _write_pack_assets(tmp_path, "second")
        store = PackStore(ProviderConfig(content_root=tmp_path))

        manifest = store.add_pack(make_pack("second"))

        assert manifest.sticker_packs[-1].ios_app_store_link == "https://itunes.apple.com/app/x"
        document = orjson.loads((tmp_path / "contents.json").read_bytes())
        assert document["iosAppStoreLink"] == "https://itunes.apple.com/app/x"
        assert "iosAppStoreLink" not in document["stickerPacks"][1]

    def test_duplicate_identifier_rejected(self, tmp_path: Path) -> None:
        write_content_root(tmp_path, make_pack("abc"))
        store = PackStore(ProviderConfig(content_root=tmp_path))
        before = (tmp_path / "contents.json").read_bytes()

        with pytest.raises(SchemaError, match="Duplicate sticker pack identifier: abc"):
            store.add_pack(make_pack("abc"))
        assert (tmp_path / "contents.json").read_bytes() == before

    def test_invalid_pack_not_written(self, tmp_path: Path) -> None:
        _write_pack_assets(tmp_path, "abc", sticker_count=2)
        store = PackStore(ProviderConfig(content_root=tmp_path))

        with pytest.raises(CountViolation):
            store.add_pack(make_pack("abc", sticker_count=2))
        assert not (tmp_path / "contents.json").exists()

    def test_missing_assets_not_written(self, tmp_path: Path) -> None:
        store = PackStore(ProviderConfig(content_root=tmp_path))

        with pytest.raises(AssetNotFound):
            store.add_pack(make_pack("abc"))
        assert store.read_manifest() is None

    def test_non_webp_sticker_names_not_written(self, tmp_path: Path) -> None:
        write_content_root(tmp_path, make_pack("abc"))
        pack_dir = tmp_path / "bad"
        pack_dir.mkdir()
        (pack_dir / "tray.png").write_bytes(png_bytes())
        for i in range(3):
            (pack_dir / f"{i}.png").write_bytes(webp_bytes())
        stickers = tuple(Sticker(image_file_name=f"{i}.png", emojis=("😀",)) for i in range(3))
        store = PackStore(ProviderConfig(content_root=tmp_path))
        before = (tmp_path / "contents.json").read_bytes()

        with pytest.raises(SchemaError, match="must be a .webp file, image file: 0.png"):
            store.add_pack(dataclasses.replace(make_pack("bad"), stickers=stickers))

        assert (tmp_path / "contents.json").read_bytes() == before
        assert [p.identifier for p in store.load().accepted] == ["abc"]

    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({"tray_image_file": "../abc/tray.png"}, "Tray image file must not contain"),
            ({"stickers": (Sticker(image_file_name="sub/01.webp"),)}, "directory traversal"),
            ({"name": ""}, "name cannot be empty"),
        ],
    )
    def test_unparseable_pack_not_written(
        self, tmp_path: Path, overrides: dict[str, object], message: str
    ) -> None:
        write_content_root(tmp_path, make_pack("abc"))
        _write_pack_assets(tmp_path, "bad")
        store = PackStore(ProviderConfig(content_root=tmp_path))
        before = (tmp_path / "contents.json").read_bytes()

        with pytest.raises(SchemaError, match=message):
            store.add_pack(dataclasses.replace(make_pack("bad"), **overrides))

        assert (tmp_path / "contents.json").read_bytes() == before
        assert not (tmp_path / "contents.json.tmp").exists()
