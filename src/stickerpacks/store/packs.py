"""Authoritative sticker pack store.

Owns the manifest file and the asset folders under one content root and
turns them into the list of packs that passed validation. The provider
rebuilds its route table from load(); nothing here is cached between calls.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from stickerpacks.config import ProviderConfig, ValidationLimits
from stickerpacks.errors import AssetNotFound, SchemaError, ValidationViolation
from stickerpacks.manifest.model import Manifest, StickerPack
from stickerpacks.manifest.parser import (
    check_sticker_pack_shape,
    dump_manifest,
    load_manifest,
    parse_manifest,
)
from stickerpacks.store.assets import AssetStore
from stickerpacks.validation.validator import verify_sticker_pack_validity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadReport:
    """Result of loading the store.

    Attributes:
        accepted: Packs that passed validation, in manifest order.
        rejected: Identifier -> violation message for dropped packs.
    """

    accepted: tuple[StickerPack, ...] = ()
    rejected: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def is_clean(self) -> bool:
        return not self.rejected


class PackStore:
    """
    Manifest plus asset folders under a single content root.

    Usage:
        store = PackStore(ProviderConfig(content_root=Path("/data/stickers")))
        report = store.load()
        for pack in report.accepted:
            ...
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        limits: ValidationLimits | None = None,
        assets: AssetStore | None = None,
    ) -> None:
        """
        Initialize pack store.

        Args:
            config: Provider configuration (content root, manifest name, strictness).
            limits: Validation limits. Uses defaults if not provided.
            assets: Asset store. Defaults to one rooted at config.content_root.
        """
        assert config.content_root is not None
        self._config = config
        self._limits = limits or ValidationLimits()
        self._assets = assets or AssetStore(config.content_root)
        self._write_lock = threading.Lock()

    @property
    def assets(self) -> AssetStore:
        """Get the asset store."""
        return self._assets

    @property
    def limits(self) -> ValidationLimits:
        """Get validation limits."""
        return self._limits

    def read_manifest(self) -> Manifest | None:
        """
        Parse the manifest file.

        Returns:
            Parsed Manifest, or None if no manifest has been written yet.

        Raises:
            SchemaError: If the manifest is malformed.
        """
        path = self._config.manifest_path
        if not path.exists():
            return None
        return load_manifest(path)

    def validate(self, pack: StickerPack) -> None:
        """
        Run the integrity validator against this store's assets.

        Raises:
            ValidationViolation: First rule the pack breaks.
            AssetNotFound: If an asset cannot be fetched.
        """
        verify_sticker_pack_validity(pack, self._assets.fetch_asset_bytes, self._limits)

    def load(self) -> LoadReport:
        """
        Parse the manifest and validate every pack.

        In strict mode the first invalid pack aborts the load. Otherwise
        invalid packs are dropped, logged and listed in the report.

        Returns:
            LoadReport with accepted packs in manifest order.

        Raises:
            SchemaError: If the manifest is malformed.
            ValidationViolation: Strict mode only, first invalid pack.
            AssetNotFound: Strict mode only, first pack with a missing asset.
        """
        manifest = self.read_manifest()
        if manifest is None:
            logger.info("No manifest at %s, store is empty", self._config.manifest_name)
            return LoadReport()

        accepted: list[StickerPack] = []
        rejected: dict[str, str] = {}
        for pack in manifest.sticker_packs:
            try:
                self.validate(pack)
            except (ValidationViolation, AssetNotFound) as e:
                if self._config.strict:
                    raise
                logger.error("Rejected sticker pack %s: %s", pack.identifier, e)
                rejected[pack.identifier] = str(e)
                continue
            accepted.append(pack)

        logger.debug("Loaded %d sticker pack(s), rejected %d", len(accepted), len(rejected))
        return LoadReport(accepted=tuple(accepted), rejected=MappingProxyType(rejected))

    def add_pack(self, pack: StickerPack) -> Manifest:
        """
        Validate a pack and append it to the manifest.

        Asset files must already be in place under the pack folder. The pack
        gets the same shape checks as a parsed one, and the new document is
        parsed back before it replaces the manifest, so a pack that the next
        load would refuse is never written.

        Returns:
            The manifest as written.

        Raises:
            SchemaError: If the identifier already exists, the pack fails the
                parser shape checks or the manifest is malformed.
            ValidationViolation: If the pack breaks an integrity rule.
            AssetNotFound: If an asset cannot be fetched.
        """
        check_sticker_pack_shape(pack)
        with self._write_lock:
            current = self.read_manifest() or Manifest(sticker_packs=())
            if current.get_pack(pack.identifier) is not None:
                raise SchemaError(f"Duplicate sticker pack identifier: {pack.identifier}")

            updated = current.with_pack(pack)
            # Validate with the store links the pack will be served with
            linked = updated.sticker_packs[-1]
            self.validate(linked)
            data = dump_manifest(updated)
            parse_manifest(data)
            self._write_manifest(data)

        logger.info("Added sticker pack %s (%d stickers)", pack.identifier, len(pack.stickers))
        return updated

    def _write_manifest(self, data: bytes) -> None:
        path = self._config.manifest_path
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        with tmp_path.open("wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
