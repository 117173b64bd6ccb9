"""Filesystem asset store.

Assets live at <root>/<identifier>/<filename>. Lookups reject names that
would resolve outside the pack folder and refuse symlinks.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePath

from stickerpacks.errors import AssetNotFound

logger = logging.getLogger(__name__)


def _is_plain_name(name: str) -> bool:
    """Single path component, not '.', '..' or absolute."""
    if not name or name.isspace() or name in (".", ".."):
        return False
    pure = PurePath(name)
    if pure.is_absolute():
        return False
    return len(pure.parts) == 1 and ".." not in name and "/" not in name and "\\" not in name


class AssetStore:
    """
    Read-only lookup of pack assets on disk.

    Usage:
        store = AssetStore(Path("/data/stickers"))
        data = store.fetch_asset_bytes("cats", "01.webp")
    """

    def __init__(self, root: Path) -> None:
        """
        Initialize asset store.

        Args:
            root: Directory containing one folder per pack identifier.
        """
        self._root = Path(root)

    @property
    def root(self) -> Path:
        """Get the asset root directory."""
        return self._root

    def asset_path(self, identifier: str, filename: str) -> Path:
        """
        Resolve the backing file for an asset.

        Args:
            identifier: Pack identifier.
            filename: Asset filename inside the pack folder.

        Returns:
            Path of an existing regular file inside the pack folder.

        Raises:
            AssetNotFound: If either name is unsafe or the file is missing.
        """
        if not _is_plain_name(identifier) or not _is_plain_name(filename):
            raise AssetNotFound(f"Invalid asset name: {identifier!r}/{filename!r}")

        pack_dir = self._root / identifier
        path = pack_dir / filename
        try:
            path.resolve().relative_to(pack_dir.resolve())
        except (ValueError, OSError) as e:
            raise AssetNotFound(f"Asset path escapes pack directory: {identifier}/{filename}") from e

        if path.is_symlink():
            raise AssetNotFound(f"Asset is a symlink (not allowed): {identifier}/{filename}")
        if not path.is_file():
            raise AssetNotFound(f"Asset file missing: {identifier}/{filename}")
        return path

    def fetch_asset_bytes(self, identifier: str, filename: str) -> bytes:
        """
        Read an asset's bytes.

        Raises:
            AssetNotFound: If the asset is unknown or cannot be read.
        """
        path = self.asset_path(identifier, filename)
        try:
            return path.read_bytes()
        except OSError as e:
            logger.warning("Failed to read asset %s/%s: %s", identifier, filename, e)
            raise AssetNotFound(f"Cannot read asset: {identifier}/{filename}") from e
