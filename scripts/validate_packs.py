#!/usr/bin/env python3
"""Validate a sticker pack content directory.

Parses <content_root>/contents.json and runs the integrity validator on every
pack against <content_root>/<identifier>/. All packs are checked, each one
reporting its first violation.

Usage:
    python scripts/validate_packs.py /data/stickers
    python scripts/validate_packs.py /data/stickers --manifest contents.json -v

Exit code 0 = every pack valid; 1 = parse error or at least one invalid pack.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from stickerpacks.config import DEFAULT_MANIFEST_NAME, ValidationLimits
from stickerpacks.errors import SchemaError
from stickerpacks.logging_config import setup_logging
from stickerpacks.manifest.parser import load_manifest
from stickerpacks.store.assets import AssetStore
from stickerpacks.validation.validator import validate_sticker_pack

logger = logging.getLogger(__name__)


def validate_content_root(content_root: Path, manifest_name: str = DEFAULT_MANIFEST_NAME) -> list[str]:
    """Validate every pack under content_root. Returns list of errors."""
    manifest_path = content_root / manifest_name
    if not manifest_path.is_file():
        return [f"{manifest_path}: manifest missing"]

    try:
        manifest = load_manifest(manifest_path)
    except SchemaError as e:
        return [f"{manifest_path}: {e}"]

    assets = AssetStore(content_root)
    limits = ValidationLimits()
    errors: list[str] = []
    for pack in manifest.sticker_packs:
        pack_errors = validate_sticker_pack(pack, assets.fetch_asset_bytes, limits)
        if pack_errors:
            errors.extend(f"{pack.identifier}: {e}" for e in pack_errors)
        else:
            print(f"  OK {pack.identifier} ({len(pack.stickers)} stickers)")
    return errors


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Validate a sticker pack content directory")
    parser.add_argument("content_root", type=Path, help="Directory holding contents.json and pack folders")
    parser.add_argument("--manifest", default=DEFAULT_MANIFEST_NAME, help="Manifest filename")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    setup_logging(level=logging.DEBUG if args.verbose else logging.WARNING, json_format=False)

    errors = validate_content_root(args.content_root, args.manifest)
    print()
    if errors:
        print(f"FAILED: {len(errors)} error(s):")
        for e in errors:
            print(f"  - {e}")
        return 1

    print("PASSED: all sticker packs valid.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
