"""
Configuration for validation limits and the content provider.

Limits mirror the constraints the consuming messenger enforces on sticker
packs. Provider settings fall back to environment variables when unset.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# Size unit used by every byte limit below. Eight times the conventional
# kibibyte; changing it changes which files are accepted.
ONE_KIBIBYTE = 8 * 1024

DEFAULT_AUTHORITY = "com.stickerpacks.provider"
DEFAULT_MANIFEST_NAME = "contents.json"


@dataclass(frozen=True)
class ValidationLimits:
    """Integrity validator limits."""

    char_count_max: int = 128
    sticker_file_size_limit_kb: int = 100
    tray_image_file_size_max_kb: int = 50
    sticker_image_width: int = 512
    sticker_image_height: int = 512
    tray_image_dimension_min: int = 24
    tray_image_dimension_max: int = 512
    sticker_count_min: int = 3
    sticker_count_max: int = 30
    emoji_limit: int = 3
    play_store_domain: str = "play.google.com"
    apple_store_domain: str = "itunes.apple.com"

    def __post_init__(self) -> None:
        if self.char_count_max < 1:
            raise ValueError(f"char_count_max must be >= 1, got {self.char_count_max}")
        if self.sticker_count_min < 1 or self.sticker_count_min > self.sticker_count_max:
            raise ValueError(
                f"sticker_count_min must be in [1, sticker_count_max], got {self.sticker_count_min}"
            )
        if self.tray_image_dimension_min > self.tray_image_dimension_max:
            raise ValueError(
                "tray_image_dimension_min must be <= tray_image_dimension_max, "
                f"got {self.tray_image_dimension_min} > {self.tray_image_dimension_max}"
            )
        if self.emoji_limit < 0:
            raise ValueError(f"emoji_limit must be >= 0, got {self.emoji_limit}")

    @property
    def sticker_file_size_max_bytes(self) -> int:
        return self.sticker_file_size_limit_kb * ONE_KIBIBYTE

    @property
    def tray_image_file_size_max_bytes(self) -> int:
        return self.tray_image_file_size_max_kb * ONE_KIBIBYTE


@dataclass
class ProviderConfig:
    """Content provider configuration.

    Attributes:
        authority: URI authority the provider answers for.
        content_root: Directory holding the manifest and one asset folder per pack.
        manifest_name: Manifest filename inside content_root.
        reload_on_query: Refresh the route table from the store before each request.
        strict: Abort a reload on the first invalid pack instead of dropping it.
    """

    authority: str = ""  # From STICKERPACKS_AUTHORITY env var
    content_root: Path | None = None  # From STICKERPACKS_CONTENT_ROOT env var
    manifest_name: str = DEFAULT_MANIFEST_NAME
    reload_on_query: bool = True
    strict: bool = True

    def __post_init__(self) -> None:
        if not self.authority:
            self.authority = os.environ.get("STICKERPACKS_AUTHORITY", DEFAULT_AUTHORITY)
        if self.content_root is None:
            env_root = os.environ.get("STICKERPACKS_CONTENT_ROOT", "")
            if not env_root:
                raise ValueError("STICKERPACKS_CONTENT_ROOT required when content_root is not set")
            self.content_root = Path(env_root)
        else:
            self.content_root = Path(self.content_root)
        if "/" in self.authority or not self.authority.strip():
            raise ValueError(f"authority must be a bare host-like name, got {self.authority!r}")
        if not self.manifest_name or "/" in self.manifest_name or ".." in self.manifest_name:
            raise ValueError(f"manifest_name must be a plain filename, got {self.manifest_name!r}")

    @property
    def manifest_path(self) -> Path:
        assert self.content_root is not None
        return self.content_root / self.manifest_name
