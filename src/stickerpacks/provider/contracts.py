"""
Query result contracts exposed to the external consumer.

Column names and their order are a cross-process contract: the consumer
reads rows by these names. Do not rename or reorder fields.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import orjson
from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from stickerpacks.manifest.model import Sticker, StickerPack

STICKER_PACK_IDENTIFIER_IN_QUERY = "sticker_pack_identifier"
STICKER_PACK_NAME_IN_QUERY = "sticker_pack_name"
STICKER_PACK_PUBLISHER_IN_QUERY = "sticker_pack_publisher"
STICKER_PACK_ICON_IN_QUERY = "sticker_pack_icon"
ANDROID_APP_DOWNLOAD_LINK_IN_QUERY = "android_play_store_link"
IOS_APP_DOWNLOAD_LINK_IN_QUERY = "ios_app_download_link"
PUBLISHER_EMAIL = "sticker_pack_publisher_email"
PUBLISHER_WEBSITE = "sticker_pack_publisher_website"
PRIVACY_POLICY_WEBSITE = "sticker_pack_privacy_policy_website"
LICENSE_AGREEMENT_WEBSITE = "sticker_pack_license_agreement_website"

STICKER_FILE_NAME_IN_QUERY = "sticker_file_name"
STICKER_FILE_EMOJI_IN_QUERY = "sticker_emoji"


class PackMetadataRow(BaseModel):
    """One row of the metadata query, one per sticker pack."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sticker_pack_identifier: str = Field(..., min_length=1)
    sticker_pack_name: str = Field(..., min_length=1)
    sticker_pack_publisher: str = Field(..., min_length=1)
    sticker_pack_icon: str = Field(..., min_length=1, description="Tray image filename")
    android_play_store_link: str | None = None
    ios_app_download_link: str | None = None
    sticker_pack_publisher_email: str | None = None
    sticker_pack_publisher_website: str | None = None
    sticker_pack_privacy_policy_website: str | None = None
    sticker_pack_license_agreement_website: str | None = None

    @classmethod
    def from_pack(cls, pack: StickerPack) -> PackMetadataRow:
        """Build the row for a pack."""
        return cls(
            sticker_pack_identifier=pack.identifier,
            sticker_pack_name=pack.name,
            sticker_pack_publisher=pack.publisher,
            sticker_pack_icon=pack.tray_image_file,
            android_play_store_link=pack.android_play_store_link,
            ios_app_download_link=pack.ios_app_store_link,
            sticker_pack_publisher_email=pack.publisher_email,
            sticker_pack_publisher_website=pack.publisher_website,
            sticker_pack_privacy_policy_website=pack.privacy_policy_website,
            sticker_pack_license_agreement_website=pack.license_agreement_website,
        )


class StickerRow(BaseModel):
    """One row of the stickers query, one per sticker in pack order."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sticker_file_name: str = Field(..., min_length=1)
    sticker_emoji: str = Field(default="", description="Comma-joined emoji glyphs")

    @classmethod
    def from_sticker(cls, sticker: Sticker) -> StickerRow:
        """Build the row for a sticker."""
        return cls(
            sticker_file_name=sticker.image_file_name,
            sticker_emoji=",".join(sticker.emojis),
        )


PACK_METADATA_COLUMNS: tuple[str, ...] = tuple(PackMetadataRow.model_fields)
STICKER_COLUMNS: tuple[str, ...] = tuple(StickerRow.model_fields)


@dataclass(frozen=True)
class QueryResult:
    """Tabular query result.

    Attributes:
        columns: Column names in wire order.
        rows: Row values aligned with columns.
    """

    columns: tuple[str, ...]
    rows: tuple[tuple[Any, ...], ...] = field(default_factory=tuple)

    @classmethod
    def from_models(cls, columns: tuple[str, ...], models: Iterable[BaseModel]) -> QueryResult:
        """Build a result from row models sharing the given columns."""
        rows = []
        for model in models:
            data = model.model_dump()
            rows.append(tuple(data[c] for c in columns))
        return cls(columns=columns, rows=tuple(rows))

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def as_dicts(self) -> list[dict[str, Any]]:
        """Rows keyed by column name."""
        return [dict(zip(self.columns, row, strict=True)) for row in self.rows]

    def to_json(self) -> bytes:
        """Serialize to JSON bytes using orjson."""
        return orjson.dumps({"columns": list(self.columns), "rows": [list(r) for r in self.rows]})
