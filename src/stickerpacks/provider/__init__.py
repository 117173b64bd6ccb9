"""Content provider exposing accepted sticker packs to the consumer."""

from stickerpacks.provider.contracts import (
    PACK_METADATA_COLUMNS,
    STICKER_COLUMNS,
    PackMetadataRow,
    QueryResult,
    StickerRow,
)
from stickerpacks.provider.exporter import MetricsExporter
from stickerpacks.provider.metrics import ProviderMetrics
from stickerpacks.provider.router import StickerContentProvider
from stickerpacks.provider.routes import RouteCode, RouteMatch, RouteTable, build_content_uri

__all__ = [
    "PACK_METADATA_COLUMNS",
    "STICKER_COLUMNS",
    "MetricsExporter",
    "PackMetadataRow",
    "ProviderMetrics",
    "QueryResult",
    "RouteCode",
    "RouteMatch",
    "RouteTable",
    "StickerContentProvider",
    "StickerRow",
    "build_content_uri",
]
