"""stickerpacks: validate sticker pack manifests and serve them to a messenger.

Pipeline: contents.json -> parser -> integrity validator -> content provider.
"""

from stickerpacks.config import ONE_KIBIBYTE, ProviderConfig, ValidationLimits
from stickerpacks.errors import (
    AssetNotFound,
    BinaryFormatViolation,
    CountViolation,
    FieldViolation,
    LinkViolation,
    RouteNotFound,
    SchemaError,
    StickerPackError,
    UnsupportedOperation,
    ValidationViolation,
)
from stickerpacks.manifest import Manifest, Sticker, StickerPack, parse_manifest, parse_sticker_packs
from stickerpacks.provider import QueryResult, StickerContentProvider
from stickerpacks.store import AssetStore, LoadReport, PackStore
from stickerpacks.validation import validate_sticker_pack, verify_sticker_pack_validity

__version__ = "0.1.0"

__all__ = [
    "ONE_KIBIBYTE",
    "AssetNotFound",
    "AssetStore",
    "BinaryFormatViolation",
    "CountViolation",
    "FieldViolation",
    "LinkViolation",
    "LoadReport",
    "Manifest",
    "PackStore",
    "ProviderConfig",
    "QueryResult",
    "RouteNotFound",
    "SchemaError",
    "Sticker",
    "StickerContentProvider",
    "StickerPack",
    "StickerPackError",
    "UnsupportedOperation",
    "ValidationLimits",
    "ValidationViolation",
    "parse_manifest",
    "parse_sticker_packs",
    "validate_sticker_pack",
    "verify_sticker_pack_validity",
]
