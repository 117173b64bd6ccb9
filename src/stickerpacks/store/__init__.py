"""Asset and pack storage backing the content provider."""

from stickerpacks.store.assets import AssetStore
from stickerpacks.store.packs import LoadReport, PackStore

__all__ = [
    "AssetStore",
    "LoadReport",
    "PackStore",
]
