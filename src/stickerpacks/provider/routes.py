"""Route table for content URIs.

URI shapes, relative to content://<authority>/:

    metadata                               all packs
    metadata/<identifier>                  one pack
    stickers/<identifier>                  stickers of one pack
    stickers_asset/<identifier>/<file>     asset bytes (tray icon or sticker)

Asset routes exist only for (identifier, filename) pairs present in an
accepted pack. A RouteTable is immutable; reloads build a new one.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from urllib.parse import quote, unquote, urlsplit

from stickerpacks.errors import RouteNotFound
from stickerpacks.manifest.model import StickerPack

CONTENT_SCHEME = "content"

METADATA = "metadata"
STICKERS = "stickers"
STICKERS_ASSET = "stickers_asset"


class RouteCode(str, Enum):
    """Kind of matched route."""

    METADATA = "metadata"
    METADATA_SINGLE_PACK = "metadata_single_pack"
    STICKERS = "stickers"
    STICKERS_ASSET = "stickers_asset"
    STICKER_PACK_TRAY_ICON = "sticker_pack_tray_icon"

    @property
    def is_asset(self) -> bool:
        return self in (RouteCode.STICKERS_ASSET, RouteCode.STICKER_PACK_TRAY_ICON)


@dataclass(frozen=True)
class RouteMatch:
    """Matched route with its captured segments."""

    code: RouteCode
    identifier: str | None = None
    filename: str | None = None


def parse_content_uri(uri: str, authority: str) -> list[str]:
    """
    Split a content URI into decoded path segments.

    Empty segments are dropped.

    Raises:
        RouteNotFound: If scheme or authority do not belong to this provider.
    """
    parts = urlsplit(uri)
    if parts.scheme != CONTENT_SCHEME or parts.netloc != authority:
        raise RouteNotFound(f"Unknown URI: {uri}")
    return [unquote(s) for s in parts.path.split("/") if s]


def build_content_uri(authority: str, *segments: str) -> str:
    """Build a content URI from raw path segments, percent-encoding each one."""
    path = "/".join(quote(s, safe="") for s in segments)
    return f"{CONTENT_SCHEME}://{authority}/{path}"


@dataclass(frozen=True)
class RouteTable:
    """
    Immutable snapshot of accepted packs and the routes derived from them.

    Attributes:
        authority: URI authority routes are registered under.
        packs: Accepted packs in manifest order.
        asset_routes: (identifier, filename) -> asset route code.
    """

    authority: str
    packs: tuple[StickerPack, ...] = ()
    asset_routes: Mapping[tuple[str, str], RouteCode] = field(
        default_factory=lambda: MappingProxyType({})
    )
    _by_identifier: Mapping[str, StickerPack] = field(
        default_factory=lambda: MappingProxyType({}), repr=False, compare=False
    )

    @classmethod
    def build(cls, authority: str, packs: Iterable[StickerPack]) -> RouteTable:
        """Build a table with one asset route per tray icon and sticker."""
        pack_tuple = tuple(packs)
        asset_routes: dict[tuple[str, str], RouteCode] = {}
        by_identifier: dict[str, StickerPack] = {}
        for pack in pack_tuple:
            by_identifier[pack.identifier] = pack
            asset_routes[(pack.identifier, pack.tray_image_file)] = RouteCode.STICKER_PACK_TRAY_ICON
            for sticker in pack.stickers:
                asset_routes[(pack.identifier, sticker.image_file_name)] = RouteCode.STICKERS_ASSET
        return cls(
            authority=authority,
            packs=pack_tuple,
            asset_routes=MappingProxyType(asset_routes),
            _by_identifier=MappingProxyType(by_identifier),
        )

    def get_pack(self, identifier: str) -> StickerPack | None:
        """Get accepted pack by identifier."""
        return self._by_identifier.get(identifier)

    def match_segments(self, segments: list[str]) -> RouteMatch | None:
        """Match decoded path segments against the table."""
        if segments == [METADATA]:
            return RouteMatch(RouteCode.METADATA)
        if len(segments) == 2 and segments[0] == METADATA:
            return RouteMatch(RouteCode.METADATA_SINGLE_PACK, identifier=segments[1])
        if len(segments) == 2 and segments[0] == STICKERS:
            return RouteMatch(RouteCode.STICKERS, identifier=segments[1])
        if len(segments) == 3 and segments[0] == STICKERS_ASSET:
            identifier, filename = segments[1], segments[2]
            code = self.asset_routes.get((identifier, filename))
            if code is not None:
                return RouteMatch(code, identifier=identifier, filename=filename)
        return None

    def match(self, uri: str) -> RouteMatch:
        """
        Match a content URI.

        Raises:
            RouteNotFound: If no route matches.
        """
        route = self.match_segments(parse_content_uri(uri, self.authority))
        if route is None:
            raise RouteNotFound(f"Unknown URI: {uri}")
        return route

    @property
    def route_count(self) -> int:
        """Three fixed routes plus one per registered asset."""
        return 3 + len(self.asset_routes)
