"""Sticker content provider: routes consumer URIs to metadata rows and asset files."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import IO

from stickerpacks.config import ProviderConfig
from stickerpacks.errors import (
    AssetNotFound,
    RouteNotFound,
    SchemaError,
    StickerPackError,
    UnsupportedOperation,
)
from stickerpacks.manifest.model import StickerPack
from stickerpacks.provider.contracts import (
    PACK_METADATA_COLUMNS,
    STICKER_COLUMNS,
    PackMetadataRow,
    QueryResult,
    StickerRow,
)
from stickerpacks.provider.metrics import ProviderMetrics
from stickerpacks.provider.routes import (
    METADATA,
    STICKERS,
    STICKERS_ASSET,
    RouteCode,
    RouteMatch,
    RouteTable,
    parse_content_uri,
)
from stickerpacks.store.packs import LoadReport, PackStore

logger = logging.getLogger(__name__)

STICKER_MIME_TYPE = "image/webp"
TRAY_ICON_MIME_TYPE = "image/png"


class StickerContentProvider:
    """
    Read-only query interface over the accepted sticker packs.

    Responsibilities:
    - Rebuild the route table from the pack store and publish it atomically
    - Answer metadata and sticker-list queries
    - Open asset files only for filenames listed in the named pack

    Each request works against one RouteTable snapshot. With reload_on_query
    the snapshot is rebuilt from the store first, so the consumer never sees
    packs the store no longer holds.

    Usage:
        provider = StickerContentProvider(PackStore(config), config)
        provider.reload()
        result = provider.query("content://<authority>/metadata")
        with provider.open_asset("content://<authority>/stickers_asset/cats/01.webp") as f:
            data = f.read()
    """

    def __init__(
        self,
        store: PackStore,
        config: ProviderConfig,
        *,
        metrics: ProviderMetrics | None = None,
    ) -> None:
        """
        Initialize content provider.

        Args:
            store: Authoritative pack store.
            config: Provider configuration.
            metrics: Metrics sink. A new one is created if not provided.
        """
        self._store = store
        self._config = config
        self._metrics = metrics or ProviderMetrics()

        # Guards the reference swap and generation; never held during a reload
        self._table_lock = threading.Lock()
        # Serialises reloads against each other
        self._reload_lock = threading.Lock()
        self._table = RouteTable.build(config.authority, ())
        self._last_report = LoadReport()
        # Bumped on every publish so queued readers can reuse a fresh table
        self._generation = 0

    @property
    def config(self) -> ProviderConfig:
        """Get provider configuration."""
        return self._config

    @property
    def metrics(self) -> ProviderMetrics:
        """Get provider metrics."""
        return self._metrics

    @property
    def authority(self) -> str:
        return self._config.authority

    @property
    def route_table(self) -> RouteTable:
        """Currently published route table."""
        with self._table_lock:
            return self._table

    @property
    def last_report(self) -> LoadReport:
        """Report of the last successful reload."""
        return self._last_report

    def get_sticker_pack_list(self) -> list[StickerPack]:
        """Accepted packs, refreshed from the store when reload_on_query is set."""
        return list(self._snapshot().packs)

    # ----- Reload -----

    def reload(self) -> RouteTable:
        """
        Rebuild the route table from the store and publish it.

        The new table is built without holding the table lock; only the
        reference swap is guarded. On failure the previous table stays live.

        Returns:
            The newly published table.

        Raises:
            SchemaError: If the manifest is malformed.
            ValidationViolation: Strict mode, first invalid pack.
            AssetNotFound: Strict mode, first pack with a missing asset.
        """
        with self._reload_lock:
            return self._reload_locked()

    def _reload_locked(self) -> RouteTable:
        try:
            report = self._store.load()
        except StickerPackError:
            self._metrics.record_reload_failure()
            logger.exception("Sticker pack reload failed, keeping previous route table")
            raise

        table = RouteTable.build(self._config.authority, report.accepted)
        with self._table_lock:
            self._table = table
            self._last_report = report
            self._generation += 1

        self._metrics.record_reload(accepted=len(report.accepted), rejected=len(report.rejected))
        logger.debug(
            "Published route table: %d pack(s), %d route(s)", len(table.packs), table.route_count
        )
        return table

    def _snapshot(self) -> RouteTable:
        """
        Table to answer one request from.

        With reload_on_query, a request that queued behind another thread's
        reload reuses the table that reload published instead of decoding
        every asset again. If that reload failed, the request reloads itself.
        """
        if not self._config.reload_on_query:
            return self.route_table
        with self._table_lock:
            generation = self._generation
        with self._reload_lock:
            with self._table_lock:
                if self._generation != generation:
                    return self._table
            return self._reload_locked()

    # ----- Routing -----

    def _match(self, uri: str, table: RouteTable) -> RouteMatch:
        try:
            route = table.match(uri)
        except RouteNotFound:
            self._metrics.record_unmatched()
            logger.info("Unknown URI requested", extra={"uri": uri})
            raise
        self._metrics.record_query(route.code.value)
        return route

    def get_type(self, uri: str) -> str:
        """
        MIME type for a URI.

        Raises:
            RouteNotFound: If the URI matches no route.
        """
        route = self._match(uri, self.route_table)
        authority = self._config.authority
        if route.code is RouteCode.METADATA:
            return f"vnd.android.cursor.dir/vnd.{authority}.{METADATA}"
        if route.code is RouteCode.METADATA_SINGLE_PACK:
            return f"vnd.android.cursor.item/vnd.{authority}.{METADATA}"
        if route.code is RouteCode.STICKERS:
            return f"vnd.android.cursor.dir/vnd.{authority}.{STICKERS}"
        if route.code is RouteCode.STICKERS_ASSET:
            return STICKER_MIME_TYPE
        return TRAY_ICON_MIME_TYPE

    # ----- Queries -----

    def query(self, uri: str) -> QueryResult:
        """
        Answer a metadata or sticker-list query.

        An unknown identifier yields an empty result, not an error.

        Raises:
            RouteNotFound: If the URI is unknown or addresses an asset.
        """
        table = self._snapshot()
        route = self._match(uri, table)
        if route.code is RouteCode.METADATA:
            return self._pack_info(table.packs)
        if route.code is RouteCode.METADATA_SINGLE_PACK:
            pack = table.get_pack(route.identifier or "")
            return self._pack_info([pack] if pack is not None else [])
        if route.code is RouteCode.STICKERS:
            pack = table.get_pack(route.identifier or "")
            stickers = pack.stickers if pack is not None else ()
            return QueryResult.from_models(
                STICKER_COLUMNS, (StickerRow.from_sticker(s) for s in stickers)
            )
        raise RouteNotFound(f"Unknown URI: {uri}")

    @staticmethod
    def _pack_info(packs: list[StickerPack] | tuple[StickerPack, ...]) -> QueryResult:
        return QueryResult.from_models(
            PACK_METADATA_COLUMNS, (PackMetadataRow.from_pack(p) for p in packs)
        )

    # ----- Assets -----

    def resolve_asset(self, uri: str) -> Path:
        """
        Resolve an asset URI to its backing file.

        The filename must be the tray icon or a sticker of the named pack in
        the current snapshot, regardless of what exists on disk.

        Raises:
            AssetNotFound: If the URI does not address a listed asset or the file is missing.
            RouteNotFound: If the URI is not an asset URI at all.
        """
        table = self._snapshot()
        segments = parse_content_uri(uri, table.authority)
        if not segments or segments[0] != STICKERS_ASSET:
            self._metrics.record_unmatched()
            raise RouteNotFound(f"Not an asset URI: {uri}")
        if len(segments) != 3:
            self._metrics.record_asset(found=False)
            raise AssetNotFound(f"Path segments should be 3, uri is: {uri}")

        # Empty segments are dropped by parse_content_uri, so both are non-empty
        identifier, filename = segments[1], segments[2]
        route = table.match_segments(segments)
        pack = table.get_pack(identifier)
        if route is None or pack is None or filename not in pack.asset_names:
            self._metrics.record_asset(found=False)
            logger.warning("Refused asset request for unlisted file", extra={"uri": uri})
            raise AssetNotFound(f"Asset not listed in sticker pack: {uri}")
        self._metrics.record_query(route.code.value)

        try:
            path = self._store.assets.asset_path(identifier, filename)
        except AssetNotFound:
            self._metrics.record_asset(found=False)
            raise
        self._metrics.record_asset(found=True)
        return path

    def open_asset(self, uri: str) -> IO[bytes]:
        """
        Open an asset file read-only.

        Raises:
            AssetNotFound: See resolve_asset.
            RouteNotFound: If the URI is not an asset URI.
        """
        path = self.resolve_asset(uri)
        try:
            return path.open("rb")
        except OSError as e:
            raise AssetNotFound(f"Cannot open asset: {uri}") from e

    # ----- Mutations -----

    def insert(self, uri: str, pack: StickerPack) -> str:
        """
        Add a validated pack and publish its routes.

        The pack's asset routes are live before this returns.

        Returns:
            The URI that was passed in.

        Raises:
            RouteNotFound: If uri is not the metadata URI of this provider.
            SchemaError: If the identifier already exists or the pack fails the
                manifest shape checks. The manifest is left untouched.
            ValidationViolation: If the pack breaks an integrity rule.
        """
        if parse_content_uri(uri, self._config.authority) != [METADATA]:
            self._metrics.record_unmatched()
            raise RouteNotFound(f"Unknown URI: {uri}")
        try:
            self._store.add_pack(pack)
        except SchemaError:
            logger.warning("Rejected insert of sticker pack %s", pack.identifier)
            raise
        self.reload()
        return uri

    def delete(self, uri: str) -> int:
        self._metrics.record_unsupported()
        raise UnsupportedOperation("delete is not supported")

    def update(self, uri: str, values: object = None) -> int:
        self._metrics.record_unsupported()
        raise UnsupportedOperation("update is not supported")
