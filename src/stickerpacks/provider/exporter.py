"""
Prometheus metrics exporter for the sticker content provider.

Exports low-cardinality metrics only. The single label is the route code;
pack identifiers and filenames never become labels.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prometheus_client import Counter, Gauge
from prometheus_client.registry import CollectorRegistry

if TYPE_CHECKING:
    from stickerpacks.provider.metrics import ProviderMetrics


# Labels that would grow with pack content
FORBIDDEN_LABELS = frozenset(
    {
        "identifier",
        "filename",
        "uri",
        "path",
        "publisher",
        "email",
    }
)

REQUIRED_METRIC_NAMES = frozenset(
    {
        "stickerpacks_provider_queries",
        "stickerpacks_provider_assets_served",
        "stickerpacks_provider_assets_not_found",
        "stickerpacks_provider_unmatched_uris",
        "stickerpacks_provider_unsupported_operations",
        "stickerpacks_provider_reloads",
        "stickerpacks_provider_reload_failures",
        "stickerpacks_provider_rejected_packs",
        "stickerpacks_provider_accepted_packs",
    }
)


class MetricsExporter:
    """
    Syncs ProviderMetrics into a Prometheus registry.

    Usage:
        registry = CollectorRegistry()
        exporter = MetricsExporter(registry=registry)
        exporter.update(provider.metrics)
        # generate_latest(registry) -> bytes for /metrics endpoint
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """
        Initialize metrics exporter.

        Args:
            registry: Prometheus CollectorRegistry. If None, a fresh one is created.
        """
        self._registry = registry or CollectorRegistry()

        self._queries = Counter(
            "stickerpacks_provider_queries",
            "Matched provider requests by route",
            ["route"],
            registry=self._registry,
        )
        self._assets_served = Counter(
            "stickerpacks_provider_assets_served",
            "Asset byte streams opened for the consumer",
            registry=self._registry,
        )
        self._assets_not_found = Counter(
            "stickerpacks_provider_assets_not_found",
            "Asset requests refused (unknown pack, unlisted filename or missing file)",
            registry=self._registry,
        )
        self._unmatched_uris = Counter(
            "stickerpacks_provider_unmatched_uris",
            "Requests whose URI matched no route",
            registry=self._registry,
        )
        self._unsupported_operations = Counter(
            "stickerpacks_provider_unsupported_operations",
            "Rejected delete/update requests",
            registry=self._registry,
        )
        self._reloads = Counter(
            "stickerpacks_provider_reloads",
            "Route table rebuilds published",
            registry=self._registry,
        )
        self._reload_failures = Counter(
            "stickerpacks_provider_reload_failures",
            "Reloads aborted by a parse or validation error",
            registry=self._registry,
        )
        self._rejected_packs = Gauge(
            "stickerpacks_provider_rejected_packs",
            "Packs dropped by the last lenient reload",
            registry=self._registry,
        )
        self._accepted_packs = Gauge(
            "stickerpacks_provider_accepted_packs",
            "Packs in the currently published route table",
            registry=self._registry,
        )

        # Counters are monotonic; track what was already exported
        self._last_queries: dict[str, int] = {}
        self._last_assets_served = 0
        self._last_assets_not_found = 0
        self._last_unmatched_uris = 0
        self._last_unsupported_operations = 0
        self._last_reloads = 0
        self._last_reload_failures = 0

    @property
    def registry(self) -> CollectorRegistry:
        """Get the Prometheus CollectorRegistry."""
        return self._registry

    @staticmethod
    def _delta(current: int, last: int) -> int:
        # A reset() on the source makes current drop below last
        return current - last if current >= last else current

    def update(self, metrics: ProviderMetrics) -> None:
        """
        Update all metrics from the provider's counters.

        Call on each scrape or on a timer.
        """
        snapshot = metrics.to_dict()

        for route, count in snapshot["queries_per_route"].items():
            delta = self._delta(count, self._last_queries.get(route, 0))
            if delta:
                self._queries.labels(route=route).inc(delta)
            self._last_queries[route] = count

        pairs = [
            ("assets_served", self._assets_served, "_last_assets_served"),
            ("assets_not_found", self._assets_not_found, "_last_assets_not_found"),
            ("unmatched_uris", self._unmatched_uris, "_last_unmatched_uris"),
            (
                "unsupported_operations",
                self._unsupported_operations,
                "_last_unsupported_operations",
            ),
            ("reloads", self._reloads, "_last_reloads"),
            ("reload_failures", self._reload_failures, "_last_reload_failures"),
        ]
        for key, counter, last_attr in pairs:
            current = snapshot[key]
            delta = self._delta(current, getattr(self, last_attr))
            if delta:
                counter.inc(delta)
            setattr(self, last_attr, current)

        self._accepted_packs.set(snapshot["accepted_packs"])
        self._rejected_packs.set(snapshot["rejected_packs"])
