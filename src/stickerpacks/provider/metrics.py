"""Metrics tracking for the content provider."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ProviderMetrics:
    """
    Counters for provider requests and reloads.

    Safe to update from concurrent request threads.
    """

    # Request counts
    queries_per_route: dict[str, int] = field(default_factory=dict)
    assets_served: int = 0
    assets_not_found: int = 0
    unmatched_uris: int = 0
    unsupported_operations: int = 0

    # Store reloads; pack counts are from the last published reload
    reloads: int = 0
    reload_failures: int = 0
    rejected_packs: int = 0
    accepted_packs: int = 0

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_query(self, route: str) -> None:
        """Record a matched query or asset request."""
        with self._lock:
            self.queries_per_route[route] = self.queries_per_route.get(route, 0) + 1

    def record_asset(self, *, found: bool) -> None:
        """Record the outcome of an asset request."""
        with self._lock:
            if found:
                self.assets_served += 1
            else:
                self.assets_not_found += 1

    def record_unmatched(self) -> None:
        with self._lock:
            self.unmatched_uris += 1

    def record_unsupported(self) -> None:
        with self._lock:
            self.unsupported_operations += 1

    def record_reload(self, *, accepted: int, rejected: int) -> None:
        """Record a successful reload; both counts describe the published table."""
        with self._lock:
            self.reloads += 1
            self.accepted_packs = accepted
            self.rejected_packs = rejected

    def record_reload_failure(self) -> None:
        with self._lock:
            self.reload_failures += 1

    @property
    def total_queries(self) -> int:
        return sum(self.queries_per_route.values())

    def to_dict(self) -> dict[str, Any]:
        """Convert metrics to dictionary."""
        with self._lock:
            return {
                "queries_per_route": dict(self.queries_per_route),
                "assets_served": self.assets_served,
                "assets_not_found": self.assets_not_found,
                "unmatched_uris": self.unmatched_uris,
                "unsupported_operations": self.unsupported_operations,
                "reloads": self.reloads,
                "reload_failures": self.reload_failures,
                "rejected_packs": self.rejected_packs,
                "accepted_packs": self.accepted_packs,
            }

    def reset(self) -> None:
        """Reset all metrics."""
        with self._lock:
            self.queries_per_route.clear()
            self.assets_served = 0
            self.assets_not_found = 0
            self.unmatched_uris = 0
            self.unsupported_operations = 0
            self.reloads = 0
            self.reload_failures = 0
            self.rejected_packs = 0
            self.accepted_packs = 0
