"""Advisory tier preference shared by concurrent retrieval calls."""

from __future__ import annotations

import logging
import threading

from zigscan.core.models import RetrievalTier

logger = logging.getLogger(__name__)


class TierPreference:
    """Preferred upstream tier, updated atomically.

    The preference only decides which tier is tried first; every call still
    falls through the remaining tiers. Reads and writes go through a lock so
    concurrent callers (threads or event loops) never lose an update, and a
    failure only demotes the tier if it is still the preferred one.
    """

    def __init__(self, preferred: RetrievalTier = RetrievalTier.PRIMARY_INDEXED_API) -> None:
        self._lock = threading.Lock()
        self._preferred = preferred

    @property
    def preferred(self) -> RetrievalTier:
        with self._lock:
            return self._preferred

    def ordered(self) -> tuple[RetrievalTier, ...]:
        """Preferred tier first, the others in canonical order."""
        first = self.preferred
        return (first, *(t for t in RetrievalTier.canonical() if t is not first))

    def set(self, tier: RetrievalTier) -> None:
        with self._lock:
            self._preferred = tier

    def record_success(self, tier: RetrievalTier) -> None:
        with self._lock:
            if self._preferred is not tier:
                logger.info("preferring %s after a successful call", tier.value)
                self._preferred = tier

    def record_failure(self, tier: RetrievalTier) -> None:
        """Demote `tier` to the next one in canonical order, if it is still preferred."""
        with self._lock:
            if self._preferred is not tier:
                return
            order = RetrievalTier.canonical()
            self._preferred = order[(order.index(tier) + 1) % len(order)]
            logger.info("demoting %s; now preferring %s", tier.value, self._preferred.value)
