from __future__ import annotations

from typing import Protocol, runtime_checkable

from zigscan.core.models import Facet, FacetResult, RecordPage, RetrievalTier, TransactionRecord


# ---------------------------------------------------------------------------
# ITransactionSource
# ---------------------------------------------------------------------------

@runtime_checkable
class ITransactionSource(Protocol):
    """
    One upstream tier able to answer point lookups and "latest" listings.

    Domain expectations:
    - Results are already mapped into `TransactionRecord`s.
    - Failures surface as `UpstreamError` subclasses; a missing hash is
      `UpstreamNotFound`, never `None`.
    """

    tier: RetrievalTier

    async def get_transaction(self, tx_hash: str) -> TransactionRecord:
        """Return the record for a bare uppercase hash."""
        ...

    async def latest_transactions(self, limit: int) -> list[TransactionRecord]:
        """Return up to `limit` most recent transactions, newest first."""
        ...

    async def block_transactions(self, height: int) -> list[TransactionRecord]:
        """Return every transaction of the block at `height`, in block order."""
        ...

    async def ping(self) -> None:
        """Raise an `UpstreamError` unless the upstream answers a cheap health call."""
        ...

    async def aclose(self) -> None:
        ...


# ---------------------------------------------------------------------------
# IAccountHistorySource
# ---------------------------------------------------------------------------

@runtime_checkable
class IAccountHistorySource(Protocol):
    """
    Server-side paginated address history (primary indexed API).
    """

    async def get_account_transactions(self, address: str, *, page: int, limit: int) -> RecordPage:
        ...


# ---------------------------------------------------------------------------
# IFacetSearchSource
# ---------------------------------------------------------------------------

@runtime_checkable
class IFacetSearchSource(Protocol):
    """
    Event-query search, one facet at a time (chain REST API).

    Implementations return whatever page the upstream produced plus its
    reported total (which may be missing or overlap other facets).
    """

    async def search_facet(self, facet: Facet, address: str, *, limit: int, offset: int = 0) -> FacetResult:
        ...
