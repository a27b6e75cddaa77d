"""Exception hierarchy for decoding and upstream retrieval.

- `DecodeFailure` is internal to the decode pipeline and never escapes it.
- `UpstreamError` subclasses describe one failed upstream call.
- `LookupFailed` subclasses are what single-hash lookups raise to callers.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from zigscan.core.models import RetrievalTier


def snippet(value: str | bytes, limit: int = 64) -> str:
    """Short printable excerpt of an input, for error context."""
    text = value.decode("latin-1") if isinstance(value, bytes) else value
    text = text.replace("\n", "\\n")
    return text if len(text) <= limit else text[:limit] + "..."


class ZigscanError(Exception):
    """Base class for all zigscan errors."""


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


class DecodeFailure(ZigscanError):
    """A wire decoding stage could not make sense of its input."""

    def __init__(self, stage: str, raw: str | bytes = "", reason: str = "") -> None:
        self.stage = stage
        self.snippet = snippet(raw)
        self.reason = reason
        msg = f"decode failed at stage={stage}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class InvalidTransactionHash(ZigscanError, ValueError):
    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"invalid transaction hash: {snippet(value)!r}")


# ---------------------------------------------------------------------------
# Upstream calls
# ---------------------------------------------------------------------------


class UpstreamError(ZigscanError):
    """One upstream call failed."""

    def __init__(self, endpoint: str, message: str = "", *, tier: RetrievalTier | None = None) -> None:
        self.endpoint = endpoint
        self.tier = tier
        super().__init__(f"{endpoint}: {message}" if message else endpoint)


class UpstreamTimeout(UpstreamError):
    """The call exceeded its time budget."""


class UpstreamConnectionError(UpstreamError):
    """Transport-level failure (DNS, refused connection, protocol error)."""


class UpstreamPayloadError(UpstreamError):
    """The upstream answered 2xx but the body was unusable."""


class UpstreamStatusError(UpstreamError):
    """The upstream answered with a non-2xx status."""

    def __init__(
        self,
        endpoint: str,
        status_code: int,
        message: str = "",
        *,
        tier: RetrievalTier | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(endpoint, message or f"HTTP {status_code}", tier=tier)


class UpstreamNotFound(UpstreamStatusError):
    def __init__(self, endpoint: str, message: str = "not found", *, tier: RetrievalTier | None = None) -> None:
        super().__init__(endpoint, 404, message, tier=tier)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


class LookupFailed(ZigscanError):
    """A single-hash lookup could not produce a record."""

    def __init__(self, tx_hash: str, message: str) -> None:
        self.tx_hash = tx_hash
        super().__init__(message)


class TransactionNotFound(LookupFailed):
    """Every tier answered and none knows the hash."""

    def __init__(self, tx_hash: str) -> None:
        super().__init__(tx_hash, f"transaction {tx_hash} not found")


class UpstreamUnreachable(LookupFailed):
    """At least one tier failed, so absence cannot be confirmed."""

    def __init__(self, tx_hash: str, errors: Sequence[UpstreamError] = ()) -> None:
        self.errors = tuple(errors)
        detail = "; ".join(str(e) for e in self.errors) or "no tiers available"
        super().__init__(tx_hash, f"transaction {tx_hash} unavailable: {detail}")
