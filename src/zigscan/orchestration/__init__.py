"""Tiered retrieval with facet fan-out and block scanning.

This package provides:
- RetrievalOrchestrator: tier fallthrough, facet merge, pagination
- TierPreference: advisory, lock-guarded tier preference
- Merge / dedup / paginate helpers
"""

from zigscan.orchestration.orchestrator import RetrievalOrchestrator
from zigscan.orchestration.preference import TierPreference
from zigscan.orchestration.utils import dedup_by_hash, estimate_total, make_window, merge_facets, paginate

__all__ = [
    "RetrievalOrchestrator",
    "TierPreference",
    "dedup_by_hash",
    "estimate_total",
    "make_window",
    "merge_facets",
    "paginate",
]
