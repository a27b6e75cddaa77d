"""Merge, dedup, sort and paginate helpers for multi-facet address history.

Functions
---------
- dedup_by_hash: keep the first record seen for each hash.
- sort_by_height_desc: stable sort, newest first.
- merge_facets: concatenate facet results in order, dedup, sort.
- paginate: slice one page out of a merged list.
- estimate_total / make_window: conservative total and the pagination window.

Pages are 1-based; a page is the half-open slice [(page-1)*size, page*size).
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from zigscan.core.models import FacetResult, PaginationWindow, TransactionRecord


def dedup_by_hash(records: Iterable[TransactionRecord]) -> list[TransactionRecord]:
    """Drop later records whose hash was already seen (first occurrence wins)."""
    seen: set[str] = set()
    out: list[TransactionRecord] = []
    for r in records:
        if r.hash in seen:
            continue
        seen.add(r.hash)
        out.append(r)
    return out


def sort_by_height_desc(records: Iterable[TransactionRecord]) -> list[TransactionRecord]:
    """Height descending; equal heights keep their input order (sorted() is stable)."""
    return sorted(records, key=lambda r: -r.height)


def merge_facets(results: Sequence[FacetResult]) -> list[TransactionRecord]:
    """Merge facet results in the given order, then dedup and sort."""
    merged: list[TransactionRecord] = []
    for res in results:
        merged.extend(res.records)
    return sort_by_height_desc(dedup_by_hash(merged))


def paginate(records: Sequence[TransactionRecord], page: int, page_size: int) -> list[TransactionRecord]:
    """Return one page; out-of-range or non-positive arguments give an empty list."""
    if page < 1 or page_size < 1:
        return []
    start = (page - 1) * page_size
    return list(records[start : start + page_size])


def estimate_total(unique_count: int, results: Sequence[FacetResult]) -> int:
    """max(unique merged count, sum of facet totals).

    Facet totals overlap (self-transfers appear in several facets) and are not
    always reported, so this is an upper bound rather than an exact count.
    A facet without a reported total contributes the rows it returned.
    """
    facet_sum = sum(r.total if r.total is not None else len(r.records) for r in results if not r.failed)
    return max(unique_count, facet_sum)


def make_window(page: int, page_size: int, total: int, *, reachable: int | None = None) -> PaginationWindow:
    """Pagination window for `total` rows.

    `reachable` caps `pages` and `has_more` when only that many rows can ever be
    served (facet fetches stop at `facet_fetch_limit`); `total` is reported as is.
    """
    served = total if reachable is None else min(total, reachable)
    pages = max(1, math.ceil(served / page_size)) if page_size > 0 else 1
    return PaginationWindow(
        page=page,
        page_size=page_size,
        total=total,
        pages=pages,
        has_more=page >= 1 and page_size > 0 and page * page_size < served,
    )
