from __future__ import annotations
import asyncio
from typing import Iterable, List, Sequence

from ..clean.canonical import canonicalize
from ..sources.base import SourceAdapter
from ..utils.logger import get_logger
from ..utils.schemas import SearchCandidate, is_placeholder

log = get_logger("search")

DEFAULT_MIN_QUERY_LENGTH = 2


def merge_candidates(groups: Iterable[Sequence[SearchCandidate]], limit: int) -> List[SearchCandidate]:
    """
    Merge candidate lists in priority order. A candidate is admitted only if
    neither its lower-cased brand name nor its canonical key was seen before.
    Candidates with a placeholder brand are passed through without claiming
    keys, so they cannot shadow a later usable candidate.
    """
    seen = set()
    merged: List[SearchCandidate] = []
    for group in groups:
        for candidate in group:
            brand_key = candidate.brand_name.lower()
            canonical_key = canonicalize(candidate.generic_name, candidate.brand_name)
            if brand_key in seen or canonical_key in seen:
                continue
            if candidate.brand_name.strip() and not is_placeholder(candidate.brand_name):
                seen.add(brand_key)
                seen.add(canonical_key)
            merged.append(candidate)
    return merged[:limit]


class SearchAggregator:
    """
    Fans a query out to the curated store and the public label API at the
    same time and merges the answers. Curated candidates always come first,
    whichever request finishes first.
    """

    def __init__(self, curated: SourceAdapter, public: SourceAdapter,
                 min_query_length: int = DEFAULT_MIN_QUERY_LENGTH):
        self.curated = curated
        self.public = public
        self.min_query_length = min_query_length

    def _unwrap(self, adapter: SourceAdapter, query: str, result) -> List[SearchCandidate]:
        if isinstance(result, BaseException):
            log.error(f"[search] {adapter.name} failed for '{query}': {result!r}")
            return []
        return list(result or [])

    async def search(self, query: str, limit: int) -> List[SearchCandidate]:
        normalized = (query or "").strip().lower()
        if len(normalized) < self.min_query_length or limit <= 0:
            return []

        results = await asyncio.gather(
            self.curated.search(normalized, limit),
            self.public.search(normalized, max(1, limit // 2)),
            return_exceptions=True,
        )
        curated = self._unwrap(self.curated, normalized, results[0])
        public = self._unwrap(self.public, normalized, results[1])

        merged = merge_candidates((curated, public), limit)
        log.debug(
            f"[search] '{normalized}': curated={len(curated)} public={len(public)} merged={len(merged)}"
        )
        return merged
