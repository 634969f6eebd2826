"""
Multi-source search: aggregation, canonical-key dedup and result validation.
"""

from .aggregator import SearchAggregator, merge_candidates
from .validation import validate_search_result, validate_search_results

__all__ = [
    "SearchAggregator",
    "merge_candidates",
    "validate_search_result",
    "validate_search_results",
]
