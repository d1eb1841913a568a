"""Persistent stores used by the summarisation pipeline."""

from .summary_cache import SummaryCache, derive_cache_key, safe_key

__all__ = ["SummaryCache", "derive_cache_key", "safe_key"]
