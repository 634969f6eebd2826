"""
Data providers for the lookup pipeline.

Importing the package registers the built-in adapters:
  "curated" -> CuratedStoreAdapter (PostgREST curated store)
  "openfda" -> OpenFDALabelAdapter (openFDA drug label API)
"""

from .registry import get_source, list_sources, register
from . import curated, openfda  # noqa: F401  (registers adapters)
from .curated import CuratedStoreAdapter
from .openfda import OpenFDALabelAdapter

__all__ = [
    "CuratedStoreAdapter",
    "OpenFDALabelAdapter",
    "get_source",
    "list_sources",
    "register",
]
