from __future__ import annotations
from typing import Dict, List, Type

from .base import SourceAdapter

_REGISTRY: Dict[str, Type[SourceAdapter]] = {}


def register(name: str):
    def _wrap(cls):
        cls.name = name
        _REGISTRY[name] = cls
        return cls
    return _wrap


def get_source(name: str) -> Type[SourceAdapter]:
    return _REGISTRY[name]


def list_sources() -> List[str]:
    return list(_REGISTRY.keys())
