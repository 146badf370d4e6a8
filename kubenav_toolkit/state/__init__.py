"""Persisted kubenav state: registry, namespace cache and saved selection."""

from .namespaces import NamespaceCache, sanitize_context
from .registry import ContextRecord, ContextRegistry
from .selection import SelectionRecord, SelectionStore

__all__ = [
    "ContextRecord",
    "ContextRegistry",
    "NamespaceCache",
    "SelectionRecord",
    "SelectionStore",
    "sanitize_context",
]
