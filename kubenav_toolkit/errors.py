"""Exceptions raised by the kubenav toolkit."""

from __future__ import annotations


class KubenavError(RuntimeError):
    """Base class for toolkit failures reported to the operator."""


class ConfigError(KubenavError):
    """Raised when settings or the config file cannot be parsed."""


class ContextNotFoundError(KubenavError):
    """Raised when a context has no registry record."""

    def __init__(self, context: str):
        super().__init__(f"Context {context} not found in context map")
        self.context = context


class NoSelectionError(KubenavError):
    """Raised when no context or namespace was provided or chosen."""
