"""Per-context namespace cache used when namespaces cannot be listed live."""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from . import atomic

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def sanitize_context(context: str) -> str:
    """Return a filesystem-safe cache key for ``context``."""

    return _UNSAFE_CHARS.sub("_", context)


def _is_entry(line: str) -> bool:
    return bool(line.strip()) and not line.startswith("#")


class NamespaceCache:
    """One file per sanitized context name, one namespace per line.

    Comment lines (``#``) and blank lines are ignored on read and kept
    untouched on rewrite.
    """

    def __init__(self, directory: Path):
        self.directory = directory

    def path_for(self, context: str) -> Path:
        return self.directory / sanitize_context(context)

    def list(self, context: str) -> list[str]:
        return [line for line in atomic.read_lines(self.path_for(context)) if _is_entry(line)]

    def add(self, context: str, namespace: str) -> bool:
        """Append ``namespace``; return ``False`` when it was already cached."""

        if not namespace.strip():
            raise ValueError("No namespace provided")
        if not _is_entry(namespace):
            raise ValueError(f"Invalid namespace name: {namespace}")
        path = self.path_for(context)
        lines = atomic.read_lines(path)
        if namespace in lines:
            return False
        atomic.write_lines(path, [*lines, namespace])
        return True

    def remove(self, context: str, namespace: str) -> bool:
        path = self.path_for(context)
        lines = atomic.read_lines(path)
        kept = [line for line in lines if line != namespace]
        if len(kept) == len(lines):
            return False
        atomic.write_lines(path, kept)
        return True

    def remove_many(self, context: str, namespaces: Iterable[str]) -> list[str]:
        """Remove each name in turn; re-running after a partial failure is safe."""

        return [namespace for namespace in namespaces if self.remove(context, namespace)]

    def delete(self, context: str) -> bool:
        path = self.path_for(context)
        if not path.exists():
            return False
        path.unlink()
        return True

    def migrate(self, old_context: str, new_context: str) -> list[str]:
        """Move cached namespaces from ``old_context`` to ``new_context``.

        Entries already cached under the new name are not duplicated. Returns
        the namespaces that were added to the new cache.
        """

        old_path = self.path_for(old_context)
        new_path = self.path_for(new_context)
        if old_path == new_path or not old_path.exists():
            return []
        existing = atomic.read_lines(new_path)
        moved = [ns for ns in self.list(old_context) if ns not in existing]
        if moved or not new_path.exists():
            atomic.write_lines(new_path, [*existing, *moved])
        old_path.unlink()
        return moved
