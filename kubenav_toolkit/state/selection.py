"""Last-used credential file, context and namespace.

The record is three ``KEY=value`` lines. Reading matches the keys literally and
never evaluates the file, so a hand-edited record can only supply strings.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from . import atomic

KEY_FILE = "KUBECONFIG"
KEY_CONTEXT = "CONTEXT"
KEY_NAMESPACE = "NAMESPACE"


@dataclass(frozen=True, slots=True)
class SelectionRecord:
    credential_file: str
    context: str
    namespace: str


def parse_selection(lines: list[str]) -> SelectionRecord | None:
    values: dict[str, str] = {}
    for line in lines:
        key, sep, value = line.partition("=")
        if sep and key in (KEY_FILE, KEY_CONTEXT, KEY_NAMESPACE):
            values.setdefault(key, value)
    if not any(values.values()):
        return None
    return SelectionRecord(
        credential_file=values.get(KEY_FILE, ""),
        context=values.get(KEY_CONTEXT, ""),
        namespace=values.get(KEY_NAMESPACE, ""),
    )


def format_selection(record: SelectionRecord) -> list[str]:
    return [
        f"{KEY_FILE}={record.credential_file}",
        f"{KEY_CONTEXT}={record.context}",
        f"{KEY_NAMESPACE}={record.namespace}",
    ]


class SelectionStore:
    def __init__(self, path: Path):
        self.path = path

    def save(self, credential_file: Path | str, context: str, namespace: str) -> SelectionRecord:
        record = SelectionRecord(str(credential_file), context, namespace)
        atomic.write_lines(self.path, format_selection(record))
        return record

    def load(self) -> SelectionRecord | None:
        return parse_selection(atomic.read_lines(self.path))

    def clear(self) -> bool:
        if not self.path.exists():
            return False
        self.path.unlink()
        return True

    def rename_context(self, old: str, new: str) -> bool:
        """Rewrite the saved context when it is ``old``; file and namespace stay."""

        record = self.load()
        if record is None or record.context != old:
            return False
        updated = replace(record, context=new)
        atomic.write_lines(self.path, format_selection(updated))
        return True

    def references(self, context: str) -> bool:
        record = self.load()
        return record is not None and record.context == context
