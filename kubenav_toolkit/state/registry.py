"""Context registry: which credential file defines each context.

The registry is persisted as ``context<TAB>path`` lines. Every mutation
rewrites the whole file through :func:`atomic.write_lines`, and the store is
kept to one record per context name with the most recent write winning.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .. import runner
from . import atomic

if TYPE_CHECKING:
    from ..kubectl import Kubectl

SEPARATOR = "\t"


@dataclass(frozen=True, slots=True)
class ContextRecord:
    """One ``context -> credential file`` mapping."""

    context: str
    credential_file: Path


def parse_record(line: str) -> ContextRecord | None:
    context, sep, file = line.partition(SEPARATOR)
    if not sep or not context or not file:
        return None
    return ContextRecord(context=context, credential_file=Path(file))


def format_record(record: ContextRecord) -> str:
    return f"{record.context}{SEPARATOR}{record.credential_file}"


def dedupe(records: Iterable[ContextRecord]) -> list[ContextRecord]:
    """Keep the last record seen for each context name."""

    latest: dict[str, ContextRecord] = {}
    for record in records:
        latest.pop(record.context, None)
        latest[record.context] = record
    return list(latest.values())


class ContextRegistry:
    def __init__(self, path: Path, kubectl: "Kubectl | None" = None):
        self.path = path
        self.kubectl = kubectl

    def all_records(self) -> list[ContextRecord]:
        records = []
        for line in atomic.read_lines(self.path):
            record = parse_record(line)
            if record is not None:
                records.append(record)
        return records

    def _write(self, records: Iterable[ContextRecord]) -> None:
        atomic.write_lines(self.path, (format_record(record) for record in records))

    def lookup(self, context: str) -> Path | None:
        found = None
        for record in self.all_records():
            if record.context == context:
                found = record.credential_file
        return found

    def contexts_for_file(self, credential_file: Path) -> list[str]:
        return [
            record.context
            for record in self.all_records()
            if record.credential_file == credential_file
        ]

    def add_mappings(self, credential_file: Path, contexts: Iterable[str]) -> list[str]:
        """Point every name in ``contexts`` at ``credential_file``.

        Any existing record for one of those names is dropped first, whichever
        file it referenced.
        """

        names = [name for name in contexts if name]
        if not names:
            return []
        records = self.all_records()
        for name in names:
            records = [record for record in records if record.context != name]
            records.append(ContextRecord(context=name, credential_file=credential_file))
        self._write(dedupe(records))
        return names

    def add_mappings_for_file(self, credential_file: Path) -> list[str]:
        """Register the contexts kubectl reports for ``credential_file``.

        A kubectl failure or a file without contexts registers nothing.
        """

        if self.kubectl is None:
            return []
        try:
            contexts = self.kubectl.list_contexts(credential_file)
        except runner.CommandError:
            return []
        return self.add_mappings(credential_file, contexts)

    def normalize(self) -> None:
        if not self.path.exists():
            return
        self._write(dedupe(self.all_records()))

    def remove_by_name(self, context: str) -> int:
        records = self.all_records()
        kept = [record for record in records if record.context != context]
        if len(kept) != len(records):
            self._write(kept)
        return len(records) - len(kept)

    def remove_by_file(self, credential_file: Path) -> int:
        records = self.all_records()
        kept = [record for record in records if record.credential_file != credential_file]
        if len(kept) != len(records):
            self._write(kept)
        return len(records) - len(kept)

    def rename(self, old: str, new: str) -> int:
        """Rename every record called ``old`` to ``new`` and normalize.

        Records already called ``new`` are dropped so the renamed file wins.
        """

        if old == new:
            return 0
        renamed = 0
        records = []
        for record in self.all_records():
            if record.context == new:
                continue
            if record.context == old:
                record = ContextRecord(context=new, credential_file=record.credential_file)
                renamed += 1
            records.append(record)
        if renamed:
            self._write(dedupe(records))
        return renamed

    def clear(self) -> None:
        self._write([])
