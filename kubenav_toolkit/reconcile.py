"""Rebuild the context registry from every managed credential file.

Before a rebuild the registry is copied to ``context_map.prev``, whose
modification time becomes the capture time. That snapshot is the baseline used
to flag files and contexts missing from it or changed since, and it is deleted
once the pass completes. A snapshot left behind by an interrupted pass
is discarded and every file is treated as new.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from . import runner
from .console import log, warn
from .credentials import CredentialStore
from .kubectl import Kubectl
from .state import ContextRegistry
from .state import atomic
from .state.registry import parse_record

SNAPSHOT_SUFFIX = ".prev"

REASON_UNKNOWN_FILE = "file not in previous registry"
REASON_NEW_CONTEXT = "defines a context not in previous registry"
REASON_MODIFIED = "modified after the registry snapshot was taken"


@dataclass(frozen=True, slots=True)
class RegistrySnapshot:
    """Registry contents and write time captured before a rebuild."""

    contexts: frozenset[str]
    files: frozenset[Path]
    captured_at: float

    @classmethod
    def empty(cls, captured_at: float = 0.0) -> "RegistrySnapshot":
        return cls(contexts=frozenset(), files=frozenset(), captured_at=captured_at)

    @classmethod
    def load(cls, path: Path) -> "RegistrySnapshot":
        records = [parse_record(line) for line in atomic.read_lines(path)]
        records = [record for record in records if record is not None]
        return cls(
            contexts=frozenset(record.context for record in records),
            files=frozenset(record.credential_file for record in records),
            captured_at=path.stat().st_mtime,
        )


@dataclass(slots=True)
class FileScan:
    credential_file: Path
    contexts: list[str]
    reason: str | None = None

    @property
    def is_new(self) -> bool:
        return self.reason is not None


@dataclass(slots=True)
class ReconcileResult:
    scans: list[FileScan] = field(default_factory=list)
    recovered: bool = False

    @property
    def new_files(self) -> list[FileScan]:
        return [scan for scan in self.scans if scan.is_new]


def classify(
    credential_file: Path,
    contexts: list[str],
    snapshot: RegistrySnapshot,
    modified_at: float,
) -> str | None:
    """Return why ``credential_file`` counts as new, or ``None`` if it is known."""

    if credential_file not in snapshot.files:
        return REASON_UNKNOWN_FILE
    if any(context not in snapshot.contexts for context in contexts):
        return REASON_NEW_CONTEXT
    if modified_at > snapshot.captured_at:
        return REASON_MODIFIED
    return None


class Reconciler:
    def __init__(self, store: CredentialStore, registry: ContextRegistry, kubectl: Kubectl):
        self.store = store
        self.registry = registry
        self.kubectl = kubectl

    @property
    def snapshot_path(self) -> Path:
        return self.registry.path.with_name(self.registry.path.name + SNAPSHOT_SUFFIX)

    def take_snapshot(self) -> tuple[RegistrySnapshot, bool]:
        """Capture the baseline; the flag is ``True`` when recovering a failed pass."""

        path = self.snapshot_path
        if path.exists():
            warn(
                f"Found {path} from an interrupted rebuild; "
                "treating every credential file as new."
            )
            atomic.write_lines(path, [])
            return RegistrySnapshot.empty(), True
        if self.registry.path.exists():
            atomic.copy_file(self.registry.path, path)
        else:
            atomic.write_lines(path, [])
        return RegistrySnapshot.load(path), False

    def _list_contexts(self, credential_file: Path) -> list[str]:
        try:
            return self.kubectl.list_contexts(credential_file)
        except runner.CommandError as exc:
            warn(f"Unable to read contexts from {credential_file}: {exc}")
            return []

    def rebuild(
        self,
        *,
        on_file: Callable[[FileScan], None] | None = None,
        prompt_all: bool = False,
    ) -> ReconcileResult:
        """Rescan the managed directory and rewrite the registry from scratch.

        ``on_file`` runs for every new file (every file with ``prompt_all``)
        after its contexts are registered, so it may rename them.
        """

        snapshot, recovered = self.take_snapshot()
        result = ReconcileResult(recovered=recovered)
        self.registry.clear()

        for credential_file in self.store.files():
            contexts = self._list_contexts(credential_file)
            try:
                modified_at = credential_file.stat().st_mtime
            except FileNotFoundError:
                continue
            scan = FileScan(
                credential_file=credential_file,
                contexts=contexts,
                reason=classify(credential_file, contexts, snapshot, modified_at),
            )
            self.registry.add_mappings(credential_file, contexts)
            if scan.is_new:
                log(f"New credential file {credential_file} ({scan.reason})")
            result.scans.append(scan)
            if on_file is not None and (scan.is_new or prompt_all):
                on_file(scan)

        self.registry.normalize()
        self.snapshot_path.unlink(missing_ok=True)
        return result
