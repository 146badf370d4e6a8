"""Propagate a context rename through the credential file and every store."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from . import runner
from .console import log, prompt_text, warn
from .kubectl import Kubectl
from .state import ContextRegistry, NamespaceCache, SelectionStore


@dataclass(slots=True)
class RenameResult:
    old: str
    new: str
    credential_file: Path
    registry_records: int = 0
    selection_updated: bool = False
    migrated_namespaces: list[str] = field(default_factory=list)


class RenamePropagator:
    """Rename a context in its file, then in the registry, cache and selection.

    Nothing is persisted unless kubectl renamed the context in the file first.
    """

    def __init__(
        self,
        kubectl: Kubectl,
        registry: ContextRegistry,
        namespaces: NamespaceCache,
        selection: SelectionStore,
    ):
        self.kubectl = kubectl
        self.registry = registry
        self.namespaces = namespaces
        self.selection = selection

    def rename(self, old: str, new: str, credential_file: Path) -> RenameResult | None:
        """Return ``None`` when ``new`` is empty or equal to ``old``.

        Raises :class:`runner.CommandError` when kubectl cannot rename the
        context; the stores are untouched in that case.
        """

        new = new.strip()
        if not new or new == old:
            return None
        self.kubectl.rename_context(credential_file, old, new)
        result = RenameResult(old=old, new=new, credential_file=credential_file)
        result.registry_records = self.registry.rename(old, new)
        self.registry.normalize()
        result.selection_updated = self.selection.rename_context(old, new)
        result.migrated_namespaces = self.namespaces.migrate(old, new)
        return result


def prompt_renames(
    propagator: RenamePropagator,
    credential_file: Path,
    *,
    ask: Callable[[str], str] = prompt_text,
) -> list[RenameResult]:
    """Offer a new name for every context in ``credential_file``.

    An empty answer keeps the original name.
    """

    try:
        contexts = propagator.kubectl.list_contexts(credential_file)
    except runner.CommandError as exc:
        warn(f"Unable to list contexts in {credential_file}: {exc}")
        return []
    if not contexts:
        return []

    log(f"Imported contexts found in {credential_file}:")
    for context in contexts:
        log(context)

    results = []
    for context in contexts:
        answer = ask(f"Rename context '{context}' (enter to keep): ")
        try:
            result = propagator.rename(context, answer, credential_file)
        except runner.CommandError:
            warn(
                "Failed to rename context via kubectl. "
                "You may not have permission to write the file."
            )
            continue
        if result is not None:
            log(f"Renamed {result.old} -> {result.new} in {credential_file}")
            results.append(result)
    return results
