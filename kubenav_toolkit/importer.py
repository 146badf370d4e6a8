"""Import a credential file into the managed directory and register it."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from . import runner
from .console import log, prompt_text
from .credentials import CredentialStore
from .kubectl import Kubectl
from .rename import RenamePropagator, RenameResult, prompt_renames
from .state import ContextRegistry


@dataclass(slots=True)
class ImportResult:
    credential_file: Path
    contexts: list[str]
    renames: list[RenameResult] = field(default_factory=list)


def import_credential_file(
    source: Path,
    *,
    store: CredentialStore,
    registry: ContextRegistry,
    kubectl: Kubectl,
    propagator: RenamePropagator | None = None,
    ask: Callable[[str], str] = prompt_text,
) -> ImportResult:
    """Copy ``source`` in, name single-context files after their context, register it.

    When ``propagator`` is given the operator is offered a rename for each
    imported context.
    """

    destination = store.import_file(source.expanduser())
    try:
        contexts = kubectl.list_contexts(destination)
    except runner.CommandError:
        contexts = []
    if len(contexts) == 1:
        destination = store.rename_for_context(destination, contexts[0])
    log(f"Imported to {destination}")

    registered = registry.add_mappings_for_file(destination)
    result = ImportResult(credential_file=destination, contexts=registered)
    if propagator is not None:
        result.renames = prompt_renames(propagator, destination, ask=ask)
        if result.renames:
            result.contexts = registry.contexts_for_file(destination)
    return result
