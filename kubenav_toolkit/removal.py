"""Remove a context together with its credential file entry, cache and selection.

The workflow is a fixed sequence of named states. Each step after
confirmation records failures and moves on so that one failed mutation never
leaves the remaining stores pointing at a context that is gone.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from . import runner
from .console import confirm, log, warn
from .credentials import CredentialStore
from .kubectl import Kubectl
from .session import Session
from .state import ContextRegistry, NamespaceCache, SelectionStore

REQUESTED = "requested"
CONFIRMED = "confirmed"
FILE_UPDATED = "file_updated"
MAP_UPDATED = "map_updated"
CACHE_CLEARED = "cache_cleared"
SELECTION_CLEARED = "selection_cleared"
DONE = "done"
ABORTED = "aborted"

STATE_ORDER = [
    REQUESTED,
    CONFIRMED,
    FILE_UPDATED,
    MAP_UPDATED,
    CACHE_CLEARED,
    SELECTION_CLEARED,
    DONE,
]


@dataclass(slots=True)
class RemovalPlan:
    context: str
    credential_file: Path
    cache_path: Path
    managed: bool

    def lines(self) -> list[str]:
        return [
            f"Planned actions for context: {self.context}",
            f" - kubeconfig: {self.credential_file}",
            " - will delete context entry from kubeconfig",
            f" - will remove namespace cache: {self.cache_path}",
            " - will clear saved selection if it references this context",
        ]


@dataclass(slots=True)
class ContextRemoval:
    """Drive one context removal from ``requested`` to ``done`` or ``aborted``."""

    context: str
    kubectl: Kubectl
    store: CredentialStore
    registry: ContextRegistry
    namespaces: NamespaceCache
    selection: SelectionStore
    session: Session | None = None
    dry_run: bool = False
    assume_yes: bool = False
    ask_confirmation: Callable[[str], bool] = field(default=confirm)
    state: str = REQUESTED
    history: list[str] = field(default_factory=list)
    plan: RemovalPlan | None = None
    abort_reason: str | None = None
    problems: list[str] = field(default_factory=list)
    file_deleted: bool = False

    @property
    def completed(self) -> bool:
        return self.state == DONE

    def _enter(self, state: str) -> None:
        self.state = state
        self.history.append(state)

    def _abort(self, reason: str) -> str:
        self.abort_reason = reason
        self._enter(ABORTED)
        return self.state

    def _problem(self, message: str) -> None:
        self.problems.append(message)
        warn(message)

    def run(self) -> str:
        """Run every transition; a dry run stops once the plan is printed."""

        self._enter(REQUESTED)
        credential_file = self.registry.lookup(self.context)
        if credential_file is None:
            return self._abort(f"Context {self.context} not found in context map; aborting.")
        self.plan = RemovalPlan(
            context=self.context,
            credential_file=credential_file,
            cache_path=self.namespaces.path_for(self.context),
            managed=self.store.manages(credential_file),
        )
        for line in self.plan.lines():
            log(line)
        if self.dry_run:
            log("Dry run; no changes will be made.")
            return self.state

        if not self.assume_yes and not self.ask_confirmation("Proceed with deletion?"):
            return self._abort("Aborted.")
        self._enter(CONFIRMED)

        for step in (
            self._update_file,
            self._update_map,
            self._clear_cache,
            self._clear_selection,
        ):
            step()
        self._enter(DONE)
        return self.state

    def _update_file(self) -> None:
        plan = self.plan
        try:
            self.kubectl.delete_context(plan.credential_file, plan.context)
        except runner.CommandError as exc:
            self._problem(
                f"Failed to delete context {plan.context} from {plan.credential_file} "
                f"(continuing with cleanup): {exc}"
            )
        else:
            log(f"Deleted context {plan.context} from {plan.credential_file}")
        self._enter(FILE_UPDATED)

    def _remaining_contexts(self) -> list[str] | None:
        """Contexts still defined by the file; ``None`` when kubectl cannot tell."""

        credential_file = self.plan.credential_file
        if not credential_file.exists():
            return []
        try:
            return self.kubectl.list_contexts(credential_file)
        except runner.CommandError as exc:
            self._problem(f"Unable to list remaining contexts in {credential_file}: {exc}")
            return None

    def _update_map(self) -> None:
        plan = self.plan
        remaining = self._remaining_contexts()
        if remaining == [] and plan.managed:
            try:
                plan.credential_file.unlink(missing_ok=True)
            except OSError as exc:
                self._problem(f"Failed to remove {plan.credential_file}: {exc}")
            else:
                self.file_deleted = True
                log(f"Removed empty kubeconfig file {plan.credential_file}")
        try:
            if remaining == [] and plan.managed:
                self.registry.remove_by_file(plan.credential_file)
            else:
                if remaining == [] and not plan.managed:
                    log(
                        f"Note: kubeconfig {plan.credential_file} is outside "
                        f"{self.store.directory}; not removing file automatically"
                    )
                self.registry.remove_by_name(plan.context)
            self.registry.normalize()
        except OSError as exc:
            self._problem(f"Failed to update context map: {exc}")
        self._enter(MAP_UPDATED)

    def _clear_cache(self) -> None:
        try:
            if self.namespaces.delete(self.context):
                log(f"Removed namespace cache {self.plan.cache_path}")
        except OSError as exc:
            self._problem(f"Failed to remove namespace cache {self.plan.cache_path}: {exc}")
        self._enter(CACHE_CLEARED)

    def _clear_selection(self) -> None:
        try:
            if self.selection.references(self.context):
                self.selection.clear()
                log(
                    f"Cleared saved selection {self.selection.path} "
                    f"(was using {self.context})"
                )
                if self.session is not None:
                    self.session.deactivate()
        except OSError as exc:
            self._problem(f"Failed to clear saved selection: {exc}")
        if self.session is not None and self.session.deactivate(self.plan.credential_file):
            log("Unset active kubeconfig (was pointing to removed file)")
        self._enter(SELECTION_CLEARED)
