"""Active credential file tracking for one kubenav invocation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from . import runner
from .console import warn
from .credentials import CredentialStore
from .errors import ContextNotFoundError, NoSelectionError
from .kubectl import Kubectl
from .state import ContextRegistry, SelectionRecord, SelectionStore


@dataclass(slots=True)
class Status:
    credential_file: str | None
    context: str | None
    namespace: str | None
    saved: bool = False

    def lines(self) -> list[str]:
        if self.saved:
            return [
                f"Saved KUBECONFIG: {self.credential_file or '(not set)'}",
                f"Saved context: {self.context or '-'}",
                f"Saved namespace: {self.namespace or '-'}",
            ]
        return [
            f"Current KUBECONFIG: {self.credential_file or '(not set)'}",
            f"Current context: {self.context or '-'}",
            f"Current namespace: {self.namespace or '-'}",
        ]


class Session:
    """Holds the credential file kubectl should use instead of a global variable.

    With no active file, kubectl sees every managed credential file joined into
    one ``KUBECONFIG`` value.
    """

    def __init__(
        self,
        *,
        kubectl: Kubectl,
        store: CredentialStore,
        registry: ContextRegistry,
        selection: SelectionStore,
        active_credential_file: Path | None = None,
    ):
        self.kubectl = kubectl
        self.store = store
        self.registry = registry
        self.selection = selection
        self.active_credential_file = active_credential_file

    def kubeconfig_env(self) -> dict[str, str]:
        if self.active_credential_file is not None:
            return {"KUBECONFIG": str(self.active_credential_file)}
        value = self.store.kubeconfig_value()
        return {"KUBECONFIG": value} if value else {}

    def deactivate(self, credential_file: Path | None = None) -> bool:
        """Drop the active file, or only when it is ``credential_file``."""

        if self.active_credential_file is None:
            return False
        if credential_file is not None and self.active_credential_file != credential_file:
            return False
        self.active_credential_file = None
        return True

    def restore(self) -> SelectionRecord | None:
        """Re-activate the saved selection when its credential file still exists."""

        record = self.selection.load()
        if record is None or not record.credential_file:
            return None
        credential_file = Path(record.credential_file)
        if not credential_file.is_file():
            return None
        self.active_credential_file = credential_file
        try:
            if record.context:
                self.kubectl.use_context(credential_file, record.context)
            if record.namespace:
                self.kubectl.set_namespace(record.namespace, kubeconfig=credential_file)
        except runner.CommandError as exc:
            warn(f"Unable to restore saved selection: {exc}")
        return record

    def current_context(self) -> str | None:
        env = self.kubeconfig_env()
        if not env:
            return None
        try:
            return self.kubectl.current_context(env=env) or None
        except runner.CommandError:
            return None

    def resolve_context(self, context: str | None = None) -> str:
        """Pick an explicit context, else the saved one, else kubectl's current one."""

        if context:
            return context
        record = self.selection.load()
        if record is not None and record.context:
            return record.context
        current = self.current_context()
        if current:
            return current
        raise NoSelectionError("No context selected; pass --context or select one first.")

    def select_context(self, context: str) -> SelectionRecord:
        credential_file = self.registry.lookup(context)
        if credential_file is None:
            raise ContextNotFoundError(context)
        self.kubectl.use_context(credential_file, context)
        self.active_credential_file = credential_file
        try:
            namespace = self.kubectl.current_namespace(kubeconfig=credential_file)
        except runner.CommandError:
            namespace = ""
        return self.selection.save(credential_file, context, namespace)

    def select_namespace(self, namespace: str) -> SelectionRecord | None:
        self.kubectl.set_namespace(namespace, env=self.kubeconfig_env())
        if self.active_credential_file is None:
            return None
        try:
            context = self.kubectl.current_context(kubeconfig=self.active_credential_file)
        except runner.CommandError:
            context = ""
        return self.selection.save(self.active_credential_file, context, namespace)

    def status(self) -> Status:
        if self.active_credential_file is not None:
            credential_file = self.active_credential_file
            try:
                context = self.kubectl.current_context(kubeconfig=credential_file)
            except runner.CommandError:
                context = None
            try:
                namespace = self.kubectl.current_namespace(kubeconfig=credential_file)
            except runner.CommandError:
                namespace = None
            return Status(str(credential_file), context, namespace or "default")
        record = self.selection.load()
        if record is not None:
            return Status(record.credential_file, record.context, record.namespace, saved=True)
        return Status(None, None, None)
