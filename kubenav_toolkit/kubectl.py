"""Thin wrapper around the ``kubectl`` commands the toolkit relies on."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

from . import runner
from .config import DEFAULT_TIMEOUT_SECS


def _split_lines(output: str) -> list[str]:
    return [line.strip("\r").strip() for line in output.splitlines() if line.strip()]


class Kubectl:
    """Run kubectl against individual credential files.

    Every call is bounded by ``timeout`` seconds and raises
    :class:`runner.CommandError` when kubectl fails, is missing or hangs.
    """

    def __init__(self, binary: str = "kubectl", *, timeout: int = DEFAULT_TIMEOUT_SECS):
        self.binary = binary
        self.timeout = timeout

    def _command(self, args: Sequence[str], kubeconfig: Path | None) -> list[str]:
        command = [self.binary]
        if kubeconfig is not None:
            command.append(f"--kubeconfig={kubeconfig}")
        command.extend(args)
        return command

    def _run(
        self,
        args: Sequence[str],
        *,
        kubeconfig: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> str:
        return runner.capture(self._command(args, kubeconfig), env=env, timeout=self.timeout)

    def list_contexts(self, kubeconfig: Path) -> list[str]:
        output = self._run(["config", "get-contexts", "-o", "name"], kubeconfig=kubeconfig)
        return _split_lines(output)

    def delete_context(self, kubeconfig: Path, context: str) -> None:
        self._run(["config", "delete-context", context], kubeconfig=kubeconfig)

    def rename_context(self, kubeconfig: Path, old: str, new: str) -> None:
        self._run(["config", "rename-context", old, new], kubeconfig=kubeconfig)

    def use_context(self, kubeconfig: Path, context: str) -> None:
        self._run(["config", "use-context", context], kubeconfig=kubeconfig)

    def set_namespace(
        self,
        namespace: str,
        *,
        kubeconfig: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._run(
            ["config", "set-context", "--current", f"--namespace={namespace}"],
            kubeconfig=kubeconfig,
            env=env,
        )

    def current_context(
        self, *, kubeconfig: Path | None = None, env: Mapping[str, str] | None = None
    ) -> str:
        return self._run(["config", "current-context"], kubeconfig=kubeconfig, env=env).strip()

    def current_namespace(
        self, *, kubeconfig: Path | None = None, env: Mapping[str, str] | None = None
    ) -> str:
        output = self._run(
            ["config", "view", "--minify", "--output", "jsonpath={..namespace}"],
            kubeconfig=kubeconfig,
            env=env,
        )
        return output.strip()

    def can_list_namespaces(
        self, *, kubeconfig: Path | None = None, env: Mapping[str, str] | None = None
    ) -> bool:
        try:
            self._run(["auth", "can-i", "list", "namespaces"], kubeconfig=kubeconfig, env=env)
        except runner.CommandError:
            return False
        return True

    def list_namespaces(
        self, *, kubeconfig: Path | None = None, env: Mapping[str, str] | None = None
    ) -> list[str]:
        output = self._run(
            ["get", "namespaces", "-o", "jsonpath={.items[*].metadata.name}"],
            kubeconfig=kubeconfig,
            env=env,
        )
        return output.split()
