"""Utility helpers for running subprocesses consistently."""

from __future__ import annotations

import os
import shlex
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

TIMEOUT_RETURNCODE = 124
MISSING_RETURNCODE = 127


@dataclass(slots=True)
class CommandError(RuntimeError):
    """Raised when a subprocess exits with a non-zero status."""

    command: Sequence[str]
    returncode: int
    stderr: str | None = None

    def __str__(self) -> str:
        message = f"{format_command(self.command)} exited with status {self.returncode}"
        if self.stderr:
            stderr = self.stderr.strip()
            if stderr:
                message = f"{message}\n{stderr}"
        return message


def format_command(command: Sequence[str]) -> str:
    """Render a subprocess command for display or logging."""

    return " ".join(shlex.quote(part) for part in command)


def _merge_env(env: Mapping[str, str] | None) -> Mapping[str, str] | None:
    if env is None:
        return None
    merged = os.environ.copy()
    merged.update(env)
    return merged


def capture(
    command: Sequence[str],
    *,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> str:
    """Run ``command`` and return its stdout.

    Non-zero exits, a missing binary and an expired ``timeout`` all surface as
    :class:`CommandError` so callers only handle one failure type.
    """

    try:
        result = subprocess.run(
            list(command),
            env=_merge_env(env),
            check=False,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise CommandError(command, MISSING_RETURNCODE, stderr=str(exc)) from exc
    except subprocess.TimeoutExpired as exc:
        raise CommandError(
            command, TIMEOUT_RETURNCODE, stderr=f"timed out after {timeout}s"
        ) from exc
    if result.returncode != 0:
        raise CommandError(command, result.returncode, stderr=result.stderr)
    return result.stdout or ""
