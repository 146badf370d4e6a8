"""Interactive fuzzy selection through ``fzf``."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence

from . import runner

NO_MATCH_RETURNCODES = {1, 130}


class FzfSelector:
    """Present items through fzf.

    ``choose`` returns ``None`` when the operator picked nothing (escape,
    interrupt or no match), which callers must treat differently from an
    empty list of items.
    """

    def __init__(self, binary: str = "fzf"):
        self.binary = binary

    def command(self, prompt: str, *, multi: bool = False) -> list[str]:
        command = [self.binary, f"--prompt={prompt}", "--height=10", "--border"]
        if multi:
            command.append("--multi")
        return command

    def choose(
        self, items: Sequence[str], *, prompt: str, multi: bool = False
    ) -> list[str] | None:
        command = self.command(prompt, multi=multi)
        try:
            result = subprocess.run(
                command,
                input="\n".join(items) + "\n",
                stdout=subprocess.PIPE,
                check=False,
                text=True,
            )
        except FileNotFoundError as exc:
            raise runner.CommandError(
                command, runner.MISSING_RETURNCODE, stderr=str(exc)
            ) from exc
        if result.returncode in NO_MATCH_RETURNCODES:
            return None
        if result.returncode != 0:
            raise runner.CommandError(command, result.returncode)
        chosen = [line for line in (result.stdout or "").splitlines() if line]
        return chosen or None
