"""Operator-facing output and prompt helpers."""

from __future__ import annotations

import sys


def log(message: str, *, dry_run: bool = False) -> None:
    prefix = "[DRY-RUN] " if dry_run else ""
    print(f"{prefix}{message}", flush=True)


def warn(message: str) -> None:
    print(message, file=sys.stderr, flush=True)


def prompt_text(message: str) -> str:
    """Read one line from the operator; EOF counts as an empty answer."""

    try:
        reply = input(message)
    except EOFError:
        return ""
    return reply.replace("\r", "").strip()


def confirm(message: str, *, assume_yes: bool = False) -> bool:
    if assume_yes:
        return True
    return prompt_text(f"{message} [y/N]: ").lower() in {"y", "yes"}


def is_interactive() -> bool:
    return sys.stdin.isatty()
