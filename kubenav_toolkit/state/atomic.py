"""Crash-safe file replacement shared by the persisted stores."""

from __future__ import annotations

import os
import shutil
import tempfile
from collections.abc import Iterable
from pathlib import Path


def write_lines(path: Path, lines: Iterable[str]) -> None:
    """Replace ``path`` with ``lines`` so readers never see a partial file.

    The content goes to a temporary file in the same directory which is then
    moved over the target with :func:`os.replace`.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            for line in lines:
                handle.write(f"{line}\n")
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def copy_file(source: Path, destination: Path) -> None:
    """Copy ``source`` over ``destination`` atomically.

    The copy gets a fresh mtime, so it records when the copy was taken.
    """

    destination.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent
    )
    os.close(fd)
    try:
        shutil.copyfile(source, tmp_name)
        os.replace(tmp_name, destination)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def read_lines(path: Path) -> list[str]:
    """Return the lines of ``path`` without newlines, or ``[]`` when it is missing."""

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    return [line.rstrip("\r") for line in text.splitlines()]
