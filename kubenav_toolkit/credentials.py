"""Managed directory of imported credential (kubeconfig) files."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from .state.namespaces import sanitize_context


class CredentialStore:
    def __init__(self, directory: Path):
        self.directory = directory

    def ensure(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def files(self) -> list[Path]:
        """Every non-hidden regular file in the managed directory, sorted by name."""

        if not self.directory.is_dir():
            return []
        return sorted(
            path
            for path in self.directory.iterdir()
            if path.is_file() and not path.name.startswith(".")
        )

    def manages(self, path: Path) -> bool:
        """Return ``True`` when ``path`` lives under the managed directory."""

        directory = self.directory.resolve()
        return directory in path.resolve().parents

    def kubeconfig_value(self) -> str | None:
        """Colon-joined ``KUBECONFIG`` value covering every managed file."""

        files = self.files()
        if not files:
            return None
        return os.pathsep.join(str(path) for path in files)

    def import_file(self, source: Path) -> Path:
        """Copy ``source`` into the managed directory, overwriting a same-named file."""

        if not source.is_file():
            raise FileNotFoundError(f"File not found: {source}")
        self.ensure()
        destination = self.directory / source.name
        if source.resolve() != destination.resolve():
            shutil.copyfile(source, destination)
        return destination

    def available_name(self, context: str) -> Path:
        """Pick ``<sanitized context>`` or the first free ``-N`` suffixed variant."""

        candidate = self.directory / sanitize_context(context)
        if not candidate.exists():
            return candidate
        index = 1
        while (self.directory / f"{candidate.name}-{index}").exists():
            index += 1
        return self.directory / f"{candidate.name}-{index}"

    def rename_for_context(self, path: Path, context: str) -> Path:
        """Rename an imported single-context file after its context."""

        if path.name == sanitize_context(context):
            return path
        destination = self.available_name(context)
        os.replace(path, destination)
        return destination
