"""Ensure ``python -m kubenav_toolkit`` runs the CLI end to end."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]


def _run(tmp_path: Path, *args: str) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    env["KUBENAV_HOME"] = str(tmp_path / "home")
    env.pop("KUBENAV_TIMEOUT", None)
    return subprocess.run(
        [sys.executable, "-m", "kubenav_toolkit", *args],
        check=False,
        capture_output=True,
        text=True,
        cwd=REPO_ROOT,
        env=env,
    )


def test_module_reads_saved_selection(tmp_path: Path) -> None:
    """The saved selection file is parsed as data, not executed."""

    home = tmp_path / "home"
    home.mkdir()
    (home / "current").write_text(
        "KUBECONFIG=/a/f2\nCONTEXT=prod\nNAMESPACE=default\n", encoding="utf-8"
    )

    result = _run(tmp_path, "show-saved")

    assert result.returncode == 0, result.stderr
    assert result.stdout.splitlines() == [
        "KUBECONFIG=/a/f2",
        "CONTEXT=prod",
        "NAMESPACE=default",
    ]


def test_module_without_command_prints_usage(tmp_path: Path) -> None:
    result = _run(tmp_path)

    assert result.returncode == 1
    assert "usage: kubenav" in result.stdout
