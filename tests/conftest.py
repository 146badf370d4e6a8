"""Test fixtures and configuration helpers."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]

# Ensure the project root is importable so ``sitecustomize`` is discovered by
# subprocesses spawned in tests.  ``sys.path`` adjustments affect the current
# interpreter while the ``PYTHONPATH`` export keeps child interpreters aligned.
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from kubenav_toolkit import config  # noqa: E402
from kubenav_toolkit.credentials import CredentialStore  # noqa: E402
from kubenav_toolkit.state import (  # noqa: E402
    ContextRegistry,
    NamespaceCache,
    SelectionStore,
)
from tests.helpers.fake_kubectl import FakeKubectl  # noqa: E402


def _export_pythonpath(monkeypatch: pytest.MonkeyPatch) -> None:
    path_str = str(ROOT)
    pythonpath = os.environ.get("PYTHONPATH")
    if not pythonpath:
        monkeypatch.setenv("PYTHONPATH", path_str)
        return
    parts = pythonpath.split(os.pathsep)
    if path_str in parts:
        return
    parts.insert(0, path_str)
    monkeypatch.setenv("PYTHONPATH", os.pathsep.join(parts))


@pytest.fixture(autouse=True)
def enable_subprocess_coverage(monkeypatch: pytest.MonkeyPatch) -> None:
    """Propagate coverage configuration to subprocesses under test."""

    monkeypatch.setenv("COVERAGE_PROCESS_START", str(ROOT / ".coveragerc"))
    _export_pythonpath(monkeypatch)


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> config.Settings:
    """Point ``KUBENAV_HOME`` at a scratch directory for the test."""

    home = tmp_path / "kubenav"
    monkeypatch.setenv(config.ENV_HOME, str(home))
    for name in (config.ENV_KUBECTL, config.ENV_FZF, config.ENV_TIMEOUT):
        monkeypatch.delenv(name, raising=False)
    return config.Settings.for_home(home)


@pytest.fixture
def kubectl() -> FakeKubectl:
    return FakeKubectl()


@pytest.fixture
def store(settings: config.Settings) -> CredentialStore:
    store = CredentialStore(settings.kubeconfig_dir)
    store.ensure()
    return store


@pytest.fixture
def registry(settings: config.Settings, kubectl: FakeKubectl) -> ContextRegistry:
    return ContextRegistry(settings.registry_path, kubectl)


@pytest.fixture
def namespaces(settings: config.Settings) -> NamespaceCache:
    return NamespaceCache(settings.namespace_dir)


@pytest.fixture
def selection(settings: config.Settings) -> SelectionStore:
    return SelectionStore(settings.selection_path)
