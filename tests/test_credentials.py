from __future__ import annotations

from pathlib import Path

from kubenav_toolkit.credentials import CredentialStore


def test_files_skip_hidden_entries(store: CredentialStore) -> None:
    for name in ("b", "a", ".DS_Store", ".a.swp"):
        (store.directory / name).write_text("apiVersion: v1\n", encoding="utf-8")
    (store.directory / "nested").mkdir()

    assert store.files() == [store.directory / "a", store.directory / "b"]
    assert store.kubeconfig_value() == f"{store.directory / 'a'}:{store.directory / 'b'}"


def test_files_of_missing_directory(tmp_path: Path) -> None:
    store = CredentialStore(tmp_path / "absent")

    assert store.files() == []
    assert store.kubeconfig_value() is None


def test_manages_only_paths_under_directory(tmp_path: Path, store: CredentialStore) -> None:
    assert store.manages(store.directory / "f1")
    assert not store.manages(tmp_path / "elsewhere" / "f1")
