from __future__ import annotations

from pathlib import Path

import pytest

from kubenav_toolkit.importer import import_credential_file
from kubenav_toolkit.rename import RenamePropagator


def _source(tmp_path: Path, kubectl, name: str, *contexts: str) -> Path:
    return kubectl.define(tmp_path / "downloads" / name, *contexts)


@pytest.fixture
def run_import(store, registry, kubectl):
    def runner(source: Path, **kwargs):
        return import_credential_file(
            source, store=store, registry=registry, kubectl=kubectl, **kwargs
        )

    return runner


def _mirror(kubectl, source: Path, destination: Path) -> None:
    kubectl.contexts[str(destination)] = list(kubectl.contexts[str(source)])


def test_single_context_file_is_named_after_context(
    tmp_path: Path, store, registry, kubectl, run_import
) -> None:
    source = _source(tmp_path, kubectl, "download.yaml", "arn:aws:eks:cluster/prod")
    kubectl.contexts[str(store.directory / "download.yaml")] = ["arn:aws:eks:cluster/prod"]
    kubectl.contexts[str(store.directory / "arn_aws_eks_cluster_prod")] = [
        "arn:aws:eks:cluster/prod"
    ]

    result = run_import(source)

    assert result.credential_file == store.directory / "arn_aws_eks_cluster_prod"
    assert result.credential_file.is_file()
    assert not (store.directory / "download.yaml").exists()
    assert result.contexts == ["arn:aws:eks:cluster/prod"]
    assert registry.lookup("arn:aws:eks:cluster/prod") == result.credential_file
    assert source.exists()


def test_single_context_name_collision_gets_suffix(
    tmp_path: Path, store, kubectl, run_import
) -> None:
    (store.directory / "prod").write_text("existing\n", encoding="utf-8")
    source = _source(tmp_path, kubectl, "config", "prod")
    kubectl.contexts[str(store.directory / "config")] = ["prod"]
    kubectl.contexts[str(store.directory / "prod-1")] = ["prod"]

    result = run_import(source)

    assert result.credential_file == store.directory / "prod-1"
    assert (store.directory / "prod").read_text(encoding="utf-8") == "existing\n"


def test_multi_context_file_keeps_its_name(
    tmp_path: Path, store, registry, kubectl, run_import, capsys
) -> None:
    source = _source(tmp_path, kubectl, "team.yaml", "dev", "staging")
    _mirror(kubectl, source, store.directory / "team.yaml")

    result = run_import(source)

    assert result.credential_file == store.directory / "team.yaml"
    assert sorted(result.contexts) == ["dev", "staging"]
    assert registry.lookup("staging") == result.credential_file
    assert f"Imported to {result.credential_file}" in capsys.readouterr().out


def test_missing_source_raises(tmp_path: Path, run_import) -> None:
    with pytest.raises(FileNotFoundError, match="File not found"):
        run_import(tmp_path / "nope.yaml")


def test_import_offers_renames(
    tmp_path: Path, store, registry, namespaces, selection, kubectl, run_import
) -> None:
    source = _source(tmp_path, kubectl, "team.yaml", "gke_project_zone_cluster", "dev")
    _mirror(kubectl, source, store.directory / "team.yaml")
    propagator = RenamePropagator(kubectl, registry, namespaces, selection)
    answers = iter(["gke", ""])

    result = run_import(source, propagator=propagator, ask=lambda _q: next(answers))

    assert [(r.old, r.new) for r in result.renames] == [("gke_project_zone_cluster", "gke")]
    assert sorted(result.contexts) == ["dev", "gke"]
    assert registry.lookup("gke") == result.credential_file
    assert registry.lookup("gke_project_zone_cluster") is None
