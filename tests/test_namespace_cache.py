from __future__ import annotations

import pytest

from kubenav_toolkit.state import NamespaceCache, sanitize_context


def test_sanitize_context_replaces_unsafe_characters() -> None:
    assert sanitize_context("arn:aws:eks:us-east-1:123:cluster/prod") == (
        "arn_aws_eks_us-east-1_123_cluster_prod"
    )
    assert sanitize_context("kind-dev.local_1") == "kind-dev.local_1"


def test_add_is_idempotent(namespaces: NamespaceCache) -> None:
    assert namespaces.add("prod", "payments") is True
    assert namespaces.add("prod", "payments") is False

    assert namespaces.list("prod") == ["payments"]
    assert namespaces.path_for("prod").read_text(encoding="utf-8") == "payments\n"


def test_add_rejects_empty_name(namespaces: NamespaceCache) -> None:
    with pytest.raises(ValueError, match="No namespace provided"):
        namespaces.add("prod", "")


@pytest.mark.parametrize("name", ["   ", "#ops"])
def test_add_rejects_names_list_would_hide(namespaces: NamespaceCache, name: str) -> None:
    with pytest.raises(ValueError):
        namespaces.add("prod", name)

    assert not namespaces.path_for("prod").exists()


def test_list_skips_comments_and_blank_lines(namespaces: NamespaceCache) -> None:
    path = namespaces.path_for("team/a")
    path.parent.mkdir(parents=True)
    path.write_text("# cached for team a\nfrontend\n\n   \nbackend\n", encoding="utf-8")

    assert namespaces.list("team/a") == ["frontend", "backend"]


def test_list_missing_cache_is_empty(namespaces: NamespaceCache) -> None:
    assert namespaces.list("unknown") == []


def test_remove_and_remove_many(namespaces: NamespaceCache) -> None:
    for name in ("a", "b", "c", "d"):
        namespaces.add("ctx", name)

    assert namespaces.remove("ctx", "b") is True
    assert namespaces.remove("ctx", "b") is False
    assert namespaces.remove_many("ctx", ["a", "missing", "d"]) == ["a", "d"]
    assert namespaces.remove_many("ctx", ["a", "d"]) == []
    assert namespaces.list("ctx") == ["c"]


def test_remove_keeps_comment_lines(namespaces: NamespaceCache) -> None:
    path = namespaces.path_for("ctx")
    path.parent.mkdir(parents=True)
    path.write_text("# header\nkeep\ndrop\n", encoding="utf-8")

    namespaces.remove("ctx", "drop")

    assert path.read_text(encoding="utf-8") == "# header\nkeep\n"


def test_migrate_merges_into_new_cache(namespaces: NamespaceCache) -> None:
    namespaces.add("old", "a")
    namespaces.add("old", "b")
    namespaces.add("new", "b")

    moved = namespaces.migrate("old", "new")

    assert moved == ["a"]
    assert namespaces.list("new") == ["b", "a"]
    assert not namespaces.path_for("old").exists()


def test_migrate_same_sanitized_key_is_noop(namespaces: NamespaceCache) -> None:
    namespaces.add("team/a", "x")

    assert namespaces.migrate("team/a", "team:a") == []
    assert namespaces.list("team_a") == ["x"]


def test_delete(namespaces: NamespaceCache) -> None:
    namespaces.add("ctx", "a")

    assert namespaces.delete("ctx") is True
    assert namespaces.delete("ctx") is False
