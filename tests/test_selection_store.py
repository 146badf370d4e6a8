from __future__ import annotations

from pathlib import Path

from kubenav_toolkit.state import SelectionRecord, SelectionStore
from kubenav_toolkit.state.selection import parse_selection


def test_save_writes_three_key_value_lines(selection: SelectionStore) -> None:
    selection.save(Path("/a/f2"), "prod", "default")

    assert selection.path.read_text(encoding="utf-8") == (
        "KUBECONFIG=/a/f2\nCONTEXT=prod\nNAMESPACE=default\n"
    )
    assert selection.load() == SelectionRecord("/a/f2", "prod", "default")


def test_load_absent_record(selection: SelectionStore) -> None:
    assert selection.load() is None


def test_save_leaves_no_temporary_files(selection: SelectionStore) -> None:
    selection.save("/a/f1", "one", "ns")
    selection.save("/a/f2", "two", "ns")

    assert sorted(path.name for path in selection.path.parent.iterdir()) == ["current"]
    assert selection.load().context == "two"


def test_load_never_evaluates_content(tmp_path: Path, selection: SelectionStore) -> None:
    marker = tmp_path / "pwned"
    selection.path.parent.mkdir(parents=True)
    selection.path.write_text(
        f"touch {marker}\n"
        "KUBECONFIG=$(touch /tmp/x)\n"
        "CONTEXT=prod=eu\n"
        "EXTRA=ignored\n"
        "NAMESPACE=\n",
        encoding="utf-8",
    )

    record = selection.load()

    assert record == SelectionRecord("$(touch /tmp/x)", "prod=eu", "")
    assert not marker.exists()


def test_parse_selection_keeps_first_duplicate_key() -> None:
    record = parse_selection(["CONTEXT=first", "CONTEXT=second"])
    assert record == SelectionRecord("", "first", "")


def test_parse_selection_without_values_is_absent() -> None:
    assert parse_selection(["KUBECONFIG=", "CONTEXT=", "garbage"]) is None


def test_rename_context_only_touches_matching_record(selection: SelectionStore) -> None:
    selection.save("/a/f2", "prod", "default")

    assert selection.rename_context("staging", "qa") is False
    assert selection.rename_context("prod", "production") is True
    assert selection.load() == SelectionRecord("/a/f2", "production", "default")


def test_clear(selection: SelectionStore) -> None:
    assert selection.clear() is False
    selection.save("/a/f2", "prod", "default")
    assert selection.references("prod")
    assert selection.clear() is True
    assert selection.load() is None
