from __future__ import annotations

import os
from pathlib import Path

import pytest

from allure_lifecycle.exceptions import ReplicationError
from allure_lifecycle.replication import copy_file, copy_tree, plan_copy
from tests.helpers.report_factory import create_report, tree_snapshot


def test_copy_tree_mirrors_structure_including_empty_dirs(tmp_path: Path) -> None:
    source = create_report(tmp_path / "allure-report")
    destination = tmp_path / "copy"

    plan = copy_tree(source, destination)

    assert tree_snapshot(destination) == tree_snapshot(source)
    assert (destination / "export").is_dir()
    assert list((destination / "export").iterdir()) == []
    assert plan.file_count == 5


def test_copy_tree_keeps_existing_destination_content(tmp_path: Path) -> None:
    source = tmp_path / "src"
    (source / "nested").mkdir(parents=True)
    (source / "nested" / "a.txt").write_text("a", encoding="utf-8")
    destination = tmp_path / "dst"
    destination.mkdir()
    (destination / "keep.txt").write_text("keep", encoding="utf-8")

    copy_tree(source, destination)

    assert (destination / "keep.txt").read_text(encoding="utf-8") == "keep"
    assert (destination / "nested" / "a.txt").read_text(encoding="utf-8") == "a"


def test_copy_tree_missing_source_raises(tmp_path: Path) -> None:
    with pytest.raises(ReplicationError) as exc_info:
        copy_tree(tmp_path / "missing", tmp_path / "dst")

    assert "does not exist" in str(exc_info.value)
    assert exc_info.value.to_dict()["error_code"] == "IO_ERROR"
    assert not (tmp_path / "dst").exists()


def test_second_copy_fails_without_touching_destination(tmp_path: Path) -> None:
    source = create_report(tmp_path / "allure-report")
    destination = tmp_path / "copy"
    copy_tree(source, destination)
    before = tree_snapshot(destination)

    # A later file in walk order changes; the refused copy must not write it.
    (source / "index.html").write_text("<html>changed</html>", encoding="utf-8")
    (source / "zzz-new.txt").write_text("new", encoding="utf-8")

    with pytest.raises(ReplicationError) as exc_info:
        copy_tree(source, destination)

    assert "already exists" in str(exc_info.value)
    assert exc_info.value.context["conflicts"] == 5
    assert tree_snapshot(destination) == before


def test_copy_tree_overwrite_replaces_files(tmp_path: Path) -> None:
    source = tmp_path / "src"
    source.mkdir()
    (source / "a.txt").write_text("new", encoding="utf-8")
    destination = tmp_path / "dst"
    destination.mkdir()
    (destination / "a.txt").write_text("old", encoding="utf-8")

    copy_tree(source, destination, overwrite=True)

    assert (destination / "a.txt").read_text(encoding="utf-8") == "new"


def test_copy_tree_destination_file_in_place_of_directory(tmp_path: Path) -> None:
    source = tmp_path / "src"
    (source / "data").mkdir(parents=True)
    destination = tmp_path / "dst"
    destination.mkdir()
    (destination / "data").write_text("not a dir", encoding="utf-8")

    with pytest.raises(ReplicationError, match="not a directory"):
        copy_tree(source, destination)


def test_copy_tree_overwrite_rejects_directory_in_place_of_file(tmp_path: Path) -> None:
    source = tmp_path / "src"
    source.mkdir()
    (source / "a.txt").write_text("new", encoding="utf-8")
    (source / "b.txt").write_text("b", encoding="utf-8")
    destination = tmp_path / "dst"
    (destination / "a.txt").mkdir(parents=True)
    before = tree_snapshot(destination)

    with pytest.raises(ReplicationError, match="is a directory"):
        copy_tree(source, destination, overwrite=True)

    assert tree_snapshot(destination) == before
    assert not (destination / "a.txt" / "a.txt").exists()


def test_copy_file_overwrite_rejects_directory_destination(tmp_path: Path) -> None:
    source = tmp_path / "a.txt"
    source.write_text("x", encoding="utf-8")
    destination = tmp_path / "existing"
    destination.mkdir()

    with pytest.raises(ReplicationError, match="is a directory"):
        copy_file(source, destination, overwrite=True)

    assert list(destination.iterdir()) == []


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_copy_tree_detects_symlink_cycle(tmp_path: Path) -> None:
    source = tmp_path / "src"
    (source / "inner").mkdir(parents=True)
    (source / "inner" / "file.txt").write_text("x", encoding="utf-8")
    try:
        os.symlink(source, source / "inner" / "loop", target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("cannot create symlinks here")

    with pytest.raises(ReplicationError, match="cycle"):
        copy_tree(source, tmp_path / "dst")

    assert not (tmp_path / "dst").exists()


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_copy_tree_follows_non_cyclic_directory_links(tmp_path: Path) -> None:
    shared = tmp_path / "shared"
    shared.mkdir()
    (shared / "s.txt").write_text("shared", encoding="utf-8")
    source = tmp_path / "src"
    source.mkdir()
    try:
        os.symlink(shared, source / "one", target_is_directory=True)
        os.symlink(shared, source / "two", target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("cannot create symlinks here")

    copy_tree(source, tmp_path / "dst")

    assert (tmp_path / "dst" / "one" / "s.txt").read_text(encoding="utf-8") == "shared"
    assert (tmp_path / "dst" / "two" / "s.txt").read_text(encoding="utf-8") == "shared"


def test_plan_copy_does_not_write(tmp_path: Path) -> None:
    source = create_report(tmp_path / "allure-report")

    plan = plan_copy(source, tmp_path / "dst")

    assert not (tmp_path / "dst").exists()
    assert plan.directories[0] == tmp_path / "dst"
    assert (source / "index.html", tmp_path / "dst" / "index.html") in plan.files


def test_copy_file_refuses_existing(tmp_path: Path) -> None:
    src = tmp_path / "a.json"
    src.write_text("{}", encoding="utf-8")
    dst = tmp_path / "b.json"
    dst.write_text("old", encoding="utf-8")

    with pytest.raises(ReplicationError, match="already exists"):
        copy_file(src, dst)
    assert dst.read_text(encoding="utf-8") == "old"

    copy_file(src, dst, overwrite=True)
    assert dst.read_text(encoding="utf-8") == "{}"


def test_copy_file_wraps_os_errors(tmp_path: Path) -> None:
    with pytest.raises(ReplicationError) as exc_info:
        copy_file(tmp_path / "missing.json", tmp_path / "out.json")

    assert isinstance(exc_info.value.original_error, OSError)
    assert exc_info.value.path == str(tmp_path / "missing.json")
