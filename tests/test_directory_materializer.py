from __future__ import annotations

import os
from pathlib import Path

import pytest

from fileext.config import Settings
from fileext.directories import materializer
from fileext.errors import (
    AlreadyExistsError,
    DeletionError,
    NotFoundError,
    RejectedPathError,
    SubprocessFailureError,
)

posix_only = pytest.mark.skipif(os.name == "nt", reason="uses POSIX shell tools")


def test_create_all_on_fresh_tree(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    created = materializer.create_all(os.path.join("x", "y", "z"))

    assert created == ["x", os.path.join("x", "y"), os.path.join("x", "y", "z")]
    assert (tmp_path / "x" / "y" / "z").is_dir()
    assert materializer.directory_exists(os.path.join("x", "y"))


def test_create_all_twice_fails(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    materializer.create_all(os.path.join("x", "y", "z"))

    with pytest.raises(AlreadyExistsError) as excinfo:
        materializer.create_all(os.path.join("x", "y", "z"))
    assert excinfo.value.path == "x"
    assert excinfo.value.reason == "AlreadyExists"


def test_create_all_with_exist_ok(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    materializer.create_all(os.path.join("x", "y"))

    assert materializer.create_all(os.path.join("x", "y"), exist_ok=True) == []
    assert materializer.create_all(os.path.join("x", "y", "w"), exist_ok=True) == [os.path.join("x", "y", "w")]
    assert materializer.create_all(tmp_path / "abs" / "dir", exist_ok=True) == [
        str(tmp_path / "abs"),
        str(tmp_path / "abs" / "dir"),
    ]


def test_partial_creation_is_kept(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "b").write_text("not a directory", encoding="utf-8")

    with pytest.raises(AlreadyExistsError) as excinfo:
        materializer.create_all(os.path.join("a", "b", "c"), exist_ok=True)
    assert excinfo.value.path == os.path.join("a", "b")
    assert (tmp_path / "a").is_dir()


def test_create_all_rejects_unsafe_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    with pytest.raises(RejectedPathError):
        materializer.create_all("x|y")
    assert list(tmp_path.iterdir()) == []


def test_delete_all_native(tmp_path: Path) -> None:
    root = tmp_path / "tree"
    (root / "nested").mkdir(parents=True)
    (root / "nested" / "file.txt").write_text("data", encoding="utf-8")

    materializer.delete_all(root, settings=Settings(delete_strategy="native"))

    assert not root.exists()
    with pytest.raises(NotFoundError):
        materializer.delete_all(root, settings=Settings(delete_strategy="native"))


@posix_only
def test_delete_all_with_host_tool(tmp_path: Path) -> None:
    root = tmp_path / "tree"
    (root / "nested").mkdir(parents=True)

    materializer.delete_all(root, settings=Settings(delete_strategy="subprocess"))

    assert not root.exists()


@posix_only
def test_delete_all_reports_tool_output(tmp_path: Path) -> None:
    root = tmp_path / "tree"
    root.mkdir()
    settings = Settings(
        delete_strategy="subprocess",
        posix_delete_command=["sh", "-c", "echo oops; echo bad >&2; exit 3", "rm"],
    )

    with pytest.raises(SubprocessFailureError) as excinfo:
        materializer.delete_all(root, settings=settings)

    assert excinfo.value.return_code == 3
    assert excinfo.value.stdout == "oops\n"
    assert excinfo.value.stderr == "bad\n"
    assert "bad" in str(excinfo.value)
    assert root.exists()


def test_delete_all_rejects_unsafe_path() -> None:
    with pytest.raises(RejectedPathError):
        materializer.delete_all("/tmp/x; rm -rf ~")


@posix_only
def test_host_tool_deletes_directory_named_like_an_option(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "-v" / "nested").mkdir(parents=True)

    materializer.delete_all("-v", settings=Settings(delete_strategy="subprocess"))

    assert not (tmp_path / "-v").exists()


@posix_only
def test_host_tool_reporting_success_without_deleting_fails(tmp_path: Path) -> None:
    root = tmp_path / "tree"
    root.mkdir()
    settings = Settings(delete_strategy="subprocess", posix_delete_command=["true"])

    with pytest.raises(DeletionError):
        materializer.delete_all(root, settings=settings)
    assert root.exists()


@pytest.mark.parametrize("strategy", ["native", pytest.param("subprocess", marks=posix_only)])
def test_delete_all_refuses_regular_files(tmp_path: Path, strategy: str) -> None:
    plain = tmp_path / "plain.txt"
    plain.write_text("data", encoding="utf-8")

    with pytest.raises(DeletionError) as excinfo:
        materializer.delete_all(plain, settings=Settings(delete_strategy=strategy))

    assert excinfo.value.path == str(plain)
    assert plain.exists()


@posix_only
@pytest.mark.parametrize("strategy", ["native", "subprocess"])
def test_delete_all_refuses_symlinks(tmp_path: Path, strategy: str) -> None:
    target = tmp_path / "target"
    (target / "kept").mkdir(parents=True)
    link = tmp_path / "link"
    os.symlink(target, link)

    with pytest.raises(DeletionError):
        materializer.delete_all(link, settings=Settings(delete_strategy=strategy))

    assert link.is_symlink()
    assert (target / "kept").is_dir()
