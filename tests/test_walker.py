from __future__ import annotations

import os

import pytest

from repo_hygiene.config import DEFAULT_CONFIG
from repo_hygiene.utils import iter_files, load_gitignore

DIRS = DEFAULT_CONFIG["exclude_dirs"]
EXTS = DEFAULT_CONFIG["exclude_extensions"]


def walk(root, **kwargs):
    return list(iter_files(str(root), DIRS, EXTS, **kwargs))


def test_skips_denied_directories_and_extensions(tmp_path, write):
    write("main.go", "package main\n")
    write("src/util.py", "")
    write(".git/config", "")
    write("node_modules/pkg/index.js", "")
    write("src/vendor/lib.go", "")
    write("build/out.txt", "")
    write(".idea/workspace.xml", "")
    write("assets/logo.PNG", "")
    write("dist.tar.GZ", "")
    write("docs/readme.md", "")

    files = walk(tmp_path)

    assert sorted(files) == ["docs/readme.md", "main.go", "src/util.py"]


def test_yields_each_file_once(tmp_path, write):
    for name in ["a.txt", "b/c.txt", "b/d/e.txt", "f/g.txt"]:
        write(name, "x")

    files = walk(tmp_path)

    assert len(files) == len(set(files)) == 4


def test_directory_match_is_by_name_not_substring(tmp_path, write):
    write("rebuild/keep.c", "")
    write("binaries/keep.c", "")
    write("bin/drop.c", "")

    assert sorted(walk(tmp_path)) == ["binaries/keep.c", "rebuild/keep.c"]


def test_is_lazy(tmp_path, write):
    write("a.txt", "")
    gen = iter_files(str(tmp_path), DIRS, EXTS)
    assert next(gen) == "a.txt"
    with pytest.raises(StopIteration):
        next(gen)


def test_extra_excludes_and_gitignore(tmp_path, write):
    write(".gitignore", "*.log\n")
    write("keep.py", "")
    write("debug.log", "")
    write("generated/api.py", "")

    assert sorted(walk(tmp_path, excludes=["generated/"])) == [".gitignore", "debug.log", "keep.py"]
    assert sorted(walk(tmp_path, ignore=load_gitignore(str(tmp_path)))) == [
        ".gitignore",
        "generated/api.py",
        "keep.py",
    ]


def test_traversal_error_aborts(tmp_path):
    with pytest.raises(FileNotFoundError):
        list(iter_files(str(tmp_path / "missing"), DIRS, EXTS))


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="no named pipes on this platform")
def test_skips_fifos(tmp_path, write):
    write("a.py", "")
    os.mkfifo(tmp_path / "pipe")
    assert walk(tmp_path) == ["a.py"]


def test_dangling_symlink_is_still_yielded(tmp_path, write):
    write("a.py", "")
    (tmp_path / "dangling").symlink_to(tmp_path / "gone.py")
    assert walk(tmp_path) == ["a.py", "dangling"]
