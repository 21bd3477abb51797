"""Shared pytest fixtures for gitobj tests."""

import os
import shutil
import tempfile
import zlib
from pathlib import Path

import pytest

from gitobj.core.config import Config
from gitobj.core.repository import Repository


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Keep the user's global config and GITOBJ_* variables out of tests."""
    home = tmp_path_factory.mktemp('home')
    monkeypatch.setattr(Config, 'GLOBAL_CONFIG_PATH', home / '.gitobjconfig')
    for key in list(os.environ):
        if key.startswith('GITOBJ_'):
            monkeypatch.delenv(key)
    return home


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def repo(temp_dir):
    """Create an initialized repository."""
    repo = Repository(str(temp_dir))
    repo.init()
    return repo


@pytest.fixture
def working_files(repo):
    """Create sample file structure in repository."""
    file1 = repo.work_tree / "test1.txt"
    file2 = repo.work_tree / "test2.txt"

    (repo.work_tree / "subdir").mkdir()
    file3 = repo.work_tree / "subdir" / "test3.txt"

    file1.write_text("Content 1")
    file2.write_text("Content 2")
    file3.write_text("Content 3")

    return {
        'file1': file1,
        'file2': file2,
        'file3': file3
    }


def write_raw_object(repo, hash, raw, compress=True):
    """
    Place arbitrary bytes at an object path, bypassing the store.

    Args:
        repo: Repository instance
        hash: 40-character hex hash naming the file
        raw: Decompressed object bytes (or file bytes if compress is False)
        compress: Whether to zlib-compress raw first

    Returns:
        Path: Object file path
    """
    path = repo.object_path(hash)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(zlib.compress(raw) if compress else raw)
    return path


@pytest.fixture
def raw_object(repo):
    """Function placing arbitrary bytes at an object path of ``repo``."""
    def place(hash, raw, compress=True):
        return write_raw_object(repo, hash, raw, compress)
    return place
