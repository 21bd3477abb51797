"""Tree entry, tree parsing and tree building tests."""

import io
import os
import stat

import pytest

from gitobj.core.errors import CorruptObjectError, UnknownModeError
from gitobj.core.hash import hash_file, hash_object
from gitobj.core.objects import ObjectKind
from gitobj.core.tree import (
    TreeEntry,
    TreeEntryMode,
    iterate_tree,
    serialize_tree,
)

HASH_A = b'\xaa' * 20
HASH_B = b'\xbb' * 20
HASH_C = b'\xcc' * 20
EMPTY_TREE = '4b825dc642cb6eb9a060e54bf8d69288fbee4904'


def file_entry(name, hash=HASH_A):
    return TreeEntry(TreeEntryMode.NORMAL_FILE, name, hash)


def dir_entry(name, hash=HASH_B):
    return TreeEntry(TreeEntryMode.DIRECTORY, name, hash)


def test_tree_entry_creation():
    """Test creating a tree entry."""
    entry = TreeEntry(TreeEntryMode.EXECUTABLE_FILE, b'run.sh', HASH_A)
    assert entry.mode is TreeEntryMode.EXECUTABLE_FILE
    assert entry.name == b'run.sh'
    assert entry.hash == HASH_A
    assert entry.hex == 'aa' * 20
    assert entry.object_type == 'blob'
    assert dir_entry(b'src').object_type == 'tree'


def test_tree_entry_rejects_nul_name():
    with pytest.raises(ValueError):
        file_entry(b'a\0b')


def test_tree_entry_rejects_short_hash():
    with pytest.raises(ValueError):
        TreeEntry(TreeEntryMode.NORMAL_FILE, b'a', b'\x00' * 19)


def test_mode_octal():
    """Test modes serialize without leading zeros."""
    assert TreeEntryMode.NORMAL_FILE.octal == '100644'
    assert TreeEntryMode.EXECUTABLE_FILE.octal == '100755'
    assert TreeEntryMode.SYMLINK.octal == '120000'
    assert TreeEntryMode.DIRECTORY.octal == '40000'


@pytest.mark.parametrize('token, mode', [
    ('100644', TreeEntryMode.NORMAL_FILE),
    ('100755', TreeEntryMode.EXECUTABLE_FILE),
    ('120000', TreeEntryMode.SYMLINK),
    ('40000', TreeEntryMode.DIRECTORY),
    ('040000', TreeEntryMode.DIRECTORY),
])
def test_mode_parse(token, mode):
    assert TreeEntryMode.parse(token) is mode


@pytest.mark.parametrize('token', ['100664', '160000', '644', '', 'abc'])
def test_mode_parse_unknown(token):
    with pytest.raises(UnknownModeError):
        TreeEntryMode.parse(token)


@pytest.mark.parametrize('st_mode, mode', [
    (stat.S_IFDIR | 0o755, TreeEntryMode.DIRECTORY),
    (stat.S_IFLNK | 0o777, TreeEntryMode.SYMLINK),
    (stat.S_IFREG | 0o755, TreeEntryMode.EXECUTABLE_FILE),
    (stat.S_IFREG | 0o744, TreeEntryMode.EXECUTABLE_FILE),
    (stat.S_IFREG | 0o645, TreeEntryMode.EXECUTABLE_FILE),
    (stat.S_IFREG | 0o644, TreeEntryMode.NORMAL_FILE),
    (stat.S_IFREG | 0o600, TreeEntryMode.NORMAL_FILE),
])
def test_mode_from_stat(st_mode, mode):
    """Test mode inference from file metadata."""
    assert TreeEntryMode.from_stat(st_mode) is mode


def test_tree_entry_sorting_by_name():
    """Test tree entries sort by name bytes."""
    assert file_entry(b'apple.txt') < file_entry(b'zebra.txt')
    assert file_entry(b'B') < file_entry(b'a')


def test_directory_sorts_as_if_slash_terminated():
    """Test a directory compares as its name followed by '/'."""
    # '.' (0x2e) < '/' (0x2f) < '0' (0x30)
    assert file_entry(b'foo.txt') < dir_entry(b'foo')
    assert dir_entry(b'foo') < file_entry(b'foo0')
    assert file_entry(b'foo-bar') < dir_entry(b'foo')


def test_shorter_file_name_sorts_first():
    assert file_entry(b'foo') < file_entry(b'foo.txt')
    assert file_entry(b'foo') < dir_entry(b'foo')


def test_canonical_order():
    """Test sorting a mixed listing yields canonical tree order."""
    entries = [
        file_entry(b'foo0'),
        dir_entry(b'foo'),
        file_entry(b'foo.txt'),
        file_entry(b'a'),
        dir_entry(b'foo-dir'),
    ]
    names = [e.name for e in sorted(entries)]
    assert names == [b'a', b'foo-dir', b'foo.txt', b'foo', b'foo0']


def test_entry_equality_includes_directoryness():
    """Test a directory and a file of the same name are distinct."""
    assert file_entry(b'foo') != dir_entry(b'foo')
    assert dir_entry(b'foo') != file_entry(b'foo')
    assert len({file_entry(b'foo'), dir_entry(b'foo')}) == 2


def test_entry_equality_ignores_hash():
    """Test entries with the same name and kind are equal."""
    assert file_entry(b'foo', HASH_A) == file_entry(b'foo', HASH_C)
    assert TreeEntry(TreeEntryMode.EXECUTABLE_FILE, b'foo', HASH_A) == file_entry(b'foo')
    assert len({file_entry(b'foo', HASH_A), file_entry(b'foo', HASH_C)}) == 1


def test_serialize_entry():
    entry = dir_entry(b'src')
    assert entry.serialize() == b'40000 src\0' + HASH_B


def test_serialize_tree_sorts():
    """Test tree serialization uses canonical order."""
    payload = serialize_tree([dir_entry(b'foo'), file_entry(b'foo.txt')])
    assert payload == b'100644 foo.txt\0' + HASH_A + b'40000 foo\0' + HASH_B


def test_serialize_empty_tree():
    assert hash_object(ObjectKind.TREE, serialize_tree([])) == EMPTY_TREE


def test_iterate_tree():
    """Test parsing yields every entry in storage order."""
    entries = [
        file_entry(b'README', HASH_A),
        TreeEntry(TreeEntryMode.EXECUTABLE_FILE, b'run.sh', HASH_B),
        TreeEntry(TreeEntryMode.SYMLINK, b'link', HASH_C),
        dir_entry(b'src', HASH_C),
    ]
    # storage order is whatever the payload holds
    payload = b''.join(e.serialize() for e in entries)

    parsed = list(iterate_tree(io.BytesIO(payload)))

    assert len(parsed) == 4
    for original, entry in zip(entries, parsed):
        assert entry.mode is original.mode
        assert entry.name == original.name
        assert entry.hash == original.hash


def test_iterate_tree_accepts_zero_padded_directory_mode():
    parsed = list(iterate_tree(io.BytesIO(b'040000 src\0' + HASH_A)))
    assert parsed[0].mode is TreeEntryMode.DIRECTORY


def test_iterate_tree_name_with_spaces():
    payload = file_entry(b'my file.txt').serialize()
    assert next(iterate_tree(io.BytesIO(payload))).name == b'my file.txt'


def test_iterate_tree_is_single_pass():
    """Test a consumed iterator yields nothing more."""
    iterator = iterate_tree(io.BytesIO(file_entry(b'a').serialize()))
    assert len(list(iterator)) == 1
    assert list(iterator) == []


def test_iterate_empty_tree():
    assert list(iterate_tree(io.BytesIO(b''))) == []


def test_iterate_tree_unknown_mode():
    with pytest.raises(UnknownModeError):
        list(iterate_tree(io.BytesIO(b'100664 a\0' + HASH_A)))


@pytest.mark.parametrize('payload', [
    b'100644',                          # no space after mode
    b'100644 name',                     # name not NUL-terminated
    b'100644 name\0' + b'\xaa' * 10,    # hash cut short
    b'1006440 name\0' + HASH_A,         # mode too long
])
def test_iterate_tree_truncated(payload):
    with pytest.raises(CorruptObjectError):
        list(iterate_tree(io.BytesIO(payload)))


# Building trees from directories


@pytest.fixture
def sample_dir(tmp_path):
    """Directory with files and a nested subdirectory."""
    (tmp_path / 'file1.txt').write_text('content1')
    (tmp_path / 'file2.txt').write_text('content2')
    subdir = tmp_path / 'subdir'
    subdir.mkdir()
    (subdir / 'nested.txt').write_text('nested content')
    return tmp_path


def read_entries(repo, hash_value):
    with repo.read_object(hash_value, ObjectKind.TREE) as obj:
        return list(iterate_tree(obj.reader))


def test_build_tree(repo, sample_dir):
    """Test building a tree stores every file and directory."""
    tree_hash = repo.build_tree(sample_dir)

    entries = read_entries(repo, tree_hash)
    assert [e.name for e in entries] == [b'file1.txt', b'file2.txt', b'subdir']
    assert entries[2].mode is TreeEntryMode.DIRECTORY

    nested = read_entries(repo, entries[2].hex)
    assert [e.name for e in nested] == [b'nested.txt']
    with repo.read_object(nested[0].hex, ObjectKind.BLOB) as obj:
        assert obj.read() == b'nested content'


def test_build_tree_matches_expected_payload(repo, tmp_path):
    """Test the root tree hash is computed over the canonical payload."""
    (tmp_path / 'a.txt').write_bytes(b'hello\n')
    blob = bytes.fromhex('ce013625030ba8dba906f756967f9e9ca394464a')
    expected = hash_object(ObjectKind.TREE, b'100644 a.txt\0' + blob)

    assert repo.build_tree(tmp_path) == expected


def test_build_tree_deterministic(repo, sample_dir):
    """Test an unmodified directory always yields the same hash."""
    assert repo.build_tree(sample_dir) == repo.build_tree(sample_dir)


def test_build_tree_directory_prefix_order(repo, tmp_path):
    """Test a directory sorts against a sibling file as 'name/'."""
    (tmp_path / 'foo.txt').write_text('file')
    (tmp_path / 'foo').mkdir()
    (tmp_path / 'foo' / 'inner').write_text('inner')
    (tmp_path / 'foo0').write_text('file')

    names = [e.name for e in read_entries(repo, repo.build_tree(tmp_path))]
    assert names == [b'foo.txt', b'foo', b'foo0']


def test_build_tree_skips_metadata_directory(repo, working_files):
    """Test the .git directory is never part of the stored tree."""
    names = [e.name for e in read_entries(repo, repo.build_tree())]
    assert b'.git' not in names
    assert names == [b'subdir', b'test1.txt', b'test2.txt']


def test_build_tree_keeps_other_hidden_files(repo, tmp_path):
    (tmp_path / '.hidden').write_text('hidden')
    names = [e.name for e in read_entries(repo, repo.build_tree(tmp_path))]
    assert names == [b'.hidden']


def test_build_tree_executable(repo, tmp_path):
    script = tmp_path / 'run.sh'
    script.write_text('#!/bin/sh\n')
    os.chmod(script, 0o755)
    (tmp_path / 'plain.txt').write_text('plain')
    os.chmod(tmp_path / 'plain.txt', 0o644)

    entries = {e.name: e.mode for e in read_entries(repo, repo.build_tree(tmp_path))}
    assert entries[b'run.sh'] is TreeEntryMode.EXECUTABLE_FILE
    assert entries[b'plain.txt'] is TreeEntryMode.NORMAL_FILE


@pytest.mark.skipif(not hasattr(os, 'symlink'), reason='symlinks unsupported')
def test_build_tree_symlink(repo, tmp_path):
    """Test symlinks are stored as their target path, not followed."""
    (tmp_path / 'target.txt').write_text('target content')
    os.symlink('target.txt', tmp_path / 'link')

    entries = {e.name: e for e in read_entries(repo, repo.build_tree(tmp_path))}
    assert entries[b'link'].mode is TreeEntryMode.SYMLINK
    with repo.read_object(entries[b'link'].hex) as obj:
        assert obj.read() == b'target.txt'


@pytest.mark.skipif(not hasattr(os, 'symlink'), reason='symlinks unsupported')
def test_store_blob_follows_symlink(repo, tmp_path):
    """Test a blob stored through a symlink matches its computed id."""
    (tmp_path / 'target.txt').write_text('target content')
    os.symlink('target.txt', tmp_path / 'link')

    blob_hash = repo.store_blob(tmp_path / 'link')

    assert blob_hash == hash_file(tmp_path / 'link')
    assert blob_hash == hash_object(ObjectKind.BLOB, b'target content')


def test_build_tree_empty_directory(repo, tmp_path):
    """Test an empty directory is stored as the empty tree."""
    (tmp_path / 'empty').mkdir()
    entries = read_entries(repo, repo.build_tree(tmp_path))
    assert entries[0].hex == EMPTY_TREE


def test_build_tree_deep_nesting(repo, tmp_path):
    """Test deep hierarchies are built without recursion limits."""
    path = tmp_path
    for _ in range(200):
        path = path / 'd'
        path.mkdir()
    (path / 'leaf.txt').write_text('leaf')

    tree_hash = repo.build_tree(tmp_path)
    depth = 0
    entries = read_entries(repo, tree_hash)
    while entries[0].mode is TreeEntryMode.DIRECTORY:
        depth += 1
        entries = read_entries(repo, entries[0].hex)
    assert depth == 200
    assert entries[0].name == b'leaf.txt'


def test_build_tree_missing_directory(repo, tmp_path):
    """Test filesystem errors abort the build."""
    with pytest.raises(FileNotFoundError):
        repo.build_tree(tmp_path / 'missing')
