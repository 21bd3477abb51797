"""Core functionality for gitobj.

This module contains the object database:
- Object kinds, header codec and payload streams
- The loose object store
- Tree entries, tree parsing and tree building
- Commit formatting
- Repository and configuration management
"""

from gitobj.core.errors import (
    ObjectError,
    ObjectNotFoundError,
    CorruptObjectError,
    MalformedHeaderError,
    UnknownModeError,
    WrongKindError,
    NotATreeError,
    RepositoryExistsError,
)
from gitobj.core.objects import (
    ObjectKind,
    GitObject,
    BoundedReader,
    encode_header,
    decode_header,
    read_header,
)
from gitobj.core.hash import HashingWriter, hash_object, hash_file
from gitobj.core.store import ObjectStore
from gitobj.core.tree import (
    TreeEntry,
    TreeEntryMode,
    iterate_tree,
    serialize_tree,
    write_blob,
    write_tree,
)
from gitobj.core.commit import Commit, write_commit, timezone_offset
from gitobj.core.config import Config, get_config
from gitobj.core.repository import Repository

__all__ = [
    'ObjectError',
    'ObjectNotFoundError',
    'CorruptObjectError',
    'MalformedHeaderError',
    'UnknownModeError',
    'WrongKindError',
    'NotATreeError',
    'RepositoryExistsError',
    'ObjectKind',
    'GitObject',
    'BoundedReader',
    'encode_header',
    'decode_header',
    'read_header',
    'HashingWriter',
    'hash_object',
    'hash_file',
    'ObjectStore',
    'TreeEntry',
    'TreeEntryMode',
    'iterate_tree',
    'serialize_tree',
    'write_blob',
    'write_tree',
    'Commit',
    'write_commit',
    'timezone_offset',
    'Config',
    'get_config',
    'Repository',
]
