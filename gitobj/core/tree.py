"""Tree entries, tree payload parsing and directory-to-tree building."""

import logging
import os
import stat
from enum import IntEnum
from functools import total_ordering
from typing import BinaryIO, Iterable, Iterator, Optional, Sequence

from .errors import CorruptObjectError, UnknownModeError
from .objects import GitObject, ObjectKind

logger = logging.getLogger(__name__)

HASH_LENGTH = 20
# longest mode token is six octal digits, plus the separating space
MAX_MODE_LENGTH = 7
DEFAULT_SKIP = ('.git',)


class TreeEntryMode(IntEnum):
    """File modes a tree entry can carry."""

    NORMAL_FILE = 0o100644
    EXECUTABLE_FILE = 0o100755
    SYMLINK = 0o120000
    DIRECTORY = 0o40000

    @property
    def octal(self) -> str:
        """Mode as serialized in tree payloads ('40000' for directories)."""
        return format(int(self), 'o')

    @property
    def is_directory(self) -> bool:
        return self is TreeEntryMode.DIRECTORY

    @classmethod
    def parse(cls, token: str) -> 'TreeEntryMode':
        """
        Parse the octal mode token of a serialized tree entry.

        Args:
            token: Mode as ASCII octal digits

        Returns:
            TreeEntryMode: Matching mode

        Raises:
            UnknownModeError: If token is not one of the known modes
        """
        mode = _MODE_TOKENS.get(token)
        if mode is None:
            raise UnknownModeError(f"Unknown tree entry mode: {token!r}")
        return mode

    @classmethod
    def from_stat(cls, st_mode: int) -> 'TreeEntryMode':
        """
        Infer the entry mode from ``lstat`` metadata.

        Args:
            st_mode: ``st_mode`` field of an lstat result

        Returns:
            TreeEntryMode: Directory, symlink, executable or normal file
        """
        if stat.S_ISDIR(st_mode):
            return cls.DIRECTORY
        if stat.S_ISLNK(st_mode):
            return cls.SYMLINK
        if st_mode & 0o111:
            return cls.EXECUTABLE_FILE
        return cls.NORMAL_FILE


_MODE_TOKENS = {mode.octal: mode for mode in TreeEntryMode}
_MODE_TOKENS['040000'] = TreeEntryMode.DIRECTORY


@total_ordering
class TreeEntry:
    """
    Represents a single entry in a tree.

    Each entry contains:
    - mode: TreeEntryMode of the entry
    - name: Raw filename bytes, no NUL
    - hash: 20-byte hash of the blob or tree the entry points to

    Entries order by name bytes, except that a directory compares as if
    its name ended in '/'. A directory 'foo' therefore sorts after a file
    'foo.txt' and before a file 'foo0', the canonical tree order.
    """

    def __init__(self, mode: TreeEntryMode, name: bytes, hash: bytes):
        """
        Initialize tree entry.

        Args:
            mode: Entry mode
            name: Entry name as bytes
            hash: 20-byte object hash
        """
        if b'\0' in name:
            raise ValueError(f"Tree entry name contains NUL: {name!r}")
        if len(hash) != HASH_LENGTH:
            raise ValueError(f"Tree entry hash must be {HASH_LENGTH} bytes, got {len(hash)}")
        self.mode = TreeEntryMode(mode)
        self.name = bytes(name)
        self.hash = bytes(hash)

    @property
    def object_type(self) -> str:
        return 'tree' if self.mode.is_directory else 'blob'

    @property
    def hex(self) -> str:
        return self.hash.hex()

    def _next_byte(self, position: int) -> Optional[int]:
        if position < len(self.name):
            return self.name[position]
        if self.mode.is_directory:
            return ord('/')
        return None

    def _compare(self, other: 'TreeEntry') -> int:
        length = min(len(self.name), len(other.name))
        prefix1 = self.name[:length]
        prefix2 = other.name[:length]
        if prefix1 != prefix2:
            return -1 if prefix1 < prefix2 else 1

        c1 = self._next_byte(length)
        c2 = other._next_byte(length)
        if c1 == c2:
            return 0
        # an exhausted non-directory name sorts first
        if c1 is None:
            return -1
        if c2 is None:
            return 1
        return -1 if c1 < c2 else 1

    def __lt__(self, other: 'TreeEntry') -> bool:
        if not isinstance(other, TreeEntry):
            return NotImplemented
        return self._compare(other) < 0

    def __eq__(self, other) -> bool:
        if not isinstance(other, TreeEntry):
            return NotImplemented
        return (self.name == other.name
                and self.mode.is_directory == other.mode.is_directory)

    def __hash__(self) -> int:
        return hash((self.name, self.mode.is_directory))

    def serialize(self) -> bytes:
        """
        Serialize entry.

        Format: <octal mode> <name>\\0<20-byte hash>
        """
        return self.mode.octal.encode('ascii') + b' ' + self.name + b'\0' + self.hash

    def __repr__(self) -> str:
        """String representation."""
        return f"TreeEntry({self.mode.octal} {self.object_type} {self.hex[:7]} {self.name!r})"


def serialize_tree(entries: Iterable[TreeEntry]) -> bytes:
    """
    Serialize entries into a tree payload in canonical order.

    Args:
        entries: Tree entries in any order

    Returns:
        bytes: Tree payload
    """
    return b''.join(entry.serialize() for entry in sorted(entries))


def _read_until(stream: BinaryIO, delimiter: bytes, limit: Optional[int] = None) -> bytes:
    data = bytearray()
    while limit is None or len(data) < limit:
        byte = stream.read(1)
        if not byte:
            break
        data += byte
        if byte == delimiter:
            break
    return bytes(data)


def _read_exact(stream: BinaryIO, n: int) -> bytes:
    data = bytearray()
    while len(data) < n:
        chunk = stream.read(n - len(data))
        if not chunk:
            break
        data += chunk
    return bytes(data)


def iterate_tree(stream: BinaryIO) -> Iterator[TreeEntry]:
    """
    Lazily parse a tree payload.

    Yields entries in storage order. The iterator consumes the stream and
    cannot be restarted; iterating again requires re-reading the object.

    Args:
        stream: Readable stream positioned at the start of a tree payload

    Yields:
        TreeEntry: One entry per serialized record

    Raises:
        UnknownModeError: If an entry's mode is not recognized
        CorruptObjectError: If the payload ends inside an entry
    """
    while True:
        raw_mode = _read_until(stream, b' ', MAX_MODE_LENGTH)
        if not raw_mode:
            return
        if not raw_mode.endswith(b' '):
            raise CorruptObjectError(f"Malformed tree entry mode: {raw_mode!r}")
        try:
            token = raw_mode[:-1].decode('ascii')
        except UnicodeDecodeError:
            raise UnknownModeError(f"Unknown tree entry mode: {raw_mode[:-1]!r}") from None
        mode = TreeEntryMode.parse(token)

        raw_name = _read_until(stream, b'\0')
        if not raw_name.endswith(b'\0'):
            raise CorruptObjectError(f"Tree entry name is not NUL-terminated: {raw_name!r}")

        hash = _read_exact(stream, HASH_LENGTH)
        if len(hash) != HASH_LENGTH:
            raise CorruptObjectError(
                f"Tree entry {raw_name[:-1]!r} has a truncated hash ({len(hash)} bytes)")

        yield TreeEntry(mode, raw_name[:-1], hash)


def write_blob(store, path) -> bytes:
    """
    Store a file as a blob.

    Symbolic links are followed, so the blob holds the contents of the
    file they point to.

    Args:
        store: ObjectStore to write to
        path: Path to file or symlink

    Returns:
        bytes: 20-byte blob hash
    """
    with GitObject.from_file(ObjectKind.BLOB, path) as obj:
        return store.write(obj)


def _list_children(directory, skip: Sequence[str]) -> list:
    with os.scandir(directory) as it:
        return [entry for entry in it if entry.name not in skip]


def write_tree(store, directory, skip: Sequence[str] = DEFAULT_SKIP) -> bytes:
    """
    Store a directory as a tree, depth first.

    Every subdirectory's tree is written before the tree that contains it.
    Symbolic links are stored as a blob of their target path.
    Any filesystem error aborts the whole build.

    Args:
        store: ObjectStore to write to
        directory: Directory to snapshot
        skip: Entry names left out at every level (the metadata directory)

    Returns:
        bytes: 20-byte hash of the root tree
    """
    # frames of (directory path, remaining children, entries collected so far)
    stack = [(os.fspath(directory), iter(_list_children(directory, skip)), set())]

    while True:
        path, children, entries = stack[-1]

        for child in children:
            mode = TreeEntryMode.from_stat(child.stat(follow_symlinks=False).st_mode)
            if mode is TreeEntryMode.DIRECTORY:
                stack.append((child.path, iter(_list_children(child.path, skip)), set()))
                break
            if mode is TreeEntryMode.SYMLINK:
                # the link itself, not what it points to
                target = os.fsencode(os.readlink(child.path))
                digest = store.write(GitObject.from_bytes(ObjectKind.BLOB, target))
            else:
                digest = write_blob(store, child.path)
            entries.add(TreeEntry(mode, os.fsencode(child.name), digest))
        else:
            stack.pop()
            digest = store.write(GitObject.from_bytes(ObjectKind.TREE, serialize_tree(entries)))
            logger.debug(f"Wrote tree {digest.hex()} for {path} ({len(entries)} entries)")

            if not stack:
                return digest

            name = os.fsencode(os.path.basename(path))
            stack[-1][2].add(TreeEntry(TreeEntryMode.DIRECTORY, name, digest))
