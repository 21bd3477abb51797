"""Object kinds, header codec and payload streams for gitobj."""

import io
import os
import zlib
from enum import Enum
from typing import BinaryIO, Tuple

from .errors import CorruptObjectError, MalformedHeaderError

# "commit " + 20 digits of a 64-bit size + NUL, rounded up
MAX_HEADER_LENGTH = 32
MAX_OBJECT_SIZE = 2 ** 64 - 1
CHUNK_SIZE = 64 * 1024


class ObjectKind(str, Enum):
    """The three object kinds the database understands."""

    BLOB = 'blob'
    TREE = 'tree'
    COMMIT = 'commit'

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, token: str) -> 'ObjectKind':
        """
        Parse a header kind token.

        Args:
            token: Kind token as found in an object header

        Returns:
            ObjectKind: Matching kind

        Raises:
            MalformedHeaderError: If the token is not a known kind
        """
        try:
            return cls(token)
        except ValueError:
            raise MalformedHeaderError(f"Unknown object kind: {token!r}") from None


def encode_header(kind: ObjectKind, size: int) -> bytes:
    """
    Encode an object header.

    Format: <kind> <size>\\0

    Args:
        kind: Object kind
        size: Payload length in bytes

    Returns:
        bytes: NUL-terminated ASCII header
    """
    if not 0 <= size <= MAX_OBJECT_SIZE:
        raise ValueError(f"Object size out of range: {size}")
    return f"{kind} {size}\0".encode('ascii')


def decode_header(raw: bytes) -> Tuple[ObjectKind, int]:
    """
    Decode a NUL-terminated object header.

    Args:
        raw: Header bytes including the trailing NUL

    Returns:
        Tuple of (kind, size)

    Raises:
        MalformedHeaderError: If the header does not parse
    """
    if not raw.endswith(b'\0'):
        raise MalformedHeaderError(f"Object header is not NUL-terminated: {raw!r}")

    body = raw[:-1]
    try:
        text = body.decode('ascii')
    except UnicodeDecodeError:
        raise MalformedHeaderError(f"Object header is not ASCII: {body!r}") from None

    parts = text.split(' ')
    if len(parts) != 2:
        raise MalformedHeaderError(f"Invalid object header: {text!r}")

    kind_token, size_token = parts
    kind = ObjectKind.parse(kind_token)

    if not size_token.isdigit():
        raise MalformedHeaderError(f"Invalid object size: {size_token!r}")
    size = int(size_token)
    if size > MAX_OBJECT_SIZE:
        raise MalformedHeaderError(f"Object size out of range: {size_token}")

    return kind, size


def read_header(stream: BinaryIO) -> Tuple[ObjectKind, int]:
    """
    Read and decode a header from the front of a stream.

    Consumes bytes up to and including the first NUL and nothing more,
    so the stream is left positioned at the first payload byte.

    Args:
        stream: Decompressed object stream

    Returns:
        Tuple of (kind, size)
    """
    header = bytearray()
    while len(header) < MAX_HEADER_LENGTH:
        byte = stream.read(1)
        if not byte:
            break
        header += byte
        if byte == b'\0':
            return decode_header(bytes(header))

    raise MalformedHeaderError(f"Object header is not NUL-terminated: {bytes(header)!r}")


class InflateReader(io.RawIOBase):
    """Incrementally inflates a zlib stream read from a file object."""

    def __init__(self, fileobj: BinaryIO):
        self._file = fileobj
        self._inflater = zlib.decompressobj()
        self._pending = b''
        self._eof = False

    def readable(self) -> bool:
        return True

    def _fill(self) -> None:
        while not self._pending and not self._eof:
            try:
                if self._inflater.unconsumed_tail:
                    self._pending = self._inflater.decompress(
                        self._inflater.unconsumed_tail, CHUNK_SIZE)
                    continue

                # anything after the end of the zlib stream is ignored
                if self._inflater.eof:
                    self._eof = True
                    break

                chunk = self._file.read(CHUNK_SIZE)
                if not chunk:
                    raise CorruptObjectError("Compressed object stream is truncated")
                self._pending = self._inflater.decompress(chunk, CHUNK_SIZE)
            except zlib.error as e:
                raise CorruptObjectError(f"Failed to inflate object: {e}") from e

    def readinto(self, buffer) -> int:
        self._fill()
        n = min(len(buffer), len(self._pending))
        buffer[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        return n

    def close(self) -> None:
        if not self.closed:
            self._file.close()
        super().close()


class BoundedReader(io.RawIOBase):
    """
    Length-limited view over another stream.

    Reports end of stream after exactly ``size`` bytes, whatever the
    underlying stream still holds. If the underlying stream runs dry first
    the object is truncated and CorruptObjectError is raised.
    """

    def __init__(self, stream: BinaryIO, size: int):
        self._stream = stream
        self._remaining = size

    @property
    def remaining(self) -> int:
        return self._remaining

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self._remaining == 0:
            return 0

        view = memoryview(buffer)
        if len(view) > self._remaining:
            view = view[:self._remaining]

        n = self._stream.readinto(view)
        if not n:
            raise CorruptObjectError(
                f"Object payload truncated: {self._remaining} bytes missing")
        self._remaining -= n
        return n

    def close(self) -> None:
        if not self.closed:
            self._stream.close()
        super().close()


class GitObject:
    """
    A stored or to-be-stored object.

    An object is a kind, a payload size and a byte stream producing the
    payload. Objects returned by ObjectStore.read own a bounded stream over
    the decompressed object file and should be closed, preferably by using
    the object as a context manager.
    """

    def __init__(self, kind: ObjectKind, size: int, reader: BinaryIO):
        """
        Initialize an object.

        Args:
            kind: Object kind
            size: Payload length in bytes
            reader: Readable binary stream producing at least ``size`` bytes
        """
        self.kind = kind
        self.size = size
        self.reader = reader

    @classmethod
    def from_bytes(cls, kind: ObjectKind, data: bytes) -> 'GitObject':
        """Create an object over in-memory payload bytes."""
        return cls(kind, len(data), io.BytesIO(data))

    @classmethod
    def from_file(cls, kind: ObjectKind, filepath) -> 'GitObject':
        """
        Create an object streaming its payload from a file.

        The size is taken from the open file descriptor so it matches
        what will be read.

        Args:
            kind: Object kind
            filepath: Path to file

        Returns:
            GitObject: Object owning the open file
        """
        f = open(filepath, 'rb')
        try:
            size = os.fstat(f.fileno()).st_size
        except OSError:
            f.close()
            raise
        return cls(kind, size, f)

    def read(self, n: int = -1) -> bytes:
        """Read from the payload stream."""
        return self.reader.read(n)

    def close(self) -> None:
        self.reader.close()

    def __enter__(self) -> 'GitObject':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"GitObject(kind={self.kind}, size={self.size})"
