"""Loose object storage for gitobj.

Objects live at ``objects/<first 2 hex chars>/<remaining 38 hex chars>``
as zlib-compressed ``<kind> <size>\\0<payload>`` byte strings. Writes are
staged in ``objects/tmp-<pid>`` and published with an atomic rename, so a
reader never sees a partially written object at its final path.
"""

import contextlib
import io
import logging
import os
import re
import zlib
from pathlib import Path
from typing import Optional

from .errors import ObjectNotFoundError, WrongKindError
from .hash import HashingWriter, copy_payload
from .objects import (
    BoundedReader,
    GitObject,
    InflateReader,
    ObjectKind,
    encode_header,
    read_header,
)

logger = logging.getLogger(__name__)

HEX_HASH_RE = re.compile(r'^[0-9a-f]{40}$')


class DeflateWriter:
    """Compresses written bytes into a binary file."""

    def __init__(self, fileobj, level: int = -1):
        self._file = fileobj
        self._compressor = zlib.compressobj(level)

    def write(self, data: bytes) -> int:
        self._file.write(self._compressor.compress(data))
        return len(data)

    def finish(self) -> None:
        self._file.write(self._compressor.flush())


class ObjectStore:
    """
    Content-addressed store of compressed objects on disk.

    The store does no locking. Concurrent writers of the same content race
    harmlessly to the same final file.
    """

    def __init__(self, objects_dir, compression_level: int = -1):
        """
        Initialize store.

        Args:
            objects_dir: Path to the objects directory
            compression_level: zlib level, -1 for the library default
        """
        self.objects_dir = Path(objects_dir)
        self.compression_level = compression_level

    def object_path(self, hash: str) -> Path:
        """
        Get filesystem path for an object.

        Args:
            hash: 40-character lowercase hex hash

        Returns:
            Path: Full path to object file

        Raises:
            ValueError: If hash is not 40 lowercase hex characters
        """
        if not HEX_HASH_RE.match(hash):
            raise ValueError(f"Not a valid object hash: {hash!r}")
        return self.objects_dir / hash[:2] / hash[2:]

    def temp_path(self) -> Path:
        """Staging path unique to this process."""
        return self.objects_dir / f"tmp-{os.getpid()}"

    def exists(self, hash: str) -> bool:
        return self.object_path(hash).exists()

    def read(self, hash: str, expected_kind: Optional[ObjectKind] = None) -> GitObject:
        """
        Open a stored object.

        The returned object's reader yields exactly ``size`` payload bytes.
        The caller owns the open file and should close the object.

        Args:
            hash: 40-character hex hash
            expected_kind: If given, the kind the object must have

        Returns:
            GitObject: Object with a bounded payload stream

        Raises:
            ObjectNotFoundError: If no object file exists
            CorruptObjectError: If the file does not inflate or the header
                does not parse
            WrongKindError: If expected_kind is given and does not match
        """
        path = self.object_path(hash)

        try:
            f = open(path, 'rb')
        except FileNotFoundError:
            raise ObjectNotFoundError(hash) from None

        stream = io.BufferedReader(InflateReader(f))
        try:
            kind, size = read_header(stream)
            if expected_kind is not None and kind != expected_kind:
                raise WrongKindError(hash, expected_kind, kind)
        except BaseException:
            stream.close()
            raise

        logger.debug(f"Read {kind} {hash} ({size} bytes)")
        return GitObject(kind, size, io.BufferedReader(BoundedReader(stream, size)))

    def read_bytes(self, hash: str, expected_kind: Optional[ObjectKind] = None) -> bytes:
        """Read an object's whole payload into memory."""
        with self.read(hash, expected_kind) as obj:
            return obj.read()

    def write(self, obj: GitObject) -> bytes:
        """
        Store an object.

        Header and payload are hashed and compressed in one pass into a
        staging file, which is renamed into place once complete.

        Args:
            obj: Object to store; exactly ``obj.size`` bytes are read from it

        Returns:
            bytes: 20-byte SHA-1 digest of header and payload

        Raises:
            ObjectError: If the payload stream is shorter than obj.size
            OSError: If any filesystem operation fails
        """
        tmp_path = self.temp_path()

        try:
            with open(tmp_path, 'wb') as f:
                deflate = DeflateWriter(f, self.compression_level)
                writer = HashingWriter(deflate)
                writer.write(encode_header(obj.kind, obj.size))
                copy_payload(obj, writer)
                deflate.finish()

            digest = writer.digest()
            hex_hash = digest.hex()
            path = self.object_path(hex_hash)

            if path.exists():
                tmp_path.unlink()
                logger.debug(f"Object {hex_hash} already stored")
                return digest

            path.parent.mkdir(exist_ok=True)
            os.replace(tmp_path, path)
        except BaseException:
            with contextlib.suppress(OSError):
                tmp_path.unlink()
            raise

        logger.debug(f"Wrote {obj.kind} {hex_hash} ({obj.size} bytes)")
        return digest

    def write_bytes(self, kind: ObjectKind, data: bytes) -> bytes:
        """Store in-memory payload bytes as an object."""
        return self.write(GitObject.from_bytes(kind, data))

    def __repr__(self) -> str:
        return f"ObjectStore(path={self.objects_dir})"
