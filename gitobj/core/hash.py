"""Hash utilities for gitobj."""

import hashlib

from .errors import ObjectError
from .objects import GitObject, ObjectKind, encode_header, CHUNK_SIZE


class HashingWriter:
    """
    Tee writer feeding a SHA-1 accumulator and a sink.

    Every byte written goes to both, so an object can be hashed and
    compressed in a single pass over its content.
    """

    def __init__(self, sink=None):
        """
        Initialize writer.

        Args:
            sink: Object with a ``write(bytes)`` method, or None to only hash
        """
        self.sink = sink
        self.hasher = hashlib.sha1()

    def write(self, data: bytes) -> int:
        if self.sink is not None:
            self.sink.write(data)
        self.hasher.update(data)
        return len(data)

    def digest(self) -> bytes:
        return self.hasher.digest()

    def hexdigest(self) -> str:
        return self.hasher.hexdigest()


def copy_payload(obj: GitObject, writer) -> int:
    """
    Copy exactly ``obj.size`` payload bytes into a writer.

    Args:
        obj: Object whose payload is copied
        writer: Destination with a ``write`` method

    Returns:
        int: Number of bytes copied

    Raises:
        ObjectError: If the source ends before ``obj.size`` bytes
    """
    remaining = obj.size
    while remaining:
        chunk = obj.reader.read(min(remaining, CHUNK_SIZE))
        if not chunk:
            raise ObjectError(
                f"{obj.kind} payload ended {remaining} bytes short of declared size {obj.size}")
        writer.write(chunk)
        remaining -= len(chunk)
    return obj.size


def hash_object(kind: ObjectKind, data: bytes) -> str:
    """
    Compute the object id of in-memory content without storing it.

    Args:
        kind: Object kind
        data: Payload bytes

    Returns:
        40-character hex string
    """
    return hashlib.sha1(encode_header(kind, len(data)) + data).hexdigest()


def hash_file(filepath, kind: ObjectKind = ObjectKind.BLOB) -> str:
    """
    Compute the object id of a file's content without storing it.

    Args:
        filepath: Path to file
        kind: Object kind to hash the content as

    Returns:
        40-character hex string
    """
    writer = HashingWriter()
    with GitObject.from_file(kind, filepath) as obj:
        writer.write(encode_header(obj.kind, obj.size))
        copy_payload(obj, writer)
    return writer.hexdigest()
