"""Commit payload formatting and storage."""

import logging
import time
from datetime import datetime, timezone as dt_timezone
from typing import Optional

from .errors import NotATreeError
from .objects import GitObject, ObjectKind

logger = logging.getLogger(__name__)

DEFAULT_IDENTITY = 'gitobj <gitobj@localhost>'


def timezone_offset(when: Optional[int] = None) -> str:
    """
    Format the local UTC offset at a point in time.

    Args:
        when: Unix timestamp, defaults to now

    Returns:
        str: Offset as sign, hours and minutes, e.g. '+0200' or '-0530'
    """
    if when is None:
        when = int(time.time())
    local = datetime.fromtimestamp(when, dt_timezone.utc).astimezone()
    return format_offset(int(local.utcoffset().total_seconds()))


def format_offset(seconds: int) -> str:
    """Format an offset east of UTC in seconds as ±HHMM."""
    sign = '-' if seconds < 0 else '+'
    minutes = abs(seconds) // 60
    return f"{sign}{minutes // 60:02d}{minutes % 60:02d}"


class Commit:
    """
    Represents a commit payload.

    A commit captures:
    - Snapshot of project (tree hash)
    - Optional parent commit
    - Author and committer identity
    - Timestamp and timezone
    - Commit message
    """

    def __init__(
        self,
        tree: str,
        message: str,
        parent: Optional[str] = None,
        identity: str = DEFAULT_IDENTITY,
        timestamp: int = 0,
        timezone: str = '+0000',
    ):
        self.tree = tree
        self.message = message
        self.parent = parent
        self.identity = identity
        self.timestamp = timestamp
        self.timezone = timezone

    @classmethod
    def create(
        cls,
        tree: str,
        message: str,
        parent: Optional[str] = None,
        identity: str = DEFAULT_IDENTITY,
        timestamp: Optional[int] = None,
        timezone: Optional[str] = None,
    ) -> 'Commit':
        """
        Create a new commit stamped with the current time.

        Args:
            tree: Hex hash of tree object
            message: Commit message
            parent: Hex hash of parent commit, if any
            identity: Author and committer, e.g. "Name <email>"
            timestamp: Unix timestamp (defaults to current time)
            timezone: Offset such as "-0500" (defaults to local offset)

        Returns:
            Commit: New commit
        """
        if timestamp is None:
            timestamp = int(time.time())
        if timezone is None:
            timezone = timezone_offset(timestamp)
        return cls(tree, message, parent, identity, timestamp, timezone)

    def serialize(self) -> bytes:
        """
        Serialize commit.

        Format:
        tree <tree-hash>
        parent <parent-hash>  (optional)
        author <identity> <timestamp> <timezone>
        committer <identity> <timestamp> <timezone>

        <commit message>

        Returns:
            bytes: UTF-8 commit payload
        """
        lines = [f'tree {self.tree}']
        if self.parent:
            lines.append(f'parent {self.parent}')
        lines.append(f'author {self.identity} {self.timestamp} {self.timezone}')
        lines.append(f'committer {self.identity} {self.timestamp} {self.timezone}')
        lines.append('')
        lines.append(self.message)
        return ('\n'.join(lines) + '\n').encode('utf-8')

    def __repr__(self) -> str:
        parent_info = f", parent={self.parent[:7]}" if self.parent else ""
        msg_preview = self.message.split('\n')[0][:50]
        return f"Commit(tree={self.tree[:7]}{parent_info}, msg='{msg_preview}')"


def write_commit(
    store,
    tree: str,
    message: str,
    parent: Optional[str] = None,
    identity: str = DEFAULT_IDENTITY,
    timestamp: Optional[int] = None,
    timezone: Optional[str] = None,
) -> bytes:
    """
    Store a commit pointing at an existing tree.

    Args:
        store: ObjectStore holding the tree and receiving the commit
        tree: Hex hash of a stored tree
        message: Commit message
        parent: Hex hash of parent commit, if any
        identity: Author and committer identity
        timestamp: Unix timestamp (defaults to current time)
        timezone: UTC offset as ±HHMM (defaults to local offset)

    Returns:
        bytes: 20-byte commit hash

    Raises:
        NotATreeError: If ``tree`` is not a tree object
        ObjectNotFoundError: If ``tree`` is not stored
    """
    with store.read(tree) as obj:
        if obj.kind is not ObjectKind.TREE:
            raise NotATreeError(tree, ObjectKind.TREE, obj.kind)

    commit = Commit.create(tree, message, parent, identity, timestamp, timezone)
    digest = store.write(GitObject.from_bytes(ObjectKind.COMMIT, commit.serialize()))
    logger.debug(f"Wrote commit {digest.hex()} for tree {tree}")
    return digest
