"""Repository management for gitobj."""

import logging
from pathlib import Path
from typing import Optional

from .commit import write_commit
from .config import Config
from .errors import RepositoryExistsError
from .objects import GitObject, ObjectKind
from .store import ObjectStore
from .tree import write_blob, write_tree

logger = logging.getLogger(__name__)

GIT_DIR = '.git'


class Repository:
    """
    Represents a gitobj repository.

    A repository owns the .git directory and exposes the object database
    operations: storing blobs, trees and commits and reading objects back.
    """

    def __init__(self, path: str = '.'):
        """
        Initialize repository.

        Args:
            path: Path to repository root (defaults to current directory)
        """
        self.work_tree = Path(path).resolve()
        self.git_dir = self.work_tree / GIT_DIR
        self.objects_dir = self.git_dir / 'objects'
        self.refs_dir = self.git_dir / 'refs'
        self.head_file = self.git_dir / 'HEAD'
        self.config_file = self.git_dir / 'config'

        self._config = None
        self._store = None

    @property
    def config(self) -> Config:
        """Get Config instance."""
        if self._config is None:
            self._config = Config(self.config_file)
        return self._config

    @property
    def objects(self) -> ObjectStore:
        """Get ObjectStore instance."""
        if self._store is None:
            self._store = ObjectStore(self.objects_dir, self.config.get_compression_level())
        return self._store

    def init(self) -> 'Repository':
        """
        Initialize a new repository.

        Creates the .git directory structure:
        .git/
        ├── objects/       # Object database
        ├── refs/          # References (left empty)
        ├── HEAD           # Current branch
        └── config         # Repository configuration

        Returns:
            Repository: self for method chaining

        Raises:
            RepositoryExistsError: If repository already exists
        """
        if self.git_dir.exists():
            raise RepositoryExistsError(f"Repository already exists at {self.git_dir}")

        self.git_dir.mkdir(parents=True)
        self.objects_dir.mkdir()
        self.refs_dir.mkdir()

        self.head_file.write_text('ref: refs/heads/main\n')
        self.config_file.write_text('[core]\nrepositoryformatversion = 0\n')

        logger.debug(f"Initialized repository at {self.git_dir}")
        return self

    @classmethod
    def find_repository(cls, path: str = '.') -> Optional['Repository']:
        """
        Find repository by searching up the directory tree.

        Args:
            path: Starting path for search

        Returns:
            Repository if found, None otherwise
        """
        current = Path(path).resolve()

        while True:
            if (current / GIT_DIR).is_dir():
                return cls(str(current))

            # Reached filesystem root
            if current == current.parent:
                return None

            current = current.parent

    def object_path(self, hash: str) -> Path:
        return self.objects.object_path(hash)

    def object_exists(self, hash: str) -> bool:
        return self.objects.exists(hash)

    def read_object(self, hash: str, expected_kind: Optional[ObjectKind] = None) -> GitObject:
        """
        Open an object for reading.

        Args:
            hash: 40-character hex hash
            expected_kind: Kind the caller requires, if any

        Returns:
            GitObject: Object with a bounded payload stream; close it when done
        """
        return self.objects.read(hash, expected_kind)

    def write_object(self, obj: GitObject) -> str:
        """Store an object and return its hex hash."""
        return self.objects.write(obj).hex()

    def store_blob(self, path) -> str:
        """
        Store a file as a blob.

        Args:
            path: Path to the file

        Returns:
            str: Hex hash of the blob
        """
        return write_blob(self.objects, path).hex()

    def build_tree(self, root_path=None) -> str:
        """
        Store a directory and everything below it as trees and blobs.

        Args:
            root_path: Directory to snapshot (defaults to the work tree)

        Returns:
            str: Hex hash of the root tree
        """
        if root_path is None:
            root_path = self.work_tree
        return write_tree(self.objects, root_path, skip=(GIT_DIR,)).hex()

    def build_commit(
        self,
        tree_hash: str,
        message: str,
        parent_hash: Optional[str] = None,
        timestamp: Optional[int] = None,
        timezone: Optional[str] = None,
    ) -> str:
        """
        Store a commit for an existing tree.

        The author and committer come from the user.name and user.email
        configuration, or the default identity.

        Args:
            tree_hash: Hex hash of a stored tree
            message: Commit message
            parent_hash: Hex hash of the parent commit, if any
            timestamp: Unix timestamp (defaults to current time)
            timezone: UTC offset as ±HHMM (defaults to local offset)

        Returns:
            str: Hex hash of the commit
        """
        digest = write_commit(
            self.objects,
            tree_hash,
            message,
            parent=parent_hash,
            identity=self.config.get_user_identity(),
            timestamp=timestamp,
            timezone=timezone,
        )
        return digest.hex()

    def __repr__(self) -> str:
        """String representation of repository."""
        return f"Repository(path={self.work_tree})"
