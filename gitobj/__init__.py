"""gitobj - a content-addressable object database in Git's loose object format."""

__version__ = '0.1.0'

from gitobj.core.repository import Repository
from gitobj.core.objects import GitObject, ObjectKind
from gitobj.core.tree import TreeEntry, TreeEntryMode, iterate_tree

__all__ = [
    'Repository',
    'GitObject',
    'ObjectKind',
    'TreeEntry',
    'TreeEntryMode',
    'iterate_tree',
]
