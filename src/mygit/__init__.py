"""
mygit - content-addressable object store and snapshot model.

This package provides:
- Immutable, zlib-compressed, SHA-1 addressed object storage
- The binary tree codec and the commit encoder
- Directory snapshot and checkout
- Integrity verification and tamper detection
- Bulk copy of a store to another location

Main entry point:
    Repository - primary interface for all operations

Example usage:
    from mygit import Repository

    repo = Repository('/path/to/project/.git')
    repo.initialize()

    tree = repo.write_tree('/path/to/project')
    commit = repo.commit_tree(tree, 'initial commit')

    repo.checkout(commit, '/tmp/restored')
"""

from .engine import Repository
from .storage.object_store import ObjectStore
from .storage.layout import StorageLayout
from .model.blob import Blob
from .model.commit import Commit
from .model.tree import Tree, TreeEntry
from .errors import (
    ObjectStoreError,
    ObjectNotFoundError,
    ObjectCorruptedError,
    IntegrityViolationError,
    MalformedTreeError,
    InvalidObjectError,
    StorageError,
    InvalidReferenceError,
)

__version__ = '0.1.0'

__all__ = [
    # Main engine
    'Repository',
    'ObjectStore',
    'StorageLayout',

    # Errors
    'ObjectStoreError',
    'ObjectNotFoundError',
    'ObjectCorruptedError',
    'IntegrityViolationError',
    'MalformedTreeError',
    'InvalidObjectError',
    'StorageError',
    'InvalidReferenceError',

    # Models
    'Blob',
    'Commit',
    'Tree',
    'TreeEntry',
]
