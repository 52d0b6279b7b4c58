"""
Repository engine.

Main entry point coordinating all components.
"""

import logging
from pathlib import Path
from typing import Dict, List, Tuple

from .storage.layout import StorageLayout
from .storage.object_store import ObjectStore
from .storage.transfer import StoreTransfer
from .integrity.verification import verify_recursive
from .integration.worktree import WorkTreeAdapter
from .errors import InvalidObjectError, ObjectStoreError
from .model.blob import BLOB_KIND
from .model.commit import COMMIT_KIND, Commit, build
from .model.tree import TREE_KIND, Tree, TreeEntry

logger = logging.getLogger(__name__)

DEFAULT_GIT_DIR = '.git'


class Repository:
    """
    Main engine for object store operations.

    This is the primary interface for:
    - Storing and retrieving objects (blobs, trees, commits)
    - Snapshotting a directory into trees
    - Creating commits
    - Checking trees and commits out
    - Verifying object integrity
    - Copying the store elsewhere
    """

    def __init__(self, git_dir: str | Path = DEFAULT_GIT_DIR):
        """
        Initialize a repository whose store lives at git_dir.

        Args:
            git_dir: filesystem path of the store root
        """
        self.git_dir = Path(git_dir).resolve()
        self.layout = StorageLayout(self.git_dir)
        self.object_store = ObjectStore(self.layout)
        self.worktree = WorkTreeAdapter(self.object_store, ignore=[self.git_dir])

    def initialize(self) -> None:
        """
        Initialize the store.

        Creates objects/, refs/ and HEAD.
        Safe to call multiple times (idempotent).
        """
        self.layout.initialize()

    # ========== Object Storage ==========

    def hash_object(self, data: bytes, kind: str = BLOB_KIND, write: bool = True) -> str:
        """
        Compute the address of data and optionally store it.

        Args:
            data: raw payload bytes
            kind: object kind (default blob)
            write: if False, only compute the address

        Returns:
            str: 40-character hex address
        """
        if write:
            return self.object_store.store(kind, data)
        return self.object_store.compute_address(kind, data)

    def cat_file(self, address: str) -> Tuple[str, bytes]:
        """Retrieve ``(kind, payload)`` for a full or abbreviated address."""
        return self.object_store.load(self.resolve(address))

    def object_header(self, address: str) -> Tuple[str, int]:
        """Retrieve ``(kind, size)`` without reading the whole payload."""
        return self.object_store.read_header(self.resolve(address))

    def resolve(self, address: str) -> str:
        """Expand an abbreviated address."""
        return self.object_store.resolve_prefix(address)

    def has_object(self, address: str) -> bool:
        """Check if an object exists."""
        return self.object_store.has_object(address)

    def list_all_objects(self) -> List[str]:
        """List all object addresses in store."""
        return self.object_store.list_all_objects()

    # ========== Trees ==========

    def write_tree(self, root: str | Path = '.', flat: bool = False) -> str:
        """Snapshot a directory and return its root tree address."""
        return self.worktree.write_tree(root, flat=flat)

    def put_tree(self, entries: List[TreeEntry]) -> str:
        """Store a tree from explicit entries, in the order given."""
        return self.object_store.store(TREE_KIND, Tree(entries).serialize())

    def get_tree(self, address: str) -> Tree:
        """Retrieve a tree by address."""
        return self.worktree.load_tree(self.resolve(address))

    def ls_tree(self, address: str, recursive: bool = False) -> List[Tuple[str, str, str]]:
        """
        List ``(mode, path, address)`` entries of a tree.

        A commit address lists the tree it references.
        """
        address = self.resolve(address)
        kind, payload = self.object_store.load(address)
        if kind == COMMIT_KIND:
            address = Commit.deserialize(payload).tree
        elif kind != TREE_KIND:
            raise InvalidObjectError(f"expected tree or commit, got {kind}", address)
        return list(self.worktree.iter_tree(address, recursive=recursive))

    # ========== Commits ==========

    def commit_tree(self, tree_address: str, message: str) -> str:
        """
        Create a commit referencing a tree and return its address.

        The tree is not required to exist in the store.
        """
        return self.object_store.store(COMMIT_KIND, build(tree_address, message))

    def get_commit(self, address: str) -> Commit:
        """Retrieve a commit by address."""
        return self.worktree.load_commit(self.resolve(address))

    # ========== Checkout ==========

    def checkout(self, address: str, dest: str | Path) -> int:
        """
        Materialize a commit or tree into dest.

        Returns number of files written.
        """
        address = self.resolve(address)
        kind, _ = self.object_store.read_header(address)
        if kind == COMMIT_KIND:
            return self.worktree.checkout_commit(address, dest)
        if kind == TREE_KIND:
            return self.worktree.checkout_tree(address, dest)
        raise InvalidObjectError(f"cannot check out a {kind}", address)

    # ========== Integrity Verification ==========

    def verify_object(self, address: str) -> bool:
        """
        Verify an object's integrity.

        Returns True if valid.
        Raises ObjectCorruptedError or IntegrityViolationError if not.
        """
        self.object_store.load(address, verify=True)
        return True

    def verify_reachable(self, address: str) -> Dict[str, object]:
        """
        Verify an object and everything it references recursively.

        Returns dict with:
            - valid: bool
            - errors: list of error messages
        """
        is_valid, errors = verify_recursive(
            address,
            load_func=lambda a: self.object_store.load(a, verify=False),
        )
        return {
            'valid': is_valid,
            'errors': errors,
        }

    def detect_tampering(self) -> Dict[str, object]:
        """
        Detect corruption across all stored objects.

        Verifies that every object decompresses, is well framed and
        hashes back to its address.

        Returns dict with:
            - tampered: list of bad object addresses
            - verified: count of verified objects
            - errors: list of errors encountered
        """
        result = {
            'tampered': [],
            'verified': 0,
            'errors': [],
        }

        for address in self.object_store.list_all_objects():
            try:
                self.verify_object(address)
                result['verified'] += 1
            except ObjectStoreError as e:
                result['tampered'].append(address)
                result['errors'].append(f"{address}: {e}")

        if result['tampered']:
            logger.warning("Found %d corrupted objects", len(result['tampered']))
        return result

    # ========== Transfer ==========

    def clone_to(self, destination: str | Path) -> 'Repository':
        """
        Copy this store into a new store root and return it.

        Existing objects at the destination are kept.
        """
        target = Repository(destination)
        StoreTransfer(self.layout, target.layout).run()
        return target

    # ========== Statistics and Diagnostics ==========

    def get_statistics(self) -> Dict[str, int]:
        """
        Get store statistics.

        Returns object count, compressed size and per-kind counts.
        """
        stats = self.object_store.get_stats()
        for address in self.object_store.list_all_objects():
            kind, _ = self.object_store.read_header(address)
            key = f'{kind}_count'
            stats[key] = stats.get(key, 0) + 1
        return stats

    def __repr__(self) -> str:
        return f"Repository(git_dir={self.git_dir})"
