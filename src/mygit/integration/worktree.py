"""
Adapter between a working directory and the object store.

Turns a directory into blob and tree objects, and materializes
trees and commits back onto disk.
"""

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Iterator, List, Optional, Tuple

from ..errors import InvalidObjectError, MalformedTreeError, StorageError
from ..model.blob import BLOB_KIND, REGULAR_FILE_MODE
from ..model.commit import COMMIT_KIND, Commit
from ..model.tree import DIRECTORY_MODE, TREE_KIND, Tree, TreeEntry, tree_sort_key

logger = logging.getLogger(__name__)

IGNORED_NAMES = frozenset({'.git'})


class WorkTreeAdapter:
    """
    Adapter for snapshotting and restoring working directories.

    This adapter:
    - Stores every regular file as a blob with mode 100644
    - Builds one tree per directory (or one flat tree on request)
    - Checks trees and commits out into a destination directory
    - Never deletes files in the destination
    """

    def __init__(self, object_store, ignore: Optional[List[Path]] = None):
        """
        Initialize adapter with an object store.

        Args:
            object_store: ObjectStore instance for storing objects
            ignore: extra paths (typically the store root) never snapshotted
        """
        self.store = object_store
        self.ignore = {Path(p).resolve() for p in (ignore or [])}

    # ========== Snapshot ==========

    def write_tree(self, root: str | Path, flat: bool = False) -> str:
        """
        Snapshot a directory and return the root tree address.

        Args:
            root: directory to snapshot
            flat: store a single tree whose entry names are full relative
                paths instead of nesting one tree per directory

        Returns:
            str: address of the stored root tree
        """
        root = Path(root).resolve()
        if not root.is_dir():
            raise StorageError("write_tree", str(root), NotADirectoryError(str(root)))

        if flat:
            address = self._write_flat_tree(root)
        else:
            address = self._write_tree_recursive(root)
            if address is None:
                address = self.store.store(TREE_KIND, Tree([]).serialize())

        logger.info("Wrote tree %s for %s", address, root)
        return address

    def _is_ignored(self, path: Path) -> bool:
        return path.name in IGNORED_NAMES or path.resolve() in self.ignore

    def _store_file(self, path: Path) -> str:
        try:
            data = path.read_bytes()
        except OSError as e:
            raise StorageError("read_file", str(path), e)
        return self.store.store(BLOB_KIND, data)

    def _list_dir(self, directory: Path) -> List[Path]:
        try:
            return sorted(directory.iterdir())
        except OSError as e:
            raise StorageError("list_dir", str(directory), e)

    def _write_tree_recursive(self, directory: Path) -> Optional[str]:
        """Store a directory's tree; returns None for a directory with no files."""
        entries = []

        for child in self._list_dir(directory):
            if self._is_ignored(child) or child.is_symlink():
                continue
            if child.is_dir():
                child_address = self._write_tree_recursive(child)
                if child_address is not None:
                    entries.append(TreeEntry(DIRECTORY_MODE, child.name, child_address))
            elif child.is_file():
                entries.append(TreeEntry(REGULAR_FILE_MODE, child.name, self._store_file(child)))

        if not entries:
            return None

        tree = Tree(entries).sorted()
        return self.store.store(TREE_KIND, tree.serialize())

    def _write_flat_tree(self, root: Path) -> str:
        entries = []

        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            dirnames[:] = [
                d for d in dirnames
                if not self._is_ignored(current / d) and not (current / d).is_symlink()
            ]
            for filename in filenames:
                path = current / filename
                if self._is_ignored(path) or path.is_symlink() or not path.is_file():
                    continue
                name = path.relative_to(root).as_posix()
                entries.append(TreeEntry(REGULAR_FILE_MODE, name, self._store_file(path)))

        entries.sort(key=tree_sort_key)
        return self.store.store(TREE_KIND, Tree(entries).serialize())

    # ========== Traversal ==========

    def load_tree(self, address: str) -> Tree:
        """Load a tree object, failing if the address holds another kind."""
        kind, payload = self.store.load(address)
        if kind != TREE_KIND:
            raise InvalidObjectError(f"expected tree, got {kind}", address)
        return Tree.deserialize(payload)

    def load_commit(self, address: str) -> Commit:
        """Load a commit object, failing if the address holds another kind."""
        kind, payload = self.store.load(address)
        if kind != COMMIT_KIND:
            raise InvalidObjectError(f"expected commit, got {kind}", address)
        return Commit.deserialize(payload)

    def iter_tree(
        self,
        address: str,
        prefix: str = '',
        recursive: bool = True,
    ) -> Iterator[Tuple[str, str, str]]:
        """
        Yield ``(mode, path, address)`` for every entry under a tree.

        With recursive=True, subtrees are descended into and only their
        file entries are yielded; otherwise subtrees are yielded as entries.
        """
        for entry in self.load_tree(address):
            path = f"{prefix}{entry.name}"
            if entry.is_tree and recursive:
                yield from self.iter_tree(entry.address, f"{path}/", recursive)
            else:
                yield entry.mode, path, entry.address

    # ========== Checkout ==========

    def checkout_tree(self, address: str, dest: str | Path) -> int:
        """
        Write the files of a tree into a destination directory.

        Existing files with the same paths are overwritten; nothing is
        removed.

        Returns:
            int: number of files written
        """
        dest = Path(dest).resolve()
        try:
            dest.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError("mkdir", str(dest), e)

        written = 0
        for entry in self.load_tree(address):
            target = dest.joinpath(*_safe_parts(entry.name))
            if entry.is_tree:
                written += self.checkout_tree(entry.address, target)
            elif entry.mode.startswith('10'):
                self._checkout_blob(entry.address, target)
                written += 1
            else:
                raise InvalidObjectError(
                    f"unsupported entry mode {entry.mode} for {entry.name!r}", address
                )

        logger.info("Checked out tree %s into %s (%d files)", address, dest, written)
        return written

    def checkout_commit(self, address: str, dest: str | Path) -> int:
        """Check out the tree a commit references."""
        return self.checkout_tree(self.load_commit(address).tree, dest)

    def _checkout_blob(self, address: str, target: Path) -> None:
        kind, payload = self.store.load(address)
        if kind != BLOB_KIND:
            raise InvalidObjectError(f"expected blob, got {kind}", address)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(payload)
        except OSError as e:
            raise StorageError("write_file", str(target), e)


def _safe_parts(name: str) -> Tuple[str, ...]:
    """
    Split an entry name into path segments that stay inside the destination.

    Flat trees carry ``/``-separated relative paths; nested trees carry a
    single segment.
    """
    path = PurePosixPath(name)
    if path.is_absolute() or '\\' in name:
        raise MalformedTreeError(f"entry name escapes checkout root: {name!r}")
    parts = path.parts
    if not parts or any(part in ('.', '..') for part in name.split('/')):
        raise MalformedTreeError(f"entry name escapes checkout root: {name!r}")
    return parts
