"""
Test package structure and exports.

Verifies that the package is correctly structured and exposes the right API.
"""

import mygit
from mygit import (
    Repository,
    Blob,
    Commit,
    Tree,
    TreeEntry,
    ObjectStoreError,
    ObjectNotFoundError,
    ObjectCorruptedError,
    IntegrityViolationError,
    MalformedTreeError,
    InvalidObjectError,
    StorageError,
    InvalidReferenceError,
)


def test_package_exports():
    """Verify that the package exposes the expected classes."""
    for name in mygit.__all__:
        assert getattr(mygit, name) is not None


def test_error_hierarchy():
    """Every error derives from ObjectStoreError."""
    for error in (
        ObjectNotFoundError,
        ObjectCorruptedError,
        IntegrityViolationError,
        MalformedTreeError,
        InvalidObjectError,
        StorageError,
        InvalidReferenceError,
    ):
        assert issubclass(error, ObjectStoreError)


def test_repository_initialization(tmp_path):
    """Verify that the repository can be initialized."""
    repo = Repository(tmp_path)
    repo.initialize()

    assert (tmp_path / "objects").exists()
    assert (tmp_path / "refs").exists()
    assert (tmp_path / "HEAD").exists()


def test_statistics(tmp_path):
    repo = Repository(tmp_path)
    repo.initialize()
    blob = repo.hash_object(b"x")
    repo.commit_tree(repo.put_tree([TreeEntry("100644", "x", blob)]), "msg")

    stats = repo.get_statistics()

    assert stats['total_objects'] == 3
    assert stats['blob_count'] == 1
    assert stats['tree_count'] == 1
    assert stats['commit_count'] == 1


def test_models_are_value_objects():
    assert Blob(b"a") == Blob(b"a")
    assert Commit("a" * 40, "m") == Commit("a" * 40, "m")
    assert Tree([]) == Tree([])


def test_subpackage_imports():
    """Verify that subpackages are importable (even if not exposed directly)."""
    import mygit.storage.object_store
    import mygit.storage.transfer
    import mygit.integrity.hashing
    import mygit.integration.worktree
    import mygit.cli

    assert mygit.storage.object_store.ObjectStore is not None
    assert mygit.integrity.hashing.compute_hash is not None
