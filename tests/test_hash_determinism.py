"""
Test hash determinism.

Verifies that same input always produces same address.
"""

import hashlib
import tempfile

import pytest

from mygit import Repository, Blob, Commit, Tree, TreeEntry
from mygit.integrity.canonical import frame_object
from mygit.integrity.hashing import compute_object_hash


class TestHashDeterminism:
    """Test that hashing is deterministic."""

    @pytest.fixture
    def store(self):
        """Create a temporary store for testing."""
        with tempfile.TemporaryDirectory() as tmpdir:
            repo = Repository(tmpdir)
            repo.initialize()
            yield repo

    def test_known_blob_address(self, store):
        """The hello blob has the well-known git address."""
        address = store.hash_object(b"hello\n")

        assert address == "ce013625030ba8dba906f756967f9e9ca394464a"
        assert store.cat_file(address) == ("blob", b"hello\n")

    def test_known_empty_blob_address(self, store):
        assert store.hash_object(b"") == "e69de29bb2d1d6434b8b29ae775ad8c2e48c5391"

    def test_known_text_blob_address(self, store):
        assert store.hash_object(b"test content\n") == "d670460b4b4aece5915caf5c68d12f560a9fe3e4"

    def test_known_empty_tree_address(self, store):
        assert store.put_tree([]) == "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

    def test_blob_hash_determinism(self, store):
        """Same blob data produces same address."""
        data = b"Hello, World!"

        hash1 = store.hash_object(data)
        hash2 = store.hash_object(data)

        assert hash1 == hash2

    def test_hash_stable_across_store_instances(self):
        """Fresh stores compute the same addresses."""
        with tempfile.TemporaryDirectory() as a, tempfile.TemporaryDirectory() as b:
            repo_a = Repository(a)
            repo_b = Repository(b)
            repo_a.initialize()
            repo_b.initialize()

            assert repo_a.hash_object(b"payload") == repo_b.hash_object(b"payload")

    def test_blob_hash_differs_with_different_data(self, store):
        """Different blob data produces different address."""
        hash1 = store.hash_object(b"data1")
        hash2 = store.hash_object(b"data2")

        assert hash1 != hash2

    def test_kind_participates_in_hash(self, store):
        """The same payload under two kinds has two addresses."""
        as_blob = store.hash_object(b"same bytes", kind="blob")
        as_other = store.hash_object(b"same bytes", kind="note")

        assert as_blob != as_other

    def test_address_is_sha1_of_framed_bytes(self, store):
        payload = b"framed"
        expected = hashlib.sha1(b"blob 6\x00framed").hexdigest()

        assert frame_object("blob", payload) == b"blob 6\x00framed"
        assert store.hash_object(payload) == expected

    def test_compute_without_write(self, store):
        """hash_object with write=False stores nothing."""
        address = store.hash_object(b"dry run", write=False)

        assert address == compute_object_hash("blob", b"dry run")
        assert not store.has_object(address)
        assert store.list_all_objects() == []

    def test_tree_hash_depends_on_entry_order(self, store):
        """Trees serialize in caller order, so order changes the address."""
        a = store.hash_object(b"a")
        b = store.hash_object(b"b")

        first = store.put_tree([TreeEntry("100644", "a", a), TreeEntry("100644", "b", b)])
        second = store.put_tree([TreeEntry("100644", "b", b), TreeEntry("100644", "a", a)])

        assert first != second

    def test_model_hash_methods_match_storage(self, store):
        """Model compute_hash methods match storage addresses."""
        blob = Blob(b"test")
        assert blob.compute_hash() == store.hash_object(b"test")

        entries = [TreeEntry("100644", "test.txt", blob.compute_hash())]
        tree = Tree(entries)
        assert tree.compute_hash() == store.put_tree(entries)

        commit = Commit(tree.compute_hash(), "message")
        assert commit.compute_hash() == store.commit_tree(tree.compute_hash(), "message")

    def test_hash_length_and_format(self, store):
        """Addresses are 40 lowercase hex characters."""
        hash_str = store.hash_object(b"test")

        assert len(hash_str) == 40
        assert all(c in '0123456789abcdef' for c in hash_str)


class TestHashCollisionResistance:
    """Test that different inputs produce different addresses."""

    @pytest.fixture
    def store(self):
        """Create a temporary store for testing."""
        with tempfile.TemporaryDirectory() as tmpdir:
            repo = Repository(tmpdir)
            repo.initialize()
            yield repo

    def test_many_blobs_unique_hashes(self, store):
        """Generate many blobs and verify all addresses are unique."""
        hashes = set()

        for i in range(100):
            hash_str = store.hash_object(f"blob_{i}".encode())
            assert hash_str not in hashes
            hashes.add(hash_str)

        assert len(hashes) == 100
        assert len(store.list_all_objects()) == 100
