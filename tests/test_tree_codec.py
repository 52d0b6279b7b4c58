"""
Test the tree codec.

Verifies the binary record layout and rejection of malformed payloads.
"""

import pytest

from mygit import MalformedTreeError, Tree, TreeEntry
from mygit.model.tree import deserialize, serialize, tree_sort_key

ADDR_A = "ce013625030ba8dba906f756967f9e9ca394464a"
ADDR_B = "e69de29bb2d1d6434b8b29ae775ad8c2e48c5391"


class TestSerialize:
    """Test entry encoding."""

    def test_record_layout(self):
        payload = serialize([TreeEntry("100644", "a.txt", ADDR_A)])

        assert payload == b"100644 a.txt\x00" + bytes.fromhex(ADDR_A)
        assert len(payload) == len("100644 a.txt") + 1 + 20

    def test_preserves_caller_order(self):
        entries = [
            TreeEntry("100644", "b.txt", ADDR_B),
            TreeEntry("100644", "a.txt", ADDR_A),
        ]

        assert deserialize(serialize(entries)) == entries

    def test_accepts_plain_tuples(self):
        payload = serialize([("100644", "a.txt", ADDR_A)])

        assert deserialize(payload) == [TreeEntry("100644", "a.txt", ADDR_A)]

    def test_empty_tree(self):
        assert serialize([]) == b""
        assert deserialize(b"") == []

    def test_utf8_names(self):
        entries = [TreeEntry("100644", "café.txt", ADDR_A)]

        assert deserialize(serialize(entries)) == entries

    def test_undecodable_name_bytes_round_trip(self):
        """Names decoded from raw filesystem bytes encode back to those bytes."""
        name = "caf\udce9.txt"
        payload = serialize([TreeEntry("100644", name, ADDR_A)])

        assert payload.startswith(b"100644 caf\xe9.txt\x00")
        assert deserialize(payload) == [TreeEntry("100644", name, ADDR_A)]

    def test_rejects_unencodable_name(self):
        with pytest.raises(MalformedTreeError):
            serialize([TreeEntry("100644", "bad\ud800", ADDR_A)])

    @pytest.mark.parametrize("entry", [
        TreeEntry("", "a.txt", ADDR_A),
        TreeEntry("100 644", "a.txt", ADDR_A),
        TreeEntry("100644", "", ADDR_A),
        TreeEntry("100644", "a\x00b", ADDR_A),
        TreeEntry("100644", "a.txt", "xyz"),
        TreeEntry("100644", "a.txt", ADDR_A.upper()),
    ])
    def test_rejects_invalid_entries(self, entry):
        with pytest.raises(MalformedTreeError):
            serialize([entry])


class TestDeserialize:
    """Test entry decoding."""

    def test_two_entry_round_trip(self):
        entries = [
            TreeEntry("100644", "a.txt", ADDR_A),
            TreeEntry("100644", "b.txt", ADDR_B),
        ]

        assert deserialize(serialize(entries)) == entries

    def test_names_with_spaces(self):
        """Only the first space separates mode from name."""
        entries = [TreeEntry("100644", "my file.txt", ADDR_A)]

        assert deserialize(serialize(entries)) == entries

    def test_address_bytes_may_contain_nul_and_space(self):
        address = "00" + "20" * 19
        entries = [
            TreeEntry("100644", "first", address),
            TreeEntry("40000", "second", ADDR_A),
        ]

        assert deserialize(serialize(entries)) == entries

    def test_truncated_address(self):
        payload = serialize([TreeEntry("100644", "a.txt", ADDR_A)])

        with pytest.raises(MalformedTreeError):
            deserialize(payload[:-1])

    def test_nul_with_no_address(self):
        with pytest.raises(MalformedTreeError):
            deserialize(b"100644 a.txt\x00")

    def test_missing_space(self):
        with pytest.raises(MalformedTreeError):
            deserialize(b"100644a.txt\x00" + bytes.fromhex(ADDR_A))

    def test_missing_nul(self):
        with pytest.raises(MalformedTreeError):
            deserialize(b"100644 a.txt")

    def test_trailing_garbage(self):
        payload = serialize([TreeEntry("100644", "a.txt", ADDR_A)])

        with pytest.raises(MalformedTreeError):
            deserialize(payload + b"100644 b")

    def test_empty_name(self):
        with pytest.raises(MalformedTreeError):
            deserialize(b"100644 \x00" + bytes.fromhex(ADDR_A))

    def test_error_reports_offset(self):
        payload = serialize([TreeEntry("100644", "a.txt", ADDR_A)])

        with pytest.raises(MalformedTreeError) as excinfo:
            deserialize(payload + b"bad")

        assert excinfo.value.offset == len(payload)


class TestTreeModel:
    """Test the Tree object."""

    def test_canonical_sort_puts_directories_after_dotted_files(self):
        tree = Tree([
            TreeEntry("40000", "a", ADDR_A),
            TreeEntry("100644", "a.b", ADDR_B),
            TreeEntry("100644", "B", ADDR_B),
        ])

        assert tree.sorted().names() == ["B", "a.b", "a"]

    def test_sort_key(self):
        assert tree_sort_key(TreeEntry("40000", "dir", ADDR_A)) == "dir/"
        assert tree_sort_key(TreeEntry("100644", "dir", ADDR_A)) == "dir"

    def test_round_trip_through_model(self):
        tree = Tree([TreeEntry("100644", "a.txt", ADDR_A)])

        assert Tree.deserialize(tree.serialize()) == tree
        assert len(tree) == 1
        assert list(tree)[0].name == "a.txt"
