"""
Tree object model and binary codec.

A tree payload is a concatenation of ``<mode> <name>\\0<20 raw address bytes>``
records with no separator between them.
"""

from typing import Iterable, List, NamedTuple

from ..errors import MalformedTreeError
from ..integrity.hashing import (
    RAW_ADDRESS_LENGTH,
    address_to_bytes,
    bytes_to_address,
    compute_object_hash,
    is_valid_address,
)

TREE_KIND = 'tree'
DIRECTORY_MODE = '40000'

# Names are raw filesystem bytes; undecodable bytes round-trip as lone surrogates.
NAME_ERRORS = 'surrogateescape'


class TreeEntry(NamedTuple):
    """One ``(mode, name, address)`` record of a tree."""

    mode: str
    name: str
    address: str

    @property
    def is_tree(self) -> bool:
        return self.mode == DIRECTORY_MODE


def tree_sort_key(entry: TreeEntry) -> str:
    """
    Sort key giving git's canonical entry order.

    Directories sort as if their name ended with ``/``.
    """
    return entry.name + '/' if entry.is_tree else entry.name


def _encode_entry(entry: TreeEntry) -> bytes:
    mode, name, address = entry
    if not mode or ' ' in mode or '\x00' in mode:
        raise MalformedTreeError(f"invalid mode {mode!r} for entry {name!r}")
    if not name or '\x00' in name:
        raise MalformedTreeError(f"invalid entry name {name!r}")
    if not is_valid_address(address):
        raise MalformedTreeError(f"invalid address {address!r} for entry {name!r}")
    try:
        header = f"{mode} {name}\x00".encode('utf-8', NAME_ERRORS)
    except UnicodeEncodeError as e:
        raise MalformedTreeError(f"unencodable entry name {name!r}: {e.reason}")
    return header + address_to_bytes(address)


def serialize(entries: Iterable[TreeEntry]) -> bytes:
    """
    Serialize entries in the order given.

    Callers wanting reproducible addresses across platforms sort with
    ``tree_sort_key`` first.
    """
    return b''.join(_encode_entry(TreeEntry(*entry)) for entry in entries)


def deserialize(payload: bytes) -> List[TreeEntry]:
    """
    Decode a tree payload back into its entries.

    Raises MalformedTreeError when a record is truncated, lacks its
    space separator, or the payload does not end on a record boundary.
    """
    entries = []
    cursor = 0
    end = len(payload)

    while cursor < end:
        nul = payload.find(b'\x00', cursor)
        if nul < 0:
            raise MalformedTreeError("entry header has no NUL terminator", cursor)

        mode_bytes, sep, name_bytes = payload[cursor:nul].partition(b' ')
        if not sep:
            raise MalformedTreeError("entry header has no space separator", cursor)
        if not mode_bytes or not name_bytes:
            raise MalformedTreeError("entry has empty mode or name", cursor)

        raw_start = nul + 1
        raw_end = raw_start + RAW_ADDRESS_LENGTH
        if raw_end > end:
            raise MalformedTreeError(
                f"expected {RAW_ADDRESS_LENGTH} address bytes, found {end - raw_start}",
                raw_start,
            )

        try:
            mode = mode_bytes.decode('ascii')
        except UnicodeDecodeError as e:
            raise MalformedTreeError(f"undecodable entry mode: {e}", cursor)
        name = name_bytes.decode('utf-8', NAME_ERRORS)

        entries.append(TreeEntry(mode, name, bytes_to_address(payload[raw_start:raw_end])))
        cursor = raw_end

    return entries


class Tree:
    """
    Immutable tree object listing named children.

    Entries can reference:
    - Blobs (regular files)
    - Other trees (subdirectories)
    """

    kind = TREE_KIND

    def __init__(self, entries: Iterable[TreeEntry]):
        self.entries = tuple(TreeEntry(*entry) for entry in entries)

    def serialize(self) -> bytes:
        return serialize(self.entries)

    @classmethod
    def deserialize(cls, payload: bytes) -> 'Tree':
        return cls(deserialize(payload))

    def sorted(self) -> 'Tree':
        """Return a new tree with entries in canonical order."""
        return Tree(sorted(self.entries, key=tree_sort_key))

    def compute_hash(self) -> str:
        """Compute content address of this tree."""
        return compute_object_hash(self.kind, self.serialize())

    def names(self) -> List[str]:
        return [entry.name for entry in self.entries]

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __eq__(self, other) -> bool:
        return isinstance(other, Tree) and other.entries == self.entries

    def __hash__(self) -> int:
        return hash(self.entries)

    def __repr__(self) -> str:
        hash_preview = self.compute_hash()[:8]
        return f"Tree(entries={len(self.entries)}, hash={hash_preview}...)"
