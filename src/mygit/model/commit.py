"""
Commit object model.

Commits reference one tree and carry a message.
"""

from typing import Iterable

from ..errors import InvalidObjectError
from ..integrity.hashing import compute_object_hash, is_valid_address

COMMIT_KIND = 'commit'

# Messages from argv may carry undecodable bytes as lone surrogates.
MESSAGE_ERRORS = 'surrogateescape'


def build(tree_address: str, message: str) -> bytes:
    """
    Build a commit payload: ``tree <address>\\n\\n<message>\\n``.

    The tree address is not checked against the store.
    """
    try:
        return f"tree {tree_address}\n\n{message}\n".encode('utf-8', MESSAGE_ERRORS)
    except UnicodeEncodeError as e:
        raise InvalidObjectError(f"commit message is not encodable: {e.reason}")


def join_message(tokens: Iterable[str]) -> str:
    """Join message tokens with single spaces."""
    return ' '.join(tokens)


class Commit:
    """
    Immutable commit object representing a snapshot event.

    A commit references:
    - Exactly one tree address
    - A free-form message

    There are no parent, author or timestamp fields.
    """

    kind = COMMIT_KIND

    def __init__(self, tree: str, message: str):
        self.tree = tree
        self.message = message

    def serialize(self) -> bytes:
        return build(self.tree, self.message)

    @classmethod
    def deserialize(cls, payload: bytes) -> 'Commit':
        """
        Parse a commit payload.

        Raises InvalidObjectError if the payload is not of the form
        ``tree <40-hex>\\n\\n<message>\\n``.
        """
        text = payload.decode('utf-8', MESSAGE_ERRORS)
        header, sep, body = text.partition('\n\n')
        if not sep:
            raise InvalidObjectError("commit has no blank line after header")

        key, _, tree = header.partition(' ')
        if key != 'tree' or not is_valid_address(tree):
            raise InvalidObjectError(f"commit header is not a tree line: {header!r}")

        if not body.endswith('\n'):
            raise InvalidObjectError("commit message has no trailing newline")

        return cls(tree, body[:-1])

    def compute_hash(self) -> str:
        """Compute content address of this commit."""
        return compute_object_hash(self.kind, self.serialize())

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, Commit)
            and other.tree == self.tree
            and other.message == self.message
        )

    def __hash__(self) -> int:
        return hash((self.tree, self.message))

    def __repr__(self) -> str:
        hash_preview = self.compute_hash()[:8]
        return f"Commit(tree={self.tree[:8]}..., hash={hash_preview}...)"
