"""
Blob object model.

Blobs store raw file content.
"""

from ..integrity.hashing import compute_object_hash

BLOB_KIND = 'blob'
REGULAR_FILE_MODE = '100644'


class Blob:
    """
    Immutable blob object containing raw data.

    Blobs are leaf objects - they contain no references.
    """

    kind = BLOB_KIND

    def __init__(self, data: bytes):
        self.data = bytes(data)

    def serialize(self) -> bytes:
        """Blob payload is the raw data itself."""
        return self.data

    def compute_hash(self) -> str:
        """Compute content address of this blob."""
        return compute_object_hash(self.kind, self.data)

    def __eq__(self, other) -> bool:
        return isinstance(other, Blob) and other.data == self.data

    def __hash__(self) -> int:
        return hash(self.data)

    def __repr__(self) -> str:
        size = len(self.data)
        hash_preview = self.compute_hash()[:8]
        return f"Blob(size={size}, hash={hash_preview}...)"
