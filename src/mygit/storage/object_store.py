"""
Content-addressed object storage.

Provides immutable, zlib-compressed object storage with content addressing.
"""

import logging
import os
import tempfile
import zlib
from pathlib import Path
from typing import Tuple

from ..errors import (
    ObjectNotFoundError,
    ObjectCorruptedError,
    IntegrityViolationError,
    StorageError,
    InvalidObjectError,
    InvalidReferenceError,
)
from ..integrity.canonical import frame_object, parse_header, unframe_object
from ..integrity.hashing import compute_hash, is_hex_prefix, is_valid_address
from .layout import StorageLayout

logger = logging.getLogger(__name__)

MIN_PREFIX_LENGTH = 4

# Decompressed bytes inspected per step while looking for the header NUL.
_HEADER_PEEK = 64


class ObjectStore:
    """
    Content-addressed object store with immutable objects.

    Objects are stored by the SHA-1 of their framed bytes.
    Once written, objects never change.
    """

    def __init__(self, layout: StorageLayout):
        """Initialize object store with given layout."""
        self.layout = layout

    def store(self, kind: str, payload: bytes) -> str:
        """
        Store an object and return its address.

        The object is stored immutably:
        - Address is the SHA-1 of ``<kind> <len>\\0<payload>``
        - The framed bytes are zlib-compressed
        - Object is written atomically
        - Storing an existing address rewrites identical bytes (idempotent)

        Returns the 40-character hex address.
        """
        if not isinstance(payload, (bytes, bytearray)):
            raise InvalidObjectError(f"payload must be bytes, not {type(payload).__name__}")
        try:
            framed = frame_object(kind, bytes(payload))
        except ValueError as e:
            raise InvalidObjectError(str(e))

        address = compute_hash(framed)
        obj_path = self.layout.get_object_path(address)

        self.layout.ensure_object_directory(address)
        self._write_object_atomic(obj_path, zlib.compress(framed))

        logger.debug("Stored %s %s (%d bytes)", kind, address, len(payload))
        return address

    def load(self, address: str, verify: bool = True) -> Tuple[str, bytes]:
        """
        Retrieve an object by its address as ``(kind, payload)``.

        If verify=True (default), re-hashes the framed bytes and checks
        them against the address.

        Raises ObjectNotFoundError if object doesn't exist.
        Raises ObjectCorruptedError if decompression or framing fails.
        Raises IntegrityViolationError if verification fails.
        """
        framed = self._read_framed(address)

        try:
            kind, payload = unframe_object(framed)
        except ValueError as e:
            raise ObjectCorruptedError(address, str(e))

        if verify:
            actual = compute_hash(framed)
            if actual != address:
                raise IntegrityViolationError(address, actual)

        logger.debug("Loaded %s %s (%d bytes)", kind, address, len(payload))
        return kind, payload

    def read_header(self, address: str) -> Tuple[str, int]:
        """
        Read only the ``(kind, size)`` header of an object.

        Decompresses just enough of the stream to find the header, in
        steps of ``_HEADER_PEEK`` bytes so long kinds are still found.
        """
        obj_path = self._existing_path(address)
        pending = self._read_object_file(obj_path)

        decompressor = zlib.decompressobj()
        head = b''
        try:
            while b'\x00' not in head:
                chunk = decompressor.decompress(pending, _HEADER_PEEK)
                if not chunk:
                    break
                head += chunk
                pending = decompressor.unconsumed_tail
        except zlib.error as e:
            raise ObjectCorruptedError(address, f"decompression failed: {e}")

        nul = head.find(b'\x00')
        if nul < 0:
            raise ObjectCorruptedError(address, "No NUL separator after header")
        try:
            return parse_header(head[:nul])
        except ValueError as e:
            raise ObjectCorruptedError(address, str(e))

    def compute_address(self, kind: str, payload: bytes) -> str:
        """Compute the address an object would have, without writing it."""
        try:
            return compute_hash(frame_object(kind, bytes(payload)))
        except ValueError as e:
            raise InvalidObjectError(str(e))

    def has_object(self, address: str) -> bool:
        """Check if an object exists in the store."""
        return self.layout.object_exists(address)

    def list_all_objects(self) -> list[str]:
        """List all object addresses in the store."""
        return self.layout.list_all_objects()

    def resolve_prefix(self, prefix: str) -> str:
        """
        Expand an abbreviated address to the unique full address.

        Raises InvalidReferenceError for short, non-hex or ambiguous prefixes.
        Raises ObjectNotFoundError if nothing matches.
        """
        prefix = prefix.lower()
        if is_valid_address(prefix):
            return prefix
        if not is_hex_prefix(prefix) or len(prefix) > 40:
            raise InvalidReferenceError(f"not a hex address: {prefix!r}")
        if len(prefix) < MIN_PREFIX_LENGTH:
            raise InvalidReferenceError(
                f"prefix {prefix!r} shorter than {MIN_PREFIX_LENGTH} characters"
            )

        matches = [a for a in self.layout.list_bucket(prefix) if a.startswith(prefix)]
        if not matches:
            raise ObjectNotFoundError(prefix)
        if len(matches) > 1:
            raise InvalidReferenceError(
                f"prefix {prefix!r} is ambiguous ({len(matches)} matches)"
            )
        return matches[0]

    def get_stats(self) -> dict:
        """Get storage statistics."""
        return self.layout.get_storage_stats()

    def _existing_path(self, address: str) -> Path:
        obj_path = self.layout.get_object_path(address)
        if not obj_path.is_file():
            raise ObjectNotFoundError(address)
        return obj_path

    def _read_framed(self, address: str) -> bytes:
        """Read and decompress the framed bytes of an object."""
        obj_path = self._existing_path(address)
        data = self._read_object_file(obj_path)
        try:
            return zlib.decompress(data)
        except zlib.error as e:
            raise ObjectCorruptedError(address, f"decompression failed: {e}")

    def _read_object_file(self, path: Path) -> bytes:
        """Read object file contents."""
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError("read_file", str(path), e)

    def _write_object_atomic(self, path: Path, data: bytes) -> None:
        """
        Write object file atomically.

        Uses temp file + rename so readers never see a partial stream.
        """
        dir_path = path.parent
        fd = None
        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(
                dir=str(dir_path),
                prefix='.tmp_',
            )

            with os.fdopen(fd, 'wb') as f:
                fd = None
                f.write(data)

            os.replace(temp_path, path)
            temp_path = None

        except OSError as e:
            if fd is not None:
                os.close(fd)
            if temp_path is not None and os.path.exists(temp_path):
                os.unlink(temp_path)
            raise StorageError("write_file", str(path), e)
