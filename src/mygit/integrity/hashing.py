"""
Content-addressed hashing using SHA-1.

Provides deterministic address computation for all object kinds.
"""

import hashlib

from .canonical import frame_object

ADDRESS_LENGTH = 40
RAW_ADDRESS_LENGTH = 20

_HEX_DIGITS = frozenset('0123456789abcdef')


def compute_hash(data: bytes) -> str:
    """
    Compute hash of raw bytes.

    Returns lowercase hex-encoded SHA-1 string.
    """
    return hashlib.sha1(data).hexdigest()


def compute_object_hash(kind: str, payload: bytes) -> str:
    """
    Compute the address of an object from its kind and payload.

    The hash covers the framed bytes ``<kind> <len>\\0<payload>``, so:
    - Same kind and payload always produce the same address
    - The same payload under a different kind has a different address
    """
    return compute_hash(frame_object(kind, payload))


def is_valid_address(address: str) -> bool:
    """Check that a string is exactly 40 lowercase hex characters."""
    return (
        isinstance(address, str)
        and len(address) == ADDRESS_LENGTH
        and all(c in _HEX_DIGITS for c in address)
    )


def is_hex_prefix(prefix: str) -> bool:
    """Check that a string is a non-empty run of lowercase hex characters."""
    return bool(prefix) and all(c in _HEX_DIGITS for c in prefix)


def address_to_bytes(address: str) -> bytes:
    """
    Convert a 40-hex address to its 20 raw bytes.

    Raises ValueError if the address is not valid.
    """
    if not is_valid_address(address):
        raise ValueError(f"Not a valid address: {address!r}")
    return bytes.fromhex(address)


def bytes_to_address(raw: bytes) -> str:
    """
    Convert 20 raw bytes to a 40-hex address.

    Raises ValueError if the input is not exactly 20 bytes.
    """
    if len(raw) != RAW_ADDRESS_LENGTH:
        raise ValueError(f"Raw address must be {RAW_ADDRESS_LENGTH} bytes, got {len(raw)}")
    return raw.hex()


def get_hash_prefix(hash_str: str, prefix_length: int = 2) -> str:
    """
    Get prefix of hash for directory sharding.

    Default is 2 characters, creating 256 subdirectories.
    """
    if len(hash_str) < prefix_length:
        raise ValueError(f"Hash too short for prefix length {prefix_length}")
    return hash_str[:prefix_length]
