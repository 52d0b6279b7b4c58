"""
Canonical object framing for deterministic hashing.

Every object is hashed and stored as ``b"<kind> <size>\\0" + payload``.
"""

from typing import Tuple


def validate_kind(kind: str) -> None:
    """
    Validate that a kind can be framed.

    Raises ValueError if the kind is empty, contains a space or NUL, or
    cannot be encoded as UTF-8.
    """
    if not kind:
        raise ValueError("Object kind cannot be empty")
    if ' ' in kind or '\x00' in kind:
        raise ValueError(f"Object kind must not contain space or NUL: {kind!r}")
    try:
        kind.encode('utf-8')
    except UnicodeEncodeError as e:
        raise ValueError(f"Object kind is not encodable as UTF-8: {e.reason}")


def frame_header(kind: str, size: int) -> bytes:
    """Encode the ``<kind> <size>\\0`` header."""
    return f"{kind} {size}\x00".encode('utf-8')


def frame_object(kind: str, payload: bytes) -> bytes:
    """
    Encode a kind and payload to the canonical framed bytes.

    Rules:
    - Kind as UTF-8, one space, decimal byte length, one NUL
    - No padding on the length
    - Payload appended verbatim

    Same input always produces same output.
    """
    validate_kind(kind)
    return frame_header(kind, len(payload)) + payload


def parse_header(header: bytes) -> Tuple[str, int]:
    """
    Parse a header (without its trailing NUL) into ``(kind, size)``.

    Raises ValueError if there is no space or the size is not decimal.
    """
    kind_bytes, sep, size_bytes = header.partition(b' ')
    if not sep:
        raise ValueError("Header has no space separator")
    if not kind_bytes:
        raise ValueError("Header has empty kind")
    if not size_bytes.isdigit():
        raise ValueError(f"Header size is not decimal: {size_bytes!r}")
    try:
        kind = kind_bytes.decode('utf-8')
    except UnicodeDecodeError as e:
        raise ValueError(f"Header kind is not UTF-8: {e}")
    return kind, int(size_bytes)


def unframe_object(data: bytes) -> Tuple[str, bytes]:
    """
    Split framed bytes into ``(kind, payload)``.

    Raises ValueError if there is no NUL separator, the header cannot be
    parsed, or the declared size does not match the payload length.
    """
    nul = data.find(b'\x00')
    if nul < 0:
        raise ValueError("No NUL separator after header")
    kind, size = parse_header(data[:nul])
    payload = data[nul + 1:]
    if size != len(payload):
        raise ValueError(
            f"Declared size {size} does not match payload length {len(payload)}"
        )
    return kind, payload
