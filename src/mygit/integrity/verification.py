"""
Integrity verification for objects, trees and commits.

Provides tamper detection and recursive verification.
"""

from typing import Callable, List, Optional, Set, Tuple

from ..errors import ObjectStoreError
from ..model.commit import COMMIT_KIND, Commit
from ..model.tree import TREE_KIND, deserialize
from .hashing import compute_object_hash

LoadFunc = Callable[[str], Tuple[str, bytes]]


def detect_tampering(address: str, kind: str, payload: bytes) -> bool:
    """
    Detect if an object has been tampered with.

    Compares the address against the recomputed hash of kind and payload.

    Returns True if tampering detected, False otherwise.
    """
    return compute_object_hash(kind, payload) != address


def extract_references(kind: str, payload: bytes) -> List[str]:
    """
    Extract all object references from an object.

    References are found in:
    - commit: the tree line
    - tree: every entry's address
    - blob and unknown kinds: none (leaf objects)

    Raises MalformedTreeError or InvalidObjectError for broken payloads.
    """
    if kind == TREE_KIND:
        return [entry.address for entry in deserialize(payload)]
    if kind == COMMIT_KIND:
        return [Commit.deserialize(payload).tree]
    return []


def verify_recursive(
    address: str,
    load_func: LoadFunc,
    visited: Optional[Set[str]] = None,
) -> Tuple[bool, List[str]]:
    """
    Recursively verify an object and everything it references.

    load_func: callable returning ``(kind, payload)`` for an address; it
        must raise ObjectStoreError subclasses for missing or broken objects.
    visited: set of already-verified addresses, shared across calls.

    Returns (is_valid, errors) where errors is list of error messages.
    """
    if visited is None:
        visited = set()

    errors = []
    pending = [address]

    while pending:
        current = pending.pop()
        if current in visited:
            continue
        visited.add(current)

        try:
            kind, payload = load_func(current)
        except ObjectStoreError as e:
            errors.append(f"Failed to load {current}: {e}")
            continue

        if detect_tampering(current, kind, payload):
            errors.append(f"Corruption in {current}: content does not match address")
            continue

        try:
            refs = extract_references(kind, payload)
        except ObjectStoreError as e:
            errors.append(f"Invalid {kind} {current}: {e}")
            continue

        pending.extend(reversed(refs))

    return len(errors) == 0, errors
