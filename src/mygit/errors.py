"""
Error types for object store operations.

All errors are explicit and never silent.
"""


class ObjectStoreError(Exception):
    """Base exception for all object store errors."""
    pass


class ObjectNotFoundError(ObjectStoreError):
    """Raised when a requested object does not exist."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Object not found: {address}")


class ObjectCorruptedError(ObjectStoreError):
    """Raised when a stored object cannot be decompressed or its header framing is broken."""

    def __init__(self, address: str, reason: str):
        self.address = address
        self.reason = reason
        super().__init__(f"Object corrupted: {address}\nReason: {reason}")


class IntegrityViolationError(ObjectStoreError):
    """Raised when a stored object's bytes do not hash back to its address."""

    def __init__(self, address: str, actual: str):
        self.address = address
        self.expected = address
        self.actual = actual
        super().__init__(
            f"Integrity violation: {address}\n"
            f"Expected hash: {address}\n"
            f"Actual hash: {actual}"
        )


class MalformedTreeError(ObjectStoreError):
    """Raised when a tree payload violates the entry record layout."""

    def __init__(self, reason: str, offset: int = None):
        self.reason = reason
        self.offset = offset
        msg = f"Malformed tree: {reason}"
        if offset is not None:
            msg += f" (at byte {offset})"
        super().__init__(msg)


class InvalidObjectError(ObjectStoreError):
    """Raised when an object kind or payload is malformed or invalid."""

    def __init__(self, reason: str, address: str = None):
        self.reason = reason
        self.address = address
        msg = f"Invalid object: {reason}"
        if address:
            msg += f" (hash: {address})"
        super().__init__(msg)


class StorageError(ObjectStoreError):
    """Raised when filesystem operations fail."""

    def __init__(self, operation: str, path: str, cause: Exception = None):
        self.operation = operation
        self.path = path
        self.cause = cause
        msg = f"Storage error during {operation}: {path}"
        if cause:
            msg += f"\nCause: {cause}"
        super().__init__(msg)


class InvalidReferenceError(ObjectStoreError):
    """Raised when an object address is invalid or ambiguous."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid reference: {reason}")
