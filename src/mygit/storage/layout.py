"""
Filesystem layout for object storage.

Implements content-addressed storage with directory sharding.
"""

import logging
from pathlib import Path

from ..errors import StorageError, InvalidReferenceError
from ..integrity.hashing import get_hash_prefix, is_valid_address

logger = logging.getLogger(__name__)

HEAD_CONTENTS = "ref: refs/heads/main\n"


class StorageLayout:
    """
    Manages filesystem layout for content-addressed objects.

    Layout:
        git_dir/
            HEAD             # "ref: refs/heads/main\\n"
            objects/
                <2 hex>/
                    <38 hex> # zlib-compressed framed object
            refs/
    """

    def __init__(self, git_dir: Path):
        """Initialize storage layout at given root."""
        self.git_dir = Path(git_dir).resolve()
        self.objects_dir = self.git_dir / "objects"
        self.refs_dir = self.git_dir / "refs"
        self.head_file = self.git_dir / "HEAD"

    def initialize(self) -> None:
        """
        Initialize storage directory structure.

        Creates all necessary directories and the HEAD marker.
        Idempotent - safe to call multiple times.
        """
        try:
            self.git_dir.mkdir(parents=True, exist_ok=True)
            self.objects_dir.mkdir(exist_ok=True)
            self.refs_dir.mkdir(exist_ok=True)
            self.head_file.write_bytes(HEAD_CONTENTS.encode('utf-8'))
        except OSError as e:
            raise StorageError("initialize", str(self.git_dir), e)
        logger.info("Initialized object store at %s", self.git_dir)

    def is_initialized(self) -> bool:
        """Check whether the objects directory exists."""
        return self.objects_dir.is_dir()

    def get_object_path(self, address: str) -> Path:
        """
        Get filesystem path for an object by its address.

        First 2 hex characters select the bucket, the remaining 38 the file.
        """
        if not is_valid_address(address):
            raise InvalidReferenceError(f"not a 40-character hex address: {address!r}")
        prefix = get_hash_prefix(address, 2)
        return self.objects_dir / prefix / address[2:]

    def ensure_object_directory(self, address: str) -> Path:
        """Ensure the bucket directory for an object exists and return it."""
        bucket_dir = self.get_object_path(address).parent
        try:
            bucket_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError("mkdir", str(bucket_dir), e)
        return bucket_dir

    def list_all_objects(self) -> list[str]:
        """
        List all object addresses in the store.

        Scans all bucket directories; files that do not form a valid
        address (temp files, stray entries) are ignored.
        """
        objects = []

        if not self.objects_dir.exists():
            return objects

        try:
            for bucket_dir in sorted(self.objects_dir.iterdir()):
                if not bucket_dir.is_dir() or len(bucket_dir.name) != 2:
                    continue

                for obj_file in sorted(bucket_dir.iterdir()):
                    address = bucket_dir.name + obj_file.name
                    if obj_file.is_file() and is_valid_address(address):
                        objects.append(address)

        except OSError as e:
            raise StorageError("list_objects", str(self.objects_dir), e)

        return objects

    def list_bucket(self, prefix: str) -> list[str]:
        """List addresses in the bucket selected by the first 2 chars of prefix."""
        bucket_dir = self.objects_dir / get_hash_prefix(prefix, 2)
        if not bucket_dir.is_dir():
            return []
        try:
            names = sorted(f.name for f in bucket_dir.iterdir() if f.is_file())
        except OSError as e:
            raise StorageError("list_bucket", str(bucket_dir), e)
        return [
            bucket_dir.name + name for name in names
            if is_valid_address(bucket_dir.name + name)
        ]

    def object_exists(self, address: str) -> bool:
        """Check if an object exists in storage."""
        return self.get_object_path(address).is_file()

    def get_storage_stats(self) -> dict:
        """
        Get storage statistics.

        Returns dict with:
        - total_objects: number of objects
        - total_size_bytes: total compressed size in bytes
        """
        stats = {
            'total_objects': 0,
            'total_size_bytes': 0,
        }

        for address in self.list_all_objects():
            obj_path = self.get_object_path(address)
            try:
                stats['total_size_bytes'] += obj_path.stat().st_size
            except OSError as e:
                raise StorageError("stat", str(obj_path), e)
            stats['total_objects'] += 1

        return stats
