"""
Bulk export/import of an object store.

Copies objects between two store roots on the local filesystem.
"""

import logging
import shutil
from pathlib import Path

from ..errors import StorageError
from .layout import StorageLayout

logger = logging.getLogger(__name__)


class StoreTransfer:
    """
    Copies the on-disk layout of one store into another.

    Objects are immutable and content-addressed, so:
    - An object already present at the destination is skipped
    - Copying is safe to repeat and to interrupt
    - HEAD and refs/ are copied as-is, overwriting the destination's
    """

    def __init__(self, source: StorageLayout, destination: StorageLayout):
        """
        Initialize transfer between two layouts.

        source: layout to read from; must already be initialized
        destination: layout to write to; initialized on demand
        """
        self.source = source
        self.destination = destination

    def copy_objects(self) -> int:
        """
        Copy every object missing from the destination.

        Each file is copied to a temporary name then renamed into its
        bucket, so readers never observe a partial object.

        Returns number of objects copied.
        """
        copied = 0

        for address in self.source.list_all_objects():
            if self.destination.object_exists(address):
                continue

            src_path = self.source.get_object_path(address)
            dst_path = self.destination.get_object_path(address)
            tmp_path = dst_path.with_name(f".tmp_{dst_path.name}")

            self.destination.ensure_object_directory(address)
            try:
                shutil.copyfile(src_path, tmp_path)
                tmp_path.replace(dst_path)
            except OSError as e:
                raise StorageError("copy_object", str(src_path), e)

            copied += 1

        return copied

    def copy_refs(self) -> None:
        """Copy HEAD and the refs/ tree."""
        try:
            if self.source.head_file.is_file():
                shutil.copyfile(self.source.head_file, self.destination.head_file)
            if self.source.refs_dir.is_dir():
                shutil.copytree(
                    self.source.refs_dir,
                    self.destination.refs_dir,
                    dirs_exist_ok=True,
                )
        except OSError as e:
            raise StorageError("copy_refs", str(self.source.git_dir), e)

    def run(self) -> int:
        """
        Run a full transfer.

        Returns number of objects copied.
        """
        if not self.source.is_initialized():
            raise StorageError(
                "clone",
                str(self.source.git_dir),
                FileNotFoundError(f"no object store at {self.source.git_dir}"),
            )

        self.destination.initialize()
        copied = self.copy_objects()
        self.copy_refs()

        logger.info(
            "Copied %d objects from %s to %s",
            copied, self.source.git_dir, self.destination.git_dir,
        )
        return copied


def export_store(source_dir: str | Path, destination_dir: str | Path) -> int:
    """Copy a store rooted at source_dir into destination_dir."""
    transfer = StoreTransfer(StorageLayout(Path(source_dir)), StorageLayout(Path(destination_dir)))
    return transfer.run()
