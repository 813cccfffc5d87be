import os

from audio_audit.errors import StorageError
from .base import BaseStorage


class LocalStorage(BaseStorage):
    """Storage backend over a local directory tree that mirrors the bucket layout."""

    def __init__(self, root: str):
        self.root = str(root)

    def _get_absolute_filename(self, path: str) -> str:
        """Constructs the absolute filename in local storage.

        Args:
            path (str): Object key relative to the root directory.

        Return:
            str: The absolute filename in local storage.
        """
        return os.path.abspath(os.path.join(self.root, path))

    def file_exist(self, path: str) -> bool:
        """
        Check if a file exists in local storage.

        Args:
            path (str): Object key relative to the root directory.

        Returns:
            bool: True if the file exists, False otherwise.

        Raises:
            StorageError: If the root directory itself is unavailable.
        """
        if not os.path.isdir(self.root):
            raise StorageError(
                self._get_absolute_filename(path),
                FileNotFoundError(f"storage root does not exist: {self.root}"),
            )
        return os.path.isfile(self._get_absolute_filename(path))
