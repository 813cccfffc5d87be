import asyncio
from abc import ABC, abstractmethod


class BaseStorage(ABC):
    """
    Abstract base class for storage backends probed by the audit.

    Implementations provide a blocking ``file_exist``; ``exists`` runs it in a
    worker thread so many probes can be in flight from one event loop.
    """

    @abstractmethod
    def file_exist(self, path: str) -> bool:
        """
        Check if an object exists.

        Args:
            path (str): Object key relative to the storage root.

        Returns:
            bool: True if the object exists, False if it is confirmed absent.

        Raises:
            StorageError: If the backend could not answer.
        """

    @abstractmethod
    def _get_absolute_filename(self, path: str) -> str:
        """Constructs the absolute location of an object, for log messages.

        Args:
            path (str): Object key relative to the storage root.

        Returns:
            str: The absolute filename/URL.
        """

    async def exists(self, path: str) -> bool:
        """Asynchronous wrapper around :meth:`file_exist`."""
        return await asyncio.to_thread(self.file_exist, path)

    def describe(self) -> str:
        """Human readable location of the storage root."""
        return self._get_absolute_filename("")
