"""
Storage Interface - Abstract base class for all storage implementations.
Repositories only talk to this interface, so the local filesystem backend can be
swapped for an object store without touching domain code.
"""

from abc import ABC, abstractmethod
from typing import Optional, List


class StorageError(Exception):
    """Raised when the underlying storage backend fails."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class StorageInterface(ABC):
    """
    Abstract storage interface that defines the contract for all storage implementations.
    """

    @abstractmethod
    async def save(self, path: str, content: bytes | str) -> None:
        """
        Save content to the specified path, replacing any previous content.

        Args:
            path: Relative path (e.g., "users/123456.json")
            content: Content to save (bytes or str)

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def load(self, path: str) -> Optional[bytes]:
        """
        Load content from the specified path.

        Args:
            path: Relative path to load from

        Returns:
            Optional[bytes]: File content as bytes, or None if file doesn't exist
        """
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check if a file exists at the specified path."""
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """
        Delete file at the specified path.

        Returns:
            bool: True if a file was deleted, False if it did not exist
        """
        pass

    @abstractmethod
    async def list(self, path: str, pattern: str = "*", recursive: bool = False) -> List[str]:
        """
        List files in the specified directory.

        Args:
            path: Directory path to list
            pattern: Glob pattern to filter files (e.g., "*.json")
            recursive: Whether to list files recursively

        Returns:
            List[str]: Sorted relative file paths
        """
        pass
