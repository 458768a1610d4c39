"""Abstract interface for audio blob storage."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from pathlib import Path
from typing import BinaryIO


class BlobStore(ABC):
    """Abstract base class for audio storage backends."""

    @abstractmethod
    def save(
        self,
        object_name: str,
        data: BinaryIO,
        size: int,
        content_type: str,
    ) -> None:
        """
        Stores an uploaded audio file.

        Args:
            object_name: The destination name in storage.
            data: File-like object containing the audio.
            size: Size of the file in bytes.
            content_type: MIME type of the file.

        Raises:
            StorageUploadError: If the upload fails.
        """

    @abstractmethod
    def exists(self, object_name: str) -> bool:
        """Reports whether the named audio file is still stored."""

    @abstractmethod
    def delete(self, object_name: str) -> None:
        """
        Removes an audio file. Deleting a missing file is not an error.

        Raises:
            StorageDeleteError: If the backend refuses the deletion.
        """

    @abstractmethod
    def local_copy(self, object_name: str) -> AbstractContextManager[Path]:
        """
        Resolves a stored file to a path on the local filesystem.

        The path is only guaranteed to exist inside the ``with`` block;
        backends that download to a temporary file remove it on exit.

        Raises:
            AudioNotFoundError: If the file is not stored.
            StorageDownloadError: If fetching the file fails.
        """

    @abstractmethod
    def ensure_ready(self) -> None:
        """Creates the bucket or directory backing the store if needed."""
