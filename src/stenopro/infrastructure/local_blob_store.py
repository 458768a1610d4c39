"""Filesystem implementation of the BlobStore interface."""

import shutil
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

from stenopro.exceptions import AudioNotFoundError, StorageDeleteError, StorageUploadError
from stenopro.logging import setup_logging

from .interfaces import BlobStore

logger = setup_logging()


class LocalBlobStore(BlobStore):
    """Keeps audio files in a directory, typically a mounted volume."""

    def __init__(self, directory: Path):
        self._directory = directory

    def _path_for(self, object_name: str) -> Path:
        # Object names are generated by the upload flow; refuse anything that
        # would resolve outside the storage directory.
        path = (self._directory / object_name).resolve()
        if self._directory.resolve() not in path.parents:
            raise ValueError(f"Invalid object name '{object_name}'")
        return path

    def save(
        self,
        object_name: str,
        data: BinaryIO,
        size: int,
        content_type: str,
    ) -> None:
        try:
            path = self._path_for(object_name)
            with path.open("wb") as target:
                shutil.copyfileobj(data, target)
            logger.info(
                "File saved to local storage",
                extra={"object_name": object_name, "size": size},
            )
        except Exception as e:
            logger.exception(
                "Local storage write failed",
                extra={"object_name": object_name},
            )
            raise StorageUploadError(object_name, e) from e

    def exists(self, object_name: str) -> bool:
        return self._path_for(object_name).is_file()

    def delete(self, object_name: str) -> None:
        try:
            self._path_for(object_name).unlink(missing_ok=True)
            logger.info("File deleted from local storage", extra={"object_name": object_name})
        except OSError as e:
            logger.exception(
                "Local storage delete failed",
                extra={"object_name": object_name},
            )
            raise StorageDeleteError(object_name, e) from e

    @contextmanager
    def local_copy(self, object_name: str) -> Iterator[Path]:
        path = self._path_for(object_name)
        if not path.is_file():
            raise AudioNotFoundError(object_name)
        yield path

    def ensure_ready(self) -> None:
        if not self._directory.exists():
            self._directory.mkdir(parents=True, exist_ok=True)
            logger.info("Storage directory created", extra={"directory": str(self._directory)})
