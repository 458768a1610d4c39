"""MinIO implementation of the BlobStore interface."""

import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import BinaryIO

from minio import Minio
from minio.error import S3Error

from stenopro.exceptions import (
    AudioNotFoundError,
    StorageDeleteError,
    StorageDownloadError,
    StorageUploadError,
)
from stenopro.logging import setup_logging

from .interfaces import BlobStore

logger = setup_logging()

_MISSING_CODES = frozenset({"NoSuchKey", "NoSuchObject", "NotFound"})


class MinioBlobStore(BlobStore):
    """Handles audio storage operations using MinIO."""

    def __init__(self, client: Minio, bucket_name: str):
        self._client = client
        self._bucket_name = bucket_name

    def save(
        self,
        object_name: str,
        data: BinaryIO,
        size: int,
        content_type: str,
    ) -> None:
        try:
            self._client.put_object(
                bucket_name=self._bucket_name,
                object_name=object_name,
                data=data,
                length=size,
                content_type=content_type,
            )
            logger.info(
                "File uploaded to MinIO",
                extra={
                    "object_name": object_name,
                    "size": size,
                    "bucket": self._bucket_name,
                },
            )
        except Exception as e:
            logger.exception(
                "MinIO upload failed",
                extra={"object_name": object_name},
            )
            raise StorageUploadError(object_name, e) from e

    def exists(self, object_name: str) -> bool:
        try:
            self._client.stat_object(
                bucket_name=self._bucket_name, object_name=object_name
            )
            return True
        except S3Error as e:
            if e.code in _MISSING_CODES:
                return False
            logger.exception(
                "MinIO stat failed",
                extra={"object_name": object_name},
            )
            raise StorageDownloadError(object_name, e) from e

    def delete(self, object_name: str) -> None:
        try:
            self._client.remove_object(
                bucket_name=self._bucket_name, object_name=object_name
            )
            logger.info(
                "File deleted from MinIO",
                extra={"object_name": object_name, "bucket": self._bucket_name},
            )
        except Exception as e:
            logger.exception(
                "MinIO delete failed",
                extra={"object_name": object_name},
            )
            raise StorageDeleteError(object_name, e) from e

    @contextmanager
    def local_copy(self, object_name: str) -> Iterator[Path]:
        with tempfile.TemporaryDirectory(prefix="stenopro-") as temp_dir:
            target = Path(temp_dir) / PurePosixPath(object_name).name
            try:
                self._client.fget_object(
                    bucket_name=self._bucket_name,
                    object_name=object_name,
                    file_path=str(target),
                )
            except S3Error as e:
                if e.code in _MISSING_CODES:
                    raise AudioNotFoundError(object_name) from e
                logger.exception(
                    "MinIO download failed",
                    extra={"object_name": object_name},
                )
                raise StorageDownloadError(object_name, e) from e
            except Exception as e:
                logger.exception(
                    "MinIO download failed",
                    extra={"object_name": object_name},
                )
                raise StorageDownloadError(object_name, e) from e

            logger.info(
                "File downloaded from MinIO",
                extra={"object_name": object_name, "bucket": self._bucket_name},
            )
            yield target

    def ensure_ready(self) -> None:
        if not self._client.bucket_exists(bucket_name=self._bucket_name):
            self._client.make_bucket(bucket_name=self._bucket_name)
            logger.info("Bucket created", extra={"bucket_name": self._bucket_name})
        else:
            logger.info(
                "Bucket already exists", extra={"bucket_name": self._bucket_name}
            )
