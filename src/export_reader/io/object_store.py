"""Object stores holding export shard files."""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from google.api_core.exceptions import GoogleAPIError
from google.cloud import storage

from ..types import ErrorType, ObjectStoreInterface, ProcessingError


class GCSObjectStore(ObjectStoreInterface):
    """
    Object store backed by Google Cloud Storage.

    Listing pages are fetched lazily by the client iterator, so discovery
    blocks once per page.
    """

    def __init__(self, client: Optional[storage.Client] = None,
                 project: Optional[str] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the GCS object store.

        Args:
            client: Optional storage client; created from the ambient
                credentials when omitted
            project: Optional project used when creating the client
            logger: Optional logger instance
        """
        self.client = client or storage.Client(project=project)
        self.logger = logger or logging.getLogger(__name__)

    def list_objects(self, bucket: str, prefix: str) -> Iterator[str]:
        """
        Yield names of objects in bucket starting with prefix.

        Raises:
            ProcessingError: If listing fails
        """
        self.logger.info(f"Listing gs://{bucket}/{prefix}*")
        try:
            for blob in self.client.list_blobs(bucket, prefix=prefix):
                yield blob.name
        except GoogleAPIError as e:
            raise ProcessingError(
                f"Failed to list gs://{bucket}/{prefix}: {e}",
                ErrorType.DISCOVERY,
                context={"bucket": bucket, "prefix": prefix}
            ) from e

    @contextmanager
    def open(self, bucket: str, name: str) -> Iterator[BinaryIO]:
        """
        Open an object for streaming reads.

        Raises:
            ProcessingError: If the object cannot be opened
        """
        blob = self.client.bucket(bucket).blob(name)
        try:
            reader = blob.open("rb")
        except GoogleAPIError as e:
            raise ProcessingError(
                f"Failed to open gs://{bucket}/{name}: {e}",
                ErrorType.IO,
                context={"bucket": bucket, "name": name}
            ) from e

        try:
            yield reader
        finally:
            reader.close()


class LocalObjectStore(ObjectStoreInterface):
    """
    Object store reading a local directory tree laid out like a bucket.

    Object ``<name>`` of bucket ``<bucket>`` is the file
    ``<root>/<bucket>/<name>``.
    """

    def __init__(self, root: Path, logger: Optional[logging.Logger] = None):
        """
        Initialize the local object store.

        Args:
            root: Directory holding one subdirectory per bucket
            logger: Optional logger instance
        """
        self.root = Path(root)
        self.logger = logger or logging.getLogger(__name__)

    def list_objects(self, bucket: str, prefix: str) -> Iterator[str]:
        """
        Yield names of files in bucket starting with prefix, in name order.

        Raises:
            ProcessingError: If the bucket directory does not exist
        """
        bucket_path = self.root / bucket
        if not bucket_path.is_dir():
            raise ProcessingError(
                f"Bucket directory not found: {bucket_path}",
                ErrorType.DISCOVERY,
                context={"bucket": bucket, "prefix": prefix}
            )

        names = sorted(
            path.relative_to(bucket_path).as_posix()
            for path in bucket_path.rglob("*")
            if path.is_file()
        )
        for name in names:
            if name.startswith(prefix):
                yield name

    @contextmanager
    def open(self, bucket: str, name: str) -> Iterator[BinaryIO]:
        """
        Open a file for reading.

        Raises:
            ProcessingError: If the file cannot be opened
        """
        path = self.root / bucket / name
        try:
            stream = path.open("rb")
        except OSError as e:
            raise ProcessingError(
                f"Failed to open {path}: {e}",
                ErrorType.IO,
                context={"bucket": bucket, "name": name}
            ) from e

        with stream:
            yield stream
