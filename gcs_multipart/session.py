"""Caller-side bookkeeping for a single multipart upload.

MultipartClient keeps no record of upload sessions. MultipartUpload is a
thin helper on top of it that remembers the upload ID and the ETag of
each uploaded part so the Complete call can cite them:
- Initiate the upload
- Track uploaded parts
- Complete or abort the upload
"""

import logging
from typing import Any, Mapping, Optional

from gcs_multipart.client import MultipartClient
from gcs_multipart.models import (
    AbortMultipartUploadRequest,
    CompleteMultipartUploadRequest,
    CompleteMultipartUploadResult,
    CompletePart,
    InitiateMultipartUploadRequest,
    UploadObjectPartRequest,
    UploadObjectPartResult,
)

logger = logging.getLogger(__name__)


class MultipartUpload:
    """Manages the lifecycle of one multipart upload.

    Can be used as a context manager: the upload is initiated on entry
    and aborted if the block raises.
    """

    def __init__(
        self,
        client: MultipartClient,
        bucket: str,
        key: str,
        custom_metadata: Optional[Mapping[str, str]] = None,
    ):
        self.client = client
        self.bucket = bucket
        self.key = key
        self.custom_metadata = dict(custom_metadata or {})
        self.upload_id: Optional[str] = None
        self.uploaded_parts: dict[int, str] = {}

    def initiate(self) -> str:
        """Initiate the upload and remember its ID.

        Returns:
            The upload ID assigned by the service.
        """
        result = self.client.initiate_multipart_upload(
            InitiateMultipartUploadRequest(
                bucket=self.bucket,
                key=self.key,
                custom_metadata=self.custom_metadata,
            )
        )
        self.upload_id = result.upload_id
        return self.upload_id

    def _require_upload_id(self) -> str:
        if self.upload_id is None:
            raise RuntimeError("Upload not initiated")
        return self.upload_id

    def upload_part(
        self,
        part_number: int,
        body: Any,
        content_length: int = 0,
        md5: str = "",
        crc32c: str = "",
    ) -> UploadObjectPartResult:
        """Upload a part and record its ETag.

        Uploading the same part number again replaces the recorded ETag,
        matching what the service does with the part itself.

        Raises:
            RuntimeError: If the upload was not initiated.
        """
        upload_id = self._require_upload_id()
        result = self.client.upload_object_part(
            UploadObjectPartRequest(
                bucket=self.bucket,
                key=self.key,
                part_number=part_number,
                upload_id=upload_id,
                body=body,
                content_length=content_length,
                md5=md5,
                crc32c=crc32c,
            )
        )
        self.add_part(part_number, result.etag)
        return result

    def add_part(self, part_number: int, etag: str) -> None:
        """Record a part uploaded outside of upload_part()."""
        self.uploaded_parts[part_number] = etag

    def get_uploaded_parts(self) -> list[CompletePart]:
        """Recorded parts in ascending part number."""
        return [
            CompletePart(part_number=number, etag=etag)
            for number, etag in sorted(self.uploaded_parts.items())
        ]

    def complete(self) -> CompleteMultipartUploadResult:
        """Complete the upload from the recorded parts.

        Raises:
            RuntimeError: If the upload was not initiated.
        """
        upload_id = self._require_upload_id()
        return self.client.complete_multipart_upload(
            CompleteMultipartUploadRequest(
                bucket=self.bucket,
                key=self.key,
                upload_id=upload_id,
                parts=tuple(self.get_uploaded_parts()),
            )
        )

    def abort(self) -> None:
        """Abort the upload.

        Does nothing if the upload was never initiated. Errors from the
        service are raised to the caller.
        """
        if self.upload_id is None:
            return

        self.client.abort_multipart_upload(
            AbortMultipartUploadRequest(
                bucket=self.bucket,
                key=self.key,
                upload_id=self.upload_id,
            )
        )

    def __enter__(self) -> "MultipartUpload":
        """Enter context manager - initiates upload."""
        self.initiate()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Exit context manager - aborts on exception."""
        if exc_type is not None:
            try:
                self.abort()
            except Exception as abort_error:
                logger.warning("Abort of upload %s failed: %s", self.upload_id, abort_error)
        return False  # Don't suppress exceptions
