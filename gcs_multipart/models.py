"""Request and result types for the XML multipart upload API.

Every operation takes one request object and returns one result object.
All of them are frozen dataclasses: built per call, never mutated.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class InitiateMultipartUploadRequest:
    """Start a new multipart upload for bucket/key."""

    bucket: str
    key: str
    # Sent as x-goog-meta-{key} headers
    custom_metadata: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class InitiateMultipartUploadResult:
    """Parsed InitiateMultipartUploadResult document."""

    bucket: str = ""
    key: str = ""
    upload_id: str = ""


@dataclass(frozen=True)
class UploadObjectPartRequest:
    """Upload one part of an in-progress multipart upload.

    ``body`` is anything httpx accepts as request content (bytes, str or
    an iterator of bytes). ``content_length``, ``md5`` and ``crc32c`` are
    only sent when set.
    """

    bucket: str
    key: str
    part_number: int
    upload_id: str
    body: Any = b""
    content_length: int = 0
    md5: str = ""
    crc32c: str = ""


@dataclass(frozen=True)
class UploadObjectPartResult:
    """Headers echoed back by the service for an uploaded part."""

    etag: str = ""
    crc32c: str = ""
    md5: str = ""


@dataclass(frozen=True)
class CompletePart:
    """A part reference cited in the CompleteMultipartUpload body."""

    part_number: int
    etag: str


@dataclass(frozen=True)
class CompleteMultipartUploadRequest:
    """Stitch uploaded parts together.

    Parts are serialized in the given order; callers supply them in
    ascending part number.
    """

    bucket: str
    key: str
    upload_id: str
    parts: tuple[CompletePart, ...] = ()


@dataclass(frozen=True)
class CompleteMultipartUploadResult:
    """Parsed CompleteMultipartUploadResult document."""

    location: str = ""
    bucket: str = ""
    key: str = ""
    etag: str = ""


@dataclass(frozen=True)
class AbortMultipartUploadRequest:
    bucket: str
    key: str
    upload_id: str


@dataclass(frozen=True)
class ListMultipartUploadsRequest:
    """List in-progress uploads in a bucket.

    Filters and markers are omitted from the query when empty or zero.
    """

    bucket: str
    key_marker: str = ""
    max_uploads: int = 0
    prefix: str = ""
    upload_id_marker: str = ""


@dataclass(frozen=True)
class ListUpload:
    """One <Upload> entry of a ListMultipartUploadsResult."""

    key: str = ""
    upload_id: str = ""
    storage_class: str = ""
    initiated: Optional[datetime] = None


@dataclass(frozen=True)
class ListMultipartUploadsResult:
    """Parsed ListMultipartUploadsResult document."""

    bucket: str = ""
    key_marker: str = ""
    upload_id_marker: str = ""
    next_key_marker: str = ""
    next_upload_id_marker: str = ""
    max_uploads: int = 0
    is_truncated: bool = False
    uploads: tuple[ListUpload, ...] = ()


@dataclass(frozen=True)
class ListObjectPartsRequest:
    bucket: str
    key: str
    upload_id: str
    max_parts: int = 0
    part_number_marker: int = 0


@dataclass(frozen=True)
class ListObjectPart:
    """One <Part> entry of a ListPartsResult."""

    part_number: int = 0
    etag: str = ""
    last_modified: Optional[datetime] = None
    size: int = 0


@dataclass(frozen=True)
class ListObjectPartsResult:
    """Parsed ListPartsResult document."""

    bucket: str = ""
    key: str = ""
    upload_id: str = ""
    storage_class: str = ""
    part_number_marker: int = 0
    next_part_number_marker: int = 0
    max_parts: int = 0
    is_truncated: bool = False
    parts: tuple[ListObjectPart, ...] = ()
