"""
Cloud Storage XML Multipart Upload Client.

A thin client for the XML multipart upload API: initiate, upload part,
complete, abort, list uploads and list parts.
"""

__version__ = "1.0.0"

from gcs_multipart.client import MultipartClient
from gcs_multipart.errors import ApiError, DecodeError, MultipartError
from gcs_multipart.models import (
    AbortMultipartUploadRequest,
    CompleteMultipartUploadRequest,
    CompleteMultipartUploadResult,
    CompletePart,
    InitiateMultipartUploadRequest,
    InitiateMultipartUploadResult,
    ListMultipartUploadsRequest,
    ListMultipartUploadsResult,
    ListObjectPart,
    ListObjectPartsRequest,
    ListObjectPartsResult,
    ListUpload,
    UploadObjectPartRequest,
    UploadObjectPartResult,
)
from gcs_multipart.session import MultipartUpload

__all__ = [
    "__version__",
    "MultipartClient",
    "MultipartUpload",
    "MultipartError",
    "ApiError",
    "DecodeError",
    "AbortMultipartUploadRequest",
    "CompleteMultipartUploadRequest",
    "CompleteMultipartUploadResult",
    "CompletePart",
    "InitiateMultipartUploadRequest",
    "InitiateMultipartUploadResult",
    "ListMultipartUploadsRequest",
    "ListMultipartUploadsResult",
    "ListObjectPart",
    "ListObjectPartsRequest",
    "ListObjectPartsResult",
    "ListUpload",
    "UploadObjectPartRequest",
    "UploadObjectPartResult",
]
