"""Client for the Cloud Storage XML multipart upload API.

See https://cloud.google.com/storage/docs/multipart-uploads

Each operation sends exactly one request through the injected httpx
client and maps the response:
- 2xx: the XML body (if any) is decoded into the result type
- anything else: ApiError with the body text or reason phrase
- a body that does not decode: DecodeError with a dump of the response

Transport errors from httpx propagate unchanged. Nothing is retried.
"""

import logging
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Any, Callable, Optional, TypeVar
from urllib.parse import quote
from xml.etree import ElementTree as ET

import httpx

from gcs_multipart.errors import DecodeError, check_response, dump_response
from gcs_multipart.models import (
    AbortMultipartUploadRequest,
    CompleteMultipartUploadRequest,
    CompleteMultipartUploadResult,
    InitiateMultipartUploadRequest,
    InitiateMultipartUploadResult,
    ListMultipartUploadsRequest,
    ListMultipartUploadsResult,
    ListObjectPartsRequest,
    ListObjectPartsResult,
    UploadObjectPartRequest,
    UploadObjectPartResult,
)
from gcs_multipart import xml_codec

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://storage.googleapis.com"

T = TypeVar("T")


def utc_now() -> datetime:
    """Default clock: the current time in UTC."""
    return datetime.now(timezone.utc)


def format_http_date(moment: datetime) -> str:
    """Format a datetime as an RFC 1123 HTTP date in GMT.

    Naive datetimes are taken as local time, like datetime.astimezone does.
    """
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


def _path_segments(quoted: str) -> str:
    """Encode . and .. segments so URL normalization can't collapse them."""
    return "/".join(
        "%2E" * len(segment) if segment in (".", "..") else segment
        for segment in quoted.split("/")
    )


def _object_path(bucket: str, key: str) -> str:
    return f"/{_path_segments(quote(bucket, safe=''))}/{_path_segments(quote(key, safe='/'))}"


def _bucket_path(bucket: str) -> str:
    return f"/{_path_segments(quote(bucket, safe=''))}/"


def _query(*items: Any) -> str:
    """Join query items, keeping their order.

    A plain string is a bare flag (``uploads``); a (name, value) tuple is
    percent-encoded as name=value.
    """
    pieces = []
    for item in items:
        if isinstance(item, str):
            pieces.append(item)
        else:
            name, value = item
            pieces.append(f"{name}={quote(str(value), safe='')}")
    return "&".join(pieces)


def _parse_hashes(response: httpx.Response) -> dict[str, str]:
    """Read the X-Goog-Hash values echoed by the service.

    The header may be repeated or comma-joined.
    """
    hashes = {}
    for value in response.headers.get_list("X-Goog-Hash", split_commas=True):
        name, sep, digest = value.strip().partition("=")
        if sep:
            hashes[name.lower()] = digest
    return hashes


class MultipartClient:
    """Client for the XML multipart upload API.

    Holds only immutable configuration and can be shared between
    concurrent callers uploading different parts or sessions.

    Args:
        http_client: Transport. Authentication, TLS and connection handling
                     are its business.
        endpoint: Base URL of the service.
        now: Clock used for the Date header.
    """

    def __init__(
        self,
        http_client: httpx.Client,
        endpoint: str = DEFAULT_ENDPOINT,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.http_client = http_client
        self.endpoint = endpoint.rstrip("/")
        self.now = now or utc_now

    def _date_header(self) -> tuple[str, str]:
        return ("Date", format_http_date(self.now()))

    def _send(
        self,
        method: str,
        path: str,
        query: str,
        headers: list[tuple[str, str]],
        content: Any = None,
        timeout: Any = httpx.USE_CLIENT_DEFAULT,
    ) -> httpx.Response:
        url = f"{self.endpoint}{path}?{query}"
        logger.debug("%s %s", method, url)
        response = self.http_client.request(
            method,
            url,
            headers=headers,
            content=content,
            timeout=timeout,
        )
        logger.debug("%s %s -> %d", method, url, response.status_code)
        check_response(response)
        return response

    def _decode(self, response: httpx.Response, decoder: Callable[[bytes], T]) -> T:
        try:
            return decoder(response.content)
        except (ET.ParseError, ValueError) as e:
            dump = dump_response(response)
            raise DecodeError(
                f"failed to parse XML body from HTTP response: {e}. Response: {dump}",
                response_dump=dump,
            ) from e

    def initiate_multipart_upload(
        self,
        req: InitiateMultipartUploadRequest,
        timeout: Any = httpx.USE_CLIENT_DEFAULT,
    ) -> InitiateMultipartUploadResult:
        """Initiate a multipart upload.

        https://cloud.google.com/storage/docs/xml-api/post-object-multipart

        Custom metadata becomes one x-goog-meta-{key} header per entry,
        in sorted key order.
        """
        headers = [self._date_header()]
        for key, value in sorted(req.custom_metadata.items()):
            headers.append((f"x-goog-meta-{key}", value))

        response = self._send(
            "POST",
            _object_path(req.bucket, req.key),
            _query("uploads"),
            headers,
            timeout=timeout,
        )
        return self._decode(response, xml_codec.decode_initiate_result)

    def upload_object_part(
        self,
        req: UploadObjectPartRequest,
        timeout: Any = httpx.USE_CLIENT_DEFAULT,
    ) -> UploadObjectPartResult:
        """Upload one part.

        https://cloud.google.com/storage/docs/xml-api/put-object-multipart

        The returned hashes are whatever the service echoed back; they are
        not checked against the request.
        """
        headers = [self._date_header()]
        if req.content_length > 0:
            headers.append(("Content-Length", str(req.content_length)))
        if req.md5:
            headers.append(("Content-MD5", req.md5))
            headers.append(("X-Goog-Hash", f"md5={req.md5}"))
        if req.crc32c:
            headers.append(("X-Goog-Hash", f"crc32c={req.crc32c}"))

        response = self._send(
            "PUT",
            _object_path(req.bucket, req.key),
            _query(("partNumber", req.part_number), ("uploadId", req.upload_id)),
            headers,
            content=req.body,
            timeout=timeout,
        )

        hashes = _parse_hashes(response)
        return UploadObjectPartResult(
            etag=response.headers.get("ETag", ""),
            crc32c=hashes.get("crc32c", ""),
            md5=hashes.get("md5", ""),
        )

    def complete_multipart_upload(
        self,
        req: CompleteMultipartUploadRequest,
        timeout: Any = httpx.USE_CLIENT_DEFAULT,
    ) -> CompleteMultipartUploadResult:
        """Complete a multipart upload from the parts listed in the request.

        https://cloud.google.com/storage/docs/xml-api/post-object-complete
        """
        body = xml_codec.encode_complete_body(req.parts)
        headers = [
            self._date_header(),
            ("Content-Length", str(len(body))),
        ]

        response = self._send(
            "POST",
            _object_path(req.bucket, req.key),
            _query(("uploadId", req.upload_id)),
            headers,
            content=body,
            timeout=timeout,
        )
        return self._decode(response, xml_codec.decode_complete_result)

    def abort_multipart_upload(
        self,
        req: AbortMultipartUploadRequest,
        timeout: Any = httpx.USE_CLIENT_DEFAULT,
    ) -> None:
        """Abort a multipart upload.

        https://cloud.google.com/storage/docs/xml-api/delete-multipart
        """
        self._send(
            "DELETE",
            _object_path(req.bucket, req.key),
            _query(("uploadId", req.upload_id)),
            [self._date_header()],
            timeout=timeout,
        )

    def list_multipart_uploads(
        self,
        req: ListMultipartUploadsRequest,
        timeout: Any = httpx.USE_CLIENT_DEFAULT,
    ) -> ListMultipartUploadsResult:
        """List in-progress multipart uploads in a bucket.

        https://cloud.google.com/storage/docs/xml-api/get-bucket-uploads

        Returns a single page; follow next_key_marker/next_upload_id_marker
        for more.
        """
        items: list[Any] = ["uploads"]
        if req.key_marker:
            items.append(("key-marker", req.key_marker))
        if req.max_uploads > 0:
            items.append(("max-uploads", req.max_uploads))
        if req.prefix:
            items.append(("prefix", req.prefix))
        if req.upload_id_marker:
            items.append(("upload-id-marker", req.upload_id_marker))

        response = self._send(
            "GET",
            _bucket_path(req.bucket),
            _query(*items),
            [self._date_header()],
            timeout=timeout,
        )
        return self._decode(response, xml_codec.decode_list_uploads_result)

    def list_object_parts(
        self,
        req: ListObjectPartsRequest,
        timeout: Any = httpx.USE_CLIENT_DEFAULT,
    ) -> ListObjectPartsResult:
        """List the parts uploaded so far for one upload.

        https://cloud.google.com/storage/docs/xml-api/get-object-multipart
        """
        items: list[Any] = [("uploadId", req.upload_id)]
        if req.max_parts > 0:
            items.append(("max-parts", req.max_parts))
        if req.part_number_marker > 0:
            items.append(("part-number-marker", req.part_number_marker))

        response = self._send(
            "GET",
            _object_path(req.bucket, req.key),
            _query(*items),
            [self._date_header()],
            timeout=timeout,
        )
        return self._decode(response, xml_codec.decode_list_parts_result)
