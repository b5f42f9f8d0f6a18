"""XML encoding and decoding for multipart upload documents.

Decoding is lenient the way the service's documents need it to be:
namespaces are dropped, unknown elements are ignored and missing
elements leave the field at its zero value. A wrong root element or a
value that does not convert raises ValueError; malformed XML raises
xml.etree.ElementTree.ParseError.
"""

import re
from datetime import datetime, timezone
from typing import Iterable, Optional
from xml.etree import ElementTree as ET

from gcs_multipart.models import (
    CompleteMultipartUploadResult,
    CompletePart,
    InitiateMultipartUploadResult,
    ListMultipartUploadsResult,
    ListObjectPart,
    ListObjectPartsResult,
    ListUpload,
)

_FRACTION = re.compile(r"\.(\d+)")


def encode_complete_body(parts: Iterable[CompletePart]) -> bytes:
    """Serialize the CompleteMultipartUpload request body.

    Parts are written in the order given, two-space indented.

    Args:
        parts: Parts to cite, already in ascending part number.

    Returns:
        UTF-8 encoded XML document without a declaration.
    """
    root = ET.Element("CompleteMultipartUpload")
    for part in parts:
        tag = ET.SubElement(root, "Part")
        ET.SubElement(tag, "PartNumber").text = str(part.part_number)
        ET.SubElement(tag, "ETag").text = part.etag
    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="unicode").encode("utf-8")


def _local_name(tag: str) -> str:
    """Strip the {namespace} prefix ElementTree puts on tags."""
    return tag.rsplit("}", 1)[-1]


def _parse_root(content: bytes, expected: str) -> ET.Element:
    if not content.strip():
        raise ValueError(f"expected element <{expected}> but body is empty")
    root = ET.fromstring(content)
    name = _local_name(root.tag)
    if name != expected:
        raise ValueError(f"expected element <{expected}> but have <{name}>")
    return root


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local_name(child.tag) == name]


def _text(element: ET.Element, name: str) -> str:
    for child in _children(element, name):
        return (child.text or "").strip()
    return ""


def _int(element: ET.Element, name: str) -> int:
    value = _text(element, name)
    if not value:
        return 0
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"invalid integer in <{name}>: {value!r}") from None


def _bool(element: ET.Element, name: str) -> bool:
    value = _text(element, name).lower()
    if value in ("", "false", "0"):
        return False
    if value in ("true", "1"):
        return True
    raise ValueError(f"invalid boolean in <{name}>: {value!r}")


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp into an aware UTC datetime.

    Args:
        value: Timestamp such as ``2021-11-10T20:48:33.000Z``.

    Returns:
        The instant in UTC, or None for an empty value.
    """
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    # fromisoformat before 3.11 only takes 3 or 6 fraction digits
    value = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise ValueError(f"invalid timestamp: {value!r}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def decode_initiate_result(content: bytes) -> InitiateMultipartUploadResult:
    root = _parse_root(content, "InitiateMultipartUploadResult")
    return InitiateMultipartUploadResult(
        bucket=_text(root, "Bucket"),
        key=_text(root, "Key"),
        upload_id=_text(root, "UploadId"),
    )


def decode_complete_result(content: bytes) -> CompleteMultipartUploadResult:
    root = _parse_root(content, "CompleteMultipartUploadResult")
    return CompleteMultipartUploadResult(
        location=_text(root, "Location"),
        bucket=_text(root, "Bucket"),
        key=_text(root, "Key"),
        etag=_text(root, "ETag"),
    )


def decode_list_uploads_result(content: bytes) -> ListMultipartUploadsResult:
    """Decode a ListMultipartUploadsResult, keeping <Upload> order."""
    root = _parse_root(content, "ListMultipartUploadsResult")
    uploads = tuple(
        ListUpload(
            key=_text(upload, "Key"),
            upload_id=_text(upload, "UploadId"),
            storage_class=_text(upload, "StorageClass"),
            initiated=parse_timestamp(_text(upload, "Initiated")),
        )
        for upload in _children(root, "Upload")
    )
    return ListMultipartUploadsResult(
        bucket=_text(root, "Bucket"),
        key_marker=_text(root, "KeyMarker"),
        upload_id_marker=_text(root, "UploadIdMarker"),
        next_key_marker=_text(root, "NextKeyMarker"),
        next_upload_id_marker=_text(root, "NextUploadIdMarker"),
        max_uploads=_int(root, "MaxUploads"),
        is_truncated=_bool(root, "IsTruncated"),
        uploads=uploads,
    )


def decode_list_parts_result(content: bytes) -> ListObjectPartsResult:
    """Decode a ListPartsResult, keeping <Part> order."""
    root = _parse_root(content, "ListPartsResult")
    parts = tuple(
        ListObjectPart(
            part_number=_int(part, "PartNumber"),
            etag=_text(part, "ETag"),
            last_modified=parse_timestamp(_text(part, "LastModified")),
            size=_int(part, "Size"),
        )
        for part in _children(root, "Part")
    )
    return ListObjectPartsResult(
        bucket=_text(root, "Bucket"),
        key=_text(root, "Key"),
        upload_id=_text(root, "UploadId"),
        storage_class=_text(root, "StorageClass"),
        part_number_marker=_int(root, "PartNumberMarker"),
        next_part_number_marker=_int(root, "NextPartNumberMarker"),
        max_parts=_int(root, "MaxParts"),
        is_truncated=_bool(root, "IsTruncated"),
        parts=parts,
    )
