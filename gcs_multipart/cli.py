"""Command-line interface for the multipart upload client.

One subcommand per API operation:
    gcs-multipart initiate BUCKET KEY [-m NAME=VALUE ...]
    gcs-multipart upload-part BUCKET KEY UPLOAD_ID PART_NUMBER FILE
    gcs-multipart complete BUCKET KEY UPLOAD_ID PART:ETAG [PART:ETAG ...]
    gcs-multipart abort BUCKET KEY UPLOAD_ID
    gcs-multipart list-uploads BUCKET
    gcs-multipart list-parts BUCKET KEY UPLOAD_ID
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import httpx
from rich.logging import RichHandler

from gcs_multipart.client import MultipartClient
from gcs_multipart.config import ConfigError, load_config
from gcs_multipart.errors import MultipartError
from gcs_multipart.http_client import build_http_client
from gcs_multipart.models import (
    AbortMultipartUploadRequest,
    CompleteMultipartUploadRequest,
    CompletePart,
    InitiateMultipartUploadRequest,
    ListMultipartUploadsRequest,
    ListObjectPartsRequest,
    UploadObjectPartRequest,
)
from gcs_multipart.reporters import ConsoleReporter, JsonReporter, Reporter


class CompositeReporter(Reporter):
    """Reporter that delegates to multiple reporters.

    Allows using both ConsoleReporter and JsonReporter simultaneously.
    """

    def __init__(self, reporters: list[Reporter]):
        self._reporters = reporters

    def on_result(self, operation: str, result: Any) -> None:
        """Delegate to all reporters."""
        for reporter in self._reporters:
            reporter.on_result(operation, result)

    def on_error(self, operation: str, error: Exception) -> None:
        """Delegate to all reporters."""
        for reporter in self._reporters:
            reporter.on_error(operation, error)


def parse_metadata_entry(value: str) -> tuple[str, str]:
    """Parse a NAME=VALUE custom metadata argument."""
    name, sep, meta_value = value.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {value!r}")
    return name, meta_value


def parse_part(value: str) -> CompletePart:
    """Parse a PART:ETAG argument."""
    number, sep, etag = value.partition(":")
    if not sep or not etag:
        raise argparse.ArgumentTypeError(f"expected PART:ETAG, got {value!r}")
    try:
        part_number = int(number)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid part number in {value!r}") from None
    return CompletePart(part_number=part_number, etag=etag)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="gcs-multipart",
        description="Drive the Cloud Storage XML multipart upload API",
    )

    parser.add_argument(
        "-c", "--config",
        metavar="PATH",
        help="Path to a JSON configuration file",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only print errors",
    )

    parser.add_argument(
        "-j", "--json-output",
        metavar="PATH",
        help="Write JSON results to file",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log each HTTP request",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    initiate = subparsers.add_parser("initiate", help="Initiate a multipart upload")
    initiate.add_argument("bucket")
    initiate.add_argument("key")
    initiate.add_argument(
        "-m", "--metadata",
        metavar="NAME=VALUE",
        type=parse_metadata_entry,
        action="append",
        default=[],
        help="Custom metadata entry (repeatable)",
    )

    upload_part = subparsers.add_parser("upload-part", help="Upload one part from a file")
    upload_part.add_argument("bucket")
    upload_part.add_argument("key")
    upload_part.add_argument("upload_id")
    upload_part.add_argument("part_number", type=int)
    upload_part.add_argument("file", type=Path)
    upload_part.add_argument("--md5", default="", help="Base64 MD5 of the part")
    upload_part.add_argument("--crc32c", default="", help="Base64 CRC32C of the part")

    complete = subparsers.add_parser("complete", help="Complete a multipart upload")
    complete.add_argument("bucket")
    complete.add_argument("key")
    complete.add_argument("upload_id")
    complete.add_argument(
        "parts",
        metavar="PART:ETAG",
        type=parse_part,
        nargs="+",
        help="Parts in ascending part number",
    )

    abort = subparsers.add_parser("abort", help="Abort a multipart upload")
    abort.add_argument("bucket")
    abort.add_argument("key")
    abort.add_argument("upload_id")

    list_uploads = subparsers.add_parser("list-uploads", help="List in-progress uploads")
    list_uploads.add_argument("bucket")
    list_uploads.add_argument("--key-marker", default="")
    list_uploads.add_argument("--max-uploads", type=int, default=0)
    list_uploads.add_argument("--prefix", default="")
    list_uploads.add_argument("--upload-id-marker", default="")

    list_parts = subparsers.add_parser("list-parts", help="List uploaded parts")
    list_parts.add_argument("bucket")
    list_parts.add_argument("key")
    list_parts.add_argument("upload_id")
    list_parts.add_argument("--max-parts", type=int, default=0)
    list_parts.add_argument("--part-number-marker", type=int, default=0)

    return parser.parse_args(argv)


def create_reporters(args: argparse.Namespace) -> list[Reporter]:
    """Create reporters based on command-line arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        List of configured reporters
    """
    reporters: list[Reporter] = [ConsoleReporter(quiet=args.quiet)]

    if args.json_output:
        reporters.append(JsonReporter(output_path=args.json_output))

    return reporters


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def run_command(client: MultipartClient, args: argparse.Namespace) -> Any:
    """Execute the selected subcommand.

    Returns:
        The operation's result, or None for abort.
    """
    if args.command == "initiate":
        return client.initiate_multipart_upload(
            InitiateMultipartUploadRequest(
                bucket=args.bucket,
                key=args.key,
                custom_metadata=dict(args.metadata),
            )
        )

    if args.command == "upload-part":
        data = args.file.read_bytes()
        return client.upload_object_part(
            UploadObjectPartRequest(
                bucket=args.bucket,
                key=args.key,
                part_number=args.part_number,
                upload_id=args.upload_id,
                body=data,
                content_length=len(data),
                md5=args.md5,
                crc32c=args.crc32c,
            )
        )

    if args.command == "complete":
        return client.complete_multipart_upload(
            CompleteMultipartUploadRequest(
                bucket=args.bucket,
                key=args.key,
                upload_id=args.upload_id,
                parts=tuple(args.parts),
            )
        )

    if args.command == "abort":
        client.abort_multipart_upload(
            AbortMultipartUploadRequest(
                bucket=args.bucket,
                key=args.key,
                upload_id=args.upload_id,
            )
        )
        return None

    if args.command == "list-uploads":
        return client.list_multipart_uploads(
            ListMultipartUploadsRequest(
                bucket=args.bucket,
                key_marker=args.key_marker,
                max_uploads=args.max_uploads,
                prefix=args.prefix,
                upload_id_marker=args.upload_id_marker,
            )
        )

    if args.command == "list-parts":
        return client.list_object_parts(
            ListObjectPartsRequest(
                bucket=args.bucket,
                key=args.key,
                upload_id=args.upload_id,
                max_parts=args.max_parts,
                part_number_marker=args.part_number_marker,
            )
        )

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 for success, 1 for operation failures, 2 for
        configuration errors
    """
    args = parse_args(argv)
    configure_logging(args.verbose)

    # Load configuration
    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    # Create reporters
    reporters = create_reporters(args)
    if len(reporters) == 1:
        reporter = reporters[0]
    else:
        reporter = CompositeReporter(reporters)

    with build_http_client(config) as http_client:
        client = MultipartClient(http_client, endpoint=config.endpoint_url)
        try:
            result = run_command(client, args)
        except (MultipartError, httpx.HTTPError, OSError) as e:
            reporter.on_error(args.command, e)
            return 1

    reporter.on_result(args.command, result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
