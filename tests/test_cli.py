"""Tests for CLI entry point.

Tests the command-line interface and argument parsing.
"""

import json
from pathlib import Path
from unittest.mock import Mock, patch

import httpx
import pytest

from gcs_multipart.cli import (
    CompositeReporter,
    create_reporters,
    main,
    parse_args,
    parse_metadata_entry,
    parse_part,
)
from gcs_multipart.models import CompletePart
from gcs_multipart.reporters import ConsoleReporter, JsonReporter

INITIATE_XML = (
    "<InitiateMultipartUploadResult>"
    "<Bucket>bucket1</Bucket><Key>big.bin</Key><UploadId>cli-upload-id</UploadId>"
    "</InitiateMultipartUploadResult>"
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep real GCS_MULTIPART_* settings out of CLI tests."""
    for name in ("GCS_MULTIPART_ENDPOINT", "GCS_MULTIPART_ACCESS_TOKEN", "GCS_MULTIPART_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


def fake_transport(handler):
    """Patch the CLI's HTTP client factory to use a mock transport."""
    return patch(
        "gcs_multipart.cli.build_http_client",
        return_value=httpx.Client(transport=httpx.MockTransport(handler)),
    )


class TestParseArgs:
    """Tests for argument parsing."""

    def test_initiate_defaults(self):
        """Global flags should have sensible defaults."""
        args = parse_args(["initiate", "bucket1", "big.bin"])

        assert args.command == "initiate"
        assert args.bucket == "bucket1"
        assert args.key == "big.bin"
        assert args.metadata == []
        assert args.config is None
        assert args.quiet is False
        assert args.json_output is None
        assert args.verbose is False

    def test_global_flags(self):
        """Should accept -c, -q, -j and -v before the command."""
        args = parse_args(["-c", "custom.json", "-q", "-j", "out.json", "-v", "abort", "b", "k", "id"])

        assert args.config == "custom.json"
        assert args.quiet is True
        assert args.json_output == "out.json"
        assert args.verbose is True

    def test_initiate_metadata(self):
        """Repeated -m should collect metadata entries."""
        args = parse_args(["initiate", "b", "k", "-m", "mtime=Saturday", "-m", "ctime=Friday"])

        assert dict(args.metadata) == {"mtime": "Saturday", "ctime": "Friday"}

    def test_complete_parts(self):
        """PART:ETAG arguments should parse into CompletePart."""
        args = parse_args(["complete", "b", "k", "id", "1:etag1", "2:etag2"])

        assert args.parts == [CompletePart(1, "etag1"), CompletePart(2, "etag2")]

    def test_list_uploads_filters(self):
        args = parse_args(["list-uploads", "b", "--prefix", "photos/", "--max-uploads", "5"])

        assert args.prefix == "photos/"
        assert args.max_uploads == 5
        assert args.key_marker == ""

    def test_list_parts_markers(self):
        args = parse_args(["list-parts", "b", "k", "id", "--max-parts", "2", "--part-number-marker", "1"])

        assert args.max_parts == 2
        assert args.part_number_marker == 1

    def test_command_required(self):
        """Running without a command should exit with usage error."""
        with pytest.raises(SystemExit) as exc_info:
            parse_args([])
        assert exc_info.value.code == 2

    def test_bad_part_rejected(self):
        """Malformed PART:ETAG should be a usage error."""
        with pytest.raises(SystemExit):
            parse_args(["complete", "b", "k", "id", "one:etag"])


class TestArgumentTypes:
    """Tests for custom argparse types."""

    def test_metadata_entry(self):
        assert parse_metadata_entry("a=b=c") == ("a", "b=c")

    def test_metadata_entry_requires_equals(self):
        import argparse

        with pytest.raises(argparse.ArgumentTypeError):
            parse_metadata_entry("novalue")

    def test_part_keeps_colons_in_etag(self):
        assert parse_part("3:abc:def") == CompletePart(3, "abc:def")


class TestCreateReporters:
    """Tests for reporter creation."""

    def test_console_only_by_default(self):
        reporters = create_reporters(parse_args(["abort", "b", "k", "id"]))

        assert len(reporters) == 1
        assert isinstance(reporters[0], ConsoleReporter)

    def test_json_reporter_added(self):
        reporters = create_reporters(parse_args(["-j", "out.json", "abort", "b", "k", "id"]))

        assert len(reporters) == 2
        assert isinstance(reporters[1], JsonReporter)

    def test_composite_delegates(self):
        first, second = Mock(), Mock()
        composite = CompositeReporter([first, second])

        composite.on_result("abort", None)
        composite.on_error("abort", ValueError("x"))

        first.on_result.assert_called_once_with("abort", None)
        second.on_error.assert_called_once()


class TestMain:
    """Tests for main entry point."""

    def test_initiate_success(self, capsys):
        """Successful command should exit 0 and print the upload ID."""
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, text=INITIATE_XML)

        with fake_transport(handler):
            exit_code = main(["initiate", "bucket1", "big.bin", "-m", "owner=me"])

        assert exit_code == 0
        assert requests[0].url.raw_path == b"/bucket1/big.bin?uploads"
        assert requests[0].headers["x-goog-meta-owner"] == "me"
        assert "cli-upload-id" in capsys.readouterr().out

    def test_api_error_exit_code(self, capsys):
        """Service errors should exit 1 and print the message."""
        with fake_transport(lambda request: httpx.Response(404, text="NoSuchUpload")):
            exit_code = main(["abort", "bucket1", "big.bin", "missing-id"])

        assert exit_code == 1
        assert "NoSuchUpload" in capsys.readouterr().out

    def test_transport_error_exit_code(self):
        """Transport errors should exit 1."""
        def handler(request):
            raise httpx.ConnectError("connection refused")

        with fake_transport(handler):
            assert main(["list-uploads", "bucket1"]) == 1

    def test_config_error_exit_code(self, tmp_path: Path, capsys):
        """Configuration errors should exit 2."""
        exit_code = main(["-c", str(tmp_path / "missing.json"), "list-uploads", "b"])

        assert exit_code == 2
        assert "Configuration error" in capsys.readouterr().err

    def test_upload_part_reads_file(self, tmp_path: Path):
        """upload-part should send the file contents with Content-Length."""
        part_file = tmp_path / "part.bin"
        part_file.write_bytes(b"0123456789")
        requests = []

        def handler(request):
            request.read()
            requests.append(request)
            return httpx.Response(200, headers={"ETag": '"e1"'})

        with fake_transport(handler):
            exit_code = main(["-q", "upload-part", "b", "k", "id", "3", str(part_file)])

        assert exit_code == 0
        assert requests[0].content == b"0123456789"
        assert requests[0].headers["Content-Length"] == "10"
        assert requests[0].url.raw_path == b"/b/k?partNumber=3&uploadId=id"

    def test_missing_part_file_exit_code(self, tmp_path: Path):
        """An unreadable part file should exit 1 without a request."""
        handler = Mock()

        with fake_transport(handler):
            exit_code = main(["upload-part", "b", "k", "id", "1", str(tmp_path / "nope.bin")])

        assert exit_code == 1
        handler.assert_not_called()

    def test_json_output_written(self, tmp_path: Path):
        """-j should write the result as JSON."""
        output = tmp_path / "results.json"

        with fake_transport(lambda request: httpx.Response(200, text=INITIATE_XML)):
            exit_code = main(["-q", "-j", str(output), "initiate", "bucket1", "big.bin"])

        assert exit_code == 0
        data = json.loads(output.read_text())
        assert data["operations"][0]["operation"] == "initiate"
        assert data["operations"][0]["result"]["upload_id"] == "cli-upload-id"

    def test_endpoint_from_environment(self, monkeypatch):
        """GCS_MULTIPART_ENDPOINT should redirect requests."""
        monkeypatch.setenv("GCS_MULTIPART_ENDPOINT", "http://localhost:4443")
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(204)

        with fake_transport(handler):
            assert main(["-q", "abort", "b", "k", "id"]) == 0

        assert str(requests[0].url) == "http://localhost:4443/b/k?uploadId=id"
