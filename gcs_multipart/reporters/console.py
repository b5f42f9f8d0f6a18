"""Console reporter using Rich library for formatted CLI output.

Displays:
- Key/value tables for single results (initiate, upload part, complete)
- Listing tables for uploads and parts
- Error lines with the HTTP status when the service rejected a request
"""

from dataclasses import fields, is_dataclass
from datetime import datetime
from typing import Any

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gcs_multipart.errors import ApiError, DecodeError
from gcs_multipart.models import ListMultipartUploadsResult, ListObjectPartsResult
from gcs_multipart.reporters.base import Reporter


def format_value(value: Any) -> str:
    """Render a result field for display."""
    if value is None:
        return "-"
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


class ConsoleReporter(Reporter):
    """Rich-based console reporter for CLI output.

    Args:
        quiet: If True, only errors are printed
    """

    def __init__(self, quiet: bool = False):
        # Use legacy_windows=True for ASCII-safe output on Windows consoles
        self.console = Console(legacy_windows=True)
        self.quiet = quiet

    def _new_table(self, title: str) -> Table:
        return Table(
            title=title,
            show_header=True,
            header_style="bold magenta",
            border_style="dim",
            box=box.ASCII,
        )

    def _summary_table(self, operation: str, result: Any, skip: tuple[str, ...] = ()) -> Table:
        table = self._new_table(operation)
        table.add_column("Field", style="cyan", no_wrap=True)
        table.add_column("Value")
        for f in fields(result):
            if f.name in skip:
                continue
            table.add_row(f.name, format_value(getattr(result, f.name)))
        return table

    def on_result(self, operation: str, result: Any) -> None:
        """Print the result of a successful operation."""
        if self.quiet:
            return

        if result is None:
            self.console.print(f"[green][OK][/green] {operation}")
            return

        if isinstance(result, ListMultipartUploadsResult):
            self.console.print(self._summary_table(operation, result, skip=("uploads",)))
            uploads = self._new_table(f"Uploads ({len(result.uploads)})")
            uploads.add_column("Key", style="cyan", no_wrap=True)
            uploads.add_column("Upload ID", no_wrap=True)
            uploads.add_column("Storage Class")
            uploads.add_column("Initiated")
            for upload in result.uploads:
                uploads.add_row(
                    upload.key,
                    upload.upload_id,
                    format_value(upload.storage_class),
                    format_value(upload.initiated),
                )
            self.console.print(uploads)
            return

        if isinstance(result, ListObjectPartsResult):
            self.console.print(self._summary_table(operation, result, skip=("parts",)))
            parts = self._new_table(f"Parts ({len(result.parts)})")
            parts.add_column("Part", justify="right", style="cyan")
            parts.add_column("ETag", no_wrap=True)
            parts.add_column("Size", justify="right")
            parts.add_column("Last Modified")
            for part in result.parts:
                parts.add_row(
                    str(part.part_number),
                    part.etag,
                    str(part.size),
                    format_value(part.last_modified),
                )
            self.console.print(parts)
            return

        if is_dataclass(result):
            self.console.print(self._summary_table(operation, result))
        else:
            self.console.print(f"[green][OK][/green] {operation}: {result}")

    def on_error(self, operation: str, error: Exception) -> None:
        """Print a failed operation. Errors are shown even in quiet mode."""
        if isinstance(error, ApiError):
            self.console.print(f"[red][ERROR][/red] {operation}: HTTP {error.status_code}")
            self.console.print(f"     [dim]{escape(error.message)}[/dim]")
        elif isinstance(error, DecodeError):
            self.console.print(f"[yellow][DECODE ERROR][/yellow] {operation}: {escape(str(error))}")
            if not self.quiet and error.response_dump:
                self.console.print(error.response_dump, markup=False, highlight=False)
        else:
            self.console.print(f"[red][ERROR][/red] {operation}: {escape(str(error))}")
