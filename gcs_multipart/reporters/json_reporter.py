"""JSON reporter for structured output.

Records every operation outcome and writes them to a file, so scripts can
pick up upload IDs and ETags without scraping console output.
"""

import json
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from gcs_multipart.errors import ApiError
from gcs_multipart.reporters.base import Reporter


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonReporter(Reporter):
    """JSON reporter for structured output.

    Args:
        output_path: Optional file path to write JSON output. The file is
                     rewritten after every recorded operation.
    """

    def __init__(self, output_path: Optional[str] = None):
        self.output_path = output_path
        self._records: list[dict[str, Any]] = []

    @property
    def records(self) -> list[dict[str, Any]]:
        """Copy of the records collected so far."""
        return list(self._records)

    def on_result(self, operation: str, result: Any) -> None:
        """Record a successful operation."""
        record: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "operation": operation,
            "status": "ok",
            "result": asdict(result) if is_dataclass(result) else result,
        }
        self._records.append(record)
        self._flush()

    def on_error(self, operation: str, error: Exception) -> None:
        """Record a failed operation."""
        record: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "operation": operation,
            "status": "error",
            "error": str(error),
            "error_type": type(error).__name__,
        }
        if isinstance(error, ApiError):
            record["status_code"] = error.status_code
        self._records.append(record)
        self._flush()

    def to_json(self) -> str:
        """Serialize the collected records."""
        return json.dumps({"operations": self._records}, indent=2, default=_json_default)

    def _flush(self) -> None:
        if not self.output_path:
            return

        path = Path(self.output_path)

        # Create parent directories if needed
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_json())
