"""Base reporter interface."""

from abc import ABC, abstractmethod
from typing import Any


class Reporter(ABC):
    """Abstract base class for operation result reporters."""

    @abstractmethod
    def on_result(self, operation: str, result: Any) -> None:
        """Called when an operation succeeds.

        ``result`` is the operation's result dataclass, or None for
        operations without a response body.
        """
        pass

    @abstractmethod
    def on_error(self, operation: str, error: Exception) -> None:
        """Called when an operation fails."""
        pass
