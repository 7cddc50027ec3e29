"""Reporting abstractions for ipkcp-client.

Contains:
- Report ABC: Base class for end-of-run reports
"""

from abc import ABC, abstractmethod


class Report(ABC):
    """Abstract base class for client reports."""

    @abstractmethod
    def print(self) -> None:
        """Print the report."""
        pass

    @abstractmethod
    def success(self) -> bool:
        """Return True if the report indicates success."""
        pass
