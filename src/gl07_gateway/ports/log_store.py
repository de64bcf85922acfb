"""Log store port - interface for processing log persistence."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain.models import ProcessingLogEntry


class LogStorePort(ABC):
    """Interface for storing processing log entries."""

    @abstractmethod
    def add_batch(self, entries: list["ProcessingLogEntry"]) -> None:
        """Insert entries in one write."""
        pass

    @abstractmethod
    def get_by_execution(self, execution_id: str) -> list["ProcessingLogEntry"]:
        """Return all entries of one run, oldest first."""
        pass

    @abstractmethod
    def delete_older_than(self, cutoff: datetime) -> int:
        """Delete entries processed before cutoff.

        Returns number of entries removed.
        """
        pass
