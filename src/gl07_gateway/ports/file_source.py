"""File source port - interface for inbox/archive/error storage."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain.models import SourceSystem


class FileSourcePort(ABC):
    """Interface for the storage a source system delivers files into.

    Relocations never overwrite an existing destination file.
    """

    @abstractmethod
    def list_files(self, source: "SourceSystem") -> list[str]:
        """List inbox file names matching the source system's pattern."""
        pass

    @abstractmethod
    def download(self, source: "SourceSystem", file_name: str) -> str:
        """Return file content as text.

        Raises FileNotFoundError if the file is not in the inbox.
        """
        pass

    @abstractmethod
    def move_to_archive(self, source: "SourceSystem", file_name: str) -> str:
        """Move file from inbox to archive.

        Returns the name the file was stored under. The name is chosen so
        that its .json sidecar name is free as well.
        """
        pass

    @abstractmethod
    def move_to_error(self, source: "SourceSystem", file_name: str) -> str:
        """Move file from inbox to the error folder.

        Returns the name the file was stored under.
        """
        pass

    @abstractmethod
    def save_json_sidecar(
        self, source: "SourceSystem", archived_name: str, content: str
    ) -> str:
        """Write JSON next to an archived file, sharing its base name.

        archived_name is the value returned by move_to_archive. Raises
        FileExistsError rather than overwrite.

        Returns the name the sidecar was stored under.
        """
        pass
