"""File source adapters."""

from ...config import Settings
from ...domain.errors import ConfigurationError
from ...ports.file_source import FileSourcePort
from .filesystem import FilesystemAdapter
from .naming import unique_name

__all__ = ["FilesystemAdapter", "create_file_source", "unique_name"]


def create_file_source(provider: str, settings: Settings) -> FileSourcePort:
    """Create the file source for a source system's provider."""
    if (provider or "local").lower() == "local":
        return FilesystemAdapter(settings.paths.base)
    raise ConfigurationError(
        f"Unknown file source provider: {provider}. Valid options are: local"
    )
