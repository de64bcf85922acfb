"""Ports - interfaces for external dependencies."""

from .file_source import FileSourcePort
from .log_store import LogStorePort
from .source_systems import SourceSystemPort
from .transformer import TransformerPort
from .unit4 import Unit4Port

__all__ = [
    "FileSourcePort",
    "LogStorePort",
    "SourceSystemPort",
    "TransformerPort",
    "Unit4Port",
]
