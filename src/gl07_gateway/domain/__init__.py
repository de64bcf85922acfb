"""Domain layer - core business logic."""

from .models import (
    FileResult,
    FileState,
    LogStatus,
    ProcessingLogEntry,
    RunFilter,
    RunSummary,
    SourceSystem,
)
from .source import SourceDocument
from .unit4 import BatchResponse, TransactionBatchRequest

__all__ = [
    "BatchResponse",
    "FileResult",
    "FileState",
    "LogStatus",
    "ProcessingLogEntry",
    "RunFilter",
    "RunSummary",
    "SourceDocument",
    "SourceSystem",
    "TransactionBatchRequest",
]
