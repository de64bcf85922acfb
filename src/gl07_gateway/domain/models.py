"""Domain models."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

NO_FILES = "(no files)"
SOURCE_SYSTEM_ENTRY = "(source system)"


class LogStatus(str, Enum):
    PROCESSING = "Processing"
    SUCCESS = "Success"
    ERROR = "Error"


class FileState(str, Enum):
    """Stages a single file passes through."""

    DISCOVERED = "discovered"
    DOWNLOADED = "downloaded"
    TRANSFORMED = "transformed"
    DRY_RUN_COMPLETE = "dry_run_complete"
    SUBMITTED = "submitted"
    ARCHIVED = "archived"
    ERRORED = "errored"


@dataclass(frozen=True)
class ReportSetup:
    """GL07 report ordering setup. Carried along, not used for posting."""

    report_id: str = ""
    report_name: str = ""
    variant: int | None = None
    user_id: str = ""
    company_id: str = ""


@dataclass(frozen=True)
class SourceSystem:
    """A configured producer of XML files.

    The optional overrides take precedence over values read from the file.
    """

    id: int
    code: str
    name: str
    folder: str
    provider: str = "local"
    pattern: str = "*.xml"
    transformer: str = "ABWTransaction"
    active: bool = True
    interface: str | None = None
    transaction_type: str | None = None
    batch_id_prefix: str | None = None
    default_currency: str | None = None
    report_setup: ReportSetup | None = None


@dataclass
class ProcessingLogEntry:
    """Outcome of processing one file (or one source system without files)."""

    source_system_id: int
    file_name: str
    execution_id: str
    status: LogStatus = LogStatus.PROCESSING
    voucher_count: int | None = None
    transaction_count: int | None = None
    error_message: str | None = None
    duration_ms: int | None = None
    processed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def finalized(self) -> bool:
        return self.status != LogStatus.PROCESSING

    def finalize(
        self,
        status: LogStatus,
        duration_ms: int,
        error_message: str | None = None,
    ) -> None:
        """Set the final status. Allowed once."""
        if self.finalized:
            raise RuntimeError(
                f"Log entry for {self.file_name} already finalized as {self.status.value}"
            )
        if status == LogStatus.PROCESSING:
            raise ValueError("Cannot finalize with status Processing")
        self.status = status
        self.duration_ms = duration_ms
        self.error_message = error_message


@dataclass
class FileResult:
    """Result of driving one file through the pipeline."""

    entry: ProcessingLogEntry
    state: FileState = FileState.DISCOVERED
    error: Exception | None = None
    aborts_source: bool = False

    @property
    def success(self) -> bool:
        return self.entry.status == LogStatus.SUCCESS


@dataclass(frozen=True)
class RunFilter:
    source_system_code: str | None = None
    file_name: str | None = None
    dry_run: bool = False


@dataclass
class RunSummary:
    execution_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    duration_ms: int = 0

    def add(self, processed: int, succeeded: int, failed: int) -> None:
        self.processed += processed
        self.succeeded += succeeded
        self.failed += failed
