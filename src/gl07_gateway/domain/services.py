"""Domain services - orchestrate business logic."""

import logging
import threading
import time
from collections.abc import Callable

from ..ports.file_source import FileSourcePort
from ..ports.log_store import LogStorePort
from ..ports.source_systems import SourceSystemPort
from ..ports.transformer import TransformerPort
from ..ports.unit4 import Unit4Port
from .errors import (
    AuthenticationError,
    ConfigurationError,
    OperationCancelled,
    SubmissionError,
    UnsupportedTransformerError,
)
from .models import (
    NO_FILES,
    SOURCE_SYSTEM_ENTRY,
    FileResult,
    FileState,
    LogStatus,
    ProcessingLogEntry,
    RunFilter,
    RunSummary,
    SourceSystem,
)

logger = logging.getLogger(__name__)

DRY_RUN_MESSAGE = "Dry run - not posted, file preserved in inbox"
NO_FILES_MESSAGE = "No files to process"
BOX_WIDTH = 64


def _elapsed_ms(timer: Callable[[], float], started: float) -> int:
    return int((timer() - started) * 1000)


def format_size(size: int) -> str:
    """Human readable size, e.g. '1.5 KB'."""
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{value:.4g} {unit}"
        value /= 1024
    return f"{value:.4g} GB"


class FileProcessingService:
    """Drives one file from inbox to archive or error folder."""

    def __init__(self, unit4: Unit4Port, timer: Callable[[], float] = time.monotonic) -> None:
        self.unit4 = unit4
        self.timer = timer

    def process(
        self,
        source: SourceSystem,
        file_name: str,
        file_source: FileSourcePort,
        transformer: TransformerPort,
        execution_id: str,
        dry_run: bool = False,
    ) -> FileResult:
        """Process a single inbox file.

        Pipeline:
            1. Download
            2. Transform
            3. Post to Unit4 (skipped on dry run)
            4. Archive with JSON sidecar

        Failures finalize the entry as Error and move the file to the error
        folder, except on dry run. Errors from the Unit4 client's
        configuration or credentials leave the file in the inbox and flag
        the result so the caller stops the source system.
        """
        started = self.timer()
        entry = ProcessingLogEntry(
            source_system_id=source.id,
            file_name=file_name,
            execution_id=execution_id,
        )
        result = FileResult(entry=entry)
        logger.info(f"  Processing file: {file_name}")

        try:
            content = file_source.download(source, file_name)
            result.state = FileState.DOWNLOADED
            logger.info(f"    Downloaded {format_size(len(content))} from {source.provider}")

            request = transformer.transform(content, source)
            result.state = FileState.TRANSFORMED
            entry.voucher_count = request.voucher_count
            entry.transaction_count = request.transaction_count
            logger.info(
                f"    Transformed: BatchId={request.batch_information.batch_id}, "
                f"Interface={request.batch_information.interface}, "
                f"Vouchers={request.voucher_count}, Rows={request.transaction_count}"
            )

            if dry_run:
                logger.info(
                    f"    [DRY RUN] Would post {request.transaction_count} rows "
                    "(file will remain in inbox)"
                )
                result.state = FileState.DRY_RUN_COMPLETE
                entry.finalize(LogStatus.SUCCESS, _elapsed_ms(self.timer, started), DRY_RUN_MESSAGE)
                return result

            response = self.unit4.post_batch(request)
            if not response.succeeded:
                raise SubmissionError(response.error_summary(), response)
            result.state = FileState.SUBMITTED
            logger.info(f"    Posted {request.transaction_count} rows to Unit4")

            archived = file_source.move_to_archive(source, file_name)
            file_source.save_json_sidecar(source, archived, request.to_json(indent=2))
            result.state = FileState.ARCHIVED
            entry.finalize(LogStatus.SUCCESS, _elapsed_ms(self.timer, started))

        except OperationCancelled:
            raise

        except (ConfigurationError, AuthenticationError) as e:
            logger.error(f"    Unit4 client unusable, file left in inbox: {e}")
            result.state = FileState.ERRORED
            result.error = e
            result.aborts_source = True
            entry.finalize(LogStatus.ERROR, _elapsed_ms(self.timer, started), str(e))

        except SubmissionError as e:
            logger.error(f"    Unit4 API error: {e}")
            self._fail(result, e, started, source, file_source, dry_run)

        except Exception as e:
            logger.exception(f"    Error processing file {file_name}: {e}")
            self._fail(result, e, started, source, file_source, dry_run)

        return result

    def _fail(
        self,
        result: FileResult,
        error: Exception,
        started: float,
        source: SourceSystem,
        file_source: FileSourcePort,
        dry_run: bool,
    ) -> None:
        result.state = FileState.ERRORED
        result.error = error
        result.entry.finalize(LogStatus.ERROR, _elapsed_ms(self.timer, started), str(error))

        if dry_run:
            logger.info("    [DRY RUN] File preserved in inbox despite error")
            return

        file_name = result.entry.file_name
        try:
            file_source.move_to_error(source, file_name)
        except Exception as e:
            logger.exception(f"    Failed to move {file_name} to error folder: {e}")


class RunService:
    """Runs every selected source system once and records the outcome.

    Source systems and their files are processed strictly in order. Log
    entries are buffered per source system and written in one batch.
    """

    def __init__(
        self,
        sources: SourceSystemPort,
        log_store: LogStorePort,
        file_source_for: Callable[[str], FileSourcePort],
        transformer_for: Callable[[str], TransformerPort],
        processor: FileProcessingService,
        cancel: threading.Event | None = None,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.sources = sources
        self.log_store = log_store
        self.file_source_for = file_source_for
        self.transformer_for = transformer_for
        self.processor = processor
        self.cancel = cancel or threading.Event()
        self.timer = timer

    def run_once(self, run_filter: RunFilter | None = None) -> RunSummary:
        run_filter = run_filter or RunFilter()
        summary = RunSummary()
        started = self.timer()

        self._log_box(
            "GL07 Transaction Processing Started",
            [
                f"Execution ID: {summary.execution_id}",
                f"Dry Run: {run_filter.dry_run}",
                f"Source Filter: {run_filter.source_system_code or 'All active systems'}",
                f"Filename Filter: {run_filter.file_name or 'All files'}",
            ],
        )

        try:
            systems = self._select(run_filter.source_system_code)
            if not systems:
                logger.warning("No active source systems found to process")
                return summary

            logger.info(f"Processing {len(systems)} source system(s)")
            for source in systems:
                self._check_cancelled()
                self._run_source(source, run_filter, summary)

        except OperationCancelled:
            logger.warning("GL07 processing was cancelled")
            raise

        except Exception as e:
            logger.exception(f"GL07 processing failed with unexpected error: {e}")
            raise

        finally:
            summary.duration_ms = _elapsed_ms(self.timer, started)
            self._log_box(
                "GL07 Processing Summary",
                [
                    f"Total Files Processed: {summary.processed}",
                    f"Successful: {summary.succeeded}",
                    f"Failed: {summary.failed}",
                    f"Duration: {summary.duration_ms}ms",
                ],
            )

        return summary

    def _select(self, code: str | None) -> list[SourceSystem]:
        if not code:
            return self.sources.get_active()

        source = self.sources.get_by_code(code)
        if source is None:
            logger.warning(f"Source system not found: {code}")
            return []
        if not source.active:
            logger.warning(f"Source system is not active: {code}")
            return []
        return [source]

    def _check_cancelled(self) -> None:
        if self.cancel.is_set():
            raise OperationCancelled("Processing cancelled")

    def _run_source(
        self, source: SourceSystem, run_filter: RunFilter, summary: RunSummary
    ) -> None:
        """Process one source system, adding to summary as each file finishes."""
        logger.info("─" * BOX_WIDTH)
        logger.info(f"Processing source system: {source.name} ({source.code})")
        logger.info(f"  Provider: {source.provider}")
        logger.info(f"  Folder: {source.folder}")
        logger.info(f"  Transformer: {source.transformer}")
        logger.info(f"  Pattern: {source.pattern}")
        logger.info(f"  Interface: {source.interface or '(from source file)'}")
        logger.info(f"  TransactionType: {source.transaction_type or '(from source file)'}")
        logger.info(f"  BatchId: {source.batch_id_prefix or '(from source file)'}")

        execution_id = summary.execution_id
        succeeded = failed = 0
        entries: list[ProcessingLogEntry] = []

        try:
            file_source = self.file_source_for(source.provider)
            transformer = self.transformer_for(source.transformer)
            files = file_source.list_files(source)

            if run_filter.file_name:
                wanted = run_filter.file_name.lower()
                files = [f for f in files if f.lower() == wanted]
                if not files:
                    logger.warning(f"  Specified file not found in inbox: {run_filter.file_name}")
                    return
                logger.info(f"  Filtered to specific file: {files[0]}")

            if not files:
                logger.info(f"  No files to process in {source.folder}/inbox")
                entry = ProcessingLogEntry(
                    source_system_id=source.id,
                    file_name=NO_FILES,
                    execution_id=execution_id,
                    voucher_count=0,
                    transaction_count=0,
                )
                entry.finalize(LogStatus.SUCCESS, 0, NO_FILES_MESSAGE)
                entries.append(entry)
                return

            logger.info(f"  Found {len(files)} file(s) to process")

            for file_name in files:
                self._check_cancelled()

                result = self.processor.process(
                    source,
                    file_name,
                    file_source,
                    transformer,
                    execution_id,
                    dry_run=run_filter.dry_run,
                )
                entries.append(result.entry)

                if result.success:
                    succeeded += 1
                    summary.add(1, 1, 0)
                    continue

                failed += 1
                summary.add(1, 0, 1)
                if result.aborts_source:
                    logger.error(f"  Stopping source system {source.code}: {result.error}")
                    break
                logger.warning(f"  File {file_name} failed, continuing with next file")

        except (UnsupportedTransformerError, ConfigurationError, AuthenticationError) as e:
            logger.error(f"  Source system {source.code} skipped: {e}")
            entry = ProcessingLogEntry(
                source_system_id=source.id,
                file_name=SOURCE_SYSTEM_ENTRY,
                execution_id=execution_id,
            )
            entry.finalize(LogStatus.ERROR, 0, str(e))
            entries.append(entry)
            failed += 1
            summary.add(0, 0, 1)

        finally:
            self._save(entries)

        logger.info(
            f"  Source system {source.code} complete: "
            f"{succeeded} success, {failed} errors"
        )

    def _save(self, entries: list[ProcessingLogEntry]) -> None:
        if not entries:
            return
        try:
            logger.debug(f"  Saving {len(entries)} processing log entries")
            self.log_store.add_batch(entries)
        except Exception as e:
            logger.exception(f"  Failed to save processing log entries: {e}")

    @staticmethod
    def _log_box(title: str, lines: list[str]) -> None:
        logger.info("╔" + "═" * BOX_WIDTH + "╗")
        logger.info(f"║  {title}")
        logger.info("╠" + "═" * BOX_WIDTH + "╣")
        for line in lines:
            logger.info(f"║  {line}")
        logger.info("╚" + "═" * BOX_WIDTH + "╝")
