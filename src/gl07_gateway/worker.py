"""Wiring for a single processing run."""

import logging
import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from .adapters.logstore import SqliteLogStore
from .adapters.sources import SettingsSourceSystems
from .adapters.storage import create_file_source
from .adapters.transform import create_transformer_registry
from .adapters.unit4 import Unit4ApiClient
from .config import Settings
from .domain.models import RunFilter, RunSummary
from .domain.services import FileProcessingService, RunService

logger = logging.getLogger(__name__)


def create_run_service(
    settings: Settings,
    unit4: Unit4ApiClient,
    cancel: threading.Event | None = None,
) -> RunService:
    """Create a RunService with configured adapters."""
    registry = create_transformer_registry(settings.transform)
    return RunService(
        sources=SettingsSourceSystems(settings.sources),
        log_store=SqliteLogStore(settings.paths.database),
        file_source_for=lambda provider: create_file_source(provider, settings),
        transformer_for=registry.get,
        processor=FileProcessingService(unit4),
        cancel=cancel,
    )


@contextmanager
def cancel_on_sigterm() -> Iterator[threading.Event]:
    """Yield an event that is set when SIGTERM arrives."""
    cancel = threading.Event()

    def handle(signum: int, frame: object) -> None:
        logger.warning("SIGTERM received, cancelling after current file")
        cancel.set()

    previous = signal.signal(signal.SIGTERM, handle)
    try:
        yield cancel
    finally:
        signal.signal(signal.SIGTERM, previous)


def run_worker(settings: Settings, run_filter: RunFilter) -> RunSummary:
    """Run all selected source systems once."""
    unit4 = Unit4ApiClient(settings.unit4)
    try:
        with cancel_on_sigterm() as cancel:
            service = create_run_service(settings, unit4, cancel)
            return service.run_once(run_filter)
    finally:
        unit4.close()
