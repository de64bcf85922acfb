"""BDD step definitions shared by the feature files."""

import threading
from contextlib import closing
from pathlib import Path

import httpx
import pytest
from pytest_bdd import given, parsers, then, when

from gl07_gateway.adapters.logstore import SqliteLogStore
from gl07_gateway.adapters.unit4 import Unit4ApiClient
from gl07_gateway.config import PathsConfig, Settings, SourceSystemConfig, Unit4Config
from gl07_gateway.domain.errors import OperationCancelled
from gl07_gateway.domain.models import ProcessingLogEntry, RunFilter, RunSummary
from gl07_gateway.worker import create_run_service

UNIT4_URL = "https://unit4.test"
TOKEN_URL = "https://unit4.test/oauth/token"


@pytest.fixture
def context(tmp_path: Path) -> dict:
    """Shared test context with temp directory."""
    return {
        "tmp_path": tmp_path,
        "base": tmp_path / "files",
        "sources": [],
        "batch_responses": [],
        "batches": [],
        "cancel": threading.Event(),
        "cancel_after_first_batch": False,
    }


def _folder(context: dict, code: str, name: str) -> Path:
    source = next(s for s in context["sources"] if s.code == code)
    return context["base"] / source.folder / name


def _unit4_handler(context: dict):
    def handle(request: httpx.Request) -> httpx.Response:
        if str(request.url) == TOKEN_URL:
            return httpx.Response(200, json={"access_token": "token", "expires_in": 3600})

        context["batches"].append(request)
        if context["cancel_after_first_batch"]:
            context["cancel"].set()
        if context["batch_responses"]:
            return context["batch_responses"].pop(0)
        return httpx.Response(200, json={"status": "Success", "batchId": "B-1"})

    return handle


def _entries(context: dict) -> list[ProcessingLogEntry]:
    store = SqliteLogStore(context["settings"].paths.database)
    with closing(store.connect()) as conn:
        ids = [
            row["execution_id"]
            for row in conn.execute("SELECT DISTINCT execution_id FROM processing_log")
        ]
    return [e for execution_id in ids for e in store.get_by_execution(execution_id)]


# Given


@given(parsers.parse('a local source system "{code}" with folder "{folder}"'))
def local_source_system(context: dict, code: str, folder: str) -> None:
    context["sources"].append(
        SourceSystemConfig(id=len(context["sources"]) + 1, code=code, folder=folder)
    )


@given(
    parsers.parse(
        'a source system "{code}" with folder "{folder}" using transformer "{transformer}"'
    )
)
def local_source_system_with_transformer(
    context: dict, code: str, folder: str, transformer: str
) -> None:
    context["sources"].append(
        SourceSystemConfig(
            id=len(context["sources"]) + 1, code=code, folder=folder, transformer=transformer
        )
    )


@given(parsers.parse('the inbox of "{code}" contains a valid ABWTransaction file "{name}"'))
def valid_file(context: dict, sample_xml: str, code: str, name: str) -> None:
    inbox = _folder(context, code, "inbox")
    inbox.mkdir(parents=True, exist_ok=True)
    (inbox / name).write_text(sample_xml, encoding="utf-8")


@given(parsers.parse('the inbox of "{code}" contains a file "{name}" with content "{content}"'))
def file_with_content(context: dict, code: str, name: str, content: str) -> None:
    inbox = _folder(context, code, "inbox")
    inbox.mkdir(parents=True, exist_ok=True)
    (inbox / name).write_text(content, encoding="utf-8")


@given("Unit4 accepts batches")
def unit4_accepts(context: dict) -> None:
    context["batch_responses"] = []


@given(parsers.parse("Unit4 answers the first batch with HTTP {status:d}"))
def unit4_fails_first(context: dict, status: int) -> None:
    context["batch_responses"] = [httpx.Response(status, text='{"message":"down"}')]


@given("the run is cancelled after the first batch")
def cancel_after_first_batch(context: dict) -> None:
    context["cancel_after_first_batch"] = True


# When


def _run(context: dict, run_filter: RunFilter) -> None:
    settings = Settings(
        paths=PathsConfig(
            base=context["base"], database=context["tmp_path"] / "db" / "processing.db"
        ),
        unit4=Unit4Config(
            base_url=UNIT4_URL,
            token_url=TOKEN_URL,
            client_id="gateway",
            client_secret="secret",
        ),
        sources=context["sources"],
    )
    context["settings"] = settings

    http = httpx.Client(transport=httpx.MockTransport(_unit4_handler(context)))
    unit4 = Unit4ApiClient(settings.unit4, http=http)
    service = create_run_service(settings, unit4, context["cancel"])
    try:
        context["summary"] = service.run_once(run_filter)
    except OperationCancelled as e:
        context["cancelled"] = e
    finally:
        unit4.close()


@when("the gateway runs")
def gateway_runs(context: dict) -> None:
    _run(context, RunFilter())


@when("the gateway runs in dry-run mode")
def gateway_runs_dry(context: dict) -> None:
    _run(context, RunFilter(dry_run=True))


@when(parsers.parse('the gateway runs for file "{name}"'))
def gateway_runs_for_file(context: dict, name: str) -> None:
    _run(context, RunFilter(file_name=name))


# Then


@then(
    parsers.parse(
        "the run summary shows {processed:d} processed, {succeeded:d} succeeded "
        "and {failed:d} failed"
    )
)
def summary_counts(context: dict, processed: int, succeeded: int, failed: int) -> None:
    summary: RunSummary = context["summary"]
    assert (summary.processed, summary.succeeded, summary.failed) == (
        processed,
        succeeded,
        failed,
    )


@then("the run is reported as cancelled")
def run_cancelled(context: dict) -> None:
    assert "cancelled" in context
    assert "summary" not in context


@then(parsers.parse('"{name}" is archived for "{code}" with a JSON sidecar'))
def archived_with_sidecar(context: dict, name: str, code: str) -> None:
    archive = _folder(context, code, "archive")
    stored = [p.name for p in archive.iterdir()]
    assert any(n.endswith(f"_{name}") for n in stored), stored
    sidecar = f"_{Path(name).stem}.json"
    assert any(n.endswith(sidecar) for n in stored), stored


@then(parsers.parse('"{name}" is in the error folder of "{code}"'))
def in_error_folder(context: dict, name: str, code: str) -> None:
    errors = [p.name for p in _folder(context, code, "error").iterdir()]
    assert any(n.endswith(f"_{name}") for n in errors), errors
    assert not (_folder(context, code, "inbox") / name).exists()


@then(parsers.parse('the inbox of "{code}" holds {count:d} files'))
def inbox_count(context: dict, code: str, count: int) -> None:
    inbox = _folder(context, code, "inbox")
    assert len([p for p in inbox.iterdir() if p.is_file()]) == count


@then(parsers.parse("Unit4 received {count:d} batches"))
def batches_received(context: dict, count: int) -> None:
    assert len(context["batches"]) == count


@then(parsers.parse('the execution log has {count:d} "{status}" entries'))
def log_status_count(context: dict, count: int, status: str) -> None:
    entries = _entries(context)
    assert len([e for e in entries if e.status.value == status]) == count
    assert len(entries) == count


@then(parsers.parse('the execution log has an entry "{name}" with status "{status}"'))
def log_has_entry(context: dict, name: str, status: str) -> None:
    matches = [e for e in _entries(context) if e.file_name == name]
    assert len(matches) == 1
    assert matches[0].status.value == status


@then(
    parsers.parse(
        'the execution log entry for "{name}" has status "{status}" mentioning "{text}"'
    )
)
def log_entry_message(context: dict, name: str, status: str, text: str) -> None:
    (entry,) = [e for e in _entries(context) if e.file_name == name]
    assert entry.status.value == status
    assert text in entry.error_message
