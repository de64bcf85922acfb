"""File source adapter using the local filesystem."""

import fnmatch
import logging
import shutil
from collections.abc import Callable
from datetime import date, datetime, timezone
from pathlib import Path

from ...domain.models import SourceSystem
from ...ports.file_source import FileSourcePort
from .naming import unique_name

logger = logging.getLogger(__name__)

INBOX = "inbox"
ARCHIVE = "archive"
ERROR = "error"


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _check_name(file_name: str) -> str:
    """Reject names that would escape the source folder."""
    if not file_name or Path(file_name).name != file_name or file_name in (".", ".."):
        raise FileNotFoundError(f"Invalid file name: {file_name!r}")
    return file_name


def _sidecar_name(file_name: str) -> str:
    return Path(file_name).with_suffix(".json").name


class FilesystemAdapter(FileSourcePort):
    """Files under base/<folder>/{inbox,archive,error}."""

    def __init__(self, base_path: Path, today: Callable[[], date] = _utc_today) -> None:
        self.base_path = base_path
        self.today = today

    def folder(self, source: SourceSystem, name: str) -> Path:
        return self.base_path / source.folder / name

    def list_files(self, source: SourceSystem) -> list[str]:
        inbox = self.folder(source, INBOX)
        logger.debug(f"Listing files in {inbox} with pattern {source.pattern}")

        if not inbox.exists():
            logger.warning(f"Inbox directory does not exist: {inbox}")
            return []

        files = sorted(
            p.name
            for p in inbox.iterdir()
            if p.is_file() and fnmatch.fnmatch(p.name, source.pattern)
        )
        logger.info(f"Found {len(files)} files in {inbox}")
        return files

    def download(self, source: SourceSystem, file_name: str) -> str:
        path = self.folder(source, INBOX) / _check_name(file_name)
        logger.debug(f"Reading file: {path}")

        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        return path.read_text(encoding="utf-8")

    def move_to_archive(self, source: SourceSystem, file_name: str) -> str:
        # reserve a name whose .json sibling is free too
        dest = self._move(source, file_name, ARCHIVE, _sidecar_name)
        logger.info(f"Archived: {source.folder}/{ARCHIVE}/{dest.name}")
        return dest.name

    def move_to_error(self, source: SourceSystem, file_name: str) -> str:
        dest = self._move(source, file_name, ERROR)
        logger.warning(f"Moved to error: {source.folder}/{ERROR}/{dest.name}")
        return dest.name

    def save_json_sidecar(self, source: SourceSystem, archived_name: str, content: str) -> str:
        dest_dir = self.folder(source, ARCHIVE)
        dest = dest_dir / _sidecar_name(_check_name(archived_name))
        if dest.exists():
            raise FileExistsError(f"Sidecar already exists: {dest}")

        dest_dir.mkdir(parents=True, exist_ok=True)
        dest.write_text(content, encoding="utf-8")
        logger.info(f"Saved JSON to archive: {dest.name}")
        return dest.name

    def _move(
        self,
        source: SourceSystem,
        file_name: str,
        target: str,
        sibling: Callable[[str], str] | None = None,
    ) -> Path:
        path = self.folder(source, INBOX) / _check_name(file_name)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")

        dest_dir = self.folder(source, target)
        dest_dir.mkdir(parents=True, exist_ok=True)

        def taken(name: str) -> bool:
            if (dest_dir / name).exists():
                return True
            return sibling is not None and (dest_dir / sibling(name)).exists()

        dest = dest_dir / unique_name(file_name, taken, self.today())

        shutil.move(str(path), dest)
        return dest
