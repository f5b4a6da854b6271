import logging
import zipfile
from pathlib import Path
from shutil import copyfileobj
from typing import IO

from sentinel_explorer.model import ProgressEventType
from sentinel_explorer.progress import ProgressReporter
from sentinel_explorer.progress.events import emit_event

log = logging.getLogger(__name__)


class ProgressReader:
    """Binary reader emitting a TASK_PROGRESS event with the size of every chunk read."""

    def __init__(self, stream: IO[bytes], task_id: str):
        self.stream = stream
        self.task_id = task_id

    def read(self, size: int = -1) -> bytes:
        data = self.stream.read(size)
        emit_event(ProgressEventType.TASK_PROGRESS, self.task_id, advance=len(data))
        return data


def setup_logging(
    log_level: str,
    reporter_cls: type[ProgressReporter] | None,
    suppressions: dict[str, list[str]] | None = None,
) -> None:
    """Configure the root logger for the selected progress reporter.

    Args:
        log_level (str): level name, e.g. "DEBUG" or "info".
        reporter_cls (type[ProgressReporter] | None): reporter whose `logging_config` provides format and handlers.
        suppressions (dict[str, list[str]] | None, optional): level name -> loggers raised to that level,
            e.g. `{"error": ["urllib3"]}`.
    """
    config = (reporter_cls or ProgressReporter).logging_config()
    # force=True replaces handlers installed by an earlier call
    logging.basicConfig(level=log_level.upper(), format=config.format, handlers=config.handlers, force=True)
    for level_name, logger_names in (suppressions or {}).items():
        level = logging.getLevelName(level_name.upper())
        for name in logger_names:
            logging.getLogger(name).setLevel(level)


def _safe_target(extract_to: Path, member: str) -> Path:
    target = (extract_to / member).resolve()
    if target != extract_to and extract_to not in target.parents:
        raise ValueError(f"Invalid archive entry: '{member}' would be extracted outside of {extract_to}")
    return target


def _top_level_name(member: str) -> str:
    return member.replace("\\", "/").strip("/").split("/", 1)[0]


def extract_zip(zip_path: Path, extract_to: Path, item_id: str) -> list[str]:
    """Extract a zip archive entry by entry.

    Directory entries become directories; file entries get their parent folders
    created before the bytes are copied. All handles are closed on every exit path.

    Args:
        zip_path (Path): Path to zip file
        extract_to (Path): Directory to extract to, created if missing
        item_id (str): identifier used for progress tracking

    Returns:
        list[str]: top-level entry names, in archive order
    """
    task_id = f"extract_{item_id}"
    extract_to.mkdir(parents=True, exist_ok=True)
    extract_root = extract_to.resolve()
    top_level: list[str] = []

    emit_event(ProgressEventType.TASK_CREATED, task_id=task_id, description="extract")
    try:
        with zipfile.ZipFile(zip_path, "r") as zip_ref:
            total_size = sum(f.file_size for f in zip_ref.infolist() if not f.is_dir())
            emit_event(ProgressEventType.TASK_DURATION, task_id=task_id, duration=total_size)

            for info in zip_ref.infolist():
                name = _top_level_name(info.filename)
                if name and name not in top_level:
                    top_level.append(name)
                target = _safe_target(extract_root, info.filename)
                if info.is_dir() or info.filename.endswith("\\"):
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with zip_ref.open(info) as in_file, open(target, "wb") as out_file:
                    copyfileobj(ProgressReader(in_file, task_id), out_file)
    except (zipfile.BadZipFile, OSError, ValueError) as e:
        emit_event(ProgressEventType.TASK_COMPLETED, task_id=task_id, success=False, description=f"failed: {e}")
        raise

    log.debug("Extracted %s into %s (%d top-level entries)", zip_path, extract_to, len(top_level))
    emit_event(ProgressEventType.TASK_COMPLETED, task_id=task_id, success=True)
    return top_level
