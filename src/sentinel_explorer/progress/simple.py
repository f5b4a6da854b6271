import logging

from sentinel_explorer.progress.base import ProgressReporter

log = logging.getLogger(__name__)


def _megabytes(size: int) -> str:
    return f"{size / 1_000_000:.1f} MB"


class SimpleProgressReporter(ProgressReporter):
    """Log one line when a download or extraction starts and one when it ends."""

    def __init__(self):
        self.completed = 0
        self.failed = 0
        self.transferred: dict[str, int] = {}
        self.expected: dict[str, int] = {}

    def start(self) -> None:
        self.completed = 0
        self.failed = 0
        self.transferred.clear()
        self.expected.clear()
        super().start()

    def add_task(self, item_id: str, description: str) -> str:
        self.transferred[item_id] = 0
        log.info("Started %s - %s", description, item_id)
        return item_id

    def set_task_duration(self, item_id: str, total: int) -> None:
        self.expected[item_id] = total

    def update_progress(self, item_id: str, advance: int | None = None, description: str | None = None) -> None:
        if advance:
            self.transferred[item_id] = self.transferred.get(item_id, 0) + advance

    def end_task(self, item_id: str, success: bool, description: str | None = None) -> None:
        size = _megabytes(self.transferred.get(item_id, 0))
        if success:
            self.completed += 1
            log.info("✓ %s - %s (%s)", description or "done", item_id, size)
            return
        self.failed += 1
        expected = self.expected.get(item_id)
        if expected:
            size = f"{size} of {_megabytes(expected)}"
        log.info("✗ %s - %s (%s)", description or "failed", item_id, size)

    def stop(self) -> None:
        super().stop()
        log.info("Finished: %d successful, %d failed", self.completed, self.failed)
