from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from sentinel_explorer.progress.base import LoggingConfig, ProgressReporter


class RichProgressReporter(ProgressReporter):
    """One transfer bar per download or extraction.

    Bars start as indeterminate and switch to a byte count once the size is known
    (Content-Length for downloads, uncompressed size for archives).
    """

    def __init__(self):
        self.progress = Progress(
            TextColumn("[bold green]{task.description}", justify="right"),
            TextColumn("[blue]{task.fields[scene]}", justify="left"),
            BarColumn(bar_width=None),
            "[progress.percentage]{task.percentage:>3.1f}%",
            "•",
            DownloadColumn(),
            "•",
            TransferSpeedColumn(),
            "•",
            TimeRemainingColumn(),
        )
        self._tasks: dict[str, tuple[TaskID, str]] = {}

    @classmethod
    def logging_config(cls) -> LoggingConfig:
        return LoggingConfig(format="%(message)s", handlers=[RichHandler(rich_tracebacks=True)])

    def start(self) -> None:
        self._tasks = {}
        self.progress.start()
        super().start()

    def add_task(self, item_id: str, description: str) -> TaskID:
        # task ids look like `download_<scene>`
        scene = item_id.split("_", 1)[-1]
        task_id = self.progress.add_task(description=description, scene=scene, start=False, total=None)
        self._tasks[item_id] = (task_id, description)
        return task_id

    def set_task_duration(self, item_id: str, total: int) -> None:
        if item_id in self._tasks:
            task_id, _ = self._tasks[item_id]
            self.progress.update(task_id, total=total)
            self.progress.start_task(task_id)

    def update_progress(self, item_id: str, advance: int | None = None, description: str | None = None) -> None:
        if item_id not in self._tasks:
            return
        task_id, current = self._tasks[item_id]
        if description:
            self._tasks[item_id] = (task_id, description)
        self.progress.update(task_id, advance=advance, description=description or current)

    def end_task(self, item_id: str, success: bool, description: str | None = None) -> None:
        if item_id not in self._tasks:
            return
        task_id, current = self._tasks.pop(item_id)
        mark = "✓" if success else "✗"
        self.progress.update(task_id, description=f"{mark} {description or current}")
        self.progress.stop_task(task_id)

    def stop(self) -> None:
        super().stop()
        self.progress.stop()
        self._tasks.clear()
