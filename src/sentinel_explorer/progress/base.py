import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from sentinel_explorer.model import ProgressEvent, ProgressEventType
from sentinel_explorer.progress.events import get_bus

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class LoggingConfig:
    format: str = DEFAULT_LOG_FORMAT
    handlers: list[logging.Handler] | None = field(default=None)


class ProgressReporter(ABC):
    """
    Base reporter: translates progress events from the bus into task updates.
    """

    @classmethod
    def logging_config(cls) -> LoggingConfig:
        return LoggingConfig()

    def start(self) -> None:
        get_bus().subscribe(self.handle)

    def stop(self) -> None:
        get_bus().unsubscribe(self.handle)

    def handle(self, event: ProgressEvent) -> None:
        data = event.data
        if event.type == ProgressEventType.TASK_CREATED:
            self.add_task(event.task_id, description=data.get("description", ""))
        elif event.type == ProgressEventType.TASK_DURATION:
            self.set_task_duration(event.task_id, total=data["duration"])
        elif event.type == ProgressEventType.TASK_PROGRESS:
            self.update_progress(event.task_id, advance=data.get("advance"), description=data.get("description"))
        elif event.type == ProgressEventType.TASK_COMPLETED:
            self.end_task(event.task_id, success=data.get("success", True), description=data.get("description"))

    @abstractmethod
    def add_task(self, item_id: str, description: str) -> Any: ...

    @abstractmethod
    def set_task_duration(self, item_id: str, total: int) -> None: ...

    @abstractmethod
    def update_progress(self, item_id: str, advance: int | None = None, description: str | None = None) -> None: ...

    @abstractmethod
    def end_task(self, item_id: str, success: bool, description: str | None = None) -> None: ...


class EmptyProgressReporter(ProgressReporter):
    """
    Empty reporter to avoid continuos checks against None
    """

    def start(self) -> None:
        pass

    def stop(self) -> None:
        pass

    def add_task(self, item_id: str, description: str) -> Any:
        pass

    def set_task_duration(self, item_id: str, total: int) -> None:
        pass

    def update_progress(self, item_id: str, advance: int | None = None, description: str | None = None) -> None:
        pass

    def end_task(self, item_id: str, success: bool, description: str | None = None) -> None:
        pass
