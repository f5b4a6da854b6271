"""Progress reporting for downloads and archive extraction.

Reporters subscribe to the progress event bus while active:
- EmptyProgressReporter: No-op reporter for silent operation
- SimpleProgressReporter: Basic log-based progress output
- RichProgressReporter: terminal progress bars
"""

from typing import Any

from sentinel_explorer.progress.base import EmptyProgressReporter, LoggingConfig, ProgressReporter
from sentinel_explorer.progress.rich import RichProgressReporter
from sentinel_explorer.progress.simple import SimpleProgressReporter
from sentinel_explorer.registry import Registry

registry = Registry[ProgressReporter](name="reporter")
registry.register("empty")(EmptyProgressReporter)
registry.register("simple")(SimpleProgressReporter)
registry.register("rich")(RichProgressReporter)

__all__ = [
    "ProgressReporter",
    "EmptyProgressReporter",
    "SimpleProgressReporter",
    "RichProgressReporter",
    "LoggingConfig",
    "create_reporter",
]


def create_reporter(reporter_name: str, **kwargs: Any) -> ProgressReporter:
    return registry.create(reporter_name, **kwargs)
