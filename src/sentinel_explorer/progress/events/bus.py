import logging
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Callable, Iterator

from sentinel_explorer.model import ProgressEvent, ProgressEventType

log = logging.getLogger(__name__)

Handler = Callable[[ProgressEvent], None]


class EventBus:
    """Fan-out of progress events to the handlers subscribed at emit time.

    Handlers run synchronously in the emitting thread, in subscription order.
    Exceptions raised by a handler propagate to the emitter.
    """

    def __init__(self):
        self._handlers: list[Handler] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: Handler) -> None:
        with self._lock:
            self._handlers.append(handler)

    def unsubscribe(self, handler: Handler) -> None:
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    def emit(self, event: ProgressEvent) -> None:
        with self._lock:
            handlers = tuple(self._handlers)
        for handler in handlers:
            handler(event)


_process_bus = EventBus()
_scoped_bus: ContextVar[EventBus | None] = ContextVar("progress_bus", default=None)


def get_bus() -> EventBus:
    """Bus installed by the innermost `use_bus` block, or the process-wide one."""
    bus = _scoped_bus.get()
    return bus if bus is not None else _process_bus


@contextmanager
def use_bus(bus: EventBus) -> Iterator[EventBus]:
    """Route events emitted inside the block to `bus`.

    Example:
        >>> events = []
        >>> bus = EventBus()
        >>> bus.subscribe(events.append)
        >>> with use_bus(bus):
        ...     extract_zip(archive, target, item_id="scene")
    """
    token = _scoped_bus.set(bus)
    try:
        yield bus
    finally:
        _scoped_bus.reset(token)


def emit_event(event_type: ProgressEventType, task_id: str, **data) -> None:
    """Build a `ProgressEvent` and send it to the current bus.

    Task ids are prefixed by the stage, e.g. `download_<scene>` or `extract_<scene>`.
    """
    bus = get_bus()
    if not len(bus):
        return
    bus.emit(ProgressEvent(type=event_type, task_id=task_id, data=data))
