"""Event sink collaborators"""
import logging
from typing import List, Protocol

from contribution_ledger.models.events import LedgerEvent

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    def emit(self, event: LedgerEvent) -> None:
        ...


def publish(sink: EventSink, event: LedgerEvent) -> None:
    """
    Hand an event to the sink after its operation has committed.

    Delivery is the sink's responsibility: a failing sink is logged and
    never turns a committed operation into an error.
    """
    try:
        sink.emit(event)
    except Exception:
        logger.exception(f"Event sink failed to deliver {getattr(event, 'kind', type(event).__name__)} event")


class LoggingEventSink:
    """Writes each event to the log as a JSON line"""

    def __init__(self, log: logging.Logger = logger):
        self.log = log

    def emit(self, event: LedgerEvent) -> None:
        self.log.info(event.model_dump_json())


class MemoryEventSink:
    """Keeps every emitted event in order"""

    def __init__(self):
        self.events: List[LedgerEvent] = []

    def emit(self, event: LedgerEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: str) -> List[LedgerEvent]:
        return [event for event in self.events if getattr(event, 'kind', None) == kind]
