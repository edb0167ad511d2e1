"""
Record events and remote write-through.

The persistence layer announces record writes through `RecordEvents`;
subscribers react independently. `register_remote_writes()` subscribes the
HTTP write-through for remote-backed entities:

    saving   -> debug log
    creating -> POST   <base_uri>
    updating -> PUT    <base_uri>/<key>
    deleting -> DELETE <base_uri>/<key>

Callbacks run in registration order; an exception in a callback aborts the
write that triggered it.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, DefaultDict, List, Optional, Type

from rowcache.domain.entity import Entity
from rowcache.domain.models import Row
from rowcache.infrastructure.api_client import ApiClient, send_request
from rowcache.utils.logging import get_logger

log = get_logger(__name__)


class RecordEvent(str, Enum):
    SAVING = "saving"
    CREATING = "creating"
    UPDATING = "updating"
    DELETING = "deleting"


@dataclass(frozen=True)
class RecordChange:
    """Payload handed to every event callback."""

    event: RecordEvent
    entity: Type[Entity]
    record: Row
    key: Optional[Any] = None


Listener = Callable[[RecordChange], None]


class RecordEvents:
    """Registry of per-event callbacks."""

    def __init__(self) -> None:
        self._listeners: DefaultDict[RecordEvent, List[Listener]] = defaultdict(list)

    def listen(self, event: RecordEvent, listener: Listener) -> None:
        self._listeners[RecordEvent(event)].append(listener)

    def listeners(self, event: RecordEvent) -> List[Listener]:
        return list(self._listeners.get(RecordEvent(event), []))

    def dispatch(
        self,
        event: RecordEvent,
        entity: Type[Entity],
        record: Row,
        key: Optional[Any] = None,
    ) -> None:
        change = RecordChange(event=RecordEvent(event), entity=entity, record=dict(record), key=key)
        for listener in self.listeners(event):
            listener(change)

    def clear(self) -> None:
        self._listeners.clear()


def _member_path(change: RecordChange) -> str:
    base_uri = change.entity.descriptor.base_uri.rstrip("/")
    return f"{base_uri}/{change.key}"


def register_remote_writes(events: RecordEvents, client_factory: Callable[[], ApiClient]) -> None:
    """Subscribe HTTP write-through for entities declaring `use_api = True`."""

    def on_saving(change: RecordChange) -> None:
        log.debug(
            "Saving record",
            extra={"entity": change.entity.descriptor.identity, "key": change.key},
        )

    def on_creating(change: RecordChange) -> None:
        if change.entity.descriptor.use_api:
            send_request(client_factory(), "post", change.entity.descriptor.base_uri, change.record)

    def on_updating(change: RecordChange) -> None:
        if change.entity.descriptor.use_api:
            send_request(client_factory(), "put", _member_path(change), change.record)

    def on_deleting(change: RecordChange) -> None:
        if change.entity.descriptor.use_api:
            send_request(client_factory(), "delete", _member_path(change), change.record)

    events.listen(RecordEvent.SAVING, on_saving)
    events.listen(RecordEvent.CREATING, on_creating)
    events.listen(RecordEvent.UPDATING, on_updating)
    events.listen(RecordEvent.DELETING, on_deleting)


__all__ = ["RecordChange", "RecordEvent", "RecordEvents", "register_remote_writes"]
