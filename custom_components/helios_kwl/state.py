"""Path-keyed state store shared by the bridge and the entity platforms."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
import inspect
import logging
from typing import Any

from .parser import ValueType

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StateMeta:
    """Schema of a state entry, fixed when the entry is created."""

    name: str
    variable: str
    value_type: ValueType
    writable: bool
    minimum: float | None = None
    maximum: float | None = None
    remark: str = ""


@dataclass(slots=True)
class StateEntry:
    """Current value of a state entry plus its schema."""

    path: str
    meta: StateMeta
    value: Any = None
    ack: bool = True


StateListener = Callable[[StateEntry], Awaitable[None] | None]


class UnknownStateError(KeyError):
    """Raised when writing a path that has no state entry."""


class StateStore:
    """In-memory store of typed state entries.

    ``ack`` distinguishes authoritative device values (``True``) from
    requests made by a consumer (``False``). Only unacknowledged writes reach
    change listeners, so device values never loop back to the device.
    """

    def __init__(self) -> None:
        """Initialise an empty store."""
        self._entries: dict[str, StateEntry] = {}
        self._created_listeners: list[StateListener] = []
        self._update_listeners: list[StateListener] = []
        self._change_listeners: list[StateListener] = []

    def __contains__(self, path: object) -> bool:
        """Return True when ``path`` has an entry."""

        return path in self._entries

    def __iter__(self) -> Iterator[StateEntry]:
        """Iterate over a snapshot of the entries."""

        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        """Return the number of entries."""

        return len(self._entries)

    def get(self, path: str) -> StateEntry | None:
        """Return the entry stored at ``path``."""

        return self._entries.get(path)

    def get_meta(self, path: str) -> StateMeta | None:
        """Return the schema stored at ``path``."""

        entry = self._entries.get(path)
        return entry.meta if entry is not None else None

    async def async_ensure_entry(
        self, path: str, meta: StateMeta, *, value: Any = None
    ) -> bool:
        """Create the entry at ``path`` unless it already exists.

        ``value`` is the acknowledged initial value seen by created
        listeners. Returns True when a new entry was created.
        """

        if not path:
            raise ValueError("State path must not be empty")
        if path in self._entries:
            return False
        entry = StateEntry(path=path, meta=meta, value=value)
        self._entries[path] = entry
        _LOGGER.debug("Created state %s (%s)", path, meta.value_type)
        await self._async_notify(self._created_listeners, entry)
        return True

    async def async_set(self, path: str, value: Any, *, ack: bool) -> StateEntry:
        """Write ``value`` to ``path`` with the given acknowledgment flag."""

        entry = self._entries.get(path)
        if entry is None:
            raise UnknownStateError(path)
        entry.value = value
        entry.ack = ack
        await self._async_notify(self._update_listeners, entry)
        if not ack:
            await self._async_notify(self._change_listeners, entry)
        return entry

    def async_subscribe_created(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` for every newly created entry."""

        return self._subscribe(self._created_listeners, listener)

    def async_subscribe_updates(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` for every value write."""

        return self._subscribe(self._update_listeners, listener)

    def async_subscribe_changes(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` for unacknowledged (consumer) writes only."""

        return self._subscribe(self._change_listeners, listener)

    @staticmethod
    def _subscribe(
        listeners: list[StateListener], listener: StateListener
    ) -> Callable[[], None]:
        listeners.append(listener)

        def _remove() -> None:
            if listener in listeners:
                listeners.remove(listener)

        return _remove

    @staticmethod
    async def _async_notify(
        listeners: list[StateListener], entry: StateEntry
    ) -> None:
        for listener in list(listeners):
            try:
                result = listener(entry)
                if inspect.isawaitable(result):
                    await result
            except Exception:  # noqa: BLE001 - listeners must not break writers
                _LOGGER.exception("State listener failed for %s", entry.path)


__all__ = [
    "StateEntry",
    "StateListener",
    "StateMeta",
    "StateStore",
    "UnknownStateError",
]
