"""Translate page bodies into typed state writes."""

from __future__ import annotations

import asyncio
import logging

from .datapoints import resolve_entry, storage_path
from .parser import PageParseError, infer_value, parse_page
from .sanitize import redact_text
from .state import StateMeta, StateStore

_LOGGER = logging.getLogger(__name__)


class StateTranslator:
    """Turn ``(identifier, value)`` pairs into state entries and values.

    The set of identifiers whose entry was already created lives for the
    lifetime of this object only; the store's own existence check keeps a
    fresh set safe after a restart.
    """

    def __init__(self, store: StateStore) -> None:
        """Bind the translator to ``store``."""
        self._store = store
        self._created: set[str] = set()

    @property
    def created(self) -> frozenset[str]:
        """Return the identifiers whose state entry has been created."""

        return frozenset(self._created)

    async def async_translate(self, body: str | None) -> int:
        """Write every reading in ``body`` to the store.

        Returns the number of values written. A malformed body writes
        nothing.
        """

        try:
            readings = parse_page(body)
        except PageParseError as err:
            _LOGGER.warning(
                "Unexpected page response (%s): %s", err, redact_text(body)
            )
            return 0

        written = 0
        for reading in readings:
            value, value_type = infer_value(reading.raw)
            catalog = resolve_entry(reading.identifier)
            path = storage_path(catalog)
            meta = StateMeta(
                name=catalog.description,
                variable=catalog.variable,
                value_type=value_type,
                writable=catalog.writable,
                minimum=catalog.minimum,
                maximum=catalog.maximum,
                remark=catalog.remark,
            )

            if reading.identifier not in self._created:
                try:
                    await self._store.async_ensure_entry(path, meta, value=value)
                except asyncio.CancelledError:
                    raise
                except Exception:  # noqa: BLE001 - keep translating the page
                    _LOGGER.exception(
                        "Failed to create state %s for %s", path, reading.identifier
                    )
                else:
                    self._created.add(reading.identifier)

            try:
                await self._store.async_set(path, value, ack=True)
            except asyncio.CancelledError:
                raise
            except Exception as err:  # noqa: BLE001 - keep translating the page
                _LOGGER.error(
                    "Failed to write %s (%s) = %r: %s; meta=%s",
                    reading.identifier,
                    path,
                    value,
                    err,
                    meta,
                )
                continue
            written += 1

        return written


__all__ = ["StateTranslator"]
