"""Callback-style event dispatch for code written against the old event names.

Older callers registered listeners for ``connect``, ``connection-close`` and
``results``. LegacyEventDispatcher accepts those names, warns once per name,
and drives the callbacks from a RecognizeStream's event channel.
"""

import inspect
import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from ...core.config import setup_logging
from .internal.streaming import RecognizeStream
from .types import EventKind, StreamEvent

logger = setup_logging(__name__)

# deprecated name -> current name
DEPRECATED_EVENT_NAMES = {
    "connect": "open",
    "connection-close": "close",
    "results": "result",
}

EVENT_NAMES = ("open", "data", "result", "error", "close")


class LegacyEventDispatcher:
    """Register callbacks by event name and feed them from a stream.

    Callbacks receive: ``open()``, ``data(text)``, ``result(frame)``,
    ``error(exception)``, ``close(code, reason)``. Async callbacks are awaited.
    """

    def __init__(
        self,
        stream: RecognizeStream,
        silent: bool = False,
        diagnostics: logging.Logger | None = None,
    ):
        self.stream = stream
        self.silent = silent
        self._log = diagnostics or logger
        self._callbacks: dict[str, list[Callable[..., Any]]] = defaultdict(list)
        self._warned: set[str] = set()

    def on(self, name: str, callback: Callable[..., Any]) -> "LegacyEventDispatcher":
        """Register a callback; deprecated names are mapped to current ones."""
        event_name = self._resolve(name)
        self._callbacks[event_name].append(callback)
        return self

    def _resolve(self, name: str) -> str:
        if name in DEPRECATED_EVENT_NAMES:
            current = DEPRECATED_EVENT_NAMES[name]
            if not self.silent and name not in self._warned:
                self._warned.add(name)
                self._log.warning(
                    f"The '{name}' event is deprecated and will be removed from a future release. "
                    f"Please listen for the '{current}' event instead. "
                    "Pass silent=True to suppress this message."
                )
            return current
        if name not in EVENT_NAMES:
            raise ValueError(f"Unknown event name: {name!r}")
        return name

    async def run(self) -> None:
        """Dispatch every event until the stream's terminal event."""
        async for event in self.stream.events():
            await self.dispatch(event)

    async def dispatch(self, event: StreamEvent) -> None:
        if event.kind is EventKind.OPEN:
            await self._call("open")
        elif event.kind is EventKind.DATA:
            await self._call("data", event.data)
        elif event.kind is EventKind.RESULT:
            await self._call("result", event.data)
        elif event.kind is EventKind.ERROR:
            await self._call("error", event.error)
        elif event.kind is EventKind.CLOSE:
            await self._call("close", event.code, event.reason)

    async def _call(self, name: str, *args: Any) -> None:
        for callback in self._callbacks.get(name, ()):
            outcome = callback(*args)
            if inspect.isawaitable(outcome):
                await outcome


__all__ = ["DEPRECATED_EVENT_NAMES", "LegacyEventDispatcher"]
