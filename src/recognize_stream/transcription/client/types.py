"""Type definitions for WebSocket recognition streams.

Provides:
- StreamOptions: Immutable configuration snapshot for one connection
- ConnectionState: Lifecycle of a TranscriptionSocket
- EventKind / StreamEvent: The single tagged output channel
"""

import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from .internal.params import DEFAULT_MODEL, DEFAULT_SERVICE_URL, normalize_legacy_options


class ConnectionState(Enum):
    """State of a transcription socket."""

    UNOPENED = "unopened"
    INITIALIZING = "initializing"
    AWAITING_READY = "awaiting_ready"
    STREAMING = "streaming"
    DRAINING = "draining"
    CLOSED = "closed"
    ERRORED = "errored"

    @property
    def is_terminal(self) -> bool:
        return self in (ConnectionState.CLOSED, ConnectionState.ERRORED)


class EventKind(Enum):
    """Kinds of events a recognition stream produces."""

    OPEN = "open"
    LISTENING = "listening"  # socket-internal, never on the output channel
    RESULT = "result"  # structured mode: parsed service frame
    DATA = "data"  # text mode: finalized transcript
    ERROR = "error"
    CLOSE = "close"


@dataclass
class StreamEvent:
    """One event on a recognition stream.

    Attributes:
        kind: What happened
        data: Transcript text (DATA) or the decoded service frame (RESULT)
        error: The terminal exception (ERROR)
        code: WebSocket close code (CLOSE), None if never connected
        reason: WebSocket close reason (CLOSE)

    """

    kind: EventKind
    data: Any = None
    error: BaseException | None = None
    code: int | None = None
    reason: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.kind in (EventKind.ERROR, EventKind.CLOSE)


@dataclass(frozen=True)
class StreamOptions:
    """Configuration snapshot owned by a single connection.

    ``params`` holds recognition parameters keyed by their wire names
    (``content-type``, ``interim_results``, ``X-Watson-Learning-Opt-Out``...),
    already normalized for legacy spellings. Both mappings are read-only.
    """

    url: str = DEFAULT_SERVICE_URL
    params: Mapping[str, Any] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    structured: bool = False
    verify_tls: bool = True
    default_model: str = DEFAULT_MODEL
    watermark: int = 16384
    poll_interval: float = 0.01
    open_timeout: float | None = 10.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @classmethod
    def build(
        cls,
        *,
        url: str | None = None,
        headers: Mapping[str, str] | None = None,
        structured: bool = False,
        verify_tls: bool = True,
        default_model: str = DEFAULT_MODEL,
        watermark: int = 16384,
        poll_interval: float = 0.01,
        open_timeout: float | None = 10.0,
        diagnostics: logging.Logger | None = None,
        **params: Any,
    ) -> "StreamOptions":
        """Create options from keyword recognition parameters.

        Hyphenated wire names can be passed with ``**{"content-type": ...}``;
        ``content_type`` and the other legacy spellings are normalized here.
        None-valued parameters are dropped.
        """
        normalized = normalize_legacy_options(
            {key: value for key, value in params.items() if value is not None},
            diagnostics,
        )
        return cls(
            url=url or DEFAULT_SERVICE_URL,
            params=normalized,
            headers=dict(headers or {}),
            structured=structured,
            verify_tls=verify_tls,
            default_model=default_model,
            watermark=watermark,
            poll_interval=poll_interval,
            open_timeout=open_timeout,
        )

    @property
    def content_type(self) -> str | None:
        return self.params.get("content-type")

    def with_params(self, **updates: Any) -> "StreamOptions":
        """Return a copy with some recognition parameters replaced."""
        return dataclasses.replace(self, params={**self.params, **updates})


__all__ = ["ConnectionState", "EventKind", "StreamEvent", "StreamOptions"]
