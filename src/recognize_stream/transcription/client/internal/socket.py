#!/usr/bin/env python3
"""Connection state machine for the recognize WebSocket.

TranscriptionSocket owns one transport connection for its whole life: it
opens it, sends the ``start`` handshake, classifies inbound frames, frames
outbound audio, and walks the drain/close sequence after ``stop``.

Lifecycle::

    UNOPENED -> INITIALIZING -> AWAITING_READY -> STREAMING -> DRAINING -> CLOSED
                     any non-terminal state -> ERRORED

All handlers run on the event loop; state is only touched from there.
"""

import asyncio
import json
import logging
from collections.abc import Callable, Mapping
from typing import Any

from ....core.config import setup_logging
from ....schemas.frames import (
    ErrorFrame,
    InboundFrame,
    ListeningFrame,
    ResultsFrame,
    StopMessage,
)
from ..exceptions import (
    ProtocolError,
    RemoteError,
    StreamingError,
    TranscriptionConnectionError,
    TranscriptionError,
)
from ..interfaces import TokenSource
from ..types import ConnectionState, EventKind, StreamEvent, StreamOptions
from .params import build_handshake, build_url
from .transport import Connector, Transport, TransportClosed, connect_websocket

logger = setup_logging(__name__)

TRANSACTION_ID_HEADER = "x-global-transaction-id"

EventSink = Callable[[StreamEvent], None]


def parse_frame(text: str) -> tuple[InboundFrame, dict[str, Any]]:
    """Classify an inbound text frame.

    Returns the typed frame together with the decoded JSON object, which is
    what structured output hands to callers unchanged.

    Any JSON object is a valid frame: a non-empty ``error`` makes it an error,
    ``state: listening`` a readiness signal, and everything else a result.

    Raises:
        ProtocolError: The frame is not a JSON object

    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise ProtocolError(f"Invalid JSON received from service: {e}", raw=text) from e
    if not isinstance(data, dict):
        raise ProtocolError("Expected a JSON object from service", raw=text)

    if data.get("error"):
        return ErrorFrame.model_validate(data), data
    if data.get("state") == "listening":
        return ListeningFrame.model_validate(data), data
    return ResultsFrame.model_validate(data), data


async def _wait_first(*events: asyncio.Event) -> None:
    waiters = [asyncio.ensure_future(event.wait()) for event in events]
    try:
        await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for waiter in waiters:
            waiter.cancel()


class TranscriptionSocket:
    """One recognize connection and its lifecycle.

    Events are reported synchronously to ``on_event``: OPEN once the
    handshake is sent, LISTENING when the service first reports readiness,
    RESULT for every other service frame, then exactly one terminal ERROR or
    CLOSE. Nothing is emitted after the terminal event.

    Args:
        options: Connection snapshot; never mutated
        on_event: Receives every StreamEvent
        connector: Coroutine returning a Transport (defaults to websockets)
        token_source: Supplies the bearer token before the transport opens
        diagnostics: Logger for lifecycle diagnostics

    """

    def __init__(
        self,
        options: StreamOptions,
        on_event: EventSink,
        connector: Connector | None = None,
        token_source: TokenSource | None = None,
        diagnostics: logging.Logger | None = None,
    ):
        self.options = options
        self._on_event = on_event
        self._connector = connector or connect_websocket
        self._token_source = token_source
        self._log = diagnostics or logger

        self.state = ConnectionState.UNOPENED
        self.error: TranscriptionError | None = None
        self.close_code: int | None = None
        self.close_reason = ""

        self._transport: Transport | None = None
        self._reader: asyncio.Task | None = None
        self._finishing = False
        self._stop_sent = False
        self._closing = False

        self._opened = asyncio.Event()
        self._listening = asyncio.Event()
        self._terminated = asyncio.Event()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._transport is not None and self.state in (
            ConnectionState.AWAITING_READY,
            ConnectionState.STREAMING,
        )

    @property
    def terminated(self) -> bool:
        return self.state.is_terminal

    @property
    def buffered_amount(self) -> int:
        """Bytes accepted by the transport but not yet written to the network."""
        if self._transport is None or self.terminated:
            return 0
        return self._transport.buffered_amount

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Connect, send the handshake, and start reading frames.

        Failures are reported as an ERROR event rather than raised.
        """
        if self.state is ConnectionState.CLOSED:
            # Closed locally before the connection was started
            return
        if self.state is not ConnectionState.UNOPENED:
            raise StreamingError(f"Socket already opened (state: {self.state.value})")
        self._transition(ConnectionState.INITIALIZING)

        headers = dict(self.options.headers)
        url = build_url(self.options.url, self.options.params, self.options.default_model)
        try:
            if self._token_source is not None:
                token = await self._token_source.get_bearer_token()
                headers["Authorization"] = f"Bearer {token}"
            transport = await self._connector(
                url,
                headers=headers,
                verify_tls=self.options.verify_tls,
                write_limit=self.options.watermark,
                open_timeout=self.options.open_timeout,
            )
        except TranscriptionError as e:
            self._fail(e)
            return
        except (OSError, TimeoutError) as e:
            self._fail(TranscriptionConnectionError(f"WebSocket connection error: {e}"))
            return

        if self.state is not ConnectionState.INITIALIZING:
            # Closed locally while the connection was being established
            await transport.close()
            return

        self._transport = transport
        try:
            await self._send_json(build_handshake(self.options.params).model_dump())
        except TransportClosed as e:
            self._fail(TranscriptionConnectionError(f"Connection lost during handshake: {e}"))
            return

        self._transition(ConnectionState.AWAITING_READY)
        self._opened.set()
        self._emit(StreamEvent(EventKind.OPEN))
        self._reader = asyncio.create_task(self._receive_loop())

        if self._finishing:
            # finish() was requested before the transport existed
            await self._send_stop()

    async def finish(self) -> None:
        """Ask the service to finish after the audio sent so far.

        Only the first call has an effect. The ``stop`` message goes out now
        if the transport is open, otherwise as soon as it opens.
        """
        if self._finishing:
            return
        self._finishing = True
        if self.is_open:
            await self._send_stop()
        else:
            self._log.debug(f"Stop deferred until open (state: {self.state.value})")

    async def stop(self) -> None:
        """Caller-initiated early termination; same wire effect as finish()."""
        await self.finish()

    async def close(self, code: int = 1000, reason: str = "") -> None:
        """Close the transport immediately, without waiting for a drain."""
        if self.terminated:
            return
        self._closing = True
        if self._transport is None:
            self._handle_close(None, reason)
            return
        await self._transport.close(code, reason)
        if self._reader is None:
            self._handle_close(code, reason)

    async def wait_until_listening(self) -> bool:
        """Wait for the first ``listening`` frame.

        Returns:
            True once audio may be sent, False if the socket terminated first

        """
        if not self._listening.is_set() and not self._terminated.is_set():
            await _wait_first(self._listening, self._terminated)
        return self._listening.is_set() and not self.terminated

    async def wait_closed(self) -> None:
        await self._terminated.wait()
        if self._reader is not None and self._reader is not asyncio.current_task():
            await asyncio.gather(self._reader, return_exceptions=True)

    async def get_transaction_id(self) -> str | None:
        """Request identifier from the upgrade response headers.

        Raises:
            TranscriptionError: The socket failed before it opened

        """
        if not self._opened.is_set() and not self._terminated.is_set():
            await _wait_first(self._opened, self._terminated)
        if not self._opened.is_set() or self._transport is None:
            raise self.error or TranscriptionConnectionError("Connection closed before it was opened")
        return self._transport.response_headers.get(TRANSACTION_ID_HEADER)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    async def send_audio(self, chunk: bytes) -> None:
        """Send one binary audio frame; only legal while STREAMING."""
        if self.state is not ConnectionState.STREAMING or self._transport is None:
            raise StreamingError(f"Cannot send audio while {self.state.value}")
        if self._stop_sent or self._closing:
            raise StreamingError("Cannot send audio after the stop message or close")
        try:
            await self._transport.send(chunk)
        except TransportClosed as e:
            error = TranscriptionConnectionError(f"Connection lost while sending audio: {e}")
            self._fail(error)
            raise (self.error or error) from e

    async def _send_stop(self) -> None:
        if self._stop_sent or self._closing or self._transport is None or self.terminated:
            return
        self._stop_sent = True
        try:
            await self._send_json(StopMessage().model_dump())
        except TransportClosed as e:
            self._fail(TranscriptionConnectionError(f"Connection lost while sending stop: {e}"))

    async def _send_json(self, message: Mapping[str, Any]) -> None:
        self._log.debug(f"send-json: {message}")
        await self._transport.send(json.dumps(message))

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    async def _receive_loop(self) -> None:
        transport = self._transport
        try:
            while not self.terminated:
                message = await transport.recv()
                await self._handle_message(message)
        except TransportClosed as closed:
            if closed.clean or self.state is ConnectionState.DRAINING:
                self._handle_close(closed.code, closed.reason)
            else:
                self._fail(TranscriptionConnectionError(f"WebSocket connection error: {closed}"))
            return

        if self.state is ConnectionState.ERRORED:
            await self._abandon(transport)

    async def _handle_message(self, message: str | bytes) -> None:
        if not isinstance(message, str):
            self._fail(ProtocolError("Unexpected binary data received from server", raw=message))
            return

        try:
            frame, data = parse_frame(message)
        except ProtocolError as e:
            self._fail(e)
            return

        self._log.debug(f"message: {data}")

        if isinstance(frame, ErrorFrame):
            self._fail(RemoteError(str(frame.error), raw=data))
        elif isinstance(frame, ListeningFrame):
            await self._handle_listening()
        else:
            self._emit(StreamEvent(EventKind.RESULT, data=data))

    async def _handle_listening(self) -> None:
        if self.state is ConnectionState.AWAITING_READY:
            self._transition(ConnectionState.STREAMING)
            self._listening.set()
            self._emit(StreamEvent(EventKind.LISTENING))
        elif self.state is ConnectionState.STREAMING and self._finishing:
            # Drain acknowledgement: everything before stop has been processed
            self._transition(ConnectionState.DRAINING)
            await self._transport.close()
        else:
            self._log.warning(f"Ignoring unexpected listening frame while {self.state.value}")

    # ------------------------------------------------------------------
    # Termination
    # ------------------------------------------------------------------

    def _handle_close(self, code: int | None, reason: str) -> None:
        self.close_code = code
        self.close_reason = reason
        if self.terminated:
            return
        self._transition(ConnectionState.CLOSED)
        self._log.info(f"Connection closed ({code}) {reason}".rstrip())
        self._terminated.set()
        self._emit(StreamEvent(EventKind.CLOSE, code=code, reason=reason))

    def _fail(self, error: TranscriptionError) -> None:
        if self.terminated:
            self._log.debug(f"Ignoring error after termination: {error}")
            return
        self.error = error
        self._transition(ConnectionState.ERRORED)
        self._log.error(f"{type(error).__name__}: {error}")
        self._terminated.set()
        self._emit(StreamEvent(EventKind.ERROR, error=error))

    async def _abandon(self, transport: Transport) -> None:
        try:
            await transport.close(1011 if isinstance(self.error, ProtocolError) else 1000)
        except TransportClosed:
            pass

    def _transition(self, to_state: ConnectionState) -> None:
        from_state = self.state
        if from_state == to_state:
            return
        self.state = to_state
        self._log.debug(f"Socket state: {from_state.value} -> {to_state.value}")

    def _emit(self, event: StreamEvent) -> None:
        try:
            self._on_event(event)
        except Exception as e:
            self._log.error(f"Error in stream event handler: {e}")


__all__ = ["TRANSACTION_ID_HEADER", "TranscriptionSocket", "parse_frame"]
