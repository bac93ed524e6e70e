#!/usr/bin/env python3
"""Duplex recognition stream: binary audio in, transcripts out.

This module provides the RecognizeStream class, the caller-facing side of a
recognize connection. Audio chunks are pushed with write(); transcripts are
pulled by iterating the stream.

Notes on flow control:

    A chunk is only handed to the socket once the transport's write buffer
    is at or below ``options.watermark`` bytes, re-checked every
    ``options.poll_interval`` seconds. Upload speed is therefore capped near
    ``watermark / poll_interval`` bytes per second: ~1.6 MB/s with the 16 kB
    default, against 32 kB/s for 16 kHz 16-bit mono microphone audio.

"""

import asyncio
import logging
from collections import deque
from collections.abc import AsyncIterator
from typing import Any

from ....audio.content_type import detect_content_type
from ....core.config import setup_logging
from ....schemas.frames import ResultsFrame
from ..exceptions import ContentTypeUndetermined, StreamingError, TranscriptionError
from ..interfaces import TokenSource
from ..types import ConnectionState, EventKind, StreamEvent, StreamOptions
from .socket import TranscriptionSocket
from .transport import Connector

logger = setup_logging(__name__)


class RecognizeStream:
    """Push binary audio, pull finalized text or structured results.

    The connection is not opened until the first chunk arrives, so the content
    type can be sniffed from that chunk when none was configured. Chunks pushed
    before the service reports ``listening`` are held, in order, and sent
    once it does.

    In text mode (the default) each service frame with final results yields
    one ``DATA`` event holding their transcripts; interim results are dropped.
    With ``options.structured`` every service frame is yielded unchanged as a
    ``RESULT`` event.

    Example::

        stream = RecognizeStream(StreamOptions.build(interim_results=True))

        async def produce():
            for chunk in chunks:
                await stream.write(chunk)
            await stream.finish()

        asyncio.create_task(produce())
        async for text in stream:
            print(text)

    """

    def __init__(
        self,
        options: StreamOptions,
        connector: Connector | None = None,
        token_source: TokenSource | None = None,
        diagnostics: logging.Logger | None = None,
    ):
        """Initialize the stream.

        Args:
            options: Connection snapshot; the sniffed content type, if any, is
                added before the socket is created
            connector: Transport factory passed to the socket
            token_source: Bearer token collaborator passed to the socket
            diagnostics: Logger for stream and socket diagnostics

        """
        self.options = options
        self._connector = connector
        self._token_source = token_source
        self._log = diagnostics or logger

        self._socket: TranscriptionSocket | None = None
        self._socket_created = asyncio.Event()
        self._open_task: asyncio.Task | None = None
        self._pump_task: asyncio.Task | None = None

        self._pending: deque[bytes] = deque()
        self._wakeup = asyncio.Event()
        self._output: asyncio.Queue[StreamEvent] = asyncio.Queue()

        self._started = False
        self._finished = False
        self._input_ended = False
        self._output_closed = False
        self._error: TranscriptionError | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def socket(self) -> TranscriptionSocket | None:
        return self._socket

    @property
    def state(self) -> ConnectionState:
        if self._socket is None:
            return ConnectionState.ERRORED if self._error else ConnectionState.UNOPENED
        return self._socket.state

    @property
    def content_type(self) -> str | None:
        return self.options.content_type

    @property
    def finished(self) -> bool:
        """True once no further input is accepted."""
        return self._finished

    @property
    def error(self) -> TranscriptionError | None:
        return self._error

    @property
    def pending_chunks(self) -> int:
        return len(self._pending)

    @property
    def buffered_amount(self) -> int:
        return self._socket.buffered_amount if self._socket is not None else 0

    def is_ready(self) -> bool:
        """Whether the stream wants more input right now."""
        if self._finished or self._output_closed:
            return False
        return not self._pending and self.buffered_amount <= self.options.watermark

    # ------------------------------------------------------------------
    # Push side
    # ------------------------------------------------------------------

    def write_nowait(self, chunk: bytes) -> bool:
        """Queue one audio chunk for transmission.

        Returns:
            is_ready() after queueing; False means the caller should wait

        Raises:
            ContentTypeUndetermined: First chunk, no content type configured,
                and none could be sniffed
            StreamingError: The stream was already finished
            TranscriptionError: The stream failed earlier

        """
        if self._error is not None:
            raise self._error
        if self._finished:
            raise StreamingError("Cannot write after the stream has been finished")
        if not isinstance(chunk, (bytes, bytearray, memoryview)):
            raise TypeError(f"Audio chunks must be bytes, not {type(chunk).__name__}")

        chunk = bytes(chunk)
        if not chunk:
            return self.is_ready()

        if not self._started:
            self._start(chunk)

        self._pending.append(chunk)
        self._wakeup.set()
        return self.is_ready()

    async def write(self, chunk: bytes) -> None:
        """Queue one chunk, then wait until the stream is ready for more."""
        self.write_nowait(chunk)
        await self.wait_ready()

    async def wait_ready(self) -> None:
        """Poll until the transport has drained below the watermark.

        Returns early once the stream is finished; raises if it failed.
        """
        while not self.is_ready():
            if self._error is not None:
                raise self._error
            if self._finished or self._output_closed:
                return
            await asyncio.sleep(self.options.poll_interval)

    async def finish(self) -> None:
        """Signal end of input.

        Pending chunks are still sent, in order, before the ``stop`` message.
        Only the first call has an effect.
        """
        if self._input_ended:
            return
        self._input_ended = True
        self._finished = True
        if not self._started:
            self._log.debug("Input ended before any audio; closing without connecting")
            self._socket_created.set()
            self._push(StreamEvent(EventKind.CLOSE))
            return
        self._wakeup.set()

    async def stop(self) -> None:
        """Stop early: discard unsent chunks and let the service drain."""
        dropped = len(self._pending)
        self._pending.clear()
        if dropped:
            self._log.info(f"Stop requested, discarding {dropped} unsent chunks")
        await self.finish()
        if self._socket is not None:
            await self._socket.stop()

    async def aclose(self) -> None:
        """Close the connection immediately, without waiting for a drain."""
        self._pending.clear()
        self._input_ended = True
        self._finished = True
        self._wakeup.set()
        if self._socket is not None:
            await self._socket.close()
        elif not self._output_closed:
            self._socket_created.set()
            self._push(StreamEvent(EventKind.CLOSE))

    def _start(self, first_chunk: bytes) -> None:
        self._started = True
        if not self.options.content_type:
            content_type = detect_content_type(first_chunk)
            if content_type is None:
                error = ContentTypeUndetermined(
                    "Unable to determine content-type from file header, please specify manually."
                )
                self._error = error
                self._finished = True
                self._socket_created.set()
                self._push(StreamEvent(EventKind.ERROR, error=error))
                raise error
            self._log.debug(f"Detected content-type {content_type}")
            self.options = self.options.with_params(**{"content-type": content_type})

        self._socket = TranscriptionSocket(
            self.options,
            self._on_socket_event,
            connector=self._connector,
            token_source=self._token_source,
            diagnostics=self._log,
        )
        self._socket_created.set()
        self._open_task = asyncio.create_task(self._socket.open())
        self._pump_task = asyncio.create_task(self._pump())

    async def _pump(self) -> None:
        socket = self._socket
        if not await socket.wait_until_listening():
            return

        while True:
            while self._pending and not socket.terminated:
                chunk = self._pending.popleft()
                try:
                    await socket.send_audio(chunk)
                except TranscriptionError:
                    # The socket has already reported the failure
                    return
                await self._after_send(socket)

            if socket.terminated:
                return
            if self._input_ended and not self._pending:
                break
            self._wakeup.clear()
            if not self._pending and not self._input_ended:
                await self._wakeup.wait()

        await socket.finish()

    async def _after_send(self, socket: TranscriptionSocket) -> None:
        while socket.buffered_amount > self.options.watermark and not socket.terminated:
            await asyncio.sleep(self.options.poll_interval)

    # ------------------------------------------------------------------
    # Pull side
    # ------------------------------------------------------------------

    def _on_socket_event(self, event: StreamEvent) -> None:
        if event.kind is EventKind.LISTENING:
            self._log.debug("Service is listening")
            return

        if event.kind is EventKind.RESULT:
            if self.options.structured:
                self._push(event)
                return
            text = self._final_text(event.data)
            if text:
                self._push(StreamEvent(EventKind.DATA, data=text))
            return

        if event.kind is EventKind.ERROR:
            self._error = event.error
            self._pending.clear()
        if event.is_terminal:
            self._finished = True
            self._wakeup.set()
        self._push(event)

    @staticmethod
    def _final_text(data: dict[str, Any]) -> str:
        return ResultsFrame.model_validate(data).final_text()

    def _push(self, event: StreamEvent) -> None:
        if self._output_closed:
            self._log.debug(f"Dropping {event.kind.value} event after end of output")
            return
        if event.is_terminal:
            self._output_closed = True
        self._output.put_nowait(event)

    async def events(self) -> AsyncIterator[StreamEvent]:
        """Yield every output event, ending after the terminal ERROR or CLOSE."""
        while True:
            event = await self._output.get()
            yield event
            if event.is_terminal:
                return

    async def __aiter__(self) -> AsyncIterator[Any]:
        """Yield transcripts (text mode) or service frames (structured mode).

        Raises the stream's error, if any, after all earlier output.
        """
        async for event in self.events():
            if event.kind in (EventKind.DATA, EventKind.RESULT):
                yield event.data
            elif event.kind is EventKind.ERROR:
                raise event.error

    # ------------------------------------------------------------------
    # Auxiliary
    # ------------------------------------------------------------------

    async def get_transaction_id(self) -> str | None:
        """Request identifier of the connection, once it is open.

        Raises:
            TranscriptionError: The stream failed or ended before opening

        """
        await self._socket_created.wait()
        if self._socket is None:
            raise self._error or StreamingError("Stream ended before a connection was opened")
        return await self._socket.get_transaction_id()

    async def wait_closed(self) -> None:
        """Wait until the connection has reached a terminal state."""
        await self._socket_created.wait()
        if self._socket is not None:
            await self._socket.wait_closed()
        tasks = [task for task in (self._open_task, self._pump_task) if task is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


__all__ = ["RecognizeStream"]
