#!/usr/bin/env python3
"""Transport seam between TranscriptionSocket and the network.

The socket state machine talks to a small Transport protocol so it can be
driven by a real WebSocket or by a test double. The default connector wraps
the ``websockets`` asyncio client.
"""

import ssl
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol

import websockets
from websockets.asyncio.client import ClientConnection, connect

from ....core.config import setup_logging
from ..exceptions import AuthError, TranscriptionConnectionError

logger = setup_logging(__name__)

# Close code used when the peer vanished without a close frame
ABNORMAL_CLOSURE = 1006


class TransportClosed(Exception):
    """Raised by Transport.recv() once the connection is closed.

    Attributes:
        code: Close code from the peer (1006 when none was received)
        reason: Close reason from the peer
        clean: True for an orderly close handshake, False for a dropped connection

    """

    def __init__(self, code: int = ABNORMAL_CLOSURE, reason: str = "", clean: bool = False):
        super().__init__(f"connection closed ({code}) {reason}".strip())
        self.code = code
        self.reason = reason
        self.clean = clean


class Transport(Protocol):
    """What TranscriptionSocket needs from a connected socket."""

    @property
    def buffered_amount(self) -> int: ...

    @property
    def response_headers(self) -> Mapping[str, str]: ...

    async def send(self, message: str | bytes) -> None: ...

    async def recv(self) -> str | bytes: ...

    async def close(self, code: int = 1000, reason: str = "") -> None: ...


Connector = Callable[..., Awaitable[Transport]]


class WebSocketTransport:
    """Transport backed by a websockets ClientConnection."""

    def __init__(self, connection: ClientConnection):
        self.connection = connection

    @property
    def buffered_amount(self) -> int:
        transport = getattr(self.connection, "transport", None)
        if transport is None or transport.is_closing():
            return 0
        return transport.get_write_buffer_size()

    @property
    def response_headers(self) -> Mapping[str, str]:
        response = self.connection.response
        if response is None:
            return {}
        return response.headers

    async def send(self, message: str | bytes) -> None:
        try:
            await self.connection.send(message)
        except websockets.exceptions.ConnectionClosed as e:
            raise self._closed(e) from e

    async def recv(self) -> str | bytes:
        try:
            return await self.connection.recv()
        except websockets.exceptions.ConnectionClosed as e:
            raise self._closed(e) from e

    async def close(self, code: int = 1000, reason: str = "") -> None:
        await self.connection.close(code, reason)

    @staticmethod
    def _closed(exc: websockets.exceptions.ConnectionClosed) -> TransportClosed:
        frame = exc.rcvd
        code = frame.code if frame is not None else ABNORMAL_CLOSURE
        reason = frame.reason if frame is not None else ""
        clean = isinstance(exc, websockets.exceptions.ConnectionClosedOK)
        return TransportClosed(code, reason, clean)


def _ssl_context(url: str, verify_tls: bool) -> ssl.SSLContext | None:
    if verify_tls or not url.startswith("wss://"):
        return None
    # Self-signed certificates on private deployments
    ssl_context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    ssl_context.check_hostname = False
    ssl_context.verify_mode = ssl.CERT_NONE
    return ssl_context


async def connect_websocket(
    url: str,
    *,
    headers: Mapping[str, str] | None = None,
    verify_tls: bool = True,
    write_limit: int = 16384,
    open_timeout: float | None = 10.0,
) -> WebSocketTransport:
    """Open a WebSocket and wrap it as a Transport.

    Raises:
        AuthError: The upgrade request was rejected with 401 or 403
        TranscriptionConnectionError: Any other failure to connect

    """
    kwargs: dict[str, Any] = {
        "additional_headers": dict(headers or {}),
        "open_timeout": open_timeout,
        "write_limit": write_limit,
        "max_size": None,
    }
    ssl_context = _ssl_context(url, verify_tls)
    if ssl_context is not None:
        kwargs["ssl"] = ssl_context

    try:
        connection = await connect(url, **kwargs)
    except websockets.exceptions.InvalidStatus as e:
        status = e.response.status_code
        if status in (401, 403):
            raise AuthError(f"Service rejected credentials (HTTP {status})") from e
        raise TranscriptionConnectionError(f"WebSocket connection error: HTTP {status}") from e
    except (OSError, TimeoutError, websockets.exceptions.WebSocketException) as e:
        raise TranscriptionConnectionError(f"WebSocket connection error: {e}") from e

    logger.info(f"Connected to {url.split('?', 1)[0]}")
    return WebSocketTransport(connection)


__all__ = [
    "ABNORMAL_CLOSURE",
    "Connector",
    "Transport",
    "TransportClosed",
    "WebSocketTransport",
    "connect_websocket",
]
