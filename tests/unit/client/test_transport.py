"""Tests for the websockets-backed transport."""

import ssl
from unittest.mock import MagicMock

import pytest
import websockets
from websockets.frames import Close

from recognize_stream.transcription.client.internal.transport import (
    ABNORMAL_CLOSURE,
    TransportClosed,
    WebSocketTransport,
    _ssl_context,
)


class TestSslContext:
    def test_verifying_by_default(self):
        assert _ssl_context("wss://host/api", verify_tls=True) is None

    def test_plain_ws_never_gets_a_context(self):
        assert _ssl_context("ws://host/api", verify_tls=False) is None

    def test_unverified_context(self):
        context = _ssl_context("wss://host/api", verify_tls=False)
        assert context.verify_mode == ssl.CERT_NONE
        assert context.check_hostname is False


class TestCloseMapping:
    def test_clean_close(self):
        exc = websockets.exceptions.ConnectionClosedOK(Close(1000, "bye"), Close(1000, "bye"), True)
        closed = WebSocketTransport._closed(exc)

        assert (closed.code, closed.reason, closed.clean) == (1000, "bye", True)

    def test_dropped_connection(self):
        exc = websockets.exceptions.ConnectionClosedError(None, None)
        closed = WebSocketTransport._closed(exc)

        assert closed.code == ABNORMAL_CLOSURE
        assert closed.clean is False

    @pytest.mark.asyncio
    async def test_recv_raises_transport_closed(self):
        connection = MagicMock()

        async def recv():
            raise websockets.exceptions.ConnectionClosedError(Close(1011, "internal"), None)

        connection.recv = recv
        transport = WebSocketTransport(connection)

        with pytest.raises(TransportClosed) as excinfo:
            await transport.recv()
        assert excinfo.value.code == 1011


class TestBufferedAmount:
    def test_reads_the_asyncio_write_buffer(self):
        connection = MagicMock()
        connection.transport.is_closing.return_value = False
        connection.transport.get_write_buffer_size.return_value = 4096

        assert WebSocketTransport(connection).buffered_amount == 4096

    def test_closing_transport_has_nothing_buffered(self):
        connection = MagicMock()
        connection.transport.is_closing.return_value = True

        assert WebSocketTransport(connection).buffered_amount == 0
