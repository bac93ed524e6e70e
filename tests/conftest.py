"""
Pytest configuration and shared fakes.

FakeTransport stands in for the websockets connection so the socket state
machine can be driven frame by frame without a network.
"""

import asyncio
import json
import os
import tempfile

# Keep test runs from writing into the user's log directory
os.environ.setdefault("RECOGNIZE_STREAM_LOG_DIR", tempfile.mkdtemp(prefix="recognize-stream-logs-"))

import pytest

from recognize_stream.transcription.client.internal.transport import TransportClosed

WAV_HEADER = b"RIFF\x24\x08\x00\x00WAVEfmt "
LISTENING = {"state": "listening"}


def final_result(text, final=True):
    return {
        "result_index": 0,
        "results": [{"final": final, "alternatives": [{"transcript": text}]}],
    }


class FakeTransport:
    """In-memory Transport.

    With ``auto_reply`` the fake answers like the service does: ``listening``
    after the start message, then ``replies`` and another ``listening`` after
    the stop message.
    """

    def __init__(self, auto_reply=False, replies=(), headers=None):
        self.sent = []
        self.buffered_amount = 0
        self.response_headers = dict(headers or {})
        self.closed_with = None
        self.auto_reply = auto_reply
        self.replies = list(replies)
        self._inbox = asyncio.Queue()

    @property
    def json_sent(self):
        return [json.loads(message) for message in self.sent if isinstance(message, str)]

    @property
    def audio_sent(self):
        return [message for message in self.sent if isinstance(message, bytes)]

    def inject(self, message):
        if isinstance(message, dict):
            message = json.dumps(message)
        self._inbox.put_nowait(message)

    def drop(self, code=1006, reason=""):
        self._inbox.put_nowait(TransportClosed(code, reason, clean=False))

    async def send(self, message):
        if self.closed_with is not None:
            raise TransportClosed(1006, "", clean=False)
        self.sent.append(message)
        if self.auto_reply and isinstance(message, str):
            action = json.loads(message).get("action")
            if action == "start":
                self.inject(LISTENING)
            elif action == "stop":
                for reply in self.replies:
                    self.inject(reply)
                self.inject(LISTENING)

    async def recv(self):
        item = await self._inbox.get()
        if isinstance(item, TransportClosed):
            raise item
        return item

    async def close(self, code=1000, reason=""):
        if self.closed_with is None:
            self.closed_with = (code, reason)
            self._inbox.put_nowait(TransportClosed(code, reason, clean=True))


class FakeConnector:
    """Connector returning a prepared transport and recording each call."""

    def __init__(self, transport=None, error=None):
        self.transport = transport or FakeTransport(auto_reply=True)
        self.error = error
        self.calls = []

    async def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.transport


async def wait_for(predicate, timeout=2.0):
    """Yield to the event loop until predicate() is true."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.001)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def connector(transport):
    return FakeConnector(transport)
