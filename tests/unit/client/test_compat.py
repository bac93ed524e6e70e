"""Tests for legacy event-name dispatch."""

from unittest.mock import MagicMock

import pytest

from conftest import FakeConnector, FakeTransport, final_result
from recognize_stream.transcription.client.compat import LegacyEventDispatcher
from recognize_stream.transcription.client.internal.streaming import RecognizeStream
from recognize_stream.transcription.client.types import StreamOptions


def make_stream(structured=False):
    transport = FakeTransport(auto_reply=True, replies=[final_result("hi ")])
    options = StreamOptions.build(structured=structured, poll_interval=0.001, content_type="audio/wav")
    return RecognizeStream(options, connector=FakeConnector(transport), diagnostics=MagicMock())


class TestNameMapping:
    def test_deprecated_names_warn_once(self):
        diagnostics = MagicMock()
        dispatcher = LegacyEventDispatcher(make_stream(), diagnostics=diagnostics)

        dispatcher.on("connect", print)
        dispatcher.on("connect", print)
        dispatcher.on("connection-close", print)
        dispatcher.on("open", print)

        assert diagnostics.warning.call_count == 2

    def test_silent_suppresses_warnings(self):
        diagnostics = MagicMock()
        dispatcher = LegacyEventDispatcher(make_stream(), silent=True, diagnostics=diagnostics)

        dispatcher.on("results", print)

        diagnostics.warning.assert_not_called()

    def test_unknown_name(self):
        dispatcher = LegacyEventDispatcher(make_stream(), diagnostics=MagicMock())

        with pytest.raises(ValueError):
            dispatcher.on("finish", print)


class TestDispatch:
    @pytest.mark.asyncio
    async def test_callbacks_follow_the_stream(self):
        stream = make_stream()
        dispatcher = LegacyEventDispatcher(stream, silent=True)
        calls = []

        async def on_data(text):
            calls.append(("data", text))

        dispatcher.on("connect", lambda: calls.append(("open",)))
        dispatcher.on("data", on_data)
        dispatcher.on("connection-close", lambda code, reason: calls.append(("close", code)))

        await stream.write(b"audio")
        await stream.finish()
        await dispatcher.run()

        assert calls == [("open",), ("data", "hi "), ("close", 1000)]

    @pytest.mark.asyncio
    async def test_results_alias_receives_frames(self):
        stream = make_stream(structured=True)
        dispatcher = LegacyEventDispatcher(stream, silent=True)
        frames = []
        dispatcher.on("results", frames.append)

        await stream.write(b"audio")
        await stream.finish()
        await dispatcher.run()

        assert frames == [final_result("hi ")]
