"""Tests for stream option snapshots and events."""

import dataclasses

import pytest

from recognize_stream.transcription.client.types import (
    ConnectionState,
    EventKind,
    StreamEvent,
    StreamOptions,
)


class TestStreamOptions:
    def test_build_normalizes_and_drops_none(self):
        options = StreamOptions.build(content_type="audio/wav", keywords=None, customization_id="c")

        assert options.params["content-type"] == "audio/wav"
        assert options.params["language_customization_id"] == "c"
        assert "keywords" not in options.params
        assert "customization_id" not in options.params
        assert options.content_type == "audio/wav"

    def test_snapshot_is_read_only(self):
        options = StreamOptions.build(timestamps=True)

        with pytest.raises(TypeError):
            options.params["timestamps"] = False
        with pytest.raises(dataclasses.FrozenInstanceError):
            options.structured = True

    def test_with_params_returns_a_copy(self):
        options = StreamOptions.build(timestamps=True)
        updated = options.with_params(**{"content-type": "audio/flac"})

        assert options.content_type is None
        assert updated.content_type == "audio/flac"
        assert updated.params["timestamps"] is True

    def test_caller_dict_is_copied(self):
        params = {"timestamps": True}
        options = StreamOptions(params=params)
        params["timestamps"] = False

        assert options.params["timestamps"] is True


class TestStates:
    def test_terminal_states(self):
        terminal = {state for state in ConnectionState if state.is_terminal}
        assert terminal == {ConnectionState.CLOSED, ConnectionState.ERRORED}

    def test_terminal_events(self):
        assert StreamEvent(EventKind.CLOSE).is_terminal
        assert StreamEvent(EventKind.ERROR, error=RuntimeError()).is_terminal
        assert not StreamEvent(EventKind.DATA, data="text").is_terminal
