"""Tests for inbound frame classification."""

import pytest

from recognize_stream.schemas.frames import ErrorFrame, ListeningFrame, ResultsFrame
from recognize_stream.transcription.client.exceptions import ProtocolError
from recognize_stream.transcription.client.internal.socket import parse_frame


class TestParseFrame:
    def test_listening(self):
        frame, data = parse_frame('{"state": "listening"}')
        assert isinstance(frame, ListeningFrame)
        assert data == {"state": "listening"}

    def test_error(self):
        frame, _ = parse_frame('{"error": "No speech detected for 30s."}')
        assert isinstance(frame, ErrorFrame)
        assert frame.error == "No speech detected for 30s."

    def test_results_keep_unknown_fields(self):
        text = (
            '{"result_index": 0, "results": [{"final": true, "alternatives": '
            '[{"transcript": "hi ", "confidence": 0.9}]}], "speaker_labels": []}'
        )
        frame, data = parse_frame(text)

        assert isinstance(frame, ResultsFrame)
        assert frame.final_text() == "hi "
        assert data["speaker_labels"] == []

    def test_other_frames_are_results(self):
        frame, _ = parse_frame('{"processing_metrics": {"wall_clock_since_first_byte_received": 1.2}}')
        assert isinstance(frame, ResultsFrame)
        assert frame.final_text() == ""

    @pytest.mark.parametrize("text", ["not json", "[1, 2]", '"listening"'])
    def test_not_a_json_object(self, text):
        with pytest.raises(ProtocolError) as excinfo:
            parse_frame(text)
        assert excinfo.value.raw == text

    @pytest.mark.parametrize(
        "text",
        [
            '{"results": "nope"}',
            '{"result_index": "0", "results": [{"final": true, "alternatives": null}]}',
            '{"results": [1, {"final": "maybe"}]}',
        ],
    )
    def test_unexpected_shapes_are_results(self, text):
        frame, _ = parse_frame(text)

        assert isinstance(frame, ResultsFrame)
        assert frame.final_text() == ""

    @pytest.mark.parametrize("text", ['{"error": ""}', '{"error": null, "results": []}'])
    def test_empty_error_is_not_an_error(self, text):
        frame, _ = parse_frame(text)
        assert isinstance(frame, ResultsFrame)

    def test_non_string_error(self):
        frame, _ = parse_frame('{"error": {"code": 408}}')
        assert isinstance(frame, ErrorFrame)


class TestFinalText:
    def test_interim_results_are_ignored(self):
        frame = ResultsFrame.model_validate(
            {
                "results": [
                    {"final": True, "alternatives": [{"transcript": "one "}, {"transcript": "won "}]},
                    {"final": False, "alternatives": [{"transcript": "tw"}]},
                    {"final": True, "alternatives": []},
                    {"final": True, "alternatives": [{"transcript": "three "}]},
                ]
            }
        )
        assert frame.final_text() == "one three "

    def test_malformed_results_are_skipped(self):
        frame = ResultsFrame.model_validate(
            {
                "results": [
                    {"final": True, "alternatives": None},
                    "garbage",
                    {"final": True, "alternatives": [{"transcript": "kept ", "confidence": "high"}]},
                ]
            }
        )
        assert frame.final_text() == "kept "
