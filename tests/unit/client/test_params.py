"""Tests for option normalization and the two wire surfaces."""

from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlsplit

from recognize_stream.transcription.client.internal.params import (
    DEFAULT_MODEL,
    OPENING_MESSAGE_PARAMS_ALLOWED,
    QUERY_PARAMS_ALLOWED,
    build_handshake,
    build_query,
    build_url,
    normalize_legacy_options,
)


class TestNormalizeLegacyOptions:
    def test_legacy_names_are_mapped(self):
        normalized = normalize_legacy_options(
            {
                "content_type": "audio/wav",
                "X-WDC-PL-OPT-OUT": True,
                "customization_id": "cust-1",
            }
        )

        assert normalized["content-type"] == "audio/wav"
        assert normalized["X-Watson-Learning-Opt-Out"] is True
        assert normalized["language_customization_id"] == "cust-1"
        assert "customization_id" not in normalized

    def test_modern_name_wins(self):
        normalized = normalize_legacy_options({"content_type": "audio/wav", "content-type": "audio/flac"})
        assert normalized["content-type"] == "audio/flac"

    def test_idempotent(self):
        options = {"token": "t", "content_type": "audio/ogg", "customization_id": "c", "timestamps": True}
        once = normalize_legacy_options(options)
        assert normalize_legacy_options(once) == once

    def test_input_is_not_mutated(self):
        options = {"customization_id": "c"}
        normalize_legacy_options(options)
        assert options == {"customization_id": "c"}

    def test_token_warns_through_diagnostics(self):
        diagnostics = MagicMock()
        normalized = normalize_legacy_options({"token": "abc"}, diagnostics)

        assert normalized["watson-token"] == "abc"
        diagnostics.warning.assert_called_once()


class TestBuildQuery:
    def test_default_model_added(self):
        assert build_query({}) == {"model": DEFAULT_MODEL}

    def test_no_default_model_with_language_customization(self):
        query = build_query({"language_customization_id": "cust-1"})
        assert "model" not in query
        assert query["language_customization_id"] == "cust-1"

    def test_explicit_model_kept_with_customization(self):
        query = build_query({"model": "es-ES_NarrowbandModel", "language_customization_id": "c"})
        assert query["model"] == "es-ES_NarrowbandModel"

    def test_only_allow_listed_keys(self):
        query = build_query(
            {
                "model": "m",
                "access_token": "a",
                "interim_results": True,
                "content-type": "audio/wav",
                "bogus": 1,
            }
        )
        assert set(query) == {"model", "access_token"}


class TestBuildHandshake:
    def test_action_is_always_start(self):
        message = build_handshake({"action": "stop", "interim_results": True}).model_dump()
        assert message == {"action": "start", "interim_results": True}

    def test_only_allow_listed_keys(self):
        message = build_handshake(
            {
                "content-type": "audio/wav",
                "timestamps": True,
                "model": "m",
                "watson-token": "t",
                "bogus": 1,
            }
        ).model_dump()
        assert message == {"action": "start", "content-type": "audio/wav", "timestamps": True}

    def test_surfaces_are_disjoint(self):
        overlap = set(OPENING_MESSAGE_PARAMS_ALLOWED) & set(QUERY_PARAMS_ALLOWED)
        assert overlap == set()

    def test_none_values_dropped(self):
        message = build_handshake({"keywords": None, "max_alternatives": 3}).model_dump()
        assert message == {"action": "start", "max_alternatives": 3}


class TestBuildUrl:
    def test_https_becomes_wss(self):
        url = build_url("https://api.example.test/speech-to-text/api", {})
        assert url == f"wss://api.example.test/speech-to-text/api/v1/recognize?model={DEFAULT_MODEL}"

    def test_http_becomes_ws(self):
        assert build_url("http://localhost:8080/", {"model": "m"}) == "ws://localhost:8080/v1/recognize?model=m"

    def test_booleans_are_lowercase(self):
        url = build_url("wss://host/api", {"X-Watson-Learning-Opt-Out": True})
        query = parse_qs(urlsplit(url).query)
        assert query["X-Watson-Learning-Opt-Out"] == ["true"]

    def test_query_follows_allow_list_order(self):
        url = build_url("wss://host/api", {"access_token": "a", "model": "m", "watson-token": "t"})
        assert urlsplit(url).query == "model=m&watson-token=t&access_token=a"
