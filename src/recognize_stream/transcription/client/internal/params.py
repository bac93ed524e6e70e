"""Connection parameters for the recognize WebSocket.

User options are split into two disjoint wire surfaces, each guarded by an
allow-list: URL query parameters, and fields of the opening ``start`` message.
Anything not on a list is dropped rather than forwarded.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

from ....core.config import setup_logging
from ....schemas.frames import StartMessage

DEFAULT_SERVICE_URL = "wss://stream.watsonplatform.net/speech-to-text/api"
DEFAULT_MODEL = "en-US_BroadbandModel"
RECOGNIZE_PATH = "/v1/recognize"

OPENING_MESSAGE_PARAMS_ALLOWED = (
    "action",
    "customization_weight",
    "processing_metrics",
    "processing_metrics_interval",
    "audio_metrics",
    "inactivity_timeout",
    "timestamps",
    "word_confidence",
    "content-type",
    "interim_results",
    "keywords",
    "keywords_threshold",
    "max_alternatives",
    "word_alternatives_threshold",
    "profanity_filter",
    "smart_formatting",
    "speaker_labels",
    "grammar_name",
    "redaction",
)

QUERY_PARAMS_ALLOWED = (
    "model",
    "X-Watson-Learning-Opt-Out",
    "watson-token",
    "language_customization_id",
    "customization_id",
    "acoustic_customization_id",
    "access_token",
    "base_model_version",
    "x-watson-metadata",
)

# deprecated name -> modern name
LEGACY_ALIASES = (
    ("token", "watson-token"),
    ("content_type", "content-type"),
    ("X-WDC-PL-OPT-OUT", "X-Watson-Learning-Opt-Out"),
    ("customization_id", "language_customization_id"),
)

logger = setup_logging(__name__)


def normalize_legacy_options(options: Mapping[str, Any], diagnostics: logging.Logger | None = None) -> dict[str, Any]:
    """Map deprecated option names onto their modern equivalents.

    A mapping applies only when the modern key is absent. ``customization_id``
    is removed once copied so the query does not carry both spellings.
    Applying this twice yields the same result as applying it once.

    Args:
        options: Raw caller options keyed by wire name
        diagnostics: Logger that receives deprecation warnings

    Returns:
        A new, normalized dict

    """
    log = diagnostics or logger
    normalized = dict(options)

    for legacy, modern in LEGACY_ALIASES:
        if normalized.get(legacy) and not normalized.get(modern):
            normalized[modern] = normalized[legacy]
            if legacy == "customization_id":
                del normalized[legacy]
            if legacy == "token":
                log.warning(
                    "Authenticating with the watson-token query parameter is deprecated and is not "
                    "supported by services that use IAM authentication; use a bearer token source instead."
                )
            else:
                log.debug(f"Mapped deprecated option {legacy!r} to {modern!r}")

    return normalized


def _wire_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return [_wire_value(item) for item in value]
    return value


def build_query(options: Mapping[str, Any], default_model: str = DEFAULT_MODEL) -> dict[str, Any]:
    """Select the query parameters, in allow-list order.

    The default model is added only when no language customization is given,
    since a customization id already implies its base model.
    """
    query: dict[str, Any] = {}
    for key in QUERY_PARAMS_ALLOWED:
        value = options.get(key)
        if value is not None:
            query[key] = value
        elif key == "model" and options.get("language_customization_id") is None:
            query[key] = default_model
    return query


def build_handshake(options: Mapping[str, Any]) -> StartMessage:
    """Build the opening ``start`` message from the control allow-list."""
    fields = {
        key: options[key]
        for key in OPENING_MESSAGE_PARAMS_ALLOWED
        if key != "action" and options.get(key) is not None
    }
    return StartMessage.model_validate(fields)


def build_url(base_url: str, options: Mapping[str, Any], default_model: str = DEFAULT_MODEL) -> str:
    """Compute the socket URL: ws scheme, recognize path, allow-listed query."""
    query = {key: _wire_value(value) for key, value in build_query(options, default_model).items()}
    socket_url = re.sub(r"^http", "ws", base_url).rstrip("/") + RECOGNIZE_PATH
    if query:
        socket_url += "?" + urlencode(query, doseq=True)
    return socket_url


__all__ = [
    "DEFAULT_MODEL",
    "DEFAULT_SERVICE_URL",
    "LEGACY_ALIASES",
    "OPENING_MESSAGE_PARAMS_ALLOWED",
    "QUERY_PARAMS_ALLOWED",
    "build_handshake",
    "build_query",
    "build_url",
    "normalize_legacy_options",
]
