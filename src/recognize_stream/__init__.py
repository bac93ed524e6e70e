"""recognize-stream - Streaming speech recognition over WebSocket."""

from importlib import metadata
from importlib import import_module
from pathlib import Path
import tomllib
from typing import TYPE_CHECKING


def _get_version() -> str:
    try:
        return metadata.version("recognize-stream")
    except Exception:
        pass

    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
        return str(data["project"]["version"])
    except Exception:
        return "unknown"


__version__ = _get_version()

if TYPE_CHECKING:
    from .audio.content_type import detect_content_type
    from .core.config import ConfigLoader, get_config
    from .transcription.client import (
        RecognizeStream,
        SpeechToTextClient,
        StreamEvent,
        StreamOptions,
        TranscriptionError,
    )

_LAZY_EXPORTS = {
    "RecognizeStream": (".transcription.client", "RecognizeStream"),
    "SpeechToTextClient": (".transcription.client", "SpeechToTextClient"),
    "StreamEvent": (".transcription.client", "StreamEvent"),
    "StreamOptions": (".transcription.client", "StreamOptions"),
    "TranscriptionError": (".transcription.client", "TranscriptionError"),
    "ConfigLoader": (".core.config", "ConfigLoader"),
    "get_config": (".core.config", "get_config"),
    "detect_content_type": (".audio.content_type", "detect_content_type"),
}


def __getattr__(name):
    if name in {"audio", "core", "schemas", "transcription"}:
        module = import_module(f".{name}", __name__)
        globals()[name] = module
        return module

    if name not in _LAZY_EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_name, attr_name = _LAZY_EXPORTS[name]
    module = import_module(module_name, __name__)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


__all__ = [
    "RecognizeStream",
    "SpeechToTextClient",
    "StreamEvent",
    "StreamOptions",
    "TranscriptionError",
    "ConfigLoader",
    "get_config",
    "detect_content_type",
]
