"""Wire message schemas for the recognize WebSocket protocol."""

from .frames import (
    ErrorFrame,
    InboundFrame,
    ListeningFrame,
    ResultsFrame,
    SpeechRecognitionAlternative,
    SpeechRecognitionResult,
    StartMessage,
    StopMessage,
)

__all__ = [
    "ErrorFrame",
    "InboundFrame",
    "ListeningFrame",
    "ResultsFrame",
    "SpeechRecognitionAlternative",
    "SpeechRecognitionResult",
    "StartMessage",
    "StopMessage",
]
