from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError


class StartMessage(BaseModel):
    """Opening control message; recognition parameters ride along as extras."""

    model_config = ConfigDict(extra="allow")

    action: Literal["start"] = "start"


class StopMessage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    action: Literal["stop"] = "stop"


class ListeningFrame(BaseModel):
    model_config = ConfigDict(extra="allow")

    state: Literal["listening"] = "listening"


class ErrorFrame(BaseModel):
    model_config = ConfigDict(extra="allow")

    error: Any


class SpeechRecognitionAlternative(BaseModel):
    model_config = ConfigDict(extra="allow")

    transcript: str = ""
    confidence: Any = None
    timestamps: Any = None
    word_confidence: Any = None


class SpeechRecognitionResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    final: bool = False
    alternatives: list[SpeechRecognitionAlternative] | None = None


class ResultsFrame(BaseModel):
    """Any non-control frame: transcription results, speaker labels, metrics."""

    model_config = ConfigDict(extra="allow")

    result_index: Any = None
    results: Any = None

    def final_text(self) -> str:
        """Concatenate the best transcript of every final result.

        Results that do not match SpeechRecognitionResult contribute nothing.
        """
        if not isinstance(self.results, list):
            return ""
        texts = []
        for raw in self.results:
            try:
                result = SpeechRecognitionResult.model_validate(raw)
            except ValidationError:
                continue
            if result.final and result.alternatives:
                texts.append(result.alternatives[0].transcript)
        return "".join(texts)


InboundFrame = ListeningFrame | ErrorFrame | ResultsFrame


__all__ = [
    "StartMessage",
    "StopMessage",
    "ListeningFrame",
    "ErrorFrame",
    "SpeechRecognitionAlternative",
    "SpeechRecognitionResult",
    "ResultsFrame",
    "InboundFrame",
]
