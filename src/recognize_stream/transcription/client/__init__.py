#!/usr/bin/env python3
"""Transcription client module - Public API exports.

This module provides the public API for the transcription client package,
consolidating all recognize-stream functionality.
"""

from .exceptions import (
    TranscriptionError,
    StreamingError,
    TranscriptionConnectionError,
    ProtocolError,
    ContentTypeUndetermined,
    RemoteError,
    AuthError,
    HttpError,
)
from .types import ConnectionState, EventKind, StreamEvent, StreamOptions
from .interfaces import RestInvoker, TokenSource
from .auth import CallableTokenSource, StaticTokenSource
from .internal.streaming import RecognizeStream
from .service import SpeechToTextClient
from .compat import LegacyEventDispatcher

__all__ = [
    # Exceptions
    "TranscriptionError",
    "StreamingError",
    "TranscriptionConnectionError",
    "ProtocolError",
    "ContentTypeUndetermined",
    "RemoteError",
    "AuthError",
    "HttpError",
    # Types
    "ConnectionState",
    "EventKind",
    "StreamEvent",
    "StreamOptions",
    # Collaborators
    "RestInvoker",
    "TokenSource",
    "CallableTokenSource",
    "StaticTokenSource",
    # Clients
    "RecognizeStream",
    "SpeechToTextClient",
    "LegacyEventDispatcher",
]
