#!/usr/bin/env python3
"""Custom exceptions for transcription client operations.

This module defines the exception hierarchy for recognize-stream errors. Every
error that ends a stream is a TranscriptionError, so callers can catch one type.
"""

from typing import Any


class TranscriptionError(Exception):
    """Base exception for transcription-related errors."""


class StreamingError(TranscriptionError):
    """Exception for misuse of a stream, such as writing after it finished."""


class TranscriptionConnectionError(TranscriptionError):
    """The transport could not be established or dropped unexpectedly."""


class ProtocolError(TranscriptionError):
    """The service sent a frame that is not a well-formed JSON control message."""

    def __init__(self, message: str, raw: Any = None):
        super().__init__(message)
        self.raw = raw


class ContentTypeUndetermined(TranscriptionError):
    """No content type was configured and none could be sniffed from the audio."""


class RemoteError(TranscriptionError):
    """The service reported an error in a control frame."""

    def __init__(self, message: str, raw: Any = None):
        super().__init__(message)
        self.raw = raw


class AuthError(TranscriptionError):
    """A bearer token could not be obtained or was rejected."""


class HttpError(TranscriptionError):
    """Raised by REST invokers for non-success HTTP responses."""

    def __init__(self, status: int, body: Any = None):
        super().__init__(f"HTTP {status}")
        self.status = status
        self.body = body
