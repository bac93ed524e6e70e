#!/usr/bin/env python3
"""Audio helpers for recognize-stream."""

from .content_type import HEADER_SIZE, detect_content_type

__all__ = ["HEADER_SIZE", "detect_content_type"]
