"""Audio content-type detection from file headers.

The recognize endpoint needs a MIME type up front. When the caller did not
configure one, it is derived from the magic bytes at the start of the first
audio chunk.
"""

# Four-byte signatures, checked against the first bytes of the chunk
_SIGNATURES: dict[bytes, str] = {
    b"fLaC": "audio/flac",
    b"RIFF": "audio/wav",
    b"OggS": "audio/ogg",
    b"\x1a\x45\xdf\xa3": "audio/webm",
}

HEADER_SIZE = 4


def detect_content_type(chunk: bytes) -> str | None:
    """Return the MIME type for an audio header, or None if unrecognized.

    Args:
        chunk: The first bytes of an audio stream (any length)

    Returns:
        A content type such as ``audio/wav``, or None

    """
    header = bytes(chunk[:HEADER_SIZE])
    if len(header) < 3:
        return None

    content_type = _SIGNATURES.get(header)
    if content_type:
        return content_type

    # MP3: ID3v2 tag, or a bare MPEG audio frame sync (11 set bits)
    if header[:3] == b"ID3":
        return "audio/mp3"
    if header[0] == 0xFF and (header[1] & 0xE0) == 0xE0:
        return "audio/mp3"

    return None


__all__ = ["HEADER_SIZE", "detect_content_type"]
