"""
Mynt Compression Boundary

The payload that follows the 16-byte header is DEFLATE-compressed (zlib
stream) iff the header's flags bit 0 is set. The header itself is never
compressed.

The compressor / decompressor are plain ``bytes -> bytes`` callables so a
different backend can be supplied; any exception they raise is wrapped in a
FormatError with the original chained.
"""

import logging
import zlib
from typing import Callable, Optional, Tuple

from .errors import FormatError, FormatErrorKind
from .spec import DEFAULT_COMPRESSION_LEVEL, FLAG_COMPRESSED, Header

logger = logging.getLogger(__name__)

Compressor = Callable[[bytes], bytes]
Decompressor = Callable[[bytes], bytes]


def deflate(data: bytes, level: int = DEFAULT_COMPRESSION_LEVEL) -> bytes:
    return zlib.compress(data, level)


def inflate(data: bytes) -> bytes:
    return zlib.decompress(data)


def compress_payload(
    payload: bytes,
    level: int = DEFAULT_COMPRESSION_LEVEL,
    compressor: Optional[Compressor] = None,
) -> bytes:
    """Compress a serialized payload. Failures become COMPRESSION_FAILED."""
    try:
        if compressor is None:
            compressed = deflate(payload, level)
        else:
            compressed = compressor(payload)
    except Exception as e:
        raise FormatError(
            FormatErrorKind.COMPRESSION_FAILED,
            f"Failed to compress Mynt file data: {e}",
        ) from e

    logger.debug("Compressed payload %d -> %d bytes", len(payload), len(compressed))
    return compressed


def decompress_payload(
    payload: bytes,
    decompressor: Optional[Decompressor] = None,
) -> bytes:
    """Decompress a payload. Failures become DECOMPRESSION_FAILED."""
    try:
        if decompressor is None:
            return inflate(payload)
        return decompressor(payload)
    except Exception as e:
        raise FormatError(
            FormatErrorKind.DECOMPRESSION_FAILED,
            f"Failed to decompress Mynt file data: {e}",
        ) from e


def apply_read_boundary(
    header: Header,
    payload: bytes,
    decompressor: Optional[Decompressor] = None,
) -> bytes:
    """Return the payload ready for decoding, decompressing it if flagged."""
    if header.flags & FLAG_COMPRESSED:
        return decompress_payload(payload, decompressor)
    return bytes(payload)


def apply_write_boundary(
    payload: bytes,
    compress: bool,
    level: int = DEFAULT_COMPRESSION_LEVEL,
    compressor: Optional[Compressor] = None,
) -> Tuple[int, bytes]:
    """
    Prepare a payload for writing.

    Returns:
        (flags, payload_as_written) where flags bit 0 matches the payload state
    """
    if compress:
        return FLAG_COMPRESSED, compress_payload(payload, level, compressor)
    return 0, payload
