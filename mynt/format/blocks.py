"""
Mynt Block Codec

Encodes and decodes single note blocks and the flat V1 block list.

Block layout (back-to-back, no padding):
    [uint8 type][uint32 content length][content][uint32 sequence][uint8 answer]

Decoding threads an explicit offset through one immutable buffer; every read
is bounds-checked before it is committed.
"""

import logging
import struct
from typing import Iterator, List, Sequence, Tuple

from .errors import FormatError, FormatErrorKind
from .spec import (
    BlockType,
    NoteBlock,
    BLOCK_PREFIX,
    BLOCK_SUFFIX,
    U32_MAX,
)

logger = logging.getLogger(__name__)


def _content_bytes(block: NoteBlock, block_type: BlockType) -> bytes:
    content = block.content
    if block_type.is_binary:
        if isinstance(content, (bytes, bytearray, memoryview)):
            return bytes(content)
        raise FormatError(
            FormatErrorKind.SERIALIZATION_FAILURE,
            f"{block_type.wire_name} block content must be bytes, "
            f"got {type(content).__name__}",
        )
    if isinstance(content, str):
        try:
            return content.encode("utf-8")
        except UnicodeEncodeError as e:
            raise FormatError(
                FormatErrorKind.SERIALIZATION_FAILURE,
                f"{block_type.wire_name} block content is not encodable as UTF-8",
            ) from e
    raise FormatError(
        FormatErrorKind.SERIALIZATION_FAILURE,
        f"{block_type.wire_name} block content must be str, "
        f"got {type(content).__name__}",
    )


def encode_block(block: NoteBlock) -> bytes:
    """
    Encode one note block.

    Raises:
        FormatError: UNKNOWN_TYPE for a type outside the four block types,
            SERIALIZATION_FAILURE for mismatched content or out-of-range ints
    """
    if not isinstance(block, NoteBlock):
        raise FormatError(
            FormatErrorKind.SERIALIZATION_FAILURE,
            f"Expected NoteBlock, got {type(block).__name__}",
        )
    block_type = BlockType.coerce(block.type)
    content = _content_bytes(block, block_type)

    if len(content) > U32_MAX:
        raise FormatError(
            FormatErrorKind.SERIALIZATION_FAILURE,
            f"Block content too large: {len(content)} bytes",
        )
    seq = block.sequence_number
    if not isinstance(seq, int) or isinstance(seq, bool):
        raise FormatError(
            FormatErrorKind.SERIALIZATION_FAILURE,
            f"Sequence number must be an int, got {type(seq).__name__}",
        )
    if not 0 <= seq <= U32_MAX:
        raise FormatError(
            FormatErrorKind.SERIALIZATION_FAILURE,
            f"Sequence number out of range: {block.sequence_number}",
        )

    try:
        return b"".join((
            BLOCK_PREFIX.pack(int(block_type), len(content)),
            content,
            BLOCK_SUFFIX.pack(seq, 1 if block.answer else 0),
        ))
    except struct.error as e:
        raise FormatError(
            FormatErrorKind.SERIALIZATION_FAILURE,
            f"Block field out of range: {e}",
        ) from e


def decode_block(buffer: bytes, offset: int) -> Tuple[NoteBlock, int]:
    """
    Decode one note block starting at ``offset``.

    Returns:
        (block, next_offset)
    """
    buffer_len = len(buffer)
    if offset + BLOCK_PREFIX.size > buffer_len:
        raise FormatError(
            FormatErrorKind.TRUNCATED,
            "Unexpected end of buffer while reading note block",
            offset,
        )

    type_index, content_length = BLOCK_PREFIX.unpack_from(buffer, offset)
    if type_index > BlockType.AUDIO:
        raise FormatError(
            FormatErrorKind.UNKNOWN_TYPE,
            f"Unknown note block type index {type_index}",
            offset,
        )

    content_start = offset + BLOCK_PREFIX.size
    content_end = content_start + content_length
    if content_end + BLOCK_SUFFIX.size > buffer_len:
        raise FormatError(
            FormatErrorKind.TRUNCATED,
            f"Note block content ({content_length} bytes) exceeds buffer length",
            offset,
        )

    block_type = BlockType(type_index)
    raw = bytes(buffer[content_start:content_end])
    if block_type.is_binary:
        content = raw
    else:
        try:
            content = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FormatError(
                FormatErrorKind.INVALID_ENCODING,
                f"{block_type.wire_name} block content is not valid UTF-8",
                content_start,
            ) from e

    sequence_number, answer = BLOCK_SUFFIX.unpack_from(buffer, content_end)
    block = NoteBlock(
        type=block_type,
        content=content,
        sequence_number=sequence_number,
        answer=answer == 1,
    )
    return block, content_end + BLOCK_SUFFIX.size


def decode_blocks(buffer: bytes, offset: int, count: int) -> Tuple[List[NoteBlock], int]:
    """
    Decode exactly ``count`` blocks starting at ``offset``.

    Bounded variant used by the V2 notebook codec, where one note's blocks
    are followed directly by the next note.

    Returns:
        (blocks, next_offset)
    """
    if count and offset >= len(buffer):
        raise FormatError(
            FormatErrorKind.OFFSET_OUT_OF_RANGE,
            "Note block offset out of bounds",
            offset,
        )

    blocks: List[NoteBlock] = []
    for _ in range(count):
        block, offset = decode_block(buffer, offset)
        blocks.append(block)
    return blocks, offset


# =============================================================================
# V1 block list
# =============================================================================

def encode_block_list(blocks: Sequence[NoteBlock]) -> bytes:
    """Concatenate encoded blocks in input order."""
    return b"".join(encode_block(b) for b in blocks)


def iter_blocks(buffer: bytes, start_offset: int = 0) -> Iterator[Tuple[int, NoteBlock]]:
    """
    Yield ``(offset, block)`` until the cursor reaches the end of the buffer.

    Stops with the first FormatError; nothing after a bad block is yielded.
    """
    if start_offset >= len(buffer):
        raise FormatError(
            FormatErrorKind.OFFSET_OUT_OF_RANGE,
            f"Note block offset out of bounds (buffer is {len(buffer)} bytes)",
            start_offset,
        )

    offset = start_offset
    while offset < len(buffer):
        block, next_offset = decode_block(buffer, offset)
        yield offset, block
        offset = next_offset


def decode_block_list(buffer: bytes, start_offset: int = 0) -> List[NoteBlock]:
    """Decode a V1 block list. Fails atomically on the first bad block."""
    blocks = [block for _, block in iter_blocks(buffer, start_offset)]
    logger.debug("Decoded %d note blocks from %d bytes", len(blocks), len(buffer))
    return blocks
