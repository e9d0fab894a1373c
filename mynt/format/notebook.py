"""
Mynt V2 Notebook Codec

Layout:
    [uint32 title length][title utf-8][uint32 note count][note...]

    note:
    [uint32 title length][title utf-8][uint16 block count][block...]

Notes sit back-to-back with no delimiter, so each note carries an explicit
block count; the block list of the last note ends where the payload ends.
"""

import logging
from typing import List, Tuple

from .blocks import decode_blocks, encode_block
from .errors import FormatError, FormatErrorKind
from .spec import Note, Notebook, U16, U16_MAX, U32, U32_MAX

logger = logging.getLogger(__name__)


def _encode_string(value: str) -> bytes:
    data = value.encode("utf-8")
    if len(data) > U32_MAX:
        raise FormatError(
            FormatErrorKind.SERIALIZATION_FAILURE,
            f"String too long: {len(data)} bytes",
        )
    return U32.pack(len(data)) + data


def _encode_note(note: Note) -> bytes:
    if len(note.note_blocks) > U16_MAX:
        raise FormatError(
            FormatErrorKind.SERIALIZATION_FAILURE,
            f"Note {note.title!r} has {len(note.note_blocks)} blocks "
            f"(max {U16_MAX})",
        )
    parts = [_encode_string(note.title), U16.pack(len(note.note_blocks))]
    parts.extend(encode_block(b) for b in note.note_blocks)
    return b"".join(parts)


def encode_notebook(notebook: Notebook) -> bytes:
    """
    Serialize a notebook.

    Raises:
        FormatError: SERIALIZATION_FAILURE, chained to the underlying error
    """
    try:
        parts = [_encode_string(notebook.title), U32.pack(len(notebook.notes))]
        parts.extend(_encode_note(n) for n in notebook.notes)
    except FormatError as e:
        if e.kind == FormatErrorKind.SERIALIZATION_FAILURE:
            raise
        raise FormatError(
            FormatErrorKind.SERIALIZATION_FAILURE,
            f"Failed to serialize notebook: {e}",
        ) from e
    except (UnicodeEncodeError, AttributeError, TypeError) as e:
        raise FormatError(
            FormatErrorKind.SERIALIZATION_FAILURE,
            f"Failed to serialize notebook: {e}",
        ) from e
    return b"".join(parts)


# =============================================================================
# Decoding
# =============================================================================

def _read_u32(buffer: bytes, offset: int, what: str) -> Tuple[int, int]:
    if offset + U32.size > len(buffer):
        raise FormatError(
            FormatErrorKind.TRUNCATED,
            f"Unexpected end of buffer while reading {what}",
            offset,
        )
    return U32.unpack_from(buffer, offset)[0], offset + U32.size


def _read_u16(buffer: bytes, offset: int, what: str) -> Tuple[int, int]:
    if offset + U16.size > len(buffer):
        raise FormatError(
            FormatErrorKind.TRUNCATED,
            f"Unexpected end of buffer while reading {what}",
            offset,
        )
    return U16.unpack_from(buffer, offset)[0], offset + U16.size


def _read_string(buffer: bytes, offset: int, what: str) -> Tuple[str, int]:
    length, offset = _read_u32(buffer, offset, f"{what} length")
    if length > len(buffer) - offset:
        raise FormatError(
            FormatErrorKind.INVALID_LENGTH,
            f"Invalid {what} length: {length}",
            offset,
        )
    end = offset + length
    try:
        value = bytes(buffer[offset:end]).decode("utf-8")
    except UnicodeDecodeError as e:
        raise FormatError(
            FormatErrorKind.INVALID_ENCODING,
            f"{what} is not valid UTF-8",
            offset,
        ) from e
    return value, end


def decode_note(buffer: bytes, offset: int) -> Tuple[Note, int]:
    """Decode one note. Returns (note, next_offset)."""
    title, offset = _read_string(buffer, offset, "note title")
    block_count, offset = _read_u16(buffer, offset, "note block count")
    blocks, offset = decode_blocks(buffer, offset, block_count)
    return Note(title=title, note_blocks=blocks), offset


def decode_notebook(buffer: bytes, offset: int = 0, strict: bool = True) -> Notebook:
    """
    Decode a notebook starting at ``offset``.

    Args:
        buffer: Decompressed payload
        offset: Start of the notebook within ``buffer``
        strict: Reject bytes left over after the last note

    Returns:
        Decoded Notebook
    """
    if offset >= len(buffer):
        raise FormatError(
            FormatErrorKind.OFFSET_OUT_OF_RANGE,
            f"Notebook offset out of bounds (buffer is {len(buffer)} bytes)",
            offset,
        )

    title, offset = _read_string(buffer, offset, "notebook title")
    note_count, offset = _read_u32(buffer, offset, "note count")

    notes: List[Note] = []
    for _ in range(note_count):
        note, offset = decode_note(buffer, offset)
        notes.append(note)

    if strict and offset != len(buffer):
        raise FormatError(
            FormatErrorKind.INVALID_LENGTH,
            f"{len(buffer) - offset} unexpected trailing bytes after notebook",
            offset,
        )

    logger.debug(
        "Decoded notebook %r: %d notes, %d blocks",
        title, len(notes), sum(len(n.note_blocks) for n in notes),
    )
    return Notebook(title=title, notes=notes)
