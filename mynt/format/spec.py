"""
Mynt Native Format Specification

Defines the binary layout of .mynt study notebook files.

Format Overview:
- Header: fixed 16 bytes, never compressed
- Payload: block list (V1) or notebook (V2), DEFLATE-compressed iff flags bit 0

Header layout (all integers little-endian):
    offset 0:  "MYNT"                (4 bytes, ASCII)
    offset 4:  major, minor, patch   (3 x uint8)
    offset 7:  flags                 (uint8; bit 0 = payload compressed)
    offset 8:  metadata_size         (uint32, uncompressed payload length)
    offset 12: toc_offset            (uint32, start of payload in the
                                      uncompressed file; always 16 on write)

Version History:
- v1: Flat, ordered list of note blocks
- v2: Notebook -> notes -> note blocks hierarchy
"""

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Tuple, Union

from .errors import FormatError, FormatErrorKind


# Magic bytes and fixed header geometry
MYNT_MAGIC = b"MYNT"
HEADER_SIZE = 16
HEADER_STRUCT = struct.Struct("<4sBBBBII")

# Flag bits
FLAG_COMPRESSED = 0x01

# Payload primitives
U16 = struct.Struct("<H")
U32 = struct.Struct("<I")
U16_MAX = 0xFFFF
U32_MAX = 0xFFFFFFFF

# Block prefix (type + content length) and suffix (sequence + answer)
BLOCK_PREFIX = struct.Struct("<BI")
BLOCK_SUFFIX = struct.Struct("<IB")

# Compression / IO defaults
DEFAULT_COMPRESSION_LEVEL = 6
MAX_FILE_SIZE = 256 * 1024 * 1024  # 256 MB max file size for reader

EXTENSION = ".mynt"


class Generation(IntEnum):
    """Payload generations. The value is the header major version."""
    V1 = 1  # Flat block list
    V2 = 2  # Notebook hierarchy


class BlockType(IntEnum):
    """Note block content types, encoded as their index."""
    WORD = 0
    DESCRIPTION = 1
    IMAGE = 2
    AUDIO = 3

    @property
    def wire_name(self) -> str:
        return self.name.lower()

    @property
    def is_binary(self) -> bool:
        """Image and audio blocks carry raw bytes; the rest carry text."""
        return self in (BlockType.IMAGE, BlockType.AUDIO)

    @classmethod
    def from_name(cls, name: str) -> "BlockType":
        member = _WIRE_NAMES.get(name)
        if member is not None:
            return member
        raise FormatError(
            FormatErrorKind.UNKNOWN_TYPE,
            f"Invalid NoteBlock type: {name!r}",
        )

    @classmethod
    def coerce(cls, value: Union["BlockType", str, int]) -> "BlockType":
        """Map a member, wire name or index to a BlockType."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls.from_name(value)
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass
        raise FormatError(
            FormatErrorKind.UNKNOWN_TYPE,
            f"Invalid NoteBlock type: {value!r}",
        )


# Lowercase wire names are the only accepted spellings
_WIRE_NAMES = {t.wire_name: t for t in BlockType}


@dataclass(frozen=True)
class NoteBlock:
    """
    Smallest unit of note content.

    ``content`` is ``str`` for word/description blocks and ``bytes`` for
    image/audio blocks. Wire names ("word", "image", ...) are accepted for
    ``type`` and normalized to BlockType; anything else is kept as given and
    rejected when the block is encoded.
    """
    type: BlockType
    content: Union[str, bytes]
    sequence_number: int = 0
    answer: bool = False

    def __post_init__(self):
        if isinstance(self.type, str) and self.type in _WIRE_NAMES:
            object.__setattr__(self, "type", _WIRE_NAMES[self.type])

    def to_dict(self) -> dict:
        """Serialize to a JSON-friendly dictionary (binary content summarized)."""
        type_name = self.type.wire_name if isinstance(self.type, BlockType) else str(self.type)
        if isinstance(self.content, (bytes, bytearray, memoryview)):
            content = {"bytes": len(self.content)}
        else:
            content = self.content
        return {
            "type": type_name,
            "content": content,
            "sequence_number": self.sequence_number,
            "answer": self.answer,
        }


@dataclass
class Note:
    """A titled, ordered group of note blocks (V2 only)."""
    title: str
    note_blocks: List[NoteBlock] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "note_blocks": [b.to_dict() for b in self.note_blocks],
        }


@dataclass
class Notebook:
    """A titled, ordered collection of notes (V2 only)."""
    title: str
    notes: List[Note] = field(default_factory=list)

    @property
    def block_count(self) -> int:
        return sum(len(n.note_blocks) for n in self.notes)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "notes": [n.to_dict() for n in self.notes],
        }


@dataclass(frozen=True)
class Header:
    """Decoded 16-byte .mynt header."""
    version: Tuple[int, int, int]
    flags: int = 0
    metadata_size: int = 0
    toc_offset: int = HEADER_SIZE
    magic: bytes = MYNT_MAGIC

    @property
    def is_compressed(self) -> bool:
        return bool(self.flags & FLAG_COMPRESSED)

    @property
    def version_string(self) -> str:
        return ".".join(str(v) for v in self.version)

    @property
    def payload_offset(self) -> int:
        """Offset of the first note byte within the (decompressed) payload."""
        return self.toc_offset - HEADER_SIZE

    def to_dict(self) -> dict:
        return {
            "magic": self.magic.decode("ascii", errors="replace"),
            "version": self.version_string,
            "flags": self.flags,
            "compressed": self.is_compressed,
            "metadata_size": self.metadata_size,
            "toc_offset": self.toc_offset,
        }


@dataclass
class MyntFile:
    """A V1 file: header plus a flat list of note blocks."""
    header: Header
    notes: List[NoteBlock] = field(default_factory=list)

    generation = Generation.V1


@dataclass
class MyntFileV2:
    """A V2 file: header plus a notebook."""
    header: Header
    notebook: Notebook

    generation = Generation.V2


def encode_header(
    version: Tuple[int, int, int],
    flags: int,
    metadata_size: int,
    toc_offset: int = HEADER_SIZE,
) -> bytes:
    """
    Encode the fixed 16-byte header.

    Format:
    - Magic (4 bytes): "MYNT"
    - Version (3 bytes): major, minor, patch
    - Flags (1 byte)
    - Metadata size (4 bytes, uint32)
    - TOC offset (4 bytes, uint32)
    """
    if len(version) != 3:
        raise FormatError(
            FormatErrorKind.SERIALIZATION_FAILURE,
            f"Version must be (major, minor, patch), got {version!r}",
        )
    try:
        return HEADER_STRUCT.pack(MYNT_MAGIC, *version, flags, metadata_size, toc_offset)
    except struct.error as e:
        raise FormatError(
            FormatErrorKind.SERIALIZATION_FAILURE,
            f"Header field out of range: {e}",
        ) from e


def decode_header(data: bytes, buffer_length: Optional[int] = None) -> Header:
    """
    Decode the 16-byte header.

    Args:
        data: Bytes starting at the header (at least 16)
        buffer_length: Length to bound the TOC offset against. Defaults to
            ``len(data)``; file readers pass the full file length.

    Returns:
        Decoded Header
    """
    if len(data) < HEADER_SIZE:
        raise FormatError(
            FormatErrorKind.TOO_SMALL,
            f"Invalid Mynt file: {len(data)} bytes is too small to contain a valid header",
        )

    magic, major, minor, patch, flags, metadata_size, toc_offset = (
        HEADER_STRUCT.unpack_from(data, 0)
    )

    if magic != MYNT_MAGIC:
        raise FormatError(
            FormatErrorKind.BAD_MAGIC,
            f"Invalid Mynt file: magic signature mismatch ({magic!r})",
        )

    limit = len(data) if buffer_length is None else buffer_length
    if toc_offset < HEADER_SIZE or toc_offset > limit:
        raise FormatError(
            FormatErrorKind.TOC_OUT_OF_RANGE,
            f"Invalid Mynt file: TOC offset {toc_offset} out of bounds "
            f"[{HEADER_SIZE}, {limit}]",
        )

    return Header(
        version=(major, minor, patch),
        flags=flags,
        metadata_size=metadata_size,
        toc_offset=toc_offset,
        magic=magic,
    )
