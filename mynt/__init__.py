"""
Mynt - Study notebook container format

Binary container for flashcard-style notebooks: a fixed 16-byte header
followed by an optionally DEFLATE-compressed payload.

Key Features:
- V1: flat, ordered list of note blocks
- V2: notebook -> notes -> note blocks
- Typed blocks: word, description (text) and image, audio (binary)
- Structured errors: every failure names the violated invariant

Usage:
    # CLI
    $ mynt info deck.mynt
    $ mynt dump deck.mynt --format json
    $ mynt repack deck.mynt -o deck-raw.mynt --no-compress

    # Python
    from mynt import read_file, write_file
    mynt_file = read_file("deck.mynt")
"""

from mynt.version import __version__, __version_info__
from mynt.format import (
    BlockType,
    FileReadError,
    FileWriteError,
    FormatError,
    FormatErrorKind,
    Generation,
    MyntFile,
    MyntFileV2,
    Note,
    NoteBlock,
    Notebook,
    WriteConfig,
    read_buffer,
    read_file,
    serialize,
    write_file,
)

__all__ = [
    "__version__",
    "__version_info__",
    "BlockType",
    "FileReadError",
    "FileWriteError",
    "FormatError",
    "FormatErrorKind",
    "Generation",
    "MyntFile",
    "MyntFileV2",
    "Note",
    "NoteBlock",
    "Notebook",
    "WriteConfig",
    "read_buffer",
    "read_file",
    "serialize",
    "write_file",
]
