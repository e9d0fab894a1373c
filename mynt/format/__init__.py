"""
Mynt Native Format (.mynt)

Container format for flashcard-style study notebooks.

File Structure:
┌──────────────────────────────┐
│ Header (16 bytes)            │ "MYNT" + version + flags + sizes
├──────────────────────────────┤
│ Payload                      │ DEFLATE-compressed iff flags bit 0
│   V1: note blocks            │ flat, ordered list
│   V2: notebook               │ title + notes, each with note blocks
└──────────────────────────────┘

Usage:
    from mynt.format import Notebook, Note, NoteBlock, write_file, read_file

    notebook = Notebook("Animals", [
        Note("Pets", [NoteBlock("word", "cat", 1), NoteBlock("description", "meows", 2, answer=True)]),
    ])
    write_file("animals.mynt", notebook)
    mynt_file = read_file("animals.mynt")
"""

from .errors import (
    FileReadError,
    FileWriteError,
    FormatError,
    FormatErrorKind,
    MyntFileError,
)

from .spec import (
    BlockType,
    Generation,
    Header,
    MyntFile,
    MyntFileV2,
    Note,
    NoteBlock,
    Notebook,
    FLAG_COMPRESSED,
    HEADER_SIZE,
    MYNT_MAGIC,
    encode_header,
    decode_header,
)

from .blocks import (
    encode_block,
    decode_block,
    decode_blocks,
    encode_block_list,
    decode_block_list,
    iter_blocks,
)

from .notebook import (
    encode_notebook,
    decode_notebook,
)

from .compression import (
    compress_payload,
    decompress_payload,
)

from .reader import (
    MyntReader,
    is_mynt,
    is_mynt_bytes,
    read_buffer,
    read_file,
    read_file_v1,
    read_file_v2,
    read_header,
)

from .writer import (
    MyntWriter,
    WriteConfig,
    serialize,
    write_file,
    write_file_v1,
    write_file_v2,
)

__all__ = [
    # Errors
    "FileReadError",
    "FileWriteError",
    "FormatError",
    "FormatErrorKind",
    "MyntFileError",
    # Spec
    "BlockType",
    "Generation",
    "Header",
    "MyntFile",
    "MyntFileV2",
    "Note",
    "NoteBlock",
    "Notebook",
    "FLAG_COMPRESSED",
    "HEADER_SIZE",
    "MYNT_MAGIC",
    "encode_header",
    "decode_header",
    # Codecs
    "encode_block",
    "decode_block",
    "decode_blocks",
    "encode_block_list",
    "decode_block_list",
    "iter_blocks",
    "encode_notebook",
    "decode_notebook",
    "compress_payload",
    "decompress_payload",
    # Reader
    "MyntReader",
    "is_mynt",
    "is_mynt_bytes",
    "read_buffer",
    "read_file",
    "read_file_v1",
    "read_file_v2",
    "read_header",
    # Writer
    "MyntWriter",
    "WriteConfig",
    "serialize",
    "write_file",
    "write_file_v1",
    "write_file_v2",
]
