"""
Mynt Format Writer

Serializes block lists (V1) and notebooks (V2) to .mynt files.

Write path:
    domain objects -> payload bytes -> header -> header + (compressed) payload

The header is always written uncompressed with ``toc_offset = 16``;
``metadata_size`` records the uncompressed payload length and flags bit 0
records whether the bytes after the header are compressed.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from .blocks import encode_block_list
from .compression import Compressor, apply_write_boundary
from .errors import FileWriteError, FormatError, FormatErrorKind
from .notebook import encode_notebook
from .spec import (
    Generation,
    MyntFile,
    MyntFileV2,
    NoteBlock,
    Notebook,
    DEFAULT_COMPRESSION_LEVEL,
    EXTENSION,
    HEADER_SIZE,
    U32_MAX,
    encode_header,
)

logger = logging.getLogger(__name__)

Writable = Union[MyntFile, MyntFileV2, Notebook, Sequence[NoteBlock]]


@dataclass
class WriteConfig:
    """Configuration for writing .mynt files."""
    compress: bool = True
    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    version_minor: int = 0
    version_patch: int = 0
    compressor: Optional[Compressor] = None  # Replacement for zlib deflate


def _serialize_payload(obj: Writable) -> Tuple[Generation, bytes]:
    if isinstance(obj, MyntFileV2):
        return Generation.V2, encode_notebook(obj.notebook)
    if isinstance(obj, Notebook):
        return Generation.V2, encode_notebook(obj)
    if isinstance(obj, MyntFile):
        return Generation.V1, encode_block_list(obj.notes)
    if isinstance(obj, (list, tuple)):
        return Generation.V1, encode_block_list(obj)
    raise FormatError(
        FormatErrorKind.SERIALIZATION_FAILURE,
        f"Cannot serialize {type(obj).__name__} as a Mynt file",
    )


def _config_from_header(obj: Writable) -> WriteConfig:
    if not isinstance(obj, (MyntFile, MyntFileV2)):
        return WriteConfig()
    header = obj.header
    _, minor, patch = header.version
    return WriteConfig(
        compress=header.is_compressed,
        version_minor=minor,
        version_patch=patch,
    )


def serialize(obj: Writable, config: Optional[WriteConfig] = None) -> bytes:
    """
    Serialize a V1 or V2 object to .mynt bytes.

    Args:
        obj: MyntFile / list of NoteBlock (V1) or MyntFileV2 / Notebook (V2).
            Sizes and offsets in a MyntFile/MyntFileV2 header are recomputed.
        config: Write configuration. Defaults to the compression flag and
            minor/patch version of the object's header, if it has one.

    Returns:
        Complete file contents
    """
    if config is None:
        config = _config_from_header(obj)
    try:
        generation, payload = _serialize_payload(obj)
        if len(payload) > U32_MAX:
            raise FormatError(
                FormatErrorKind.SERIALIZATION_FAILURE,
                f"Payload too large: {len(payload)} bytes",
            )

        flags, stored = apply_write_boundary(
            payload,
            config.compress,
            config.compression_level,
            config.compressor,
        )
        header = encode_header(
            (int(generation), config.version_minor, config.version_patch),
            flags,
            len(payload),
            HEADER_SIZE,
        )
    except FormatError as e:
        raise FileWriteError.wrap(e) from e

    logger.debug(
        "Serialized V%d file: payload=%d stored=%d compressed=%s",
        generation, len(payload), len(stored), bool(flags),
    )
    return header + stored


def write_file(
    path: Union[str, Path],
    obj: Writable,
    config: Optional[WriteConfig] = None,
    mode: int = 0o644,
) -> int:
    """
    Write a .mynt file atomically. Returns bytes written.

    The data goes to a temporary file in the destination directory, is
    fsynced, then renamed over ``path``.
    """
    path = Path(path)
    try:
        data = serialize(obj, config)
    except FileWriteError as e:
        raise FileWriteError.wrap(e.cause, str(path)) from e.cause

    dir_name = path.parent.resolve()
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix=EXTENSION + ".tmp")
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise FileWriteError.wrap(e, str(path)) from e

    logger.debug("Wrote %d bytes to %s", len(data), path)
    return len(data)


def write_file_v1(
    path: Union[str, Path],
    notes: List[NoteBlock],
    config: Optional[WriteConfig] = None,
) -> int:
    """Write a V1 (flat block list) file."""
    return write_file(path, list(notes), config)


def write_file_v2(
    path: Union[str, Path],
    notebook: Notebook,
    config: Optional[WriteConfig] = None,
) -> int:
    """Write a V2 (notebook) file."""
    return write_file(path, notebook, config)


class MyntWriter:
    """
    Writer for creating .mynt files.

    Usage:
        writer = MyntWriter("deck.mynt", WriteConfig(compress=False))
        writer.write(notebook)
    """

    def __init__(
        self,
        output_path: Union[str, Path],
        config: Optional[WriteConfig] = None,
    ):
        self.output_path = Path(output_path)
        self.config = config

        # Ensure .mynt extension
        if self.output_path.suffix != EXTENSION:
            self.output_path = self.output_path.with_suffix(EXTENSION)

    def write(self, obj: Writable) -> Path:
        write_file(self.output_path, obj, self.config)
        return self.output_path
