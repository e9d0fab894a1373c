"""
Mynt Format Reader

Reads .mynt files and buffers back into MyntFile (V1) or MyntFileV2 (V2).

Read path:
    bytes -> header (first 16 bytes) -> payload (rest, inflated if flagged)
          -> block list (V1) or notebook (V2)

The whole file is loaded into memory before decoding. Every failure surfaces
as a single FileReadError whose ``__cause__`` is the original error.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .blocks import decode_block_list
from .compression import Decompressor, apply_read_boundary
from .errors import FileReadError, FormatError, FormatErrorKind
from .notebook import decode_notebook
from .spec import (
    Generation,
    Header,
    MyntFile,
    MyntFileV2,
    FLAG_COMPRESSED,
    HEADER_SIZE,
    HEADER_STRUCT,
    MAX_FILE_SIZE,
    MYNT_MAGIC,
    decode_header,
)

logger = logging.getLogger(__name__)

GenerationLike = Union[Generation, int, None]


def is_mynt_bytes(data: bytes) -> bool:
    """Fast check if bytes start with the Mynt magic."""
    return bytes(data[:len(MYNT_MAGIC)]) == MYNT_MAGIC


def is_mynt(path: Union[str, Path]) -> bool:
    """Fast check if a file is Mynt format. Reads only the magic bytes."""
    with open(path, "rb") as f:
        head = f.read(len(MYNT_MAGIC))
    return is_mynt_bytes(head)


def resolve_generation(header: Header, generation: GenerationLike = None) -> Generation:
    """Pick the payload generation: explicit request, else header major version."""
    value = header.version[0] if generation is None else generation
    try:
        return Generation(value)
    except ValueError:
        raise FormatError(
            FormatErrorKind.UNSUPPORTED_GENERATION,
            f"Unsupported Mynt generation: {value!r}",
        ) from None


def _load_bytes(path: Union[str, Path], max_size: int) -> bytes:
    path = Path(path)
    try:
        file_size = path.stat().st_size
        if file_size > max_size:
            raise FileReadError(
                f"File size {file_size} exceeds maximum {max_size} bytes. "
                f"Pass max_size= to override."
            )
        return path.read_bytes()
    except OSError as e:
        raise FileReadError.wrap(e, str(path)) from e


def _uncompressed_length(data: bytes) -> int:
    """Length of the file as it would be with its payload decompressed."""
    if len(data) < HEADER_SIZE:
        return len(data)
    flags, metadata_size = HEADER_STRUCT.unpack_from(data, 0)[4:6]
    if flags & FLAG_COMPRESSED:
        return HEADER_SIZE + metadata_size
    return len(data)


def _decode_header(data: bytes) -> Header:
    # toc_offset points into the uncompressed file
    header = decode_header(data[:HEADER_SIZE], buffer_length=_uncompressed_length(data))
    logger.debug(
        "Decoded header: version=%s flags=%#04x metadata_size=%d toc_offset=%d",
        header.version_string, header.flags, header.metadata_size, header.toc_offset,
    )
    return header


def _payload(
    header: Header,
    data: bytes,
    decompressor: Optional[Decompressor] = None,
) -> bytes:
    payload = apply_read_boundary(header, data[HEADER_SIZE:], decompressor)
    if len(payload) != header.metadata_size:
        raise FormatError(
            FormatErrorKind.INVALID_LENGTH,
            f"Payload is {len(payload)} bytes but header declares "
            f"{header.metadata_size}",
        )
    return payload


def _decode_payload(
    header: Header,
    payload: bytes,
    generation: Generation,
) -> Union[MyntFile, MyntFileV2]:
    start = header.payload_offset
    if generation == Generation.V1:
        # An empty block list serializes to an empty payload
        if start == 0 and not payload:
            return MyntFile(header=header, notes=[])
        return MyntFile(header=header, notes=decode_block_list(payload, start))
    return MyntFileV2(header=header, notebook=decode_notebook(payload, start))


def read_header(data: bytes) -> Header:
    """Decode only the header of a .mynt buffer."""
    try:
        return _decode_header(data)
    except FormatError as e:
        raise FileReadError.wrap(e) from e


def read_buffer(
    data: bytes,
    generation: GenerationLike = None,
    decompressor: Optional[Decompressor] = None,
) -> Union[MyntFile, MyntFileV2]:
    """
    Parse a complete .mynt buffer.

    Args:
        data: Entire file contents
        generation: Generation.V1 / Generation.V2, or None to use the
            header's major version
        decompressor: Replacement for zlib inflate

    Returns:
        MyntFile for V1, MyntFileV2 for V2
    """
    try:
        header = _decode_header(data)
        gen = resolve_generation(header, generation)
        payload = _payload(header, data, decompressor)
        return _decode_payload(header, payload, gen)
    except FormatError as e:
        raise FileReadError.wrap(e) from e


def read_file(
    path: Union[str, Path],
    generation: GenerationLike = None,
    max_size: int = MAX_FILE_SIZE,
) -> Union[MyntFile, MyntFileV2]:
    """Read and parse a .mynt file."""
    data = _load_bytes(path, max_size)
    try:
        return read_buffer(data, generation)
    except FileReadError as e:
        raise FileReadError.wrap(e.cause, str(path)) from e.cause


def read_file_v1(path: Union[str, Path]) -> MyntFile:
    """Read a V1 (flat block list) file."""
    return read_file(path, Generation.V1)


def read_file_v2(path: Union[str, Path]) -> MyntFileV2:
    """Read a V2 (notebook) file."""
    return read_file(path, Generation.V2)


class MyntReader:
    """
    Reader for .mynt files.

    Loads the file once and decodes the header eagerly; the payload is only
    inflated and decoded on request.

    Usage:
        with MyntReader("deck.mynt") as reader:
            print(reader.header.version_string)
            mynt_file = reader.load()
    """

    def __init__(
        self,
        path: Union[str, Path],
        max_size: int = MAX_FILE_SIZE,
    ):
        self.path = Path(path)
        self._data: Optional[bytes] = _load_bytes(self.path, max_size)
        try:
            self.header = _decode_header(self._data)
        except FormatError as e:
            raise FileReadError.wrap(e, str(self.path)) from e

    def close(self) -> None:
        self._data = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def data(self) -> bytes:
        if self._data is None:
            raise ValueError("Reader is closed")
        return self._data

    @property
    def generation(self) -> Generation:
        try:
            return resolve_generation(self.header)
        except FormatError as e:
            raise FileReadError.wrap(e, str(self.path)) from e

    @property
    def is_compressed(self) -> bool:
        return self.header.is_compressed

    @property
    def file_size(self) -> int:
        return len(self.data)

    @property
    def stored_payload_size(self) -> int:
        """Payload size as stored on disk (compressed size if flagged)."""
        return len(self.data) - HEADER_SIZE

    def payload(self) -> bytes:
        """Return the decompressed payload bytes."""
        try:
            return _payload(self.header, self.data)
        except FormatError as e:
            raise FileReadError.wrap(e, str(self.path)) from e

    def load(self, generation: GenerationLike = None) -> Union[MyntFile, MyntFileV2]:
        """Decode the whole file."""
        try:
            gen = resolve_generation(self.header, generation)
            return _decode_payload(self.header, _payload(self.header, self.data), gen)
        except FormatError as e:
            raise FileReadError.wrap(e, str(self.path)) from e

    def get_info(self) -> Dict[str, Any]:
        """Get file information without decoding the payload."""
        info = self.header.to_dict()
        info.update({
            "path": str(self.path),
            "file_size": self.file_size,
            "stored_payload_size": self.stored_payload_size,
        })
        try:
            info["generation"] = int(resolve_generation(self.header))
        except FormatError:
            info["generation"] = None
        if self.header.metadata_size:
            info["compression_ratio"] = round(
                self.stored_payload_size / self.header.metadata_size, 4
            )
        return info
