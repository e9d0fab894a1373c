"""
Mynt Format Errors

Every structural failure raised while encoding or decoding a .mynt file is a
FormatError carrying a FormatErrorKind, so callers can match on the kind
instead of parsing messages. The file-level entry points wrap the first
failure in FileReadError / FileWriteError and chain the original with
``raise ... from``.
"""

from enum import Enum
from typing import Optional


class FormatErrorKind(str, Enum):
    """Kinds of structural failure."""
    TOO_SMALL = "too_small"
    BAD_MAGIC = "bad_magic"
    TOC_OUT_OF_RANGE = "toc_out_of_range"
    UNKNOWN_TYPE = "unknown_type"
    TRUNCATED = "truncated"
    INVALID_LENGTH = "invalid_length"
    OFFSET_OUT_OF_RANGE = "offset_out_of_range"
    INVALID_ENCODING = "invalid_encoding"
    DECOMPRESSION_FAILED = "decompression_failed"
    COMPRESSION_FAILED = "compression_failed"
    SERIALIZATION_FAILURE = "serialization_failure"
    UNSUPPORTED_GENERATION = "unsupported_generation"


class MyntFileError(Exception):
    """Base class for all Mynt file errors."""


class FormatError(MyntFileError, ValueError):
    """
    A .mynt byte stream or domain object violates the format.

    Attributes:
        kind: Which structural invariant was violated
        offset: Byte offset where decoding failed, if known
    """

    def __init__(
        self,
        kind: FormatErrorKind,
        message: str,
        offset: Optional[int] = None,
    ):
        self.kind = kind
        self.offset = offset
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)


class _WrappedError(MyntFileError):
    """Boundary error wrapping a single underlying cause."""

    action = "processing"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    @property
    def kind(self) -> Optional[FormatErrorKind]:
        """Kind of the wrapped FormatError, or None for storage errors."""
        if isinstance(self.cause, FormatError):
            return self.cause.kind
        return None

    @classmethod
    def wrap(cls, cause: BaseException, source: Optional[str] = None) -> "_WrappedError":
        where = f" {source}" if source else ""
        return cls(f"Error {cls.action} Mynt file{where}: {cause}", cause)


class FileReadError(_WrappedError):
    """Reading a .mynt file or buffer failed."""
    action = "reading"


class FileWriteError(_WrappedError):
    """Writing a .mynt file or buffer failed."""
    action = "writing"
