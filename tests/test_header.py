"""
Tests for the Mynt header codec.
"""

import pytest

from mynt.format import (
    FormatError,
    FormatErrorKind,
    Header,
    HEADER_SIZE,
    encode_header,
    decode_header,
)


class TestEncodeHeader:
    """Tests for header encoding."""

    def test_layout(self):
        """Magic, version, flags and little-endian sizes land at fixed offsets."""
        data = encode_header((1, 2, 3), 1, 13, 16)
        assert len(data) == HEADER_SIZE
        assert data == (
            b"MYNT"
            b"\x01\x02\x03"
            b"\x01"
            b"\x0d\x00\x00\x00"
            b"\x10\x00\x00\x00"
        )

    def test_large_metadata_size(self):
        data = encode_header((2, 0, 0), 0, 0x01020304)
        assert data[8:12] == b"\x04\x03\x02\x01"

    def test_version_out_of_range(self):
        with pytest.raises(FormatError) as exc_info:
            encode_header((256, 0, 0), 0, 0)
        assert exc_info.value.kind == FormatErrorKind.SERIALIZATION_FAILURE

    def test_version_wrong_arity(self):
        with pytest.raises(FormatError) as exc_info:
            encode_header((1, 0), 0, 0)
        assert exc_info.value.kind == FormatErrorKind.SERIALIZATION_FAILURE


class TestDecodeHeader:
    """Tests for header decoding and rejection."""

    def test_decode(self):
        header = decode_header(encode_header((2, 1, 0), 1, 25))
        assert header == Header(version=(2, 1, 0), flags=1, metadata_size=25, toc_offset=16)
        assert header.magic == b"MYNT"
        assert header.is_compressed
        assert header.version_string == "2.1.0"
        assert header.payload_offset == 0

    def test_uncompressed_flag(self):
        header = decode_header(encode_header((1, 0, 0), 0, 0))
        assert not header.is_compressed

    def test_too_small(self):
        """Fewer than 16 bytes is TOO_SMALL."""
        with pytest.raises(FormatError) as exc_info:
            decode_header(b"MYNT\x01\x00\x00")
        assert exc_info.value.kind == FormatErrorKind.TOO_SMALL

    def test_empty(self):
        with pytest.raises(FormatError) as exc_info:
            decode_header(b"")
        assert exc_info.value.kind == FormatErrorKind.TOO_SMALL

    def test_bad_magic(self):
        """A wrong signature is BAD_MAGIC."""
        data = b"MINT" + encode_header((1, 0, 0), 0, 0)[4:]
        with pytest.raises(FormatError) as exc_info:
            decode_header(data)
        assert exc_info.value.kind == FormatErrorKind.BAD_MAGIC

    def test_toc_below_header(self):
        """A TOC offset of 5 points inside the header."""
        data = encode_header((1, 0, 0), 0, 0, toc_offset=5)
        with pytest.raises(FormatError) as exc_info:
            decode_header(data)
        assert exc_info.value.kind == FormatErrorKind.TOC_OUT_OF_RANGE

    def test_toc_past_buffer(self):
        data = encode_header((1, 0, 0), 0, 0, toc_offset=17)
        with pytest.raises(FormatError) as exc_info:
            decode_header(data)
        assert exc_info.value.kind == FormatErrorKind.TOC_OUT_OF_RANGE

    def test_toc_within_full_buffer_length(self):
        """The TOC bound can be taken from the whole file, not just the header slice."""
        data = encode_header((1, 0, 0), 0, 4, toc_offset=18)
        header = decode_header(data, buffer_length=20)
        assert header.toc_offset == 18
        assert header.payload_offset == 2

    def test_format_error_is_value_error(self):
        with pytest.raises(ValueError):
            decode_header(b"nope")

    def test_to_dict(self):
        info = decode_header(encode_header((1, 0, 0), 1, 42)).to_dict()
        assert info == {
            "magic": "MYNT",
            "version": "1.0.0",
            "flags": 1,
            "compressed": True,
            "metadata_size": 42,
            "toc_offset": 16,
        }
