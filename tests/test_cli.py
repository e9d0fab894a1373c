"""
Mynt CLI Tests

Tests for the command-line interface.
"""

import pytest
from typer.testing import CliRunner

from mynt.api.cli.main import app
from mynt.format import WriteConfig, read_file, write_file
from mynt.version import __version__


runner = CliRunner()


@pytest.fixture
def v1_file(tmp_path, sample_blocks):
    path = tmp_path / "deck.mynt"
    write_file(path, sample_blocks)
    return path


@pytest.fixture
def v2_file(tmp_path, sample_notebook):
    path = tmp_path / "animals.mynt"
    write_file(path, sample_notebook)
    return path


@pytest.fixture
def bad_file(tmp_path):
    path = tmp_path / "bad.mynt"
    path.write_bytes(b"JUNK" + b"\x00" * 20)
    return path


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_version_flag(self) -> None:
        """Test --version flag shows version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self) -> None:
        """Test --help lists the commands."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("info", "dump", "validate", "repack"):
            assert command in result.output


class TestInfoCommand:
    """Test the info command."""

    def test_info_text(self, v2_file) -> None:
        result = runner.invoke(app, ["info", str(v2_file)])
        assert result.exit_code == 0
        assert "2.0.0" in result.output
        assert "Compressed" in result.output

    def test_info_json(self, v1_file) -> None:
        result = runner.invoke(app, ["info", str(v1_file), "--format", "json"])
        assert result.exit_code == 0
        assert '"generation": 1' in result.output
        assert '"toc_offset": 16' in result.output

    def test_info_missing_file(self, tmp_path) -> None:
        result = runner.invoke(app, ["info", str(tmp_path / "missing.mynt")])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_info_bad_magic(self, bad_file) -> None:
        result = runner.invoke(app, ["info", str(bad_file)])
        assert result.exit_code == 1
        assert "bad_magic" in result.output


class TestDumpCommand:
    """Test the dump command."""

    def test_dump_v1(self, v1_file) -> None:
        result = runner.invoke(app, ["dump", str(v1_file)])
        assert result.exit_code == 0
        assert "4 note blocks" in result.output
        assert "cat" in result.output
        assert "bytes" in result.output

    def test_dump_v2(self, v2_file) -> None:
        result = runner.invoke(app, ["dump", str(v2_file)])
        assert result.exit_code == 0
        assert "Animals" in result.output
        assert "Pets" in result.output
        assert "crow" in result.output

    def test_dump_json(self, v2_file) -> None:
        result = runner.invoke(app, ["dump", str(v2_file), "-f", "json"])
        assert result.exit_code == 0
        assert '"title": "Animals"' in result.output
        assert '"bytes": 256' in result.output


class TestValidateCommand:
    """Test the validate command."""

    def test_validate_ok(self, v1_file) -> None:
        result = runner.invoke(app, ["validate", str(v1_file)])
        assert result.exit_code == 0
        assert "OK" in result.output

    def test_validate_corrupt(self, tmp_path, sample_blocks) -> None:
        corrupt = tmp_path / "corrupt.mynt"
        write_file(corrupt, sample_blocks, WriteConfig(compress=False))
        data = bytearray(corrupt.read_bytes())
        data[16] = 7  # first block type
        corrupt.write_bytes(bytes(data))
        result = runner.invoke(app, ["validate", str(corrupt)])
        assert result.exit_code == 1
        assert "unknown_type" in result.output


class TestRepackCommand:
    """Test the repack command."""

    def test_repack_uncompressed(self, tmp_path, v2_file, sample_notebook) -> None:
        out = tmp_path / "raw.mynt"
        result = runner.invoke(app, ["repack", str(v2_file), "-o", str(out), "--no-compress"])
        assert result.exit_code == 0
        repacked = read_file(out)
        assert not repacked.header.is_compressed
        assert repacked.notebook == sample_notebook

    def test_repack_keeps_minor_version(self, tmp_path, sample_blocks) -> None:
        src = tmp_path / "src.mynt"
        out = tmp_path / "out.mynt"
        write_file(src, sample_blocks, WriteConfig(compress=False, version_minor=2))
        result = runner.invoke(app, ["repack", str(src), "-o", str(out), "--level", "9"])
        assert result.exit_code == 0
        repacked = read_file(out)
        assert repacked.header.is_compressed
        assert repacked.header.version == (1, 2, 0)
        assert repacked.notes == sample_blocks

    def test_repack_requires_output(self, v1_file) -> None:
        result = runner.invoke(app, ["repack", str(v1_file)])
        assert result.exit_code != 0
