"""
Mynt Test Configuration

Pytest fixtures and configuration for Mynt tests.
"""

import sys
from pathlib import Path
from typing import List

import pytest


# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from mynt.format import BlockType, Note, NoteBlock, Notebook  # noqa: E402


# Smallest valid PNG signature + IHDR start; content is opaque to the codec
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01"
AUDIO_BYTES = bytes(range(256))


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def sample_blocks() -> List[NoteBlock]:
    """A V1 block list covering every block type."""
    return [
        NoteBlock("word", "cat", 1, False),
        NoteBlock("description", "a small domesticated feline 🐈", 2, True),
        NoteBlock(BlockType.IMAGE, PNG_BYTES, 3, False),
        NoteBlock(BlockType.AUDIO, AUDIO_BYTES, 7, True),
    ]


@pytest.fixture
def sample_notebook(sample_blocks: List[NoteBlock]) -> Notebook:
    """A V2 notebook with populated and empty notes."""
    return Notebook(
        title="Animals",
        notes=[
            Note(title="Pets", note_blocks=sample_blocks),
            Note(title="Empty", note_blocks=[]),
            Note(title="Birds", note_blocks=[
                NoteBlock("word", "crow", 10),
                NoteBlock("description", "black, clever", 11, answer=True),
            ]),
        ],
    )


@pytest.fixture
def mynt_path(tmp_path: Path) -> Path:
    """Path for a temporary .mynt file."""
    return tmp_path / "deck.mynt"
