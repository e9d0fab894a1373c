"""
Mynt CLI - Command Line Interface

Inspect, validate and repack .mynt study notebook files.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional, Union

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich import box

from mynt.format import (
    FileReadError,
    FileWriteError,
    MyntFile,
    MyntFileV2,
    MyntReader,
    NoteBlock,
    WriteConfig,
    write_file,
)
from mynt.format.spec import DEFAULT_COMPRESSION_LEVEL
from mynt.version import __version__

# Initialize Typer app
app = typer.Typer(
    name="mynt",
    help="Mynt - inspect and repack .mynt study notebook files",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Rich console for pretty output
console = Console()
err_console = Console(stderr=True)

PREVIEW_CHARS = 48


class OutputFormat(str, Enum):
    """Output format options."""
    text = "text"
    json = "json"


def _fail(error: Exception) -> None:
    kind = getattr(error, "kind", None)
    label = f" [dim]({kind.value})[/dim]" if kind is not None else ""
    console.print(f"[bold red]Error:[/bold red]{label} {escape(str(error))}")
    raise typer.Exit(code=1)


def _open(path: Path) -> MyntReader:
    try:
        return MyntReader(path)
    except FileReadError as e:
        _fail(e)


def _load(reader: MyntReader) -> Union[MyntFile, MyntFileV2]:
    try:
        return reader.load()
    except FileReadError as e:
        _fail(e)


def _preview(block: NoteBlock) -> str:
    if isinstance(block.content, bytes):
        return f"[dim]<{len(block.content)} bytes>[/dim]"
    text = block.content.replace("\n", " ")
    if len(text) > PREVIEW_CHARS:
        text = text[:PREVIEW_CHARS - 1] + "…"
    return escape(text)


def _blocks_table(blocks: List[NoteBlock], title: Optional[str] = None) -> Table:
    table = Table(title=title, box=box.ROUNDED, title_justify="left")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Seq", justify="right", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Answer", justify="center")
    table.add_column("Content")
    for i, block in enumerate(blocks):
        table.add_row(
            str(i),
            str(block.sequence_number),
            block.type.wire_name,
            "[green]✓[/green]" if block.answer else "",
            _preview(block),
        )
    return table


def _to_dict(mynt_file: Union[MyntFile, MyntFileV2]) -> Dict[str, Any]:
    result: Dict[str, Any] = {
        "header": mynt_file.header.to_dict(),
        "generation": int(mynt_file.generation),
    }
    if isinstance(mynt_file, MyntFileV2):
        result["notebook"] = mynt_file.notebook.to_dict()
    else:
        result["notes"] = [b.to_dict() for b in mynt_file.notes]
    return result


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"mynt [bold]{__version__}[/bold]")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version", "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """
    Mynt - study notebook container format

    Inspect, validate and repack .mynt files (V1 block lists and V2 notebooks).
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.command()
def info(
    file: Annotated[
        Path,
        typer.Argument(help="Mynt file to inspect"),
    ],
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.text,
) -> None:
    """
    Show header information without decoding the payload.

    Examples:
        mynt info deck.mynt
        mynt info deck.mynt --format json
    """
    with _open(file) as reader:
        file_info = reader.get_info()

    if output_format == OutputFormat.json:
        console.print_json(json.dumps(file_info))
        return

    generation = file_info["generation"]
    ratio = file_info.get("compression_ratio")
    console.print(Panel.fit(
        f"[bold]File:[/bold] [green]{escape(file_info['path'])}[/green]\n"
        f"[bold]Version:[/bold] {file_info['version']}"
        f" [dim](V{generation if generation is not None else '?'})[/dim]\n"
        f"[bold]Compressed:[/bold] {'yes' if file_info['compressed'] else 'no'}"
        f" [dim](flags {file_info['flags']:#04x})[/dim]\n"
        f"[bold]Payload:[/bold] {file_info['metadata_size']:,} bytes"
        f" -> {file_info['stored_payload_size']:,} stored"
        + (f" [dim]({ratio:.1%})[/dim]" if ratio is not None else "")
        + f"\n[bold]TOC offset:[/bold] {file_info['toc_offset']}",
        title="[bold blue]Mynt File Info[/bold blue]",
        border_style="blue",
    ))


@app.command()
def dump(
    file: Annotated[
        Path,
        typer.Argument(help="Mynt file to decode"),
    ],
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.text,
) -> None:
    """
    Decode and print the file contents.

    Examples:
        mynt dump deck.mynt
        mynt dump notebook.mynt --format json
    """
    with _open(file) as reader:
        mynt_file = _load(reader)

    if output_format == OutputFormat.json:
        console.print_json(json.dumps(_to_dict(mynt_file)))
        return

    if isinstance(mynt_file, MyntFileV2):
        notebook = mynt_file.notebook
        console.print(
            f"[bold blue]{escape(notebook.title)}[/bold blue] "
            f"[dim]({len(notebook.notes)} notes, {notebook.block_count} blocks)[/dim]"
        )
        for note in notebook.notes:
            console.print(_blocks_table(note.note_blocks, title=escape(note.title)))
    else:
        console.print(f"[bold blue]{len(mynt_file.notes)} note blocks[/bold blue]")
        console.print(_blocks_table(mynt_file.notes))


@app.command()
def validate(
    file: Annotated[
        Path,
        typer.Argument(help="Mynt file to validate"),
    ],
) -> None:
    """
    Fully decode a file and report whether it is well-formed.

    Exits with status 1 and the error kind when decoding fails.
    """
    with _open(file) as reader:
        mynt_file = _load(reader)

    console.print(
        f"[bold green]OK[/bold green] {file} "
        f"[dim](V{int(mynt_file.generation)}, version {mynt_file.header.version_string})[/dim]"
    )


@app.command()
def repack(
    file: Annotated[
        Path,
        typer.Argument(help="Mynt file to re-serialize"),
    ],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Output .mynt file path"),
    ],
    compress: Annotated[
        bool,
        typer.Option("--compress/--no-compress", help="Compress the payload"),
    ] = True,
    level: Annotated[
        int,
        typer.Option("--level", "-l", min=0, max=9, help="DEFLATE compression level"),
    ] = DEFAULT_COMPRESSION_LEVEL,
) -> None:
    """
    Re-serialize a file, optionally toggling payload compression.

    Examples:
        mynt repack deck.mynt -o deck-raw.mynt --no-compress
        mynt repack deck.mynt -o deck-small.mynt --level 9
    """
    with _open(file) as reader:
        mynt_file = _load(reader)

    _, minor, patch = mynt_file.header.version
    config = WriteConfig(
        compress=compress,
        compression_level=level,
        version_minor=minor,
        version_patch=patch,
    )
    try:
        written = write_file(output, mynt_file, config)
    except FileWriteError as e:
        _fail(e)

    console.print(
        f"[bold green]Wrote[/bold green] {output} "
        f"[dim]({written:,} bytes, {'compressed' if compress else 'uncompressed'})[/dim]"
    )


if __name__ == "__main__":
    app()
