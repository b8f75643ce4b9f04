
"""CLI implementation for tfrecordio."""

import json
import sys
from pathlib import Path
from typing import Optional

import typer

from . import RecordIterator, RecordWriter, open_source, open_sink, scan
from .core.model import Summary
from .core.util import summary_asdict, record_asdict

app = typer.Typer(add_completion=False, help="Inspect, dump and write TFRecord files.")


def iter_sources(files: list[str]) -> list[str]:
    """Get list of sources from files argument or stdin."""
    if "-" in files:
        # stdin mode
        stdin_lines = [ln.strip() for ln in sys.stdin if ln.strip()]
        if not stdin_lines:
            return []
        return stdin_lines
    elif files:
        return list(files)
    return []


@app.command()
def inspect(
    files: list[str] = typer.Argument(None, help="Files or URLs to check, or '-' for stdin"),
    no_data_crc: bool = typer.Option(False, "--no-data-crc", help="Skip payload checksum verification"),
    fields: Optional[str] = typer.Option(None, "--fields", help="Comma-separated subset of keys to emit"),
    jsonl: bool = typer.Option(False, "--jsonl", help="Force JSON-lines output"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
):
    """Validate one or many TFRecord files and summarise each."""
    sel_fields = set(fields.split(",")) if fields else None
    sources = iter_sources(files or [])

    if not sources:
        typer.echo("No input files given.", err=True)
        raise typer.Exit(code=1)

    results: list[Summary] = []
    for src in sources:
        try:
            res = scan(src, check_data_crc=not no_data_crc)
        except Exception as e:
            res = Summary(success=False, records=0, payload_bytes=0, error=str(e), bytes_read=0)
        results.append(res)

    # open output sink
    sink = open(output, "w", encoding="utf-8") if output else sys.stdout
    try:
        # choose output style
        if len(sources) == 1 and not jsonl:
            obj = {"source": sources[0], **summary_asdict(results[0], fields=sel_fields)}
            json.dump(obj, sink, indent=2)
            sink.write("\n")
        else:
            for src, res in zip(sources, results):
                obj = {"source": src, **summary_asdict(res, fields=sel_fields)}
                sink.write(json.dumps(obj))
                sink.write("\n")
    finally:
        if output:
            sink.close()

    # exit code
    if any(not r.success for r in results):
        raise typer.Exit(code=1)


@app.command()
def dump(
    file: str = typer.Argument(..., help="File or URL to read"),
    text: bool = typer.Option(False, "--text", help="Decode records as UTF-8 instead of Base64"),
    limit: Optional[int] = typer.Option(None, "--limit", min=0, help="Stop after N records"),
    no_data_crc: bool = typer.Option(False, "--no-data-crc", help="Skip payload checksum verification"),
):
    """Print each record as one JSON line."""
    try:
        src = open_source(file)
    except (OSError, ValueError) as e:
        typer.echo(f"Cannot open {file}: {e}", err=True)
        raise typer.Exit(code=1)

    with src:
        it = RecordIterator(src, check_data_crc=not no_data_crc)
        index = 0
        while (limit is None or index < limit) and it.next():
            typer.echo(json.dumps(record_asdict(index, it.value_bytes(), text=text)))
            index += 1

    if it.err is not None:
        typer.echo(f"Error after {index} records: {it.err}", err=True)
        raise typer.Exit(code=1)


@app.command()
def pack(
    output: Path = typer.Argument(..., help="TFRecord file to create"),
    lines_file: Optional[Path] = typer.Argument(None, help="Text file with one record per line (default: stdin)"),
    append: bool = typer.Option(False, "--append", help="Append to OUTPUT instead of replacing it"),
):
    """Write each input line (without its newline) as one record."""
    lines = open(lines_file, "rb") if lines_file else sys.stdin.buffer
    count = 0
    try:
        with open_sink(output, append=append) as sink:
            writer = RecordWriter(sink)
            for line in lines:
                writer.write(line.rstrip(b"\r\n"))
                count += 1
            written = writer.bytes_written
    finally:
        if lines_file:
            lines.close()

    typer.echo(json.dumps({"output": str(output), "records": count, "bytes_written": written}))


if __name__ == "__main__":
    app()
