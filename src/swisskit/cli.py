from __future__ import annotations

import threading
import time
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path

import typer

from .channel import Channel
from .chunks import chunk
from .config import ToolkitConfig, load_config
from .errors import OpenError, RetryError, StreamError
from .lines import read_lines, stream_lines
from .paths import config_path, find_repo_root
from .retry import retry
from .size import Unit, file_size_in
from .stream import read_json_file, stream_json

app = typer.Typer(add_completion=False, help="swisskit: streaming file and collection utilities")
fileutils_app = typer.Typer(help="Decode JSON array files and measure files")
readerutils_app = typer.Typer(help="Read text files line by line")
sliceutils_app = typer.Typer(help="Split sequences")

app.add_typer(fileutils_app, name="fileutils")
app.add_typer(readerutils_app, name="readerutils")
app.add_typer(sliceutils_app, name="sliceutils")


@dataclass
class Record:
    name: str = ""
    language: str = ""
    id: str = ""
    bio: str = ""
    version: float = 0.0


def _report(count: int, started: float, noun: str) -> None:
    elapsed = time.perf_counter() - started
    rate = count / elapsed if elapsed > 0 else 0.0
    typer.secho(
        f"✅ {count} {noun} fetched in {elapsed * 1000:.0f}ms ({rate:.0f} {noun}/sec)",
        fg=typer.colors.GREEN,
    )


def _fail(message: str, *, code: int = 1) -> typer.Exit:
    typer.secho(message, fg=typer.colors.RED)
    return typer.Exit(code=code)


@app.callback()
def configure(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (defaults to $SWISSKIT_CONFIG or <repo root>/swisskit.yaml)",
    ),
) -> None:
    path = config.resolve() if config else config_path(find_repo_root())
    ctx.obj = load_config(path)


@fileutils_app.command("json")
def read_json(
    ctx: typer.Context,
    path: Path | None = typer.Argument(None, help="JSON array file (defaults to example_json)"),
    retries: int | None = typer.Option(None, "--retries", min=1, help="Attempts to open the file"),
) -> None:
    cfg: ToolkitConfig = ctx.obj
    target = path or cfg.example_json
    started = time.perf_counter()

    try:
        records = retry(
            read_json_file,
            target,
            Record,
            backend=cfg.json_backend,
            max_retries=retries or cfg.retry_max_retries,
            delay_s=cfg.retry_delay_s,
            retry_on=(OpenError,),
        )
    except (RetryError, StreamError) as e:
        raise _fail(f"failed to read json file: {e}") from e

    _report(len(records), started, "records")


@fileutils_app.command("json-chan")
def stream_json_cmd(
    ctx: typer.Context,
    path: Path | None = typer.Argument(None, help="JSON array file (defaults to example_json)"),
    limit: int | None = typer.Option(None, "--limit", min=1, help="Stop after this many records"),
) -> None:
    cfg: ToolkitConfig = ctx.obj
    target = path or cfg.example_json
    out: Channel[Record] = Channel()
    cancel = threading.Event()

    def producer() -> None:
        # The error also closes `out`, so the loop below raises it.
        with suppress(StreamError):
            stream_json(target, Record, out, backend=cfg.json_backend, cancel=cancel)

    started = time.perf_counter()
    t = threading.Thread(target=producer, name="swisskit-json-producer", daemon=True)
    t.start()

    count = 0
    try:
        for _ in out:
            count += 1
            if limit is not None and count >= limit:
                cancel.set()
                break
    except StreamError as e:
        raise _fail(f"failed to read json file: {e}") from e
    finally:
        t.join()

    _report(count, started, "records")


@fileutils_app.command("size")
def size(
    ctx: typer.Context,
    path: Path | None = typer.Argument(None, help="File to measure (defaults to example_json)"),
    unit: str = typer.Option("MiB", "--unit", "-u", help="KiB|MiB|GiB|TiB"),
) -> None:
    cfg: ToolkitConfig = ctx.obj
    target = path or cfg.example_json

    try:
        u = Unit.parse(unit)
    except ValueError as e:
        raise _fail(str(e), code=2) from e

    try:
        value = file_size_in(target, u)
    except OSError as e:
        raise _fail(f"failed to stat {target}: {e}") from e

    typer.echo(f"{value:.2f} {u.name[0]}iB")


@readerutils_app.command("lines")
def lines(
    ctx: typer.Context,
    path: Path | None = typer.Argument(None, help="Text file (defaults to example_text)"),
) -> None:
    cfg: ToolkitConfig = ctx.obj
    target = path or cfg.example_text
    started = time.perf_counter()

    try:
        result = read_lines(target, max_line_size=cfg.max_line_size, encoding=cfg.encoding)
    except StreamError as e:
        raise _fail(f"failed to read file: {e}") from e

    _report(len(result), started, "lines")


@readerutils_app.command("stream-lines")
def stream_lines_cmd(
    ctx: typer.Context,
    path: Path | None = typer.Argument(None, help="Text file (defaults to example_text)"),
    echo: bool = typer.Option(False, "--print", help="Print every line as it arrives"),
) -> None:
    cfg: ToolkitConfig = ctx.obj
    target = path or cfg.example_text
    out: Channel[str] = Channel()

    def producer() -> None:
        # The error also closes `out`, so the loop below raises it.
        with suppress(StreamError):
            stream_lines(target, out, max_line_size=cfg.max_line_size, encoding=cfg.encoding)

    started = time.perf_counter()
    t = threading.Thread(target=producer, name="swisskit-line-producer", daemon=True)
    t.start()

    count = 0
    try:
        for line in out:
            if echo:
                typer.echo(line.encode(cfg.encoding, errors="surrogateescape"))
            count += 1
    except StreamError as e:
        raise _fail(f"failed to read file: {e}") from e
    finally:
        t.join()

    _report(count, started, "lines")


@sliceutils_app.command("chunk")
def chunk_cmd(
    items: list[str] | None = typer.Argument(None, help="Items to split (defaults to 1..7)"),
    size: int = typer.Option(2, "--size", "-n", help="Items per chunk"),
) -> None:
    values = items or [str(i) for i in range(1, 8)]

    try:
        chunks = chunk(values, size)
    except ValueError as e:
        raise _fail(str(e), code=2) from e

    for c in chunks:
        typer.echo(" ".join(c))


def main() -> None:
    # Entry point for console script.
    app()


if __name__ == "__main__":
    main()
