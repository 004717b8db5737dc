"""Typer CLI entrypoint for converting hadolint output to SARIF."""
from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from packages.exporters.sarif import __version__, level_for
from packages.pipeline.convert import convert as convert_stream
from packages.schema.errors import MalformedInput, WriteError
from packages.schema.models import Diagnostic

app = typer.Typer(add_completion=False)
console = Console(stderr=True)

_LOG = logging.getLogger(__name__)

_LOGGER_NAMESPACES = ("apps", "packages")


class DebugLogger:
    """JSONL debug trace writer used during CLI runs."""

    def __init__(self, path: Optional[Path]):
        self._handle = None
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = path.open("w", encoding="utf-8")

    @property
    def enabled(self) -> bool:
        return self._handle is not None

    def log(self, event: str, payload: Optional[dict] = None, **extra: object) -> None:
        if not self._handle:
            return
        entry: dict[str, object] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": event,
        }
        if payload:
            entry.update(payload)
        if extra:
            entry.update(extra)
        self._handle.write(json.dumps(entry, ensure_ascii=False) + "\n")
        self._handle.flush()

    def close(self) -> None:
        if self._handle:
            self._handle.close()
            self._handle = None


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"hadolint-sarif {__version__}")
        raise typer.Exit()


@app.command()
def convert(
    input: Optional[Path] = typer.Argument(
        None,
        help="input file; reads from stdin if none is given",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="output file; writes to stdout if none is given",
    ),
    summary: bool = typer.Option(
        False, "--summary", help="Print a table of converted findings to stderr"
    ),
    debug_log: Optional[Path] = typer.Option(
        None,
        "--debug-log",
        help="Write debug trace JSONL to this path",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """Convert hadolint warnings into SARIF.

    The expected input is generated by running 'hadolint -f json'.
    """

    debug = DebugLogger(debug_log)
    source = str(input) if input is not None else "<stdin>"
    sink = str(output) if output is not None else "<stdout>"

    with _verbose_logging(verbose):
        try:
            debug.log("start", {"input": source, "output": sink})
            _LOG.debug("Reading hadolint output from %s", source)

            reader = input.open("rb") if input is not None else typer.get_binary_stream("stdin")
            writer = _DeferredFileSink(output) if output is not None else typer.get_binary_stream("stdout")
            try:
                conversion = convert_stream(reader, writer)
            except MalformedInput as exc:
                console.print(f"[red]Malformed hadolint input in {source}: {exc}[/]")
                debug.log("error", {"stage": "parse", "message": str(exc)})
                debug.log("exit", {"code": 2})
                raise typer.Exit(code=2) from exc
            except WriteError as exc:
                console.print(f"[red]{exc}[/]")
                debug.log("error", {"stage": "write", "message": str(exc)})
                debug.log("exit", {"code": 2})
                raise typer.Exit(code=2) from exc
            finally:
                if input is not None:
                    reader.close()
                if output is not None:
                    writer.close()

            diagnostics = conversion.diagnostics
            rule_ids = conversion.rule_ids
            debug.log("parsed", {
                "count": len(diagnostics),
                "diagnostics": [diag.model_dump(mode="json") for diag in diagnostics],
            })
            debug.log("rules", {"ids": rule_ids})

            if summary:
                console.print(_summary_table(diagnostics))

            console.log(
                f"Converted {len(diagnostics)} diagnostic(s) across {len(rule_ids)} rule(s) to {sink}"
            )
            debug.log("exit", {"code": 0})

        finally:
            debug.close()


class _DeferredFileSink:
    """Binary sink that only creates ``path`` once something is written to it."""

    def __init__(self, path: Path):
        self._path = path
        self._handle: Optional[BinaryIO] = None

    def write(self, data: bytes) -> int:
        if self._handle is None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self._path.open("wb")
        return self._handle.write(data)

    def flush(self) -> None:
        if self._handle is not None:
            self._handle.flush()

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None


@contextmanager
def _verbose_logging(enabled: bool) -> Iterator[None]:
    if not enabled:
        yield
        return
    handler = RichHandler(console=console, show_path=False)
    loggers = [logging.getLogger(name) for name in _LOGGER_NAMESPACES]
    previous = [logger.level for logger in loggers]
    for logger in loggers:
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
    try:
        yield
    finally:
        for logger, level in zip(loggers, previous):
            logger.removeHandler(handler)
            logger.setLevel(level)


def _summary_table(diagnostics: List[Diagnostic]) -> Table:
    table = Table(title="hadolint findings")
    table.add_column("Rule")
    table.add_column("Level")
    table.add_column("Location")
    table.add_column("Message")
    for diag in diagnostics:
        location = f"{diag.file}:{diag.line}"
        if diag.column is not None:
            location = f"{location}:{diag.column}"
        table.add_row(diag.rule_id, level_for(diag.severity), location, diag.message)
    return table


if __name__ == "__main__":  # pragma: no cover - manual execution
    app()
