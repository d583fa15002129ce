"""Command-line interface for search_replace."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import BinaryIO, NoReturn, Optional, Sequence

import search_replace as sr
from search_replace.exceptions import ConfigurationError
from search_replace.models import ExecutorKind, PipelineReport, Strategy
from search_replace.pipeline import DEFAULT_LOOKAHEAD, READ_BUFFER_SIZE, OrderedPipeline
from search_replace.replacements import ReplacementSet

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser whose usage errors exit 1, like every other usage error."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="search-replace",
        description=(
            "Replace strings in a database dump read from stdin, fixing the length "
            "of serialized strings whose content changed. Output goes to stdout."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {sr.__version__}")
    parser.add_argument(
        "pairs",
        nargs="*",
        metavar="FROM TO",
        help="Replacement pairs, applied in order",
    )
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in Strategy],
        default=Strategy.TOKEN.value,
        help="token: escape-aware token walk (default); regex: legacy whole-line repair",
    )
    parser.add_argument(
        "--executor",
        choices=[e.value for e in ExecutorKind],
        default=ExecutorKind.THREAD.value,
        help=(
            "Worker pool used to rewrite lines. thread (default) starts fast and suits "
            "small dumps, but rewriting is CPU-bound and runs on one core; process uses "
            "every core at the cost of pickling each line, and is faster on large dumps"
        ),
    )
    parser.add_argument("--workers", type=_positive_int, default=None, help="Worker pool size")
    parser.add_argument(
        "--lookahead",
        type=_positive_int,
        default=DEFAULT_LOOKAHEAD,
        help="Maximum number of lines in flight",
    )
    parser.add_argument("--stats", action="store_true", help="Print a summary table on stderr")
    parser.add_argument("--json", action="store_true", help="Print the summary as JSON on stderr")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def _print_rich_report(report: PipelineReport) -> None:
    from rich.console import Console
    from rich.panel import Panel
    from rich.table import Table

    console = Console(stderr=True)

    border = "red" if report.read_error else ("yellow" if report.malformed_lines else "green")

    table = Table(title="Search-Replace Summary", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Strategy", report.strategy.value)
    table.add_row("Lines", f"{report.lines:,}")
    table.add_row("Tokens seen", f"{report.tokens_seen:,}")
    table.add_row("Tokens rewritten", f"{report.tokens_rewritten:,}")
    table.add_row("Malformed lines", f"{report.malformed_lines:,}")
    table.add_row("Bytes in", f"{report.bytes_in:,}")
    table.add_row("Bytes out", f"{report.bytes_out:,}")

    console.print(Panel(table, border_style=border))

    if report.read_error:
        console.print(Panel(report.read_error, title="Read Error", border_style="red"))


def _open_stdin() -> BinaryIO:
    return open(sys.stdin.fileno(), "rb", buffering=READ_BUFFER_SIZE, closefd=False)


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        replacements = ReplacementSet.from_args(args.pairs)
    except ConfigurationError as exc:
        print(f"search-replace: {exc}", file=sys.stderr)
        return exc.exit_code

    pipeline = OrderedPipeline(
        replacements,
        lookahead=args.lookahead,
        workers=args.workers,
        executor=args.executor,
        strategy=args.strategy,
    )

    source = stdin if stdin is not None else _open_stdin()
    sink = stdout if stdout is not None else sys.stdout.buffer
    report = pipeline.run(source, sink)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, sort_keys=True), file=sys.stderr)
    elif args.stats:
        _print_rich_report(report)

    if report.read_error:
        print(f"search-replace: {report.read_error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
