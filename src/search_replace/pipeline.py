"""
Ordered concurrent pipeline.

    reader thread ──submit──▶ executor (thread/process pool)
          │
          └──(raw, future)──▶ bounded FIFO queue ──▶ output loop (caller's thread)

Lines are rewritten concurrently and may finish in any order; the output
loop blocks on the future at the head of the queue, so line k is written
only after lines 1..k-1. The queue's maxsize caps how many lines are in
flight at once.
"""

from __future__ import annotations

import json
import logging
import queue
import threading
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from typing import BinaryIO, Iterator, Optional, Union

from search_replace.exceptions import PipelineError
from search_replace.legacy import replace_and_fix
from search_replace.models import ExecutorKind, LineResult, PipelineReport, Strategy
from search_replace.replacements import ReplacementSet
from search_replace.rewriter import rewrite_line_detailed

logger = logging.getLogger(__name__)

DEFAULT_LOOKAHEAD = 10
READ_BUFFER_SIZE = 2 * 1024 * 1024
_PUT_POLL_SECONDS = 0.1

_END = object()


def iter_lines(stream: BinaryIO) -> Iterator[bytes]:
    """Yield newline-terminated lines; the last line may lack its newline."""
    while True:
        line = stream.readline()
        if not line:
            return
        yield line


def split_newline(line: bytes) -> tuple[bytes, bytes]:
    if line.endswith(b"\n"):
        return line[:-1], b"\n"
    return line, b""


def process_line(
    line: bytes, replacements: ReplacementSet, strategy: Strategy = Strategy.TOKEN
) -> LineResult:
    """Worker entry point: rewrite one raw line, preserving its newline."""
    body, newline = split_newline(line)
    if strategy == Strategy.REGEX:
        result = LineResult(data=replace_and_fix(body, replacements))
    else:
        result = rewrite_line_detailed(body, replacements)
    result.data += newline
    return result


class OrderedPipeline:
    """Rewrites a line stream concurrently while preserving line order."""

    def __init__(
        self,
        replacements: ReplacementSet,
        *,
        lookahead: int = DEFAULT_LOOKAHEAD,
        workers: Optional[int] = None,
        executor: Union[ExecutorKind, str] = ExecutorKind.THREAD,
        strategy: Union[Strategy, str] = Strategy.TOKEN,
    ) -> None:
        if lookahead < 1:
            raise PipelineError(f"lookahead must be at least 1, got {lookahead}")
        if workers is not None and workers < 1:
            raise PipelineError(f"workers must be at least 1, got {workers}")
        self.replacements = replacements
        self.lookahead = lookahead
        self.workers = workers
        self.executor = ExecutorKind(executor)
        self.strategy = Strategy(strategy)

    def _make_executor(self) -> Executor:
        pool_cls = ThreadPoolExecutor if self.executor == ExecutorKind.THREAD else ProcessPoolExecutor
        return pool_cls(max_workers=self.workers)

    def run(self, source: BinaryIO, sink: BinaryIO) -> PipelineReport:
        """
        Rewrite every line of ``source`` into ``sink``.

        A read error stops reading but every line already dispatched is
        still written; the error is recorded on the returned report.
        Exceptions raised while rewriting a line propagate to the caller.
        """
        report = PipelineReport(strategy=self.strategy)
        slots: queue.Queue = queue.Queue(maxsize=self.lookahead)
        stop = threading.Event()

        with self._make_executor() as pool:
            reader = threading.Thread(
                target=self._read,
                args=(source, pool, slots, stop, report),
                name="search-replace-reader",
                daemon=True,
            )
            reader.start()
            try:
                while True:
                    slot = slots.get()
                    if slot is _END:
                        break
                    raw, future = slot
                    result = future.result()
                    sink.write(result.data)
                    report.record(raw, result)
            finally:
                stop.set()
                reader.join(timeout=1.0)
                sink.flush()

        logger.info(json.dumps({"event": "pipeline_complete", **report.to_dict()}))
        return report

    def _read(
        self,
        source: BinaryIO,
        pool: Executor,
        slots: queue.Queue,
        stop: threading.Event,
        report: PipelineReport,
    ) -> None:
        try:
            for raw in iter_lines(source):
                if stop.is_set():
                    return
                future = pool.submit(process_line, raw, self.replacements, self.strategy)
                _put(slots, (raw, future), stop)
        except Exception as e:
            message = str(e) or type(e).__name__
            report.read_error = message
            logger.error(json.dumps({"event": "read_error", "error": message}))
        finally:
            _put(slots, _END, stop)


def _put(slots: queue.Queue, item: object, stop: threading.Event) -> None:
    """Block until ``item`` is queued, giving up once the output loop has stopped."""
    while not stop.is_set():
        try:
            slots.put(item, timeout=_PUT_POLL_SECONDS)
            return
        except queue.Full:
            continue


def run_pipeline(
    source: BinaryIO, sink: BinaryIO, replacements: ReplacementSet, **options
) -> PipelineReport:
    """Convenience wrapper around ``OrderedPipeline(replacements, **options).run``."""
    return OrderedPipeline(replacements, **options).run(source, sink)
