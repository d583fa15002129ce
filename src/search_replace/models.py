"""Data models shared across search_replace."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from search_replace.exceptions import InvalidReplacementError


class Strategy(str, Enum):
    TOKEN = "token"  # escape-aware token walk, then fallback pass
    REGEX = "regex"  # whole-line replace, then regex length repair


class ExecutorKind(str, Enum):
    THREAD = "thread"
    PROCESS = "process"


@dataclass(frozen=True)
class Replacement:
    from_: bytes
    to: bytes

    def __post_init__(self) -> None:
        if not self.from_:
            raise InvalidReplacementError("Replacement <from> must not be empty")


@dataclass(frozen=True)
class Token:
    """
    A recognized ``s:<len>:\\"<content>\\";`` span within a line.

    All offsets index the raw (escaped) line. ``declared_length`` is in
    unescaped bytes.
    """

    prefix_start: int
    length_start: int
    length_end: int
    content_start: int
    content_end: int
    next_index: int
    declared_length: int


@dataclass
class LineResult:
    data: bytes
    tokens_seen: int = 0
    tokens_rewritten: int = 0
    malformed: bool = False
    malformed_offset: Optional[int] = None


@dataclass
class PipelineReport:
    lines: int = 0
    tokens_seen: int = 0
    tokens_rewritten: int = 0
    malformed_lines: int = 0
    bytes_in: int = 0
    bytes_out: int = 0
    strategy: Strategy = Strategy.TOKEN
    read_error: Optional[str] = None

    def record(self, raw: bytes, result: LineResult) -> None:
        self.lines += 1
        self.bytes_in += len(raw)
        self.bytes_out += len(result.data)
        self.tokens_seen += result.tokens_seen
        self.tokens_rewritten += result.tokens_rewritten
        if result.malformed:
            self.malformed_lines += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "lines": self.lines,
            "tokens_seen": self.tokens_seen,
            "tokens_rewritten": self.tokens_rewritten,
            "malformed_lines": self.malformed_lines,
            "bytes_in": self.bytes_in,
            "bytes_out": self.bytes_out,
            "strategy": self.strategy.value,
            "read_error": self.read_error,
        }
