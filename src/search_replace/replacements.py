"""
Replacement set and command-line pair validation.

A ReplacementSet is built once at startup and shared read-only by every
worker. Pairs are always applied in the order given, each operating on the
output of the previous one.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, Sequence, Union

from search_replace.exceptions import InvalidFromError, InvalidToError, UsageError
from search_replace.models import Replacement

MIN_FROM_LENGTH = 4
MIN_TO_LENGTH = 2

# Values must stay within a URL/hostname-ish alphabet
_INPUT_RE = re.compile(r"[A-Za-z0-9_\-\.:/]+")
# ...and must not look like serialized structure (s:12:, a:4:, i:0: ...)
_STRUCTURE_RE = re.compile(r"\w:\d+:")

PairValue = Union[str, bytes]


def _to_bytes(value: PairValue) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else bytes(value)


class ReplacementSet:
    """Immutable, ordered collection of Replacement pairs."""

    __slots__ = ("_items",)

    def __init__(self, replacements: Iterable[Replacement] = ()) -> None:
        self._items: tuple[Replacement, ...] = tuple(replacements)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[PairValue, PairValue]]) -> "ReplacementSet":
        return cls(Replacement(_to_bytes(src), _to_bytes(dst)) for src, dst in pairs)

    @classmethod
    def from_args(cls, args: Sequence[str]) -> "ReplacementSet":
        """Validate a flat ``[from, to, from, to, ...]`` argument list."""
        return cls.from_pairs(parse_replacement_args(args))

    def __iter__(self) -> Iterator[Replacement]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> Replacement:
        return self._items[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReplacementSet):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{r.from_!r}->{r.to!r}" for r in self._items)
        return f"ReplacementSet({pairs})"


def apply_replacements(data: bytes, replacements: Iterable[Replacement]) -> bytes:
    """Apply every replacement to ``data`` in order (plain substring replace)."""
    for replacement in replacements:
        data = data.replace(replacement.from_, replacement.to)
    return data


def valid_input(value: str, min_length: int) -> bool:
    """Check a single command-line replacement value."""
    if len(value) < min_length:
        return False
    if not _INPUT_RE.fullmatch(value):
        return False
    if _STRUCTURE_RE.search(value):
        return False
    return True


def parse_replacement_args(args: Sequence[str]) -> list[tuple[str, str]]:
    """
    Split and validate a flat list of replacement arguments.

    Raises:
        UsageError: No arguments, or an odd number of them.
        InvalidFromError: A <from> value failed validation.
        InvalidToError: A <to> value failed validation.
    """
    if not args:
        raise UsageError("Usage: search-replace <from> <to> [<from> <to> ...]")
    if len(args) % 2:
        raise UsageError("All replacements must have a <from> and <to> value")

    pairs: list[tuple[str, str]] = []
    for i in range(0, len(args), 2):
        src, dst = args[i], args[i + 1]
        if not valid_input(src, MIN_FROM_LENGTH):
            raise InvalidFromError(
                f"Invalid <from> value {src!r}: minimum length is {MIN_FROM_LENGTH}, "
                f"allowed characters are A-Z a-z 0-9 _ - . : /"
            )
        if not valid_input(dst, MIN_TO_LENGTH):
            raise InvalidToError(
                f"Invalid <to> value {dst!r}: minimum length is {MIN_TO_LENGTH}, "
                f"allowed characters are A-Z a-z 0-9 _ - . : /"
            )
        pairs.append((src, dst))
    return pairs
