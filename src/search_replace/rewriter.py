"""
Line rewriter — token-aware replacement with length repair.

Per line:
  1. Walk tokens left to right. Text between tokens gets plain replacement,
     token content gets replacement plus a recomputed length prefix when it
     changed.
  2. A malformed token ends structured parsing; the rest of the line gets
     plain replacement with no length repair.
  3. A line with no tokens at all gets plain replacement as a whole.

Every byte of the input goes through the replacement set exactly once, so a
``to`` that contains its own ``from`` never compounds.

The rebuilt line is assembled from new slices; the input is never mutated.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Iterable

from search_replace.escape import unescaped_length
from search_replace.exceptions import MalformedTokenError
from search_replace.models import LineResult, Replacement, Token
from search_replace.replacements import apply_replacements
from search_replace.scanner import TERMINATOR, find_token

logger = logging.getLogger(__name__)


class RewriteState(str, Enum):
    SCANNING = "scanning"
    FALLBACK = "fallback"
    DONE = "done"


def rewrite_line(line: bytes, replacements: Iterable[Replacement]) -> bytes:
    """Rewrite one line (without its newline) and return the new bytes."""
    return rewrite_line_detailed(line, replacements).data


def rewrite_line_detailed(line: bytes, replacements: Iterable[Replacement]) -> LineResult:
    """Rewrite one line and report what the token walk saw."""
    replacements = tuple(replacements)
    result = LineResult(data=b"")
    parts: list[bytes] = []
    offset = 0
    state = RewriteState.SCANNING

    while state is RewriteState.SCANNING:
        try:
            token = find_token(line, offset)
        except MalformedTokenError as exc:
            logger.info(
                json.dumps(
                    {
                        "event": "malformed_token",
                        "offset": exc.offset,
                        "declared_length": exc.declared_length,
                        "reason": str(exc),
                    }
                )
            )
            result.malformed = True
            result.malformed_offset = exc.offset
            # Fallback pass over the verbatim remainder
            parts.append(apply_replacements(line[offset:], replacements))
            state = RewriteState.DONE
            continue

        if token is None:
            # Whole line when offset is 0, otherwise the plain tail
            parts.append(apply_replacements(line[offset:], replacements))
            state = RewriteState.FALLBACK if offset == 0 else RewriteState.DONE
            continue

        offset = _consume_token(line, offset, token, replacements, parts, result)

    result.data = b"".join(parts)
    return result


def _consume_token(
    line: bytes,
    offset: int,
    token: Token,
    replacements: tuple[Replacement, ...],
    parts: list[bytes],
    result: LineResult,
) -> int:
    """Emit the plain span before ``token`` and the token itself; return the next offset."""
    result.tokens_seen += 1
    parts.append(apply_replacements(line[offset:token.prefix_start], replacements))
    parts.append(_rewrite_token(line, token, replacements, result))
    return token.next_index


def _rewrite_token(
    line: bytes, token: Token, replacements: tuple[Replacement, ...], result: LineResult
) -> bytes:
    content = line[token.content_start:token.content_end]
    updated = apply_replacements(content, replacements)
    if updated == content:
        # Untouched tokens keep their original prefix, even a non-canonical one
        return line[token.prefix_start:token.next_index]

    result.tokens_rewritten += 1
    return b's:%d:\\"' % unescaped_length(updated) + updated + TERMINATOR
