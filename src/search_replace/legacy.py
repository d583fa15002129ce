"""
Regex length-repair strategy.

Replaces across the whole line first, then recomputes the length prefix of
every token a replacement touched. Faster than the token walk on lines with
many tokens, but a token whose content contains ``\\";`` is cut short by the
non-greedy match, so the token strategy remains the default.
"""

from __future__ import annotations

import re
from typing import Iterable

from search_replace.escape import unescaped_length
from search_replace.models import Replacement

_TOKEN_SEARCH_RE = re.compile(rb's:\d+:\\".*?\\";')
_TOKEN_CONTENT_RE = re.compile(rb's:\d+:\\"(.*?)\\";')


def fix_token(token: bytes) -> bytes:
    """
    Rebuild a single token with a length prefix matching its content.

    Input that does not look like a token is returned unchanged.
    """
    match = _TOKEN_CONTENT_RE.fullmatch(token)
    if match is None:
        return token

    content = match.group(1)
    return b's:%d:\\"%s\\";' % (unescaped_length(content), content)


def fix_serialized_lengths(line: bytes) -> bytes:
    """Recompute the length prefix of every token in ``line``."""
    return _TOKEN_SEARCH_RE.sub(lambda m: fix_token(m.group(0)), line)


def replace_and_fix(line: bytes, replacements: Iterable[Replacement]) -> bytes:
    """Apply each replacement globally, then repair the tokens containing its output."""
    for replacement in replacements:
        if replacement.from_ not in line:
            continue

        line = line.replace(replacement.from_, replacement.to)

        def _fix(match: re.Match, to: bytes = replacement.to) -> bytes:
            token = match.group(0)
            # Only tokens that received this replacement are touched
            if to not in token:
                return token
            return fix_token(token)

        line = _TOKEN_SEARCH_RE.sub(_fix, line)
    return line
