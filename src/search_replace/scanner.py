"""
Serialized string token scanner.

Finds ``s:<len>:\\"<content>\\";`` tokens in a dump line and walks the
content with the escape codec until the declared (unescaped) length is
consumed. The walk never runs past the next structural prefix on the line,
so one corrupt length cannot swallow the rest of the line.
"""

from __future__ import annotations

import re
from typing import Optional

from search_replace.escape import BACKSLASH, decode_escape_pair
from search_replace.exceptions import MalformedTokenError
from search_replace.models import Token

PREFIX_PATTERN = re.compile(rb's:(\d+):\\"')
TERMINATOR = b'\\";'


def find_token(line: bytes, start: int = 0) -> Optional[Token]:
    """
    Locate and walk the next token at or after ``start``.

    Returns:
        The Token, or None when no structural prefix occurs in the span.

    Raises:
        MalformedTokenError: A prefix was found but its content does not end
            with a terminator exactly at the declared length.
    """
    match = PREFIX_PATTERN.search(line, start)
    if match is None:
        return None
    return scan_token(line, match)


def scan_token(line: bytes, match: re.Match) -> Token:
    """Walk the content of the token whose prefix is ``match``."""
    declared = int(match.group(1))
    content_start = match.end()

    # The next prefix (if any) caps how far this token may extend
    upper = PREFIX_PATTERN.search(line, content_start)
    bound = upper.start() if upper else len(line)

    count = 0
    pos = content_start
    while count < declared:
        if pos >= bound:
            raise MalformedTokenError(
                f"Token at byte {match.start()} declares {declared} bytes "
                f"but only {count} are available",
                offset=match.start(),
                declared_length=declared,
            )
        if line[pos] == BACKSLASH and pos + 1 < bound:
            count += len(decode_escape_pair(line[pos], line[pos + 1]))
            pos += 2
        else:
            count += 1
            pos += 1

    if count > declared:
        raise MalformedTokenError(
            f"Token at byte {match.start()} overruns its declared length {declared}",
            offset=match.start(),
            declared_length=declared,
        )

    terminator_end = pos + len(TERMINATOR)
    if terminator_end > bound or line[pos:terminator_end] != TERMINATOR:
        raise MalformedTokenError(
            f"Token at byte {match.start()} is not terminated after {declared} bytes",
            offset=match.start(),
            declared_length=declared,
        )

    return Token(
        prefix_start=match.start(),
        length_start=match.start(1),
        length_end=match.end(1),
        content_start=content_start,
        content_end=pos,
        next_index=terminator_end,
        declared_length=declared,
    )
