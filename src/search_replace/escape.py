"""
Escape codec for dump-tool escaped byte spans.

Database dump tools write string values with backslash escapes (``\\n``,
``\\"``, ``\\\\`` ...). A serialized string's length prefix counts the bytes
*after* those escapes are undone, so every length computation in this package
goes through :func:`unescaped_length` rather than ``len()``.

Unrecognized escapes (``\\a``, ``\\/`` ...) are not errors: both bytes are
passed through and count as two logical bytes.
"""

from __future__ import annotations

BACKSLASH = 0x5C

# Second byte of a two-byte escape -> the literal byte it stands for
ESCAPE_CODES: dict[int, int] = {
    BACKSLASH: BACKSLASH,
    ord("'"): ord("'"),
    ord('"'): ord('"'),
    ord("n"): 0x0A,
    ord("r"): 0x0D,
    ord("t"): 0x09,
    ord("b"): 0x08,
    ord("f"): 0x0C,
    ord("0"): 0x00,
}


def decode_escape_pair(byte_a: int, byte_b: int) -> bytes:
    """
    Decode a raw two-byte pair.

    Args:
        byte_a: First raw byte (an escape only when it is a backslash).
        byte_b: Second raw byte.

    Returns:
        A single literal byte when the pair is a recognized escape, otherwise
        both bytes unchanged.
    """
    if byte_a == BACKSLASH:
        literal = ESCAPE_CODES.get(byte_b)
        if literal is not None:
            return bytes((literal,))
    return bytes((byte_a, byte_b))


def unescaped_length(span: bytes) -> int:
    """Return the logical byte count of ``span`` once escapes are undone."""
    count = 0
    i = 0
    end = len(span)
    while i < end:
        if span[i] == BACKSLASH and i + 1 < end:
            count += len(decode_escape_pair(span[i], span[i + 1]))
            i += 2
        else:
            count += 1
            i += 1
    return count


def unescape(span: bytes) -> bytes:
    """Return ``span`` with every recognized escape resolved to its literal byte."""
    out = bytearray()
    i = 0
    end = len(span)
    while i < end:
        if span[i] == BACKSLASH and i + 1 < end:
            out += decode_escape_pair(span[i], span[i + 1])
            i += 2
        else:
            out.append(span[i])
            i += 1
    return bytes(out)
