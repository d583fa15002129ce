"""
Unit tests — scanner.py

Covers:
- Token offsets for simple, empty and escaped content
- Content containing an escaped terminator is walked past by length
- Missing prefix returns None
- Short, overlong and unterminated tokens raise MalformedTokenError
- The next structural prefix bounds the walk
"""
from __future__ import annotations

import pytest

from search_replace.exceptions import MalformedTokenError
from search_replace.scanner import PREFIX_PATTERN, TERMINATOR, find_token


class TestFindToken:

    def test_simple_token_offsets(self):
        line = rb's:21:\"http://automattic.com\";'
        token = find_token(line)
        assert token is not None
        assert token.prefix_start == 0
        assert token.declared_length == 21
        assert line[token.length_start:token.length_end] == b"21"
        assert line[token.content_start:token.content_end] == b"http://automattic.com"
        assert token.next_index == len(line)

    def test_empty_content(self):
        line = rb's:0:\"\";'
        token = find_token(line)
        assert token.content_start == token.content_end
        assert token.next_index == len(line)

    def test_token_inside_sql(self):
        line = rb"('s:5:\"hello\";')"
        token = find_token(line)
        assert token.prefix_start == 2
        assert line[token.content_start:token.content_end] == b"hello"
        assert line[token.next_index:] == b"')"

    def test_start_offset_skips_earlier_tokens(self):
        line = rb's:1:\"a\";s:1:\"b\";'
        first = find_token(line)
        second = find_token(line, first.next_index)
        assert line[second.content_start:second.content_end] == b"b"

    def test_no_prefix_returns_none(self):
        assert find_token(b"http://automattic.com") is None

    def test_no_prefix_after_start_returns_none(self):
        line = rb's:1:\"a\"; trailing'
        token = find_token(line)
        assert find_token(line, token.next_index) is None

    def test_escaped_content_walked_by_unescaped_length(self):
        line = rb's:24:\"https:\\/\\/automattic.com\";'
        token = find_token(line)
        assert line[token.content_start:token.content_end] == rb"https:\\/\\/automattic.com"

    def test_escaped_terminator_inside_content(self):
        """The declared length decides where content ends, not the first terminator."""
        line = rb's:18:\"\\a\\b\\c\\d\\e\\f\\g\\h\";\";'
        token = find_token(line)
        assert line[token.content_start:token.content_end] == rb'\\a\\b\\c\\d\\e\\f\\g\\h\";'
        assert token.next_index == len(line)

    def test_css_with_quotes_and_unicode(self):
        line = (
            rb's:29:\"body:after{ content: \"'
            + "▼".encode("utf-8")
            + rb'\"; }\";'
        )
        token = find_token(line)
        assert token.next_index == len(line)

    def test_multibyte_content(self):
        line = 's:15:\\"http://🖖.com\\";'.encode("utf-8")
        token = find_token(line)
        assert token.content_end - token.content_start == 15


class TestMalformedTokens:

    def test_declared_length_too_long(self):
        line = rb"('s:21:\"https://a8c.com\";')"
        with pytest.raises(MalformedTokenError) as exc_info:
            find_token(line)
        assert exc_info.value.offset == 2
        assert exc_info.value.declared_length == 21

    def test_declared_length_too_short(self):
        with pytest.raises(MalformedTokenError, match="not terminated"):
            find_token(rb's:3:\"hello\";')

    def test_overrun_by_unrecognized_escape(self):
        """An unrecognized escape counts two bytes and can overshoot."""
        with pytest.raises(MalformedTokenError, match="overruns"):
            find_token(rb's:1:\"\a\";')

    def test_missing_terminator(self):
        with pytest.raises(MalformedTokenError):
            find_token(rb's:5:\"hello')

    def test_next_prefix_bounds_the_walk(self):
        """A bad length must not consume the following token."""
        line = rb's:30:\"short\";s:5:\"hello\";'
        with pytest.raises(MalformedTokenError):
            find_token(line)

    def test_empty_declared_nonzero(self):
        with pytest.raises(MalformedTokenError):
            find_token(rb's:10:\"\";')


class TestPatterns:

    def test_prefix_requires_escaped_quote(self):
        assert PREFIX_PATTERN.search(b's:5:"hello";') is None

    def test_prefix_captures_digits(self):
        match = PREFIX_PATTERN.search(rb'a:1:{s:123:\"')
        assert match.group(1) == b"123"

    def test_terminator_bytes(self):
        assert TERMINATOR == b'\\";'
