"""
search_replace - streaming search/replace for database dumps.

Rewrites a line-oriented dump in order while repairing the length prefix of
serialized strings (``s:<len>:\\"...\\";``) whose content changed.

Usage:
    from search_replace import ReplacementSet, rewrite_line
    replacements = ReplacementSet.from_pairs([("http://a.com", "https://a.com")])
    rewrite_line(line, replacements)
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from search_replace.escape import decode_escape_pair, unescaped_length
from search_replace.exceptions import (
    ConfigurationError,
    InvalidFromError,
    InvalidReplacementError,
    InvalidToError,
    MalformedTokenError,
    PipelineError,
    SearchReplaceError,
    UsageError,
)
from search_replace.legacy import fix_serialized_lengths, fix_token, replace_and_fix
from search_replace.models import (
    ExecutorKind,
    LineResult,
    PipelineReport,
    Replacement,
    Strategy,
    Token,
)
from search_replace.pipeline import OrderedPipeline, run_pipeline
from search_replace.replacements import ReplacementSet, apply_replacements
from search_replace.rewriter import rewrite_line, rewrite_line_detailed
from search_replace.scanner import find_token

try:
    __version__ = version("search-replace")
except PackageNotFoundError:
    __version__ = "0.0.0+local"


__all__ = [
    "__version__",
    "rewrite_line",
    "rewrite_line_detailed",
    "find_token",
    "decode_escape_pair",
    "unescaped_length",
    "apply_replacements",
    "fix_token",
    "fix_serialized_lengths",
    "replace_and_fix",
    "run_pipeline",
    "OrderedPipeline",
    "Replacement",
    "ReplacementSet",
    "Token",
    "LineResult",
    "PipelineReport",
    "Strategy",
    "ExecutorKind",
    "SearchReplaceError",
    "ConfigurationError",
    "UsageError",
    "InvalidReplacementError",
    "InvalidFromError",
    "InvalidToError",
    "MalformedTokenError",
    "PipelineError",
]
