# File: repogen/tags.py
"""
repogen - Struct Tag Parser
============================

Go struct tags follow the ``key:"value" key2:"value2"`` convention.  The
tokenizer below walks that grammar pair by pair, so values may contain
whitespace and escaped quotes, and any malformed input is reported with the
offset where scanning stopped.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Tuple

from repogen.exceptions import TagSyntaxError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("repogen.tags")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

# key:"value"; keys are runs of non-space, non-quote, non-colon characters
_PAIR_RE: re.Pattern[str] = re.compile(r'([^\s:"]+):"((?:[^"\\]|\\.)*)"')
_KEY_RE: re.Pattern[str] = re.compile(r'[^\s:"]*')
_WHITESPACE_RE: re.Pattern[str] = re.compile(r"\s*")
_ESCAPE_RE: re.Pattern[str] = re.compile(r"\\(.)", re.DOTALL)

_GO_ESCAPES: Dict[str, str] = {"n": "\n", "t": "\t", "r": "\r"}


def _unescape(value: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _GO_ESCAPES.get(m.group(1), m.group(1)), value)


def _diagnose(tag: str, pos: int) -> Tuple[int, str]:
    """Explain why no key:"value" pair starts at *pos*."""
    key_match = _KEY_RE.match(tag, pos)
    key_end: int = key_match.end() if key_match else pos
    key: str = tag[pos:key_end]

    if not key:
        return pos, "expected a tag key"
    if key_end >= len(tag) or tag[key_end] != ":":
        return key_end, f"expected ':' after key {key!r}"
    if key_end + 1 >= len(tag) or tag[key_end + 1] != '"':
        return key_end + 1, f"expected '\"' to open the value of {key!r}"
    return len(tag), f"unterminated value for key {key!r}"


def parse_tag(tag: str) -> Dict[str, str]:
    """
    Parse the content of a struct tag into a ``key → value`` mapping.

    Args:
        tag: Tag text without the surrounding backticks,
             e.g. ``column:"id" primary:"true"``.

    Returns:
        Mapping in the order the keys appear.  Blank input yields ``{}``.

    Raises:
        TagSyntaxError: On a malformed pair or a repeated key.
    """
    result: Dict[str, str] = {}
    pos: int = _WHITESPACE_RE.match(tag, 0).end()  # type: ignore[union-attr]

    while pos < len(tag):
        match = _PAIR_RE.match(tag, pos)
        if match is None:
            offset, reason = _diagnose(tag, pos)
            raise TagSyntaxError(tag, offset, reason)

        key: str = match.group(1)
        if key in result:
            raise TagSyntaxError(tag, pos, f"duplicate key {key!r}")
        result[key] = _unescape(match.group(2))

        pos = match.end()
        if pos < len(tag) and not tag[pos].isspace():
            raise TagSyntaxError(
                tag, pos, f"expected whitespace after the value of {key!r}"
            )
        pos = _WHITESPACE_RE.match(tag, pos).end()  # type: ignore[union-attr]

    logger.debug("Parsed tag %r → %s", tag, result)
    return result


def unquote_tag_literal(literal: str) -> str:
    """
    Strip the Go string-literal punctuation around a tag.

    Raw literals (```...```) are returned verbatim; interpreted literals
    (``"..."``) also have their escape sequences resolved.
    """
    if len(literal) >= 2 and literal[0] == literal[-1] == "`":
        return literal[1:-1]
    if len(literal) >= 2 and literal[0] == literal[-1] == '"':
        return _unescape(literal[1:-1])
    raise TagSyntaxError(literal, 0, "tag is not a Go string literal")


__all__: List[str] = [
    "parse_tag",
    "unquote_tag_literal",
]
