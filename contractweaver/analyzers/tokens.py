"""Flat PHP token sequences read off tree-sitter parse trees.

The weaving passes only need a linear view of the source: where keywords,
names and braces sit, and which spans are comments, strings or inline HTML.
Tokens are the leaves of the tree-sitter parse tree, with comment, string,
heredoc and variable nodes kept whole and the gaps between leaves turned into
whitespace tokens, so the token texts always concatenate back to the input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .tree_sitter import php_parser

INLINE_HTML = "inline_html"
OPEN_TAG = "open_tag"
CLOSE_TAG = "close_tag"
WHITESPACE = "whitespace"
COMMENT = "comment"
STRING = "string"
VARIABLE = "variable"
NAME = "name"
NUMBER = "number"
DOUBLE_COLON = "double_colon"
OBJECT_OPERATOR = "object_operator"
RAW = "raw"

TRIVIA = frozenset({WHITESPACE, COMMENT})

# Nodes emitted as one token without descending into their children.
_WHOLE_NODES = {
    "comment": COMMENT,
    "string": STRING,
    "encapsed_string": STRING,
    "heredoc": STRING,
    "nowdoc": STRING,
    "shell_command_expression": STRING,
    "variable_name": VARIABLE,
    "php_tag": OPEN_TAG,
    "php_end_tag": CLOSE_TAG,
    "text": INLINE_HTML,
    "integer": NUMBER,
    "float": NUMBER,
}
_LEAF_KINDS = {
    "::": DOUBLE_COLON,
    "->": OBJECT_OPERATOR,
    "?->": OBJECT_OPERATOR,
    "?>": CLOSE_TAG,
}


@dataclass(frozen=True)
class Token:
    """A token with its kind, exact text and character offset in the source."""

    kind: str
    text: str
    start: int

    @property
    def end(self) -> int:
        return self.start + len(self.text)

    def is_raw(self, char: str) -> bool:
        return self.kind == RAW and self.text == char

    def is_keyword(self, *words: str) -> bool:
        return self.kind == NAME and self.text.lower() in words


@dataclass(frozen=True)
class TokenStream:
    """Tokens of one text plus the spans tree-sitter could not parse.

    ``faults`` holds ``(start, end)`` character spans of ``ERROR`` nodes and
    zero-width spans where tree-sitter recovered by assuming a missing token.
    Text that stops mid-comment or mid-declaration produces them at its end.
    """

    text: str
    tokens: Tuple[Token, ...]
    faults: Tuple[Tuple[int, int], ...] = ()

    def settled_until(self, offset: int) -> int:
        """Return how far past ``offset`` the parse is free of faults."""
        settled = len(self.text)
        for start, end in self.faults:
            if end > offset or start >= offset:
                settled = min(settled, max(start, offset))
        return settled


def scan(text: str) -> TokenStream:
    """Parse ``text`` as a PHP file and flatten the tree into tokens."""
    data = text.encode("utf-8")
    tree = php_parser().parse(data)
    offsets = _char_offsets(text, data)

    def position(byte_offset: int) -> int:
        return byte_offset if offsets is None else offsets[byte_offset]

    tokens: List[Token] = []
    faults: List[Tuple[int, int]] = []
    cursor = 0
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        start, end = position(node.start_byte), position(node.end_byte)
        if node.is_missing:
            faults.append((start, start))
            continue
        if node.is_error:
            faults.append((start, end))
        kind = _WHOLE_NODES.get(node.type)
        if kind is None and node.child_count:
            stack.extend(reversed(node.children))
            continue
        if end <= cursor:
            continue
        start = max(start, cursor)
        if start > cursor:
            tokens.append(_gap(text, cursor, start))
        tokens.append(Token(kind or _leaf_kind(node.type, text[start:end]), text[start:end], start))
        cursor = end

    if cursor < len(text):
        tokens.append(_gap(text, cursor, len(text)))
    return TokenStream(text=text, tokens=tuple(tokens), faults=tuple(faults))


def tokenize(text: str) -> List[Token]:
    """Return the tokens of ``text``; their texts concatenate back to ``text``."""
    return list(scan(text).tokens)


def _leaf_kind(node_type: str, text: str) -> str:
    kind = _LEAF_KINDS.get(node_type)
    if kind is not None:
        return kind
    # Keywords are anonymous leaves; they classify as names like identifiers.
    if text.isidentifier():
        return NAME
    return RAW


def _gap(text: str, start: int, end: int) -> Token:
    gap = text[start:end]
    return Token(WHITESPACE if gap.isspace() else RAW, gap, start)


def _char_offsets(text: str, data: bytes) -> Optional[List[int]]:
    """Map UTF-8 byte offsets to character offsets; None when they coincide."""
    if len(data) == len(text):
        return None
    offsets: List[int] = []
    for index, char in enumerate(text):
        offsets.extend([index] * len(char.encode("utf-8")))
    offsets.append(len(text))
    return offsets


__all__ = [
    "CLOSE_TAG",
    "COMMENT",
    "DOUBLE_COLON",
    "INLINE_HTML",
    "NAME",
    "NUMBER",
    "OBJECT_OPERATOR",
    "OPEN_TAG",
    "RAW",
    "STRING",
    "TRIVIA",
    "Token",
    "TokenStream",
    "VARIABLE",
    "WHITESPACE",
    "scan",
    "tokenize",
]
