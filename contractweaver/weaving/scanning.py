"""Token scanning helpers shared by the marking and injection passes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..analyzers.tokens import DOUBLE_COLON, NAME, OBJECT_OPERATOR, TRIVIA, Token

STRUCTURE_KEYWORDS = ("class", "trait")
FUNCTION_KEYWORD = "function"


@dataclass(frozen=True)
class Hook:
    """Token span from a declaration keyword up to and including its opening brace."""

    tokens: Tuple[Token, ...]

    @property
    def text(self) -> str:
        return "".join(token.text for token in self.tokens)

    @property
    def brace(self) -> Token:
        return self.tokens[-1]

    @property
    def end(self) -> int:
        return self.brace.end


def next_significant(tokens: Sequence[Token], index: int) -> Optional[int]:
    """Return the index of the first non-trivia token after ``index``."""
    for position in range(index + 1, len(tokens)):
        if tokens[position].kind not in TRIVIA:
            return position
    return None


def previous_significant(tokens: Sequence[Token], index: int) -> Optional[Token]:
    for position in range(index - 1, -1, -1):
        if tokens[position].kind not in TRIVIA:
            return tokens[position]
    return None


def is_member_access(tokens: Sequence[Token], index: int) -> bool:
    previous = previous_significant(tokens, index)
    return previous is not None and previous.kind in (DOUBLE_COLON, OBJECT_OPERATOR)


def structure_name_at(tokens: Sequence[Token], index: int) -> Optional[str]:
    """Return the declared name when ``tokens[index]`` opens a named class or trait."""
    token = tokens[index]
    if not token.is_keyword(*STRUCTURE_KEYWORDS) or is_member_access(tokens, index):
        return None
    previous = previous_significant(tokens, index)
    if previous is not None and previous.is_keyword("new"):
        return None
    name_index = next_significant(tokens, index)
    if name_index is None or tokens[name_index].kind != NAME:
        return None
    return tokens[name_index].text


def function_name_at(tokens: Sequence[Token], index: int) -> Optional[str]:
    """Return the declared name when ``tokens[index]`` opens a named function."""
    token = tokens[index]
    if not token.is_keyword(FUNCTION_KEYWORD) or is_member_access(tokens, index):
        return None
    name_index = next_significant(tokens, index)
    if name_index is not None and tokens[name_index].is_raw("&"):
        name_index = next_significant(tokens, name_index)
    if name_index is None or tokens[name_index].kind != NAME:
        return None
    return tokens[name_index].text


def _header_terminator(tokens: Sequence[Token], index: int) -> Optional[int]:
    for position in range(index, len(tokens)):
        if tokens[position].is_raw(";") or tokens[position].is_raw("{"):
            return position
    return None


def opens_declaration(tokens: Sequence[Token], index: int) -> bool:
    """Return whether ``tokens[index]`` is a class, trait or function keyword."""
    return tokens[index].is_keyword(FUNCTION_KEYWORD, *STRUCTURE_KEYWORDS) and not is_member_access(
        tokens, index
    )


def header_end(tokens: Sequence[Token], index: int) -> Optional[int]:
    """Return the offset after the ``{`` or ``;`` ending the header at ``tokens[index]``.

    None means the header is still open at the end of the token sequence.
    """
    position = _header_terminator(tokens, index)
    return None if position is None else tokens[position].end


def collect_hook(tokens: Sequence[Token], index: int) -> Optional[Hook]:
    """Collect the hook starting at ``tokens[index]``.

    Returns None for bodiless declarations (a ``;`` comes first) and when the
    opening brace lies beyond the end of the token sequence.
    """
    position = _header_terminator(tokens, index)
    if position is None or tokens[position].is_raw(";"):
        return None
    return Hook(tuple(tokens[index : position + 1]))


class Splice:
    """Collects edits at offsets of a text and applies them in one go.

    Edits at the same offset keep the order in which they were added. Replaced
    spans must not overlap.
    """

    def __init__(self) -> None:
        self._edits: List[Tuple[int, int, int, str]] = []

    def insert(self, offset: int, text: str) -> None:
        self._edits.append((offset, len(self._edits), offset, text))

    def replace(self, start: int, end: int, text: str) -> None:
        self._edits.append((start, len(self._edits), end, text))

    def __len__(self) -> int:
        return len(self._edits)

    def apply(self, text: str, offset: int = 0) -> str:
        """Apply the edits to ``text``, a slice of the edited text beginning at ``offset``."""
        if not self._edits:
            return text
        parts: List[str] = []
        cursor = 0
        for start, _, end, replacement in sorted(self._edits):
            start, end = start - offset, end - offset
            parts.append(text[cursor:start])
            parts.append(replacement)
            cursor = max(cursor, end)
        parts.append(text[cursor:])
        return "".join(parts)


__all__ = [
    "FUNCTION_KEYWORD",
    "Hook",
    "STRUCTURE_KEYWORDS",
    "Splice",
    "collect_hook",
    "function_name_at",
    "header_end",
    "is_member_access",
    "next_significant",
    "opens_declaration",
    "previous_significant",
    "structure_name_at",
]
