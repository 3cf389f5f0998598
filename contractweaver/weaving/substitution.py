"""Path/identity substitution and the original path hint for relocated source."""

from __future__ import annotations

import ntpath
import posixpath
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from ..analyzers.tokens import NAME, Token, tokenize
from ..placeholders import Placeholder
from .scanning import Splice, is_member_access


@dataclass(frozen=True)
class SubstitutionRule:
    """Replaces one magic constant with a class constant holding the original value."""

    magic: str
    constant: str
    resolve: Callable[[str], str]


def _directory_of(path: str) -> str:
    module = ntpath if "\\" in path and "/" not in path else posixpath
    return module.dirname(path) or "."


def default_rules(
    dir_constant: str = "CONTRACTWEAVER_DIR_SUBSTITUTE",
    file_constant: str = "CONTRACTWEAVER_FILE_SUBSTITUTE",
) -> List[SubstitutionRule]:
    return [
        SubstitutionRule(magic="__DIR__", constant=dir_constant, resolve=_directory_of),
        SubstitutionRule(magic="__FILE__", constant=file_constant, resolve=str),
    ]


class MagicConstantSubstitution:
    """Rewrites ``__DIR__``/``__FILE__`` so cached copies resolve their original location.

    Only magic constant tokens are rewritten; occurrences inside strings and
    comments are left alone. Magic constants are case-insensitive in PHP.
    """

    def __init__(self, rules: Optional[Iterable[SubstitutionRule]] = None) -> None:
        rule_list = list(rules) if rules is not None else default_rules()
        self._rules: Dict[str, SubstitutionRule] = {rule.magic.upper(): rule for rule in rule_list}

    @property
    def rules(self) -> List[SubstitutionRule]:
        return list(self._rules.values())

    def declarations(self, path: str) -> str:
        """Render the class constant declarations holding the original values."""
        return "".join(
            f"const {rule.constant} = {_php_string(rule.resolve(path))};"
            for rule in self._rules.values()
        )

    def apply(self, text: str) -> str:
        """Replace every magic constant token in ``text`` with its class constant reference."""
        tokens = tokenize(text)
        edits = Splice()
        self.substitute(tokens, edits)
        return edits.apply(text)

    def substitute(
        self, tokens: Sequence[Token], edits: Splice, start: int = 0, end: Optional[int] = None
    ) -> None:
        """Record replacements for the magic constant tokens lying within ``start:end``."""
        for index, token in enumerate(tokens):
            if token.kind != NAME or token.start < start:
                continue
            if end is not None and token.end > end:
                break
            rule = self._rules.get(token.text.upper())
            if rule is None or is_member_access(tokens, index):
                continue
            edits.replace(token.start, token.end, f"self::{rule.constant}")


def _php_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


# ----------------------------------------------------------------------
# Original path hint

_HINT = Placeholder.ORIGINAL_PATH_HINT.token
_HINT_PATTERN = re.compile(re.escape(_HINT) + r"(?P<path>.*?)#(?P<mtime>\d+)" + re.escape(_HINT))


@dataclass(frozen=True)
class PathHint:
    """Original location and modification time recorded in a woven file."""

    path: str
    mtime: int

    def is_stale(self, mtime: float) -> bool:
        return int(mtime) != self.mtime


def render_path_hint(path: str, mtime: float) -> str:
    return f" /* {_HINT}{path}#{int(mtime)}{_HINT} */"


def extract_path_hint(text: str) -> Optional[PathHint]:
    """Return the path hint recorded in woven ``text``, if any."""
    match = _HINT_PATTERN.search(text)
    if match is None:
        return None
    return PathHint(path=match.group("path"), mtime=int(match.group("mtime")))


__all__ = [
    "MagicConstantSubstitution",
    "PathHint",
    "SubstitutionRule",
    "default_rules",
    "extract_path_hint",
    "render_path_hint",
]
